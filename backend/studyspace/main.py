"""
Study Space 后端 - FastAPI 入口
"""
import logging
import os
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from studyspace.config import settings
from studyspace.routers import diagrams, materials
from studyspace.services import media_services
from studyspace.utils.storage import ensure_dir

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("studyspace")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时：存储目录 + 外部服务共享连接池
    for subdir in ("uploads", "generated", "diagrams"):
        ensure_dir(os.path.join(settings.storage_path, subdir))

    http_client = httpx.AsyncClient(
        limits=httpx.Limits(max_connections=settings.http_max_connections),
    )
    media_services.bind(http_client)
    logger.info("Media services ready (kroki=%s)", settings.kroki_base_url)

    yield

    # 关闭时
    media_services.bind(None)
    await http_client.aclose()


# 创建应用
app = FastAPI(
    title="Study Space",
    description="学习空间：AI 笔记生成的图表 / 图片后处理",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(materials.router, prefix="/api/materials", tags=["学习资料"])
app.include_router(diagrams.router, prefix="/api/diagrams", tags=["图表"])

# 静态文件（存储的图表和生成图）；首次部署时目录还不存在，先创建再挂载
ensure_dir(settings.storage_path)
app.mount("/storage", StaticFiles(directory=settings.storage_path), name="storage")


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "studyspace.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug,
    )
