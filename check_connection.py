import asyncio
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.abspath("backend"))

import httpx
from studyspace.config import settings
from studyspace.utils.auth import create_access_token

SMOKE_NOTES = """# 联通测试
> 自检用笔记
---
## 细胞结构
```mermaid
graph TD
Cell[Cell] --> Nucleus[Nucleus]
```
"""


async def check_full_link():
    print("=== 开始全链路联通自检 ===")
    base_url = f"http://127.0.0.1:{settings.backend_port}"

    # 1. 检查后端健康
    print(f"\n1. 检查后端健康 ({base_url}/health)...")
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.get(f"{base_url}/health")
            if resp.status_code == 200:
                print("   [OK] 后端存活")
            else:
                print(f"   [FAIL] 后端返回 {resp.status_code}: {resp.text}")
                return
    except httpx.HTTPError as e:
        print(f"   [FAIL] 无法连接后端: {e}")
        print(f"   建议：请确保已在 backend 目录下运行 'uvicorn studyspace.main:app --port {settings.backend_port}'")
        return

    # 2. 图表引擎列表
    print("\n2. 获取图表引擎列表...")
    async with httpx.AsyncClient() as client:
        resp = await client.get(f"{base_url}/api/diagrams/engines")
        if resp.status_code == 200:
            print(f"   [OK] 支持 {len(resp.json()['engines'])} 种引擎")
        else:
            print(f"   [FAIL] 获取失败 {resp.status_code}: {resp.text}")
            return

    # 3. 本地签发测试 Token（与后端共用 JWT_SECRET）
    headers = {"Authorization": f"Bearer {create_access_token({'sub': 'link_test_user'})}"}

    # 4. 单图渲染（经过 Kroki）
    print(f"\n3. 渲染测试图表 (Kroki: {settings.kroki_base_url})...")
    try:
        async with httpx.AsyncClient(timeout=60.0) as client:
            resp = await client.post(
                f"{base_url}/api/diagrams/render",
                json={"engine": "mermaid", "source": "graph TD\nA-->B", "format": "svg"},
                headers=headers,
            )
            data = resp.json()
            if resp.status_code == 200 and data["status"] == "resolved":
                print("   [OK] 图表渲染成功")
            else:
                print(f"   [FAIL] 图表渲染失败 {resp.status_code}: {data}")
                print("   原因推测：Kroki 不可达 / KROKI_BASE_URL 配置错误")
    except httpx.HTTPError as e:
        print(f"   [FAIL] 渲染请求异常: {e}")

    # 5. 整篇笔记后处理
    print("\n4. 笔记后处理...")
    try:
        async with httpx.AsyncClient(timeout=settings.finalize_timeout_seconds + 10) as client:
            resp = await client.post(
                f"{base_url}/api/materials/finalize",
                json={"markdown": SMOKE_NOTES},
                headers=headers,
            )
            if resp.status_code == 200:
                data = resp.json()
                print(f"   [OK] 标题: {data['title']}，嵌入媒体 {len(data['embedded_media'])} 个")
                if "⚠️" in data["content"]:
                    print("   [WARN] 正文中有失败标注，请查看后端日志")
            else:
                print(f"   [FAIL] 后处理失败 {resp.status_code}: {resp.text}")
    except httpx.HTTPError as e:
        print(f"   [FAIL] 后处理请求异常: {e}")

    print("\n=== 自检完成 ===")

if __name__ == "__main__":
    try:
        asyncio.run(check_full_link())
    except KeyboardInterrupt:
        pass
