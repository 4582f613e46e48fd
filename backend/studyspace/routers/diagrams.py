"""
图表路由
"""
from fastapi import APIRouter, Depends

from studyspace.dependencies import get_current_user, get_media_services
from studyspace.pipeline.diagram import available_engines, resolve_diagram
from studyspace.schemas.content import DiagramRenderRequest, DiagramRenderResponse
from studyspace.services import MediaServices

router = APIRouter()


@router.get("/engines", response_model=dict)
async def list_engines():
    """支持的图表引擎"""
    return {"engines": available_engines()}


@router.post("/render", response_model=DiagramRenderResponse)
async def render_diagram(
    req: DiagramRenderRequest,
    user_id: str = Depends(get_current_user),
    services: MediaServices = Depends(get_media_services),
):
    """渲染单个图表（失败时 status=failed，不报 HTTP 错误）"""
    resolution = await resolve_diagram(req.engine, req.source, output_format=req.format, client=services.renderer)
    return DiagramRenderResponse(
        status=resolution.status,
        url=resolution.url,
        error=resolution.reason,
    )
