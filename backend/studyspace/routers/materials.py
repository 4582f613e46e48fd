"""
学习资料路由：模型生成笔记的后处理
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from studyspace.config import settings
from studyspace.dependencies import get_current_user, get_media_services
from studyspace.exceptions import ContentValidationError
from studyspace.pipeline.finalize import finalize
from studyspace.pipeline.notes import is_refusal, split_generated_notes
from studyspace.schemas.content import FinalizeRequest, FinalizeResponse
from studyspace.services import MediaServices

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/finalize", response_model=FinalizeResponse)
async def finalize_material(
    req: FinalizeRequest,
    user_id: str = Depends(get_current_user),
    services: MediaServices = Depends(get_media_services),
):
    """
    处理模型生成的笔记：拆标题、渲染图表、填充图片

    单个图片/图表失败只会在正文里留下标注；整体超时返回 504。
    """
    if is_refusal(req.markdown):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The provided content was deemed inappropriate, harmful, or unsuitable for processing. "
                   "Please review your input and try again with valid study materials.",
        )

    title, body = split_generated_notes(req.markdown)
    logger.info("Finalizing material '%s' for user %s (%d chars)", title, user_id, len(body))

    try:
        result = await asyncio.wait_for(
            finalize(body, services=services),
            timeout=settings.finalize_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error("Finalizing material '%s' timed out after %ss", title, settings.finalize_timeout_seconds)
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Processing timed out. Try with a smaller file or fewer pages.",
        )
    except ContentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return FinalizeResponse(
        title=title,
        content=result.content,
        embedded_media=[m.to_dict() for m in result.embedded_media],
    )
