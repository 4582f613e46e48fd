"""
内容后处理流水线入口

raw markdown -> 提取占位 -> 逐个解析（有界并发）-> 按位置倒序整合 -> 正文 + 媒体清单
"""
import asyncio
import logging
from typing import Optional

from studyspace.config import settings
from studyspace.pipeline.assembler import assemble
from studyspace.pipeline.diagram import resolve_diagram
from studyspace.pipeline.directives import extract_directives
from studyspace.pipeline.image import generate_image, search_image
from studyspace.pipeline.models import Directive, DirectiveKind, FinalizedContent, Resolution
from studyspace.services import MediaServices, media_services

logger = logging.getLogger(__name__)


async def resolve_directive(directive: Directive, services: Optional[MediaServices] = None) -> Resolution:
    """把单个占位解析为 URL；任何异常都转为 Failed"""
    services = services or media_services
    try:
        if directive.kind is DirectiveKind.DIAGRAM:
            return await resolve_diagram(directive.engine, directive.source, client=services.renderer)
        if directive.kind is DirectiveKind.IMAGE_SEARCH:
            return await search_image(directive.description, client=services.image_search)
        return await generate_image(directive.description, client=services.image_generator)
    except Exception as e:
        logger.exception("Unexpected error resolving %s directive at %d", directive.kind.value, directive.position)
        return Resolution.failed(str(e) or e.__class__.__name__)


async def finalize(
    markdown: str,
    services: Optional[MediaServices] = None,
    max_concurrency: Optional[int] = None,
) -> FinalizedContent:
    """
    完成生成内容的后处理

    Args:
        markdown: 模型生成的 Markdown
        services: 外部服务（默认全局实例）
        max_concurrency: 同时解析的占位数上限，1 即逐个处理

    Returns:
        FinalizedContent

    Raises:
        ContentValidationError: markdown 不是字符串
    """
    directives = extract_directives(markdown)
    if not directives:
        return FinalizedContent(content=markdown)

    logger.info("Found %d directive(s) to resolve", len(directives))
    semaphore = asyncio.Semaphore(max(1, max_concurrency or settings.max_concurrent_resolutions))

    async def _resolve(directive: Directive) -> Resolution:
        async with semaphore:
            resolution = await resolve_directive(directive, services)
        if resolution.ok:
            logger.info("✓ %s resolved: %s", directive.kind.value, directive.label)
        else:
            logger.warning("✗ %s failed: %s", directive.kind.value, resolution.reason)
        return resolution

    resolutions = await asyncio.gather(*(_resolve(d) for d in directives))
    return assemble(markdown, zip(directives, resolutions))
