"""
图片解析（Image Resolver）

- 搜索占位 {{IMAGE: ...}}：搜一张图，取第一条结果
- 生图占位 {{GENERATE: ...}}：增强提示词后生图；仅 502 重试（固定间隔，非阻塞等待）
  生成结果落存储；未启用存储时退化为 base64 data URL（仅适合开发/低频使用）
"""
import asyncio
import base64
import logging
from typing import Optional

from studyspace.config import settings
from studyspace.exceptions import MediaNotFoundError, ResolutionError, TransientServiceError
from studyspace.pipeline.models import Resolution
from studyspace.services.image_generation import ImageGenerationClient, image_generation_client
from studyspace.services.image_search import ImageSearchClient, image_search_client
from studyspace.utils.storage import save_object

logger = logging.getLogger(__name__)

PROMPT_STYLE_SUFFIX = "clean white background, labeled, scientific illustration style, high quality, detailed"


def enhance_prompt(prompt: str) -> str:
    return f"Educational diagram: {prompt}, {PROMPT_STYLE_SUFFIX}"


async def search_image(
    description: str,
    num_results: Optional[int] = None,
    client: Optional[ImageSearchClient] = None,
) -> Resolution:
    """搜索图片，返回第一条结果的 URL"""
    if not description:
        return Resolution.failed("Empty image description")

    searcher = client or image_search_client
    limit = num_results or settings.image_search_num_results
    try:
        results = await searcher.search(description, limit)
        if not results:
            raise MediaNotFoundError(f"No image found for '{description}'")
    except ResolutionError as e:
        logger.warning("Image search failed for '%s': %s", description, e)
        return Resolution.failed(str(e))

    return Resolution.resolved(results[0].url)


async def _store_generated(content: bytes) -> str:
    if settings.use_object_storage:
        return await save_object(content, folder="generated")
    logger.warning("Object storage disabled, embedding generated image as base64 data URL")
    return f"data:image/png;base64,{base64.b64encode(content).decode('ascii')}"


async def generate_image(
    description: str,
    enhance: Optional[bool] = None,
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
    client: Optional[ImageGenerationClient] = None,
) -> Resolution:
    """
    生成图片

    Args:
        description: 用户的图片描述
        enhance: 是否套用教学插图风格提示词
        max_retries: 最多尝试次数
        retry_delay: 502 重试间隔（秒）
    """
    if not description:
        return Resolution.failed("Empty image description")

    enhance = settings.image_generation_enhance if enhance is None else enhance
    max_retries = max(1, settings.image_generation_max_retries if max_retries is None else max_retries)
    retry_delay = settings.image_generation_retry_delay_seconds if retry_delay is None else retry_delay
    generator = client or image_generation_client
    prompt = enhance_prompt(description) if enhance else description

    for attempt in range(1, max_retries + 1):
        try:
            content = await generator.generate(prompt)
        except TransientServiceError as e:
            if e.retryable and attempt < max_retries:
                logger.info("Image generation failed (502), retrying (%d/%d)...", attempt, max_retries)
                await asyncio.sleep(retry_delay)
                continue
            logger.warning("Image generation error (attempt %d/%d): %s", attempt, max_retries, e)
            return Resolution.failed(str(e))

        try:
            url = await _store_generated(content)
        except OSError as e:
            logger.error("Generated image storage failed: %s", e)
            return Resolution.failed(f"Image storage failed: {e}")
        logger.info("Generated image stored for '%s'", description)
        return Resolution.resolved(url)
