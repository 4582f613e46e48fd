"""
文生图客户端（Pollinations 风格：GET {base}/prompt/{prompt}，直接返回图片字节）
"""
from typing import Optional
from urllib.parse import quote

import httpx

from studyspace.config import settings
from studyspace.exceptions import TransientServiceError
from studyspace.services.http import ServiceClient


class ImageGenerationClient(ServiceClient):
    """文生图客户端"""

    def __init__(self, base_url: Optional[str] = None, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(http_client)
        self._base_url = base_url

    @property
    def base_url(self) -> str:
        return (self._base_url or settings.image_generation_base_url).rstrip("/")

    async def generate(self, prompt: str) -> bytes:
        """
        生成图片

        Raises:
            TransientServiceError: HTTP 错误（status_code=502 时可重试）/ 网络错误 / 超时
        """
        url = f"{self.base_url}/prompt/{quote(prompt, safe='')}"
        timeout = settings.image_generation_timeout_seconds
        try:
            async with self._client() as client:
                response = await client.get(
                    url,
                    headers={"User-Agent": "StudySpace/1.0"},
                    timeout=timeout,
                    follow_redirects=True,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientServiceError(
                f"Image generation failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise TransientServiceError(f"Image generation timed out after {timeout:g}s") from e
        except httpx.HTTPError as e:
            raise TransientServiceError(f"Image generation service unreachable: {e}") from e

        if not response.content:
            raise TransientServiceError("Image generation returned an empty body")
        return response.content


# 全局客户端实例
image_generation_client = ImageGenerationClient()
