"""
Kroki 图表渲染服务客户端

- POST {base}/{engine}/{format}：提交源码，返回渲染后的图片字节
- GET  {base}/{engine}/{format}/{encoded}：小图可直接用编码后的 URL 访问
"""
import logging
from typing import Optional

import httpx

from studyspace.config import settings
from studyspace.exceptions import DiagramSyntaxError, TransientServiceError
from studyspace.services.http import ServiceClient

logger = logging.getLogger(__name__)


class KrokiClient(ServiceClient):
    """Kroki 渲染客户端"""

    def __init__(self, base_url: Optional[str] = None, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(http_client)
        self._base_url = base_url

    @property
    def base_url(self) -> str:
        return (self._base_url or settings.kroki_base_url).rstrip("/")

    def get_url(self, engine: str, output_format: str, encoded_source: str) -> str:
        """拼接 GET 形式的图表 URL"""
        return f"{self.base_url}/{engine}/{output_format}/{encoded_source}"

    async def render(self, engine: str, source: str, output_format: str = "png") -> bytes:
        """
        渲染图表

        Raises:
            DiagramSyntaxError: 4xx，源码被拒绝（不重试）
            TransientServiceError: 5xx / 网络错误 / 超时
        """
        url = f"{self.base_url}/{engine}/{output_format}"
        timeout = settings.diagram_render_timeout_seconds
        try:
            async with self._client() as client:
                response = await client.post(
                    url,
                    content=source.encode("utf-8"),
                    headers={"Content-Type": "text/plain"},
                    timeout=timeout,
                )
        except httpx.TimeoutException as e:
            raise TransientServiceError(f"Diagram rendering timed out after {timeout:g}s") from e
        except httpx.HTTPError as e:
            raise TransientServiceError(f"Diagram service unreachable: {e}") from e

        if 400 <= response.status_code < 500:
            message = response.content.decode("utf-8", errors="replace")[:300]
            logger.warning("Kroki rejected %s diagram (%s): %s", engine, response.status_code, message)
            raise DiagramSyntaxError(message)
        if response.status_code >= 400:
            raise TransientServiceError(
                f"Diagram service error: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.content

    async def check(self, url: str) -> int:
        """
        轻量存在性检查（HEAD），返回状态码

        Raises:
            TransientServiceError: 网络错误 / 超时
        """
        timeout = settings.diagram_check_timeout_seconds
        try:
            async with self._client() as client:
                response = await client.head(url, timeout=timeout)
        except httpx.TimeoutException as e:
            raise TransientServiceError(f"Diagram URL check timed out after {timeout:g}s") from e
        except httpx.HTTPError as e:
            raise TransientServiceError(f"Diagram URL check failed: {e}") from e
        return response.status_code


# 全局客户端实例
kroki_client = KrokiClient()
