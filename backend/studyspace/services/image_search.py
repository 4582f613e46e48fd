"""
图片搜索客户端（Google Custom Search JSON API）
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from studyspace.config import settings
from studyspace.exceptions import ServiceNotConfiguredError, TransientServiceError
from studyspace.services.http import ServiceClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageSearchResult:
    url: str
    title: str = ""
    thumbnail_url: str = ""


class ImageSearchClient(ServiceClient):
    """图片搜索客户端"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        search_engine_id: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(http_client)
        self._api_key = api_key
        self._search_engine_id = search_engine_id

    async def search(self, query: str, limit: int = 1) -> List[ImageSearchResult]:
        """
        搜索图片（安全搜索开启）

        Returns:
            结果列表，无结果时为空列表

        Raises:
            ServiceNotConfiguredError: 未配置 API Key / 搜索引擎 ID
            TransientServiceError: HTTP 错误 / 网络错误 / 超时
        """
        api_key = self._api_key or settings.google_api_key
        engine_id = self._search_engine_id or settings.google_search_engine_id
        if not api_key or not engine_id:
            raise ServiceNotConfiguredError("Image search is not configured (GOOGLE_API_KEY / GOOGLE_SEARCH_ENGINE_ID)")

        params = {
            "key": api_key,
            "cx": engine_id,
            "q": query,
            "searchType": "image",
            "num": limit,
            "safe": "active",
        }
        timeout = settings.image_search_timeout_seconds
        try:
            async with self._client() as client:
                response = await client.get(settings.image_search_base_url, params=params, timeout=timeout)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientServiceError(
                f"Image search failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise TransientServiceError(f"Image search timed out after {timeout:g}s") from e
        except httpx.HTTPError as e:
            raise TransientServiceError(f"Image search unreachable: {e}") from e

        items = response.json().get("items") or []
        return [
            ImageSearchResult(
                url=item.get("link", ""),
                title=item.get("title", ""),
                thumbnail_url=(item.get("image") or {}).get("thumbnailLink", ""),
            )
            for item in items
            if item.get("link")
        ]


# 全局客户端实例
image_search_client = ImageSearchClient()
