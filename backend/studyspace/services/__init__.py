"""
服务层：外部渲染 / 搜索 / 生图服务
"""
from dataclasses import dataclass
from typing import Optional

import httpx

from studyspace.services.image_generation import ImageGenerationClient, image_generation_client
from studyspace.services.image_search import ImageSearchClient, ImageSearchResult, image_search_client
from studyspace.services.kroki_client import KrokiClient, kroki_client


@dataclass
class MediaServices:
    """流水线使用的一组外部服务"""
    renderer: KrokiClient
    image_search: ImageSearchClient
    image_generator: ImageGenerationClient

    def bind(self, http_client: Optional[httpx.AsyncClient]):
        """挂载（或卸下）共享连接池"""
        for service in (self.renderer, self.image_search, self.image_generator):
            service.http_client = http_client


media_services = MediaServices(
    renderer=kroki_client,
    image_search=image_search_client,
    image_generator=image_generation_client,
)

__all__ = [
    "MediaServices",
    "media_services",
    "KrokiClient",
    "kroki_client",
    "ImageSearchClient",
    "ImageSearchResult",
    "image_search_client",
    "ImageGenerationClient",
    "image_generation_client",
]
