"""
外部 HTTP 服务客户端基类

应用启动时挂上共享的 httpx.AsyncClient（连接池）；未挂载时每次调用临时建一个。
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx


class ServiceClient:
    """持有（可选的）共享 httpx.AsyncClient"""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http_client = http_client

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.http_client is not None:
            yield self.http_client
            return
        async with httpx.AsyncClient() as client:
            yield client
