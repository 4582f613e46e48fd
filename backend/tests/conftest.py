"""
Pytest fixtures and configuration
"""
import os
import sys
from typing import AsyncGenerator, Callable, List, Tuple

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from studyspace.main import app
from studyspace.config import settings
from studyspace.dependencies import get_media_services
from studyspace.services import MediaServices, KrokiClient, ImageSearchClient, ImageGenerationClient
from studyspace.utils.auth import create_access_token

KROKI_URL = "https://kroki.test"
SEARCH_URL = "https://search.test/customsearch/v1"
GENERATION_URL = "https://generate.test"

Handler = Callable[[httpx.Request], httpx.Response]


def _unexpected(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, text=f"unexpected request: {request.method} {request.url}")


class FakeBackend:
    """三个外部服务的假实现：按服务记录请求，响应由测试设置"""

    def __init__(self):
        self.kroki: Handler = _unexpected
        self.search: Handler = _unexpected
        self.generate: Handler = _unexpected
        self.requests: List[Tuple[str, httpx.Request]] = []
        self._clients: List[httpx.AsyncClient] = []

        self.renderer = KrokiClient(base_url=KROKI_URL, http_client=self._client_for("kroki"))
        self.image_search = ImageSearchClient(
            api_key="test-key",
            search_engine_id="test-cx",
            http_client=self._client_for("search"),
        )
        self.image_generator = ImageGenerationClient(
            base_url=GENERATION_URL,
            http_client=self._client_for("generate"),
        )
        self.services = MediaServices(
            renderer=self.renderer,
            image_search=self.image_search,
            image_generator=self.image_generator,
        )

    def _client_for(self, name: str) -> httpx.AsyncClient:
        async def handle(request: httpx.Request) -> httpx.Response:
            self.requests.append((name, request))
            response = getattr(self, name)(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        client = httpx.AsyncClient(transport=httpx.MockTransport(handle))
        self._clients.append(client)
        return client

    def requests_to(self, name: str) -> List[httpx.Request]:
        return [r for n, r in self.requests if n == name]

    async def aclose(self):
        for client in self._clients:
            await client.aclose()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """每个测试独立的存储目录，关闭 URL 模式，重试不等待"""
    storage = tmp_path / "storage"
    monkeypatch.setattr(settings, "storage_path", str(storage))
    monkeypatch.setattr(settings, "storage_public_url", "/storage")
    monkeypatch.setattr(settings, "use_object_storage", True)
    monkeypatch.setattr(settings, "diagram_url_mode", False)
    monkeypatch.setattr(settings, "diagram_output_format", "png")
    monkeypatch.setattr(settings, "diagram_inline_svg", True)
    monkeypatch.setattr(settings, "image_generation_retry_delay_seconds", 0)
    monkeypatch.setattr(settings, "image_search_base_url", SEARCH_URL)
    monkeypatch.setattr(settings, "google_api_key", "")
    monkeypatch.setattr(settings, "google_search_engine_id", "")
    return storage


@pytest_asyncio.fixture(scope="function")
async def fake() -> AsyncGenerator[FakeBackend, None]:
    """假外部服务"""
    backend = FakeBackend()
    yield backend
    await backend.aclose()


@pytest_asyncio.fixture(scope="function")
async def client(fake: FakeBackend) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client wired to the fake services"""
    app.dependency_overrides[get_media_services] = lambda: fake.services

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def auth_client(client: AsyncClient) -> AsyncGenerator[AsyncClient, None]:
    """Create authenticated test client"""
    token = create_access_token(data={"sub": "student-1"})
    client.headers["Authorization"] = f"Bearer {token}"
    yield client


@pytest.fixture
def svg_bytes() -> bytes:
    return b'<svg xmlns="http://www.w3.org/2000/svg"><text>A-B</text></svg>'


@pytest.fixture
def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\nfake-png-body"
