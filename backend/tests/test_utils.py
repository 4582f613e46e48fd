"""
Unit tests for utility functions
"""
import os
import aiofiles
import pytest
from datetime import timedelta

from studyspace.utils.auth import create_access_token, decode_access_token, decode_token
from studyspace.utils.storage import save_file, save_object, get_file_url, ensure_dir
from studyspace.config import settings


class TestAuthUtils:
    """Test authentication utilities"""

    def test_create_access_token(self):
        """Test creating JWT token"""
        token = create_access_token(
            data={"sub": "test_user_id"},
            expires_delta=timedelta(hours=1)
        )

        assert token is not None
        assert isinstance(token, str)
        assert len(token) > 0

    def test_decode_access_token(self):
        """Test decoding JWT token"""
        user_id = "test_user_123"
        token = create_access_token(
            data={"sub": user_id},
            expires_delta=timedelta(hours=1)
        )

        payload = decode_access_token(token)

        assert payload is not None
        assert payload.get("sub") == user_id
        assert decode_token(token) == user_id

    def test_decode_invalid_token(self):
        """Test decoding invalid token"""
        assert decode_access_token("invalid_token") is None
        assert decode_token("invalid_token") is None

    def test_token_expiration(self):
        """Test token with very short expiration"""
        token = create_access_token(
            data={"sub": "user"},
            expires_delta=timedelta(seconds=-1)  # Already expired
        )

        assert decode_access_token(token) is None


class TestStorageUtils:
    """Test storage utilities (storage_path points at tmp_path via conftest)"""

    @pytest.mark.asyncio
    async def test_save_file(self):
        """Test saving file"""
        content = b"Test file content"
        filepath = await save_file(content, "notes.png", "uploads")

        assert os.path.exists(filepath)
        assert filepath.endswith(".png")
        with open(filepath, "rb") as f:
            assert f.read() == content

    @pytest.mark.asyncio
    async def test_save_file_unique_names(self):
        """Test that saved files get unique names"""
        path1 = await save_file(b"Content 1", "same.png", "generated")
        path2 = await save_file(b"Content 2", "same.png", "generated")

        assert path1 != path2
        assert os.path.exists(path1)
        assert os.path.exists(path2)

    @pytest.mark.asyncio
    async def test_save_object_returns_public_url(self):
        url = await save_object(b"png", folder="generated")

        assert url.startswith("/storage/generated/")
        assert url.endswith(".png")

    @pytest.mark.asyncio
    async def test_save_object_reuses_existing_id(self, isolated_settings):
        """Same object_id is written once; later writes reuse the first file"""
        first = await save_object(b"first", folder="diagrams", object_id="diagram_mermaid_abc", ext=".svg")
        second = await save_object(b"second", folder="diagrams", object_id="diagram_mermaid_abc", ext=".svg")

        assert first == second == "/storage/diagrams/diagram_mermaid_abc.svg"
        with open(isolated_settings / "diagrams" / "diagram_mermaid_abc.svg", "rb") as f:
            assert f.read() == b"first"

    @pytest.mark.asyncio
    async def test_save_object_failed_write_is_not_reused(self, isolated_settings, monkeypatch):
        """A write that dies halfway leaves nothing behind; the next save stores the full bytes"""
        real_open = aiofiles.open

        class DiskFull:
            def __init__(self, path, mode):
                self._ctx = real_open(path, mode)

            async def __aenter__(self):
                self._f = await self._ctx.__aenter__()
                return self

            async def __aexit__(self, *exc):
                return await self._ctx.__aexit__(*exc)

            async def write(self, data):
                await self._f.write(data[:2])
                raise OSError("disk full")

        monkeypatch.setattr(aiofiles, "open", DiskFull)
        with pytest.raises(OSError):
            await save_object(b"FULLCONTENT", folder="diagrams", object_id="diagram_x_1")

        folder = isolated_settings / "diagrams"
        assert os.listdir(folder) == []

        monkeypatch.setattr(aiofiles, "open", real_open)
        url = await save_object(b"FULLCONTENT", folder="diagrams", object_id="diagram_x_1")

        assert url == "/storage/diagrams/diagram_x_1.png"
        with open(folder / "diagram_x_1.png", "rb") as f:
            assert f.read() == b"FULLCONTENT"
        assert os.listdir(folder) == ["diagram_x_1.png"]

    def test_get_file_url(self):
        """Test getting file URL"""
        filepath = os.path.join(settings.storage_path, "diagrams", "d.png")

        assert get_file_url(filepath) == "/storage/diagrams/d.png"

    def test_get_file_url_custom_prefix(self, monkeypatch):
        monkeypatch.setattr(settings, "storage_public_url", "https://cdn.test/media/")
        filepath = os.path.join(settings.storage_path, "generated", "g.png")

        assert get_file_url(filepath) == "https://cdn.test/media/generated/g.png"

    def test_ensure_dir(self, tmp_path):
        """Test ensuring directory exists"""
        new_dir = os.path.join(str(tmp_path), "new", "nested", "dir")

        assert not os.path.exists(new_dir)

        ensure_dir(new_dir)

        assert os.path.isdir(new_dir)

    def test_ensure_dir_existing(self, tmp_path):
        """Test ensuring existing directory (should not fail)"""
        ensure_dir(str(tmp_path))

        assert os.path.exists(str(tmp_path))
