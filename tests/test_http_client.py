"""Tests for the registry client."""

from pathlib import Path

import httpx
import pytest

from pinyin_bot.models.binding_types import DownloadStatus
from pinyin_bot.services.http_client import RegistryClient


def test_metadata_url_defaults():
    client = RegistryClient()
    assert client.metadata_url("pinyin-darwin-arm64") == \
        "https://registry.npmjs.com/@napi-rs/pinyin-darwin-arm64/latest"


def test_metadata_url_custom_registry():
    client = RegistryClient(base_url="https://registry.npmmirror.com/", namespace="")
    assert client.metadata_url("pkg") == "https://registry.npmmirror.com/pkg/latest"


@pytest.mark.parametrize("url,expected", [
    ("https://r.example/@napi-rs/p/-/p-1.0.0.tgz", "p-1.0.0.tgz"),
    ("https://r.example/download?id=1", "download"),
    ("https://r.example/", "package.tgz"),
])
def test_file_name_from_url(url, expected):
    assert RegistryClient.file_name_from_url(url) == expected


@pytest.mark.asyncio
async def test_requires_context_manager():
    with pytest.raises(RuntimeError):
        await RegistryClient().fetch_latest("pkg")


@pytest.mark.asyncio
async def test_fetch_latest_rejects_non_object():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=["not", "a", "dict"]))
    async with RegistryClient(transport=transport) as client:
        with pytest.raises(ValueError):
            await client.fetch_latest("pkg")


@pytest.mark.asyncio
async def test_download_reports_progress(tmp_path: Path):
    body = b"x" * 1000
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
    progress = []

    async with RegistryClient(transport=transport) as client:
        result = await client.download(
            "https://r.example/p-1.0.0.tgz",
            tmp_path / "dl",
            lambda pct, remaining: progress.append((pct, remaining))
        )

    assert result.status == DownloadStatus.COMPLETE
    assert result.is_complete
    assert result.file_path == tmp_path / "dl" / "p-1.0.0.tgz"
    assert result.file_path.read_bytes() == body
    assert result.total_bytes == 1000
    assert progress[-1] == (100.0, 0)


@pytest.mark.asyncio
async def test_download_http_error(tmp_path: Path):
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    async with RegistryClient(transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.download("https://r.example/p.tgz", tmp_path)
