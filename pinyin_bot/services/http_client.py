"""
异步 HTTP 客户端封装
用于查询包仓库元数据、流式下载二进制压缩包
"""
import logging
import posixpath
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import aiofiles
import httpx

from pinyin_bot.core.logger import get_logger
from pinyin_bot.models.binding_types import DownloadResult, DownloadStatus


# (百分比, 剩余字节数)；服务端未给出长度时两者均为 None
ProgressCallback = Callable[[Optional[float], Optional[int]], None]

DEFAULT_REGISTRY = "https://registry.npmjs.com"
DEFAULT_NAMESPACE = "@napi-rs"
CHUNK_SIZE = 64 * 1024


class RegistryClient:
    """
    包仓库客户端，封装元数据查询和压缩包下载

    用法:
        async with RegistryClient() as client:
            url, data = await client.fetch_latest("pinyin-linux-x64-gnu")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY,
        namespace: str = DEFAULT_NAMESPACE,
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        初始化客户端

        Args:
            base_url: 仓库基础 URL
            namespace: 包命名空间（如 @napi-rs）
            timeout: 请求超时时间（秒）
            transport: 自定义 httpx 传输层（测试时注入 MockTransport）
            logger: 日志记录器
        """
        self.base_url = base_url
        self.namespace = namespace
        self.timeout = timeout
        self.transport = transport
        self.logger = logger or get_logger("registry")
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """上下文管理器入口"""
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            follow_redirects=True
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """上下文管理器退出"""
        if self.client:
            await self.client.aclose()
            self.client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self.client:
            raise RuntimeError("请使用 'async with' 管理器使用此客户端")
        return self.client

    def metadata_url(self, package_name: str) -> str:
        """最新版本元数据的 URL"""
        parts = [self.base_url.rstrip('/')]
        if self.namespace:
            parts.append(self.namespace.strip('/'))
        parts.extend([package_name, "latest"])
        return "/".join(parts)

    async def fetch_latest(self, package_name: str) -> tuple[str, Dict[str, Any]]:
        """
        获取包的最新版本元数据

        Returns:
            (请求的 URL, 元数据字典)

        Raises:
            httpx.RequestError: 网络请求错误
            httpx.HTTPStatusError: HTTP 状态错误
            ValueError: 响应不是 JSON 对象
        """
        client = self._require_client()
        url = self.metadata_url(package_name)
        self.logger.debug(f"查询元数据: {url}")

        try:
            response = await client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            self.logger.error(f"❌ 仓库返回错误 {e.response.status_code}: {url}")
            raise
        except httpx.RequestError as e:
            self.logger.error(f"❌ 仓库请求失败: {type(e).__name__}: {e}")
            self.logger.error(f"   URL: {url}")
            raise

        if not isinstance(data, dict):
            raise ValueError(f"元数据不是 JSON 对象: {type(data).__name__}")
        return url, data

    @staticmethod
    def file_name_from_url(url: str) -> str:
        """从下载地址推断文件名"""
        name = posixpath.basename(urlparse(url).path)
        return name or "package.tgz"

    async def download(
        self,
        url: str,
        directory: Path,
        on_progress: Optional[ProgressCallback] = None
    ) -> DownloadResult:
        """
        流式下载文件到指定目录

        传输结束时收到的字节数少于 Content-Length 则返回 ABORTED 状态。

        Raises:
            httpx.RequestError: 网络请求错误
            httpx.HTTPStatusError: HTTP 状态错误
        """
        client = self._require_client()
        directory.mkdir(parents=True, exist_ok=True)
        file_path = directory / self.file_name_from_url(url)

        received = 0
        total: Optional[int] = None

        async with client.stream("GET", url) as response:
            response.raise_for_status()
            length = response.headers.get("Content-Length")
            if length and length.isdigit():
                total = int(length)

            # Content-Length 对应传输字节数，进度按 num_bytes_downloaded 计算
            async with aiofiles.open(file_path, 'wb') as f:
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    await f.write(chunk)
                    received = response.num_bytes_downloaded
                    if on_progress:
                        self._report(on_progress, received, total)
            received = response.num_bytes_downloaded

        if total is not None and received < total:
            self.logger.warning(f"⚠️ 下载中断: {received}/{total} 字节")
            return DownloadResult(
                status=DownloadStatus.ABORTED,
                file_path=file_path,
                bytes_received=received,
                total_bytes=total
            )

        return DownloadResult(
            status=DownloadStatus.COMPLETE,
            file_path=file_path,
            bytes_received=received,
            total_bytes=total
        )

    def _report(self, on_progress: ProgressCallback, received: int, total: Optional[int]) -> None:
        """进度回调出错不影响下载本身"""
        if total:
            percentage = min(received / total * 100, 100.0)
            remaining = max(total - received, 0)
        else:
            percentage, remaining = None, None
        try:
            on_progress(percentage, remaining)
        except Exception as e:
            self.logger.debug(f"进度回调失败（已忽略）: {e}")
