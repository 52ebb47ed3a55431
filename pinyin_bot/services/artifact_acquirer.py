"""
二进制文件获取服务

流程：检查本地文件 -> 查询仓库元数据 -> 流式下载压缩包 -> 解压到目标目录
任何一步失败都会以 DownloadError 结束，不做自动重试。
"""
import asyncio
import gzip
import logging
import os
import shutil
import tarfile
import tempfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Union
from urllib.parse import urlparse

import httpx

from pinyin_bot.core.exceptions import DownloadError
from pinyin_bot.core.logger import get_logger
from pinyin_bot.services.http_client import ProgressCallback, RegistryClient


BINARY_SUFFIX = ".node"
PACKAGE_DIR = "package"


def expected_binary_path(target_dir: Union[str, Path], identifier: str) -> Path:
    """本地二进制文件的期望路径，同时用于“已下载”判断和解压后的校验"""
    return Path(target_dir) / PACKAGE_DIR / f"{identifier}{BINARY_SUFFIX}"


def package_name_for(identifier: str) -> str:
    """仓库包名：pinyin.linux-x64-gnu -> pinyin-linux-x64-gnu"""
    return identifier.replace(".", "-", 1)


class ProgressLogger:
    """默认进度输出，每跨过一个 step 百分比记录一行日志"""

    def __init__(self, logger: logging.Logger, step: int = 10):
        self.logger = logger
        self.step = step
        self._last_bucket = -1

    def __call__(self, percentage: Optional[float], remaining: Optional[int]) -> None:
        if percentage is None:
            return
        bucket = int(percentage) // self.step
        if bucket == self._last_bucket:
            return
        self._last_bucket = bucket
        remaining_mb = (remaining or 0) / 1024 / 1024
        self.logger.info(f"{percentage:.0f} % Remaining(MB): {remaining_mb:.2f}")


class ArtifactAcquirer:
    """
    确保目标目录下存在可加载的二进制文件

    同一标识可重复调用：文件已存在时直接返回，不访问网络。
    """

    def __init__(
        self,
        client_factory: Optional[Callable[[], RegistryClient]] = None,
        logger: Optional[logging.Logger] = None,
        on_progress: Optional[ProgressCallback] = None
    ):
        self.logger = logger or get_logger("acquirer")
        self.client_factory = client_factory or (lambda: RegistryClient(logger=self.logger))
        self.on_progress = on_progress

    async def ensure(self, identifier: str, target_dir: Union[str, Path]) -> Path:
        """
        确保二进制文件存在

        Args:
            identifier: 平台标识，例如 pinyin.linux-x64-gnu
            target_dir: 存放目录

        Returns:
            二进制文件路径

        Raises:
            DownloadError: 查询、下载或解压失败
        """
        target_dir = Path(target_dir)
        expected = expected_binary_path(target_dir, identifier)
        if expected.exists():
            self.logger.debug(f"二进制文件已存在: {expected}")
            return expected

        target_dir.mkdir(parents=True, exist_ok=True)
        package_name = package_name_for(identifier)

        async with self.client_factory() as client:
            tarball_url = await self._fetch_tarball_url(client, package_name)
            self.logger.info(f"⬇️ Starting download from {tarball_url}")
            archive_path = await self._download(client, tarball_url, target_dir)

        try:
            await asyncio.to_thread(extract_archive, archive_path)
        finally:
            archive_path.unlink(missing_ok=True)

        if not expected.exists():
            raise DownloadError(f"Archive did not contain the expected binary: {expected}")

        self.logger.info(f"✅ File downloaded successfully at {expected}")
        return expected

    async def _fetch_tarball_url(self, client: RegistryClient, package_name: str) -> str:
        url = client.metadata_url(package_name)
        try:
            _, data = await client.fetch_latest(package_name)
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"❌ Failed to fetch from URL: {url}: {e}")
            raise DownloadError(f"Failed to fetch from URL {url}: {e}", cause=e) from e

        dist = data.get("dist")
        tarball_url = dist.get("tarball") if isinstance(dist, dict) else None
        if not _is_http_url(tarball_url):
            raise DownloadError(f"Failed to get the binary url from {url}")
        return tarball_url

    async def _download(self, client: RegistryClient, url: str, target_dir: Path) -> Path:
        on_progress = self.on_progress or ProgressLogger(self.logger)
        try:
            result = await client.download(url, target_dir, on_progress)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, OSError) as e:
            _discard_partial(target_dir, url)
            self.logger.error(f"❌ Failed to download the file: {e}")
            raise DownloadError(f"Failed to download the binary file: {e}", cause=e) from e

        if not result.is_complete:
            if result.file_path is not None:
                result.file_path.unlink(missing_ok=True)
            self.logger.error(f"❌ Download was aborted: {url}")
            raise DownloadError("Failed to download the binary file: Download was aborted")
        return result.file_path


def _discard_partial(target_dir: Path, url: str) -> None:
    """删除传输中断时留下的部分文件"""
    try:
        partial = target_dir / RegistryClient.file_name_from_url(url)
    except ValueError:
        return
    partial.unlink(missing_ok=True)


def _is_http_url(value) -> bool:
    """仓库给出的下载地址必须是带主机名的 http(s) URL"""
    if not isinstance(value, str) or not value:
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def extract_archive(archive_path: Path) -> None:
    """
    把 .tgz 压缩包解压到它所在的目录，保留包内的相对路径

    先在临时目录中完整解压，成功后再移动到目标位置，
    压缩包损坏时不会留下不完整的文件。

    Raises:
        DownloadError: 读取、gunzip 或解包失败，消息中区分阶段
    """
    output_dir = archive_path.parent
    staging = Path(tempfile.mkdtemp(prefix=".extract-", dir=output_dir))
    tar_path = staging / "archive.tar"
    content_dir = staging / "content"
    try:
        _gunzip(archive_path, tar_path)
        _untar(tar_path, content_dir)
        _promote(content_dir, output_dir)
    finally:
        shutil.rmtree(staging, ignore_errors=True)


def _gunzip(archive_path: Path, tar_path: Path) -> None:
    try:
        src = open(archive_path, 'rb')
    except OSError as e:
        raise DownloadError(f"An error occurred while reading the file: {e}", cause=e) from e

    with src:
        try:
            with gzip.GzipFile(fileobj=src) as gz, open(tar_path, 'wb') as out:
                shutil.copyfileobj(gz, out)
        except (gzip.BadGzipFile, zlib.error, EOFError) as e:
            raise DownloadError(f"An error occurred while gunzipping the file: {e}", cause=e) from e
        except OSError as e:
            raise DownloadError(f"An error occurred while reading the file: {e}", cause=e) from e


def _check_member(member: tarfile.TarInfo) -> None:
    """拒绝会写到目标目录之外的条目"""
    name = PurePosixPath(member.name)
    if name.is_absolute() or ".." in name.parts:
        raise tarfile.TarError(f"unsafe path in archive: {member.name}")
    if member.issym() or member.islnk():
        link = PurePosixPath(member.linkname)
        if link.is_absolute() or ".." in link.parts:
            raise tarfile.TarError(f"unsafe link in archive: {member.name} -> {member.linkname}")


def _untar(tar_path: Path, dest: Path) -> None:
    try:
        dest.mkdir(parents=True, exist_ok=True)
        with tarfile.open(tar_path, 'r:') as tar:
            members = tar.getmembers()
            for member in members:
                _check_member(member)
            if hasattr(tarfile, "data_filter"):
                tar.extractall(dest, members=members, filter="data")
            else:
                tar.extractall(dest, members=members)
    except (tarfile.TarError, OSError) as e:
        raise DownloadError(f"An error occurred during extraction: {e}", cause=e) from e


def _promote(content_dir: Path, output_dir: Path) -> None:
    """把解压好的文件移动到最终位置"""
    try:
        for path in sorted(content_dir.rglob("*")):
            if path.is_dir() and not path.is_symlink():
                continue
            dest = output_dir / path.relative_to(content_dir)
            dest.parent.mkdir(parents=True, exist_ok=True)
            os.replace(path, dest)
    except OSError as e:
        raise DownloadError(f"An error occurred during extraction: {e}", cause=e) from e
