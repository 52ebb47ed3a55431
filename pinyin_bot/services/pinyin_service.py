"""
拼音服务
启动时解析平台、获取并加载二进制模块，之后对外提供转换和比较接口
"""
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

from pinyin_bot.core.config_manager import ConfigManager
from pinyin_bot.core.exceptions import BindingLoadError, DownloadError, ErrorKind, PinyinError
from pinyin_bot.core.logger import get_logger
from pinyin_bot.models.binding_types import ConvertOptions, HostPlatform, PinyinStyle
from pinyin_bot.models.config_schema import PinyinCommandConfig, PinyinConfig
from pinyin_bot.services.artifact_acquirer import ArtifactAcquirer, expected_binary_path
from pinyin_bot.services.binding_loader import BindingLoader, NativeBinding, NativeModuleLoader, PinyinResult
from pinyin_bot.services.http_client import RegistryClient
from pinyin_bot.services.platform_resolver import PlatformResolver, detect_host_platform


_FAILURE_MESSAGES = {
    ErrorKind.UNSUPPORTED_PLATFORM: "pinyin 目前不支持你的系统",
    ErrorKind.DOWNLOAD_FAILED: "下载二进制文件遇到错误，请查看日志获取更详细信息",
    ErrorKind.LOAD_FAILED: "在处理二进制文件时遇到了错误",
}


class PinyinService:
    """
    拼音服务

    用法:
        service = PinyinService(ConfigManager.get_pinyin_config())
        await service.start()
        service.pinyin("中文")
    """

    def __init__(
        self,
        config: Optional[PinyinConfig] = None,
        host: Optional[HostPlatform] = None,
        resolver: Optional[PlatformResolver] = None,
        acquirer: Optional[ArtifactAcquirer] = None,
        loader: Optional[BindingLoader] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config or PinyinConfig()
        self.logger = logger or get_logger("service")
        self.host = host
        self.resolver = resolver or PlatformResolver(logger=self.logger)
        self.acquirer = acquirer or ArtifactAcquirer(
            client_factory=self._make_client,
            logger=self.logger
        )
        self.loader = loader or NativeModuleLoader()
        self._binding: Optional[NativeBinding] = None

    def _make_client(self) -> RegistryClient:
        registry = self.config.registry
        return RegistryClient(
            base_url=registry.base_url,
            namespace=registry.namespace,
            timeout=registry.timeout,
            logger=self.logger
        )

    @property
    def binary_dir(self) -> Path:
        """二进制文件存放目录，相对路径基于 base_dir"""
        general = self.config.general
        path = Path(general.binary_dir)
        if path.is_absolute():
            return path
        base = Path(general.base_dir) if general.base_dir else Path.cwd()
        return (base / path).resolve()

    @property
    def is_ready(self) -> bool:
        return self._binding is not None

    async def start(self) -> None:
        """
        启动服务：解析平台 -> 获取二进制文件 -> 加载

        Raises:
            PinyinError: 任一阶段失败，按 kind 区分，启动中止
        """
        if self._binding is not None:
            return

        binary_dir = self.binary_dir
        binary_dir.mkdir(parents=True, exist_ok=True)

        try:
            host = self.host or detect_host_platform()
            identifier = self.resolver.resolve_host(host)
            self._binding = await self._acquire_and_load(identifier, binary_dir, host)
        except PinyinError as e:
            self.logger.error(_FAILURE_MESSAGES[e.kind])
            self.logger.error(f"   {e}")
            raise

        self.logger.info("✅ pinyin 服务启动成功")

    async def _acquire_and_load(self, identifier: str, binary_dir: Path, host: HostPlatform) -> NativeBinding:
        expected = expected_binary_path(binary_dir, identifier)
        try:
            path = await self.acquirer.ensure(identifier, binary_dir)
            return self.loader.load(path)
        except DownloadError:
            raise
        except Exception as e:
            self.logger.error(f"❌ 加载二进制文件失败: {e}")
            raise BindingLoadError(f"Failed to use {expected} on {host}", cause=e) from e

    def _require_binding(self) -> NativeBinding:
        if self._binding is None:
            raise RuntimeError("pinyin 服务尚未启动")
        return self._binding

    def pinyin(self, text: str, options: Optional[ConvertOptions] = None) -> PinyinResult:
        """同步转换"""
        binding = self._require_binding()
        return binding.pinyin(text, (options or ConvertOptions()).to_dict())

    async def async_pinyin(self, text: str, options: Optional[ConvertOptions] = None,
                           signal: Any = None) -> PinyinResult:
        """异步转换，signal 原样传给二进制模块用于取消"""
        binding = self._require_binding()
        opts = (options or ConvertOptions()).to_dict()
        if signal is None:
            return await binding.async_pinyin(text, opts)
        return await binding.async_pinyin(text, opts, signal)

    def compare(self, a: str, b: str) -> int:
        """按拼音比较两个字符串，返回负数/0/正数"""
        return self._require_binding().compare(a, b)


def parse_pinyin_args(raw: str, defaults: Optional[PinyinCommandConfig] = None) -> Tuple[str, ConvertOptions]:
    """
    解析 /pinyin 命令参数

    支持 -d/--heteronym、-s/--segment、-S/--no-segment、-o/--output <0-4>，
    其余部分作为待注音文本。

    Raises:
        ValueError: -o 缺少取值或取值不在 0-4
    """
    defaults = defaults or PinyinCommandConfig()
    heteronym = defaults.heteronym
    segment = defaults.segment
    style = defaults.style
    words: List[str] = []

    tokens = raw.split()
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token in ("-d", "--heteronym"):
            heteronym = True
        elif token in ("-s", "--segment"):
            segment = True
        elif token in ("-S", "--no-segment"):
            segment = False
        elif token in ("-o", "--output"):
            if i + 1 >= len(tokens):
                raise ValueError("-o 需要一个 0-4 的数字")
            value = tokens[i + 1]
            if not value.isdigit() or int(value) not in {s.value for s in PinyinStyle}:
                raise ValueError(f"无效的注音风格: {value}")
            style = int(value)
            i += 1
        else:
            words.append(token)
        i += 1

    options = ConvertOptions(style=PinyinStyle(style), heteronym=heteronym, segment=segment)
    return " ".join(words), options


def format_pinyin_result(result: PinyinResult) -> str:
    """多音字用 / 连接，各字之间用空格连接"""
    return " ".join(
        "/".join(item) if isinstance(item, (list, tuple)) else str(item)
        for item in result
    )


# 全局单例
_pinyin_service: Optional[PinyinService] = None


def get_pinyin_service() -> PinyinService:
    """获取全局拼音服务单例"""
    global _pinyin_service
    if _pinyin_service is None:
        _pinyin_service = PinyinService(ConfigManager.get_pinyin_config())
    return _pinyin_service
