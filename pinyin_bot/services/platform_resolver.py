"""
平台解析服务
根据 (系统, 架构, libc) 计算需要下载的二进制文件标识
"""
import logging
import os
import platform
import shutil
import sys
from typing import Dict, Optional

from pinyin_bot.core.exceptions import UnsupportedPlatformError
from pinyin_bot.core.logger import get_logger
from pinyin_bot.models.binding_types import HostPlatform


PRODUCT_PREFIX = "pinyin"

# 占位：该架构的标识按 musl / glibc 加不同后缀
_LIBC_SPLIT = "libc-split"

# 系统 -> 架构 -> 平台标识
PLATFORM_TABLE: Dict[str, Dict[str, str]] = {
    "android": {
        "arm64": "android-arm64",
        "arm": "android-arm-eabi",
    },
    "win32": {
        "x64": "win32-x64-msvc",
        "ia32": "win32-ia32-msvc",
        "arm64": "win32-arm64-msvc",
    },
    "darwin": {
        "x64": "darwin-x64",
        "arm64": "darwin-arm64",
    },
    "freebsd": {
        "x64": "freebsd-x64",
    },
    "linux": {
        "x64": _LIBC_SPLIT,
        "arm64": _LIBC_SPLIT,
        "arm": "linux-arm-gnueabihf",
    },
}

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv8l": "arm64",
    "armv8b": "arm64",
    "armv7l": "arm",
    "armv7": "arm",
    "armv6l": "arm",
    "arm": "arm",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "ia32": "ia32",
}


class PlatformResolver:
    """
    表驱动的平台解析器

    纯函数语义：同样的输入永远得到同样的标识，不做任何 I/O。
    """

    def __init__(self, prefix: str = PRODUCT_PREFIX,
                 logger: Optional[logging.Logger] = None):
        self.prefix = prefix
        self.logger = logger or get_logger("platform")

    def resolve(self, os_name: str, arch: str, is_musl: bool = False) -> str:
        """
        解析二进制文件标识

        Args:
            os_name: 系统名（android / win32 / darwin / freebsd / linux）
            arch: 架构名（x64 / ia32 / arm64 / arm）
            is_musl: 是否为 musl libc，仅对 linux x64/arm64 生效

        Returns:
            标识字符串，例如 pinyin.linux-x64-gnu

        Raises:
            UnsupportedPlatformError: 系统或架构不在支持列表中
        """
        arch_table = PLATFORM_TABLE.get(os_name)
        if arch_table is None or arch not in arch_table:
            raise UnsupportedPlatformError(os_name, arch)

        token = arch_table[arch]
        if token == _LIBC_SPLIT:
            token = f"{os_name}-{arch}-{'musl' if is_musl else 'gnu'}"

        identifier = f"{self.prefix}.{token}"
        self.logger.debug(f"平台 {os_name}-{arch} (musl={is_musl}) -> {identifier}")
        return identifier

    def resolve_host(self, host: HostPlatform) -> str:
        return self.resolve(host.os, host.arch, host.is_musl)


def normalize_os(system: str) -> str:
    """把 sys.platform 的取值归一化为解析表使用的系统名"""
    system = system.lower()
    if system == "android":
        return "android"
    if system.startswith("linux"):
        # 旧版本解释器在 Android 上也报告 linux
        if hasattr(sys, "getandroidapilevel") or "ANDROID_ROOT" in os.environ:
            return "android"
        return "linux"
    if system in ("win32", "cygwin"):
        return "win32"
    if system.startswith("freebsd"):
        return "freebsd"
    return system


def normalize_arch(machine: str) -> str:
    """把 platform.machine() 的取值归一化为解析表使用的架构名"""
    machine = machine.lower()
    if machine in _ARCH_ALIASES:
        return _ARCH_ALIASES[machine]
    if machine.startswith("armv8"):
        return "arm64"
    if machine.startswith(("armv7", "armv6")):
        return "arm"
    return machine


def is_musl_libc() -> bool:
    """
    检测当前 C 库是否为 musl

    1. 优先使用 platform.libc_ver() 的结构化结果
    2. 没有结果时查找 ldd 并检查其内容是否包含 musl
    3. 探测本身失败时保守地认为是 musl
    """
    lib, _version = platform.libc_ver()
    if lib:
        return "musl" in lib.lower()

    try:
        ldd_path = shutil.which("ldd")
        if not ldd_path:
            return True
        with open(ldd_path, "r", encoding="utf-8", errors="ignore") as f:
            return "musl" in f.read()
    except OSError:
        return True


def detect_host_platform() -> HostPlatform:
    """检测当前运行环境"""
    os_name = normalize_os(sys.platform)
    arch = normalize_arch(platform.machine())
    is_musl = is_musl_libc() if os_name == "linux" else False
    return HostPlatform(os=os_name, arch=arch, is_musl=is_musl)
