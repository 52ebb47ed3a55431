"""
拼音服务异常定义
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """错误类别"""
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    DOWNLOAD_FAILED = "download_failed"
    LOAD_FAILED = "load_failed"


class PinyinError(Exception):
    """拼音服务基础异常"""

    kind: ErrorKind = ErrorKind.LOAD_FAILED

    def __init__(self, message: str, kind: Optional[ErrorKind] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.cause = cause


class UnsupportedPlatformError(PinyinError):
    """当前系统/架构没有对应的二进制文件"""
    kind = ErrorKind.UNSUPPORTED_PLATFORM

    def __init__(self, os_name: str, arch: str):
        super().__init__(f"Unsupported OS: {os_name}, architecture: {arch}")
        self.os_name = os_name
        self.arch = arch


class DownloadError(PinyinError):
    """获取或解压二进制文件失败"""
    kind = ErrorKind.DOWNLOAD_FAILED

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)


class BindingLoadError(PinyinError):
    """二进制文件存在，但无法加载或缺少导出函数"""
    kind = ErrorKind.LOAD_FAILED

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause=cause)
