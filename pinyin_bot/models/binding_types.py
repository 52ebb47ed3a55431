"""
拼音二进制模块相关的类型定义
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Dict, Optional


class PinyinStyle(IntEnum):
    """注音风格"""
    PLAIN = 0              # 普通风格，不带声调
    WITH_TONE = 1          # 带声调
    WITH_TONE_NUM = 2      # 声调在各个拼音之后，用数字 1-4 表示
    WITH_TONE_NUM_END = 3  # 声调在拼音最后，用数字 1-4 表示
    FIRST_LETTER = 4       # 首字母


@dataclass(frozen=True)
class ConvertOptions:
    """转换选项，原样传给二进制模块，不在本地解释"""
    style: PinyinStyle = PinyinStyle.WITH_TONE
    heteronym: bool = False
    segment: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "style": int(self.style),
            "heteronym": self.heteronym,
            "segment": self.segment,
        }


class DownloadStatus(str, Enum):
    """下载终止状态"""
    COMPLETE = "COMPLETE"
    ABORTED = "ABORTED"


@dataclass
class DownloadResult:
    """一次下载的结果"""
    status: DownloadStatus
    file_path: Optional[Path] = None
    bytes_received: int = 0
    total_bytes: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.status == DownloadStatus.COMPLETE and self.file_path is not None


@dataclass(frozen=True)
class HostPlatform:
    """运行环境：系统、架构、是否 musl libc"""
    os: str
    arch: str
    is_musl: bool = False

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"
