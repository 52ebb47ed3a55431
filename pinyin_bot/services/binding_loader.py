"""
二进制模块加载
"""
import importlib.machinery
import importlib.util
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Union

from pinyin_bot.core.exceptions import BindingLoadError


PinyinResult = Union[List[str], List[List[str]]]

# Python 属性名 -> 模块可能使用的导出名
_EXPORTS = {
    "pinyin": ("pinyin",),
    "async_pinyin": ("async_pinyin", "asyncPinyin"),
    "compare": ("compare",),
}


@dataclass(frozen=True)
class NativeBinding:
    """已加载模块暴露的三个函数"""
    pinyin: Callable[..., PinyinResult]
    async_pinyin: Callable[..., Awaitable[PinyinResult]]
    compare: Callable[[str, str], int]

    @classmethod
    def from_module(cls, module: Any) -> "NativeBinding":
        """
        从模块对象中取出导出函数

        Raises:
            BindingLoadError: 缺少任一导出或导出不可调用
        """
        found = {}
        for attr, candidates in _EXPORTS.items():
            func = next(
                (getattr(module, name) for name in candidates if callable(getattr(module, name, None))),
                None
            )
            if func is None:
                raise BindingLoadError(f"Native module does not export '{candidates[-1]}'")
            found[attr] = func
        return cls(**found)


class BindingLoader(ABC):
    """按路径加载二进制模块的能力"""

    @abstractmethod
    def load(self, path: Path) -> NativeBinding:
        """
        加载指定路径的二进制模块

        Raises:
            BindingLoadError: 加载失败
        """


class NativeModuleLoader(BindingLoader):
    """通过 importlib 把文件当作原生扩展模块加载"""

    def __init__(self, module_name: str = "pinyin_native"):
        self.module_name = module_name

    def load(self, path: Path) -> NativeBinding:
        loader = importlib.machinery.ExtensionFileLoader(self.module_name, str(path))
        spec = importlib.util.spec_from_file_location(self.module_name, str(path), loader=loader)
        if spec is None:
            raise BindingLoadError(f"Cannot create module spec for {path}")

        try:
            module = importlib.util.module_from_spec(spec)
            loader.exec_module(module)
        except (ImportError, OSError) as e:
            raise BindingLoadError(f"Cannot load native module {path}: {e}", cause=e) from e

        return NativeBinding.from_module(module)
