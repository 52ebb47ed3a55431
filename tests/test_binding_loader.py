"""Tests for loading the native pinyin module."""

from pathlib import Path
from types import SimpleNamespace

import pytest

from pinyin_bot.core.exceptions import BindingLoadError, ErrorKind
from pinyin_bot.services.binding_loader import NativeBinding, NativeModuleLoader


async def _async_pinyin(text, options=None, signal=None):
    return [text]


def test_from_module_with_camel_case_export():
    module = SimpleNamespace(
        pinyin=lambda text, options=None: [text],
        asyncPinyin=_async_pinyin,
        compare=lambda a, b: 0,
    )
    binding = NativeBinding.from_module(module)
    assert binding.pinyin("中") == ["中"]
    assert binding.async_pinyin is _async_pinyin
    assert binding.compare("a", "b") == 0


def test_from_module_with_snake_case_export():
    module = SimpleNamespace(
        pinyin=lambda text, options=None: [text],
        async_pinyin=_async_pinyin,
        compare=lambda a, b: 0,
    )
    assert NativeBinding.from_module(module).async_pinyin is _async_pinyin


@pytest.mark.parametrize("missing", ["pinyin", "asyncPinyin", "compare"])
def test_from_module_missing_export(missing):
    exports = {
        "pinyin": lambda text, options=None: [text],
        "asyncPinyin": _async_pinyin,
        "compare": lambda a, b: 0,
    }
    exports.pop(missing)
    with pytest.raises(BindingLoadError) as exc_info:
        NativeBinding.from_module(SimpleNamespace(**exports))
    assert missing in str(exc_info.value)
    assert exc_info.value.kind == ErrorKind.LOAD_FAILED


def test_from_module_non_callable_export():
    module = SimpleNamespace(pinyin="not callable", asyncPinyin=_async_pinyin, compare=lambda a, b: 0)
    with pytest.raises(BindingLoadError):
        NativeBinding.from_module(module)


def test_native_loader_rejects_non_binary(tmp_path: Path):
    fake = tmp_path / "pinyin.linux-x64-gnu.node"
    fake.write_bytes(b"definitely not a shared object")

    with pytest.raises(BindingLoadError) as exc_info:
        NativeModuleLoader().load(fake)

    assert str(fake) in str(exc_info.value)


def test_native_loader_missing_file(tmp_path: Path):
    with pytest.raises(BindingLoadError):
        NativeModuleLoader().load(tmp_path / "missing.node")
