import io
import tarfile
from pathlib import Path

import pytest


def build_tgz(files: dict) -> bytes:
    """按 {相对路径: 内容} 构造 .tgz 字节流"""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def tgz_factory():
    return build_tgz


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    path = tmp_path / "node-rs" / "pinyin"
    path.mkdir(parents=True)
    return path
