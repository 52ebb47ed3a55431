"""Tests for the TOML config loader."""

from pathlib import Path

import pytest

from pinyin_bot.core.config_manager import CONFIG_DIR_ENV, PINYIN_CONFIG_FILE, ConfigManager
from pinyin_bot.models.config_schema import PinyinConfig


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))
    monkeypatch.setattr(ConfigManager, "_instance", None)
    monkeypatch.setattr(ConfigManager, "_pinyin_config", None)
    return tmp_path


def test_config_dir_from_env(config_dir: Path):
    assert ConfigManager.get_config_dir() == config_dir


def test_bundled_config_is_valid(monkeypatch):
    monkeypatch.delenv(CONFIG_DIR_ENV, raising=False)
    monkeypatch.setattr(ConfigManager, "_instance", None)
    monkeypatch.setattr(ConfigManager, "_pinyin_config", None)

    config = ConfigManager.get_pinyin_config()

    assert (ConfigManager.get_config_dir() / PINYIN_CONFIG_FILE).exists()
    assert config.general.binary_dir


def test_loads_values(config_dir: Path):
    (config_dir / PINYIN_CONFIG_FILE).write_text(
        '[general]\nbinary_dir = "/opt/pinyin"\n\n'
        '[registry]\nbase_url = "https://registry.npmmirror.com"\ntimeout = 10\n\n'
        '[command]\nheteronym = true\nstyle = 0\n',
        encoding="utf-8"
    )

    config = ConfigManager.get_pinyin_config()

    assert config.general.binary_dir == "/opt/pinyin"
    assert config.registry.base_url == "https://registry.npmmirror.com"
    assert config.registry.timeout == 10
    assert config.command.heteronym is True
    assert config.command.style == 0
    # 未给出的字段取默认值
    assert config.registry.namespace == PinyinConfig().registry.namespace


def test_missing_file_uses_defaults(config_dir: Path):
    assert ConfigManager.get_pinyin_config() == PinyinConfig()


def test_invalid_toml_uses_defaults(config_dir: Path):
    (config_dir / PINYIN_CONFIG_FILE).write_text("[general\nbinary_dir = ", encoding="utf-8")
    assert ConfigManager.get_pinyin_config() == PinyinConfig()


def test_invalid_value_uses_defaults(config_dir: Path):
    (config_dir / PINYIN_CONFIG_FILE).write_text("[command]\nstyle = 9\n", encoding="utf-8")
    assert ConfigManager.get_pinyin_config().command.style == PinyinConfig().command.style


def test_reload_picks_up_changes(config_dir: Path):
    path = config_dir / PINYIN_CONFIG_FILE
    path.write_text("[registry]\ntimeout = 5\n", encoding="utf-8")
    assert ConfigManager.get_pinyin_config().registry.timeout == 5

    path.write_text("[registry]\ntimeout = 7\n", encoding="utf-8")
    assert ConfigManager.get_pinyin_config().registry.timeout == 5

    ConfigManager.reload()
    assert ConfigManager.get_pinyin_config().registry.timeout == 7
