"""
配置管理器 - 负责加载和管理 TOML 配置文件
"""
import os
from pathlib import Path
from typing import Optional
import toml
from pydantic import ValidationError
from pinyin_bot.models.config_schema import PinyinConfig
from pinyin_bot.core.logger import logger


CONFIG_DIR_ENV = "PINYIN_BOT_CONFIG_DIR"
PINYIN_CONFIG_FILE = "pinyin_config.toml"


class ConfigManager:
    """
    配置管理单例

    用法:
        ConfigManager.get_pinyin_config()  # 获取拼音插件配置（懒加载）
        ConfigManager.reload()             # 热重载
    """

    _instance: Optional['ConfigManager'] = None
    _pinyin_config: Optional[PinyinConfig] = None

    def __new__(cls):
        """单例模式"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_config_dir(cls) -> Path:
        """配置目录：优先环境变量，否则为项目根目录下的 configs/"""
        env_dir = os.environ.get(CONFIG_DIR_ENV)
        if env_dir:
            return Path(env_dir)
        return Path(__file__).parent.parent.parent / "configs"

    @classmethod
    def get_pinyin_config(cls) -> PinyinConfig:
        """获取拼音插件配置"""
        manager = cls()
        if manager._pinyin_config is None:
            config_path = cls.get_config_dir() / PINYIN_CONFIG_FILE

            if config_path.exists():
                try:
                    data = toml.load(str(config_path))
                    manager._pinyin_config = PinyinConfig(
                        general=data.get("general", {}),
                        registry=data.get("registry", {}),
                        command=data.get("command", {})
                    )
                    logger.info("✅ 拼音配置加载成功")
                except (toml.TomlDecodeError, ValidationError) as e:
                    logger.warning(f"⚠️ 拼音配置加载失败，使用默认配置: {e}")
                    manager._pinyin_config = PinyinConfig()
            else:
                logger.warning(f"⚠️ 拼音配置文件不存在，使用默认配置: {config_path}")
                manager._pinyin_config = PinyinConfig()

        return manager._pinyin_config

    @classmethod
    def reload(cls) -> None:
        """重新加载配置（用于热重载）"""
        manager = cls()
        manager._pinyin_config = None
        cls.get_pinyin_config()
        logger.info("✅ 所有配置已热重载")
