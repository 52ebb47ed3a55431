"""
Pinyin Bot 启动入口文件
"""
import sys
import logging
from pathlib import Path
from dotenv import load_dotenv

project_root = Path(__file__).parent

# 加载 .env 文件
load_dotenv(project_root / ".env")

import nonebot
from nonebot.adapters.onebot.v11 import Adapter as OneBotAdapter
from pinyin_bot.core.config_manager import ConfigManager
from pinyin_bot.core.logger import setup_logger

logger = setup_logger(__name__)


class NoiseEventFilter(logging.Filter):
    """过滤掉不需要的事件日志"""

    def filter(self, record):
        return 'input_status' not in record.getMessage()


nonebot_logger = logging.getLogger("nonebot")
nonebot_logger.addFilter(NoiseEventFilter())

# 初始化 NoneBot（从 .env 读取配置）
nonebot.init()

driver = nonebot.get_driver()
driver.register_adapter(OneBotAdapter)

# ============ 配置 NoneBot 日志过滤器（屏蔽 Matcher 噪音日志）============
from nonebot.log import logger as nonebot_log, default_filter, default_format


def custom_log_filter(record):
    """屏蔽 Matcher 相关的噪音日志"""
    msg: str = record["message"]
    if msg.startswith("Event will be handled by Matcher"):
        return False
    if "Matcher(" in msg and "running complete" in msg:
        return False
    return default_filter(record)


nonebot_log.remove()
nonebot_log.add(
    sys.stdout,
    level="INFO",
    format=default_format,
    filter=custom_log_filter,
)


@driver.on_startup
async def on_startup():
    """启动时加载配置"""
    cfg = ConfigManager.get_pinyin_config()
    logger.info("✅ 配置加载成功")
    logger.info(f"   二进制目录: {cfg.general.binary_dir}")
    logger.info(f"   仓库: {cfg.registry.base_url}/{cfg.registry.namespace}")


nonebot.load_plugin("pinyin_bot.plugins.pinyin")

if __name__ == "__main__":
    nonebot.run()
