"""
拼音插件
启动时准备 pinyin 二进制模块，并提供注音命令
"""
from nonebot import get_driver

from pinyin_bot.core.logger import logger
from pinyin_bot.services.pinyin_service import get_pinyin_service
from . import commands

__plugin_name__ = "pinyin"
__plugin_usage__ = """
拼音插件

命令：
/pinyin <文本> - 给文本注音
  -d 处理多音字
  -s / -S 开启 / 关闭分词（默认开启）
  -o <0-4> 0 不带声调，1 带声调（默认），2 用 1-4 在拼音后标注声调，
           3 用 1-4 在所有拼音后标注声调，4 首字母
/pinyin_compare <文本A> <文本B> - 按拼音比较两段文本

示例：
/pinyin 中文
/pinyin -d -o 2 重庆
"""

driver = get_driver()


@driver.on_startup
async def start_pinyin_service():
    """启动拼音服务，失败时中止启动"""
    logger.info("🔤 正在启动 pinyin 服务...")
    await get_pinyin_service().start()
