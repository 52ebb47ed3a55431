"""
日志配置
包根 logger "pinyin_bot" 持有唯一的控制台处理器，各组件使用其子 logger
"""
import logging
import os
import sys
from typing import Optional, Union


ROOT_LOGGER_NAME = "pinyin_bot"
LOG_LEVEL_ENV = "PINYIN_BOT_LOG_LEVEL"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_level(level: Union[int, str, None] = None) -> int:
    """
    解析日志级别

    未指定时读取环境变量 PINYIN_BOT_LOG_LEVEL，仍为空则为 INFO；
    无法识别的级别名同样回落到 INFO。
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logger(name: str, level: Union[int, str, None] = None) -> logging.Logger:
    """
    设置日志记录器

    Args:
        name: 日志记录器名称
        level: 日志级别（数字或级别名），为空时按环境变量决定

    Returns:
        配置好的 Logger 对象
    """
    logger = logging.getLogger(name)
    resolved = resolve_level(level)
    logger.setLevel(resolved)

    # 避免重复添加处理器
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(resolved)
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    return logger


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """
    获取组件 logger，例如 get_logger("registry") -> pinyin_bot.registry

    子 logger 不单独挂处理器，日志经包根 logger 输出。
    """
    if not component:
        return logger
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")


# 包根日志记录器
logger = setup_logger(ROOT_LOGGER_NAME)
