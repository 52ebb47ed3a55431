"""
拼音命令
/pinyin <文本> - 注音
/pinyin_compare <文本A> <文本B> - 按拼音比较
"""
from nonebot import on_command
from nonebot.adapters.onebot.v11 import Message, MessageEvent, MessageSegment
from nonebot.exception import FinishedException
from nonebot.params import CommandArg

from pinyin_bot.core.config_manager import ConfigManager
from pinyin_bot.core.logger import logger
from pinyin_bot.services.pinyin_service import format_pinyin_result, get_pinyin_service, parse_pinyin_args


# /pinyin 文本
pinyin_cmd = on_command("pinyin", aliases={"拼音"}, priority=5, block=True)


@pinyin_cmd.handle()
async def handle_pinyin(event: MessageEvent, args: Message = CommandArg()):
    """给文本注音"""
    service = get_pinyin_service()
    if not service.is_ready:
        await pinyin_cmd.finish("pinyin 服务尚未启动，请查看日志")

    cfg = ConfigManager.get_pinyin_config()
    try:
        message, options = parse_pinyin_args(args.extract_plain_text(), cfg.command)
    except ValueError as e:
        await pinyin_cmd.finish(f"{e}\n用法：/pinyin [-d] [-s|-S] [-o 0-4] 文本")

    if not message:
        await pinyin_cmd.finish("你必须提供需要注音的内容")

    try:
        result = await service.async_pinyin(message, options)
        reply = format_pinyin_result(result)
        await pinyin_cmd.finish(MessageSegment.reply(event.message_id) + reply)
    except FinishedException:
        raise
    except Exception as e:
        logger.error(f"❌ 注音失败: {e}")
        await pinyin_cmd.finish("注音失败，请稍后再试")


# /pinyin_compare 文本A 文本B
compare_cmd = on_command("pinyin_compare", priority=5, block=True)


@compare_cmd.handle()
async def handle_compare(event: MessageEvent, args: Message = CommandArg()):
    """按拼音比较两段文本"""
    service = get_pinyin_service()
    if not service.is_ready:
        await compare_cmd.finish("pinyin 服务尚未启动，请查看日志")

    parts = args.extract_plain_text().split()
    if len(parts) != 2:
        await compare_cmd.finish("用法：/pinyin_compare 文本A 文本B")

    a, b = parts
    order = service.compare(a, b)
    symbol = "<" if order < 0 else ">" if order > 0 else "="
    await compare_cmd.finish(MessageSegment.reply(event.message_id) + f"{a} {symbol} {b}")
