# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : The main message handler orchestrating services.
"""
from loguru import logger
from telegram import Update
from telegram.ext import ContextTypes

from mybot.services.telegram_adapter import TelegramReplySink, is_bot_mention, to_inbound_message
from mybot.task_manager import non_blocking_handler
from triggers.auto_translation import TranslationPipeline

PIPELINE_KEY = "translation_pipeline"


@non_blocking_handler("handle_message")
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Converts the update and hands it to the translation pipeline.
    """
    if not (message := to_inbound_message(update)):
        return

    pipeline: TranslationPipeline = context.bot_data[PIPELINE_KEY]
    sink = TelegramReplySink(context.bot, update.effective_chat.id)
    bot_username = context.bot.username

    if is_bot_mention(message, bot_username):
        logger.debug(f"Received mention - {message.dedup_key}")
        await pipeline.handle_mention(message, sink, bot_username)
    else:
        await pipeline.handle(message, sink)
