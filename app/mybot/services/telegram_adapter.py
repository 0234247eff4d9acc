# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Telegram 消息与翻译流程之间的转换
"""
from loguru import logger
from telegram import Bot, Message, ReplyParameters, Update, User
from telegram.error import BadRequest

from models import InboundMessage, MessageKind, ReplyPayload

# 平台生成的服务消息字段
_SERVICE_FIELDS = (
    "new_chat_members",
    "left_chat_member",
    "new_chat_title",
    "new_chat_photo",
    "delete_chat_photo",
    "group_chat_created",
    "supergroup_chat_created",
    "channel_chat_created",
    "pinned_message",
    "migrate_to_chat_id",
    "migrate_from_chat_id",
    "message_auto_delete_timer_changed",
    "video_chat_started",
    "video_chat_ended",
    "forum_topic_created",
)


def is_real_bot(user: User | None) -> bool:
    """检测是否为真正的机器人用户

    匿名管理员与频道消息在 Telegram 中同样以 is_bot=True 的特殊用户出现，不视为机器人。
    """
    if not user or not user.is_bot:
        return False

    if user.username and user.username.lower().endswith("bot"):
        if user.username in ("GroupAnonymousBot", "Channel_Bot"):
            logger.debug(f"[机器人检测] 匿名管理员或频道消息: {user.username}")
            return False
        return True

    if user.first_name and any(
        keyword in user.first_name.lower() for keyword in ["anonymous", "admin", "group", "channel"]
    ):
        logger.debug(f"[机器人检测] 可能是匿名管理员: {user.first_name}")
        return False

    return True


def is_service_message(message: Message) -> bool:
    return any(getattr(message, field, None) for field in _SERVICE_FIELDS)


def to_inbound_message(update: Update) -> InboundMessage | None:
    message = update.effective_message
    if not message or not update.effective_chat:
        return None

    if message.from_user:
        author_id = str(message.from_user.id)
    elif message.sender_chat:
        author_id = str(message.sender_chat.id)
    else:
        author_id = ""

    if is_service_message(message):
        kind = MessageKind.SYSTEM
    elif update.edited_message or update.edited_channel_post:
        kind = MessageKind.EDITED
    else:
        kind = MessageKind.NORMAL

    return InboundMessage(
        conversation_id=str(update.effective_chat.id),
        message_id=str(message.message_id),
        author_id=author_id,
        text=message.text or message.caption or "",
        is_from_automated_sender=is_real_bot(message.from_user) or bool(message.via_bot),
        kind=kind,
    )


def is_bot_mention(message: InboundMessage, bot_username: str | None) -> bool:
    if not bot_username:
        return False
    return f"@{bot_username.lstrip('@')}".lower() in message.text.lower()


class TelegramReplySink:
    """将回复发送到指定聊天，优先回复原消息，原消息不可用时直接发送到群组"""

    def __init__(self, bot: Bot, chat_id: int | str):
        self.bot = bot
        self.chat_id = chat_id

    async def __call__(self, payload: ReplyPayload) -> None:
        if payload.thread_id is None:
            await self.bot.send_message(chat_id=self.chat_id, text=payload.text)
            return

        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=payload.text,
                reply_parameters=ReplyParameters(message_id=int(payload.thread_id)),
            )
        except BadRequest as err:
            logger.warning(f"回复原消息失败: {err}，尝试发送到群组")
            await self.bot.send_message(chat_id=self.chat_id, text=payload.text)
