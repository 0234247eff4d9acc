# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/8 12:34
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class MessageKind(str, Enum):
    NORMAL = "normal"
    """
    用户发送的普通消息
    """

    SYSTEM = "system"
    """
    平台生成的服务消息，例如成员进出群、置顶、修改群名
    """

    EDITED = "edited"
    """
    用户编辑过的消息
    """


class InboundMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    conversation_id: str = Field(description="会话 ID，Telegram 中为 chat.id")
    message_id: str = Field(description="会话内的消息 ID")
    author_id: str = Field(default="", description="发送者 ID")
    text: str = Field(default="", description="消息文本或图片说明")
    is_from_automated_sender: bool = Field(default=False, description="是否由机器人或平台发出")
    kind: MessageKind = MessageKind.NORMAL

    @property
    def dedup_key(self) -> str:
        return make_dedup_key(self.conversation_id, self.message_id)


def make_dedup_key(conversation_id: str, message_id: str) -> str:
    return f"{conversation_id}:{message_id}"


class RejectReason(str, Enum):
    AUTOMATED_SENDER = "Bot message or system message"
    UNSUPPORTED_KIND = "Unsupported message kind"
    ALREADY_PROCESSED = "Already processed"
    EMPTY_TEXT = "Empty or whitespace-only message"
    PICTOGRAPHIC_ONLY = "Emoji-only message"
    OPT_OUT = "Ignore command detected"
    TOO_SHORT = "Message too short for translation"


class Eligibility(BaseModel):
    eligible: bool
    reason: RejectReason | None = None


class TranslationOutcome(BaseModel):
    target_language: str
    text: str = ""
    succeeded: bool = False
    error_detail: str | None = None
    attempts: int = 0


class Batch(BaseModel):
    source_language: str
    outcomes: List[TranslationOutcome] = Field(default_factory=list)

    @property
    def target_languages(self) -> List[str]:
        return [o.target_language for o in self.outcomes]

    @property
    def succeeded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)

    @property
    def is_empty(self) -> bool:
        return not self.outcomes


class ReplyPayload(BaseModel):
    text: str
    thread_id: str | None = Field(default=None, description="回复的目标消息 ID，为空时直接发送")


class CacheStats(BaseModel):
    size: int
    oldest_entry_age: float | None = Field(default=None, description="最早条目的存活时间（秒）")
