# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 判断消息是否需要进入翻译流程
"""
import re
from typing import Iterable

from models import Eligibility, InboundMessage, MessageKind, RejectReason

DEFAULT_MIN_LENGTH = 3
DEFAULT_OPT_OUT_MARKERS = ("/ignore", "!ignore")

# 仅由表情、空白以及表情的组合字符构成的文本
_PICTOGRAPHIC_ONLY = re.compile(
    "^["
    r"\s"
    "\U0001F600-\U0001F64F"  # emoticons
    "\U0001F300-\U0001F5FF"  # symbols & pictographs
    "\U0001F680-\U0001F6FF"  # transport & map
    "\U0001F900-\U0001F9FF"  # supplemental symbols & pictographs
    "\U0001FA70-\U0001FAFF"  # symbols & pictographs extended-A
    "\U0001F1E6-\U0001F1FF"  # regional indicators
    "\U0001F3FB-\U0001F3FF"  # skin tone modifiers
    "\u2600-\u26FF"  # misc symbols
    "\u2700-\u27BF"  # dingbats
    "\u2B50\u2B55\u2B1B\u2B1C"
    "\u200D"  # zero width joiner
    "\uFE0F"  # variation selector-16
    "\u20E3"  # keycap
    "]*$"
)


def is_pictographic_only(text: str) -> bool:
    return bool(_PICTOGRAPHIC_ONLY.match(text))


def contains_opt_out_marker(text: str, markers: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(marker.lower() in lowered for marker in markers if marker)


def evaluate(
    message: InboundMessage,
    already_processed: bool,
    *,
    min_length: int = DEFAULT_MIN_LENGTH,
    opt_out_markers: Iterable[str] = DEFAULT_OPT_OUT_MARKERS,
) -> Eligibility:
    """
    依次检查，命中第一条即拒绝：

    1. 机器人或平台发出的消息
    2. 普通消息与编辑消息以外的类型
    3. 已处理过的消息
    4. 空消息
    5. 纯表情消息
    6. 包含退出标记的消息
    7. 过短的消息

    提及请求传入去掉提及与目标语言后的正文，min_length 为 1，空正文由调用方回复提示。

    Args:
        message: 入站消息
        already_processed: 去重缓存的查询结果，由调用方查询一次后传入
        min_length: 去除首尾空白后的最短长度
        opt_out_markers: 退出标记，不区分大小写的子串匹配

    Returns:
        Eligibility
    """
    if message.is_from_automated_sender:
        return Eligibility(eligible=False, reason=RejectReason.AUTOMATED_SENDER)

    if message.kind not in (MessageKind.NORMAL, MessageKind.EDITED):
        return Eligibility(eligible=False, reason=RejectReason.UNSUPPORTED_KIND)

    if already_processed:
        return Eligibility(eligible=False, reason=RejectReason.ALREADY_PROCESSED)

    text = message.text or ""
    stripped = text.strip()

    if not stripped:
        return Eligibility(eligible=False, reason=RejectReason.EMPTY_TEXT)

    if is_pictographic_only(text):
        return Eligibility(eligible=False, reason=RejectReason.PICTOGRAPHIC_ONLY)

    if contains_opt_out_marker(text, opt_out_markers):
        return Eligibility(eligible=False, reason=RejectReason.OPT_OUT)

    if len(stripped) < min_length:
        return Eligibility(eligible=False, reason=RejectReason.TOO_SHORT)

    return Eligibility(eligible=True)
