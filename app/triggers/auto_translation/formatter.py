# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译结果的排版与长消息拆分
"""
from typing import List

from models import Batch
from triggers.auto_translation.language_detector import get_language_flag

MAX_MESSAGE_LENGTH = 4000

FAILED_PLACEHOLDER = "⚠️ translation failed"

SEGMENT_SEPARATOR = "\n\n"


def format_translation_results(batch: Batch) -> str:
    segments = []
    for outcome in batch.outcomes:
        flag = get_language_flag(outcome.target_language)
        if outcome.succeeded and outcome.text:
            segments.append(f"{flag} {outcome.text}")
        else:
            segments.append(f"{flag} {FAILED_PLACEHOLDER}")
    return SEGMENT_SEPARATOR.join(segments)


def _split_word(word: str, max_length: int) -> List[str]:
    # 单个词本身超过上限时只能硬切
    if len(word) <= max_length:
        return [word]
    return [word[i : i + max_length] for i in range(0, len(word), max_length)]


def split_long_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    将超长文本拆分为多段，每段长度不超过 max_length。

    优先在换行处拆分；单行仍超长时在空格处拆分，不会切断单词。
    每段都会去除首尾空白。
    """
    if len(text) <= max_length:
        stripped = text.strip()
        return [stripped] if stripped else []

    chunks: List[str] = []
    current = ""

    for line in text.split("\n"):
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) <= max_length:
            current = candidate
            continue

        if current:
            chunks.append(current)
            current = ""

        if len(line) <= max_length:
            current = line
            continue

        for word in line.split(" "):
            for piece in _split_word(word, max_length):
                candidate = f"{current} {piece}" if current else piece
                if len(candidate) <= max_length:
                    current = candidate
                else:
                    chunks.append(current)
                    current = piece

    if current:
        chunks.append(current)

    return [chunk.strip() for chunk in chunks if chunk.strip()]


def render_reply(batch: Batch, max_length: int = MAX_MESSAGE_LENGTH) -> List[str]:
    return split_long_message(format_translation_results(batch), max_length)
