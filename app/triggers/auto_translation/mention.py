# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 解析提及机器人的翻译请求，例如 `@bot -> en, fr 需要翻译的内容`
"""
import re
from typing import List

from pydantic import BaseModel

_TARGETS_PATTERN = re.compile(r"->\s*([a-z]{2}(?:\s*,\s*[a-z]{2})*)\b", re.IGNORECASE)


class MentionRequest(BaseModel):
    text: str
    target_languages: List[str] | None = None


def parse_mention_request(text: str, bot_username: str) -> MentionRequest:
    bot_username = bot_username.lstrip("@")
    if bot_username:
        text = re.sub(rf"@{re.escape(bot_username)}\b", "", text, flags=re.IGNORECASE)

    target_languages = None
    if match := _TARGETS_PATTERN.search(text):
        target_languages = []
        for lang in match.group(1).split(","):
            lang = lang.strip().lower()
            if lang not in target_languages:
                target_languages.append(lang)
        text = text[: match.start()] + text[match.end() :]

    return MentionRequest(text=text.strip(), target_languages=target_languages)
