# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:15
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 语言代码与本地语言检测
"""

import re

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException
from loguru import logger

# 设置随机种子以确保检测结果的一致性
DetectorFactory.seed = 0

UNDETERMINED = "und"

# 支持的语言与对应的旗帜
LANGUAGE_FLAGS = {
    "en": "🇺🇸",
    "ja": "🇯🇵",
    "ko": "🇰🇷",
    "fr": "🇫🇷",
    "zh": "🇨🇳",
    "es": "🇪🇸",
    "de": "🇩🇪",
    "it": "🇮🇹",
    "pt": "🇵🇹",
    "ru": "🇷🇺",
    "ar": "🇸🇦",
    "hi": "🇮🇳",
    "th": "🇹🇭",
    "vi": "🇻🇳",
    "id": "🇮🇩",
    "ms": "🇲🇾",
    "tl": "🇵🇭",
}

DEFAULT_FLAG = "🌐"

SUPPORTED_LANGUAGES = frozenset(LANGUAGE_FLAGS)

# langdetect 与模型常见的非标准写法
_ALIASES = {"zh-cn": "zh", "zh-tw": "zh", "zh-hans": "zh", "zh-hant": "zh", "fil": "tl"}

MIN_CONFIDENCE = 0.6


def get_language_flag(lang_code: str) -> str:
    return LANGUAGE_FLAGS.get(lang_code, DEFAULT_FLAG)


def normalize_language_code(raw: str | None) -> str:
    """将模型或 langdetect 的输出标准化为受支持的 ISO-639-1 代码，否则返回 `und`"""
    if not raw:
        return UNDETERMINED

    parts = raw.strip().split()
    if not parts:
        return UNDETERMINED

    code = parts[0].strip("'\"`.,:;").lower()
    code = _ALIASES.get(code, code)

    if code in SUPPORTED_LANGUAGES:
        return code
    return UNDETERMINED


def clean_text_for_detection(text: str) -> str:
    """清理文本以便进行语言检测"""
    if not text:
        return ""

    # 移除 URL
    text = re.sub(r'https?://[^\s]+', '', text)

    # 移除邮箱地址
    text = re.sub(r'\S+@\S+', '', text)

    # 移除用户名提及（@username）
    text = re.sub(r'@\w+', '', text)

    # 移除 hashtag
    text = re.sub(r'#\w+', '', text)

    # 移除多余的空格
    text = re.sub(r'\s+', ' ', text).strip()

    return text


def detect_language(text: str) -> str:
    """使用 langdetect 检测文本的主要语言

    Returns:
        受支持的语言代码，无法判断时返回 `und`
    """
    cleaned_text = clean_text_for_detection(text)
    if len(cleaned_text) < 3:
        return UNDETERMINED

    try:
        lang_probs = detect_langs(cleaned_text)
    except LangDetectException as e:
        logger.debug(f"语言检测失败: {e}")
        return UNDETERMINED

    for lang_prob in lang_probs:
        if lang_prob.prob < MIN_CONFIDENCE:
            break
        code = normalize_language_code(lang_prob.lang)
        if code != UNDETERMINED:
            logger.debug(f"检测到语言: {code} (置信度: {lang_prob.prob:.3f})")
            return code

    logger.debug(f"未在支持的语言列表中找到合适的语言: {lang_probs}")
    return UNDETERMINED
