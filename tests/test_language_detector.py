# -*- coding: utf-8 -*-
"""
Tests for language code handling and the local langdetect backend.
"""
import pytest

from triggers.auto_translation.language_detector import (
    DEFAULT_FLAG,
    UNDETERMINED,
    clean_text_for_detection,
    detect_language,
    get_language_flag,
    normalize_language_code,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("ko", "ko"),
        (" JA\n", "ja"),
        ("'fr'", "fr"),
        ("`es`.", "es"),
        ("zh-TW", "zh"),
        ("fil", "tl"),
        ("en (English)", "en"),
        ("und", UNDETERMINED),
        ("xx", UNDETERMINED),
        ("", UNDETERMINED),
        (None, UNDETERMINED),
    ],
)
def test_normalize_language_code(raw, expected):
    assert normalize_language_code(raw) == expected


def test_language_flags():
    assert get_language_flag("ko") == "🇰🇷"
    assert get_language_flag("ja") == "🇯🇵"
    assert get_language_flag("sw") == DEFAULT_FLAG


def test_clean_text_for_detection():
    text = "@alice see https://example.com/x and mail bob@example.com #release   now"

    assert clean_text_for_detection(text) == "see and mail now"


class TestDetectLanguage:

    def test_english_sentence(self):
        text = "Could you please review the deployment checklist before the meeting tomorrow?"

        assert detect_language(text) == "en"

    def test_too_little_text_is_undetermined(self):
        assert detect_language("@alice https://example.com") == UNDETERMINED
