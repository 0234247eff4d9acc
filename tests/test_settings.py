# -*- coding: utf-8 -*-
"""
Tests for the configuration layer.
"""
import pytest

from settings import Settings, parse_language_list


class TestSettings:

    def test_target_languages_are_parsed(self, make_settings):
        settings = make_settings(TARGET_LANGS=" KO, ja ,ko,,fr ")

        assert settings.target_languages == ["ko", "ja", "fr"]

    def test_empty_target_languages_are_rejected(self, make_settings):
        with pytest.raises(ValueError):
            make_settings(TARGET_LANGS=" , ")

    def test_max_attempts_counts_the_first_call(self, make_settings):
        assert make_settings(RETRY_MAX=2).max_attempts == 3
        assert make_settings(RETRY_MAX=0).max_attempts == 1

    def test_opt_out_markers(self, make_settings):
        settings = make_settings(OPT_OUT_MARKERS="/Ignore, #NoTr ,")

        assert settings.opt_out_markers == ("/ignore", "#notr")

    def test_is_ready_requires_both_credentials(self, make_settings):
        assert make_settings().is_ready is True
        assert make_settings(TELEGRAM_BOT_API_TOKEN="").is_ready is False

    @pytest.mark.parametrize("field, value", [("GEN_TIMEOUT", 0), ("RETRY_MAX", -1), ("REPLY_MAX_LENGTH", 5000)])
    def test_out_of_range_values(self, make_settings, field, value):
        with pytest.raises(ValueError):
            make_settings(**{field: value})

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("THREAD_MODE", "false")
        monkeypatch.setenv("DEDUP_TTL_SECONDS", "30")

        settings = Settings(_env_file=None, TELEGRAM_BOT_API_TOKEN="t", GEMINI_API_KEY="k")

        assert settings.THREAD_MODE is False
        assert settings.DEDUP_TTL_SECONDS == 30


def test_parse_language_list_keeps_order():
    assert parse_language_list("ja,ko,en,ja") == ["ja", "ko", "en"]
