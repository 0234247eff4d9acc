# -*- coding: utf-8 -*-
"""
Tests for process startup and graceful shutdown.
"""
import asyncio
import os
import signal
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

import main
from conftest import FakeGenerationClient
from settings import Settings
from triggers.auto_translation import TranslationPipeline


def make_application():
    application = MagicMock()
    application.bot_data = {}
    application.start = AsyncMock()
    application.stop = AsyncMock()
    application.updater.start_polling = AsyncMock()
    application.updater.stop = AsyncMock()
    return application


class TestShutdownGracePeriod:

    def test_covers_detection_and_fan_out_with_backoff(self):
        config = Settings(_env_file=None, GEN_TIMEOUT=8.0, RETRY_MAX=2, RETRY_BASE_DELAY=1.0)

        # two stages of 3 attempts * 8s plus 1s + 2s of backoff each
        assert main.shutdown_grace_period(config) == 54

    def test_single_attempt_has_no_backoff(self, make_settings):
        assert main.shutdown_grace_period(make_settings(RETRY_MAX=0, GEN_TIMEOUT=2.0)) == 4


@pytest.mark.skipif(sys.platform == "win32", reason="requires POSIX signals")
@pytest.mark.asyncio
@pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
async def test_shutdown_signal_drains_in_flight_tasks(monkeypatch, make_settings, recording_sleep, sig):
    config = make_settings(HEALTH_HOST="127.0.0.1", HEALTH_PORT=0, LOG_LEVEL="WARNING")
    monkeypatch.setattr(main, "settings", config)

    drain_timeouts = []

    async def fake_wait_for_all_tasks(timeout):
        drain_timeouts.append(timeout)
        return True

    monkeypatch.setattr(main, "wait_for_all_tasks", fake_wait_for_all_tasks)

    client = FakeGenerationClient()
    client.aclose = AsyncMock()
    pipeline = TranslationPipeline(config, client, sleep=recording_sleep)
    application = make_application()
    health_server = main.build_health_server(pipeline)

    serving = asyncio.create_task(main.serve(application, pipeline, health_server))
    for _ in range(500):
        if health_server.started:
            break
        await asyncio.sleep(0.01)
    assert health_server.started

    os.kill(os.getpid(), sig)
    await asyncio.wait_for(serving, timeout=10)

    application.updater.stop.assert_awaited_once()
    assert drain_timeouts == [main.shutdown_grace_period(config)]
    application.stop.assert_awaited_once()
    client.aclose.assert_awaited_once()
    assert application.bot_data[main.PIPELINE_KEY] is pipeline
