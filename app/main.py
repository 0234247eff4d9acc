# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
import asyncio
import contextlib
import json
import signal

import uvicorn
from loguru import logger
from telegram import Update
from telegram.ext import Application, MessageHandler, filters

from gemini import GeminiClient
from mybot.handlers import handle_message, PIPELINE_KEY
from mybot.services.health_service import create_health_app
from mybot.task_manager import cancel_all_tasks, wait_for_all_tasks
from settings import Settings, settings, LOG_DIR
from triggers.auto_translation import TranslationPipeline, DeduplicationCache, MetricsCollector
from triggers.auto_translation.retry import backoff_delay
from utils import init_log

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class HealthServer(uvicorn.Server):
    """uvicorn 服务，信号由机器人统一处理，避免退出时跳过任务收尾"""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def shutdown_grace_period(config: Settings) -> float:
    """
    单条消息最坏情况下的处理时间：语言检测与翻译两个阶段，每个阶段都可能用满
    全部尝试次数与退避等待。
    """
    backoff = sum(
        backoff_delay(attempt, config.RETRY_BASE_DELAY) for attempt in range(config.max_attempts - 1)
    )
    return 2 * (config.max_attempts * config.GEN_TIMEOUT + backoff)


def build_pipeline() -> TranslationPipeline:
    client = GeminiClient(
        settings.GEMINI_API_KEY.get_secret_value(),
        model_name=settings.MODEL_NAME,
        base_url=settings.GEMINI_BASE_URL,
        detection_backend=settings.DETECTION_BACKEND,
    )
    return TranslationPipeline(
        settings,
        client,
        cache=DeduplicationCache(ttl_seconds=settings.DEDUP_TTL_SECONDS),
        metrics=MetricsCollector(),
    )


def build_health_server(pipeline: TranslationPipeline) -> HealthServer:
    return HealthServer(
        uvicorn.Config(
            create_health_app(pipeline, settings),
            host=settings.HEALTH_HOST,
            port=settings.HEALTH_PORT,
            log_level=settings.LOG_LEVEL.lower(),
        )
    )


async def serve(
    application: Application, pipeline: TranslationPipeline, health_server: HealthServer
) -> None:
    application.bot_data[PIPELINE_KEY] = pipeline

    # 新消息与编辑后的消息，命令由 Telegram 单独路由
    application.add_handler(
        MessageHandler(
            (filters.UpdateType.MESSAGE | filters.UpdateType.EDITED_MESSAGE) & ~filters.COMMAND,
            handle_message,
        )
    )

    def request_shutdown() -> None:
        logger.info("Receiving a shutdown signal that is stopping the bot...")
        health_server.should_exit = True

    loop = asyncio.get_running_loop()
    for sig in SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, request_shutdown)

    logger.success(
        f"Auto translation bot initialized - targets={settings.target_languages} "
        f"thread_mode={settings.THREAD_MODE} model={settings.MODEL_NAME}"
    )

    try:
        async with application:
            await application.start()
            await application.updater.start_polling(allowed_updates=Update.ALL_TYPES)

            # 收到退出信号后 serve 返回，随后停止拉取并等待进行中的翻译
            await health_server.serve()

            await application.updater.stop()
            if not await wait_for_all_tasks(timeout=shutdown_grace_period(settings)):
                cancel_all_tasks()
            await application.stop()
    finally:
        for sig in SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)
        await pipeline.client.aclose()


def main() -> None:
    """Start the bot."""
    init_log(
        level=settings.LOG_LEVEL,
        runtime=LOG_DIR.joinpath("runtime.log"),
        error=LOG_DIR.joinpath("error.log"),
        serialize=LOG_DIR.joinpath("serialize.log"),
    )

    sp = settings.model_dump(mode="json")

    s = json.dumps(sp, indent=2, ensure_ascii=False)
    logger.success(f"Loading settings: {s}")

    pipeline = build_pipeline()
    asyncio.run(serve(settings.get_default_application(), pipeline, build_health_server(pipeline)))


if __name__ == "__main__":
    main()
