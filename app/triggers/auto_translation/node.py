# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能的核心业务逻辑
"""
import asyncio
import time
from typing import Awaitable, Callable, List, Sequence

from loguru import logger

from models import Batch, InboundMessage, RejectReason, ReplyPayload
from prompts import (
    MENTION_EMPTY_TEXT_REPLY,
    MENTION_ERROR_REPLY,
    MENTION_SAME_LANGUAGE_REPLY,
    MENTION_UNDETERMINED_REPLY,
)
from settings import Settings
from triggers.auto_translation.dedup import DeduplicationCache
from triggers.auto_translation.eligibility import evaluate
from triggers.auto_translation.fan_out import (
    FanOutOrchestrator,
    bounded_call,
    filter_target_languages,
)
from triggers.auto_translation.formatter import render_reply
from triggers.auto_translation.generation import GenerationClient
from triggers.auto_translation.language_detector import UNDETERMINED
from triggers.auto_translation.mention import parse_mention_request
from triggers.auto_translation.metrics import MetricsCollector
from triggers.auto_translation.retry import Sleep, run_with_retry
from utils import preview_text

ReplySink = Callable[[ReplyPayload], Awaitable[None]]


def _undetermined(lang: str) -> str | None:
    if lang == UNDETERMINED:
        return "Language could not be determined"
    return None


class TranslationPipeline:
    """
    单条消息的完整处理流程：资格判断 -> 去重标记 -> 语言检测 -> 并发翻译 -> 排版发送。

    这是处理单元的最外层边界，任何意外异常都在这里记录并放弃该消息，
    不会影响其他正在处理的消息。
    """

    def __init__(
        self,
        settings: Settings,
        client: GenerationClient,
        *,
        cache: DeduplicationCache | None = None,
        metrics: MetricsCollector | None = None,
        limiter: asyncio.Semaphore | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings
        self.client = client
        self.cache = cache or DeduplicationCache(ttl_seconds=settings.DEDUP_TTL_SECONDS)
        self.metrics = metrics or MetricsCollector()
        self.limiter = limiter or asyncio.Semaphore(settings.MAX_INFLIGHT_CALLS)
        self.sleep = sleep
        self.orchestrator = FanOutOrchestrator(
            client,
            timeout=settings.GEN_TIMEOUT,
            max_attempts=settings.max_attempts,
            limiter=self.limiter,
            base_delay=settings.RETRY_BASE_DELAY,
            sleep=sleep,
        )

    def _preview(self, text: str) -> str:
        return preview_text(text, limit=100, mask=self.settings.MASK_TEXT_IN_LOGS)

    async def detect_language(self, text: str) -> str:
        outcome = await run_with_retry(
            lambda: bounded_call(
                self.limiter, lambda: self.client.detect_language(text), self.settings.GEN_TIMEOUT
            ),
            self.settings.max_attempts,
            is_soft_failure=_undetermined,
            base_delay=self.settings.RETRY_BASE_DELAY,
            sleep=self.sleep,
            label="Language detection",
        )
        return outcome.value if outcome.succeeded else UNDETERMINED

    async def _translate_and_reply(
        self,
        message: InboundMessage,
        text: str,
        source_language: str,
        target_languages: Sequence[str],
        sink: ReplySink,
        thread_id: str | None,
    ) -> Batch:
        batch = await self.orchestrator.fan_out(text, source_language, target_languages)
        if batch.is_empty:
            return batch

        for part in render_reply(batch, self.settings.REPLY_MAX_LENGTH):
            await sink(ReplyPayload(text=part, thread_id=thread_id))

        return batch

    def _record(self, message: InboundMessage, batch: Batch, started: float) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        self.metrics.record_batch(
            conversation_id=message.conversation_id,
            message_id=message.message_id,
            source_language=batch.source_language,
            target_languages=batch.target_languages,
            latency_ms=latency_ms,
            successful_translations=batch.succeeded_count,
            failed_translations=batch.failed_count,
        )
        logger.info(
            f"Translation completed - conversation={message.conversation_id} "
            f"message={message.message_id} src={batch.source_language} "
            f"targets={batch.target_languages} ok={batch.succeeded_count} "
            f"failed={batch.failed_count} latency_ms={latency_ms:.0f}"
        )

    async def handle(self, message: InboundMessage, sink: ReplySink) -> Batch | None:
        """
        处理一条入站消息

        Returns:
            发送了回复时返回 Batch，否则返回 None
        """
        started = time.perf_counter()
        try:
            logger.debug(
                f"Received message - conversation={message.conversation_id} "
                f"message={message.message_id} text={self._preview(message.text)}"
            )

            key = message.dedup_key
            verdict = evaluate(
                message,
                self.cache.is_processed(key),
                min_length=self.settings.MIN_TEXT_LENGTH,
                opt_out_markers=self.settings.opt_out_markers,
            )
            if not verdict.eligible:
                logger.debug(f"Skipping message {key}: {verdict.reason.value}")
                return None

            # 必须在第一个 await 之前标记，避免重复投递的同一消息并发进入流程
            self.cache.mark_processed(key)

            source_language = await self.detect_language(message.text)
            if source_language == UNDETERMINED:
                logger.warning(
                    f"Language detection failed or returned undefined - {key} "
                    f"text={self._preview(message.text)}"
                )
                return None

            logger.info(f"Language detected - {key} lang={source_language}")

            thread_id = message.message_id if self.settings.THREAD_MODE else None
            batch = await self._translate_and_reply(
                message,
                message.text,
                source_language,
                self.settings.target_languages,
                sink,
                thread_id,
            )
            if batch.is_empty:
                return None

            self._record(message, batch, started)
            return batch

        except Exception as err:
            latency_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                f"Message processing failed - conversation={message.conversation_id} "
                f"message={message.message_id} latency_ms={latency_ms:.0f}: {err}"
            )
            self.metrics.record_failure(
                conversation_id=message.conversation_id,
                message_id=message.message_id,
                latency_ms=latency_ms,
                error_type="processing_error",
                target_languages=list(self.settings.target_languages),
            )
            return None

    async def handle_mention(
        self, message: InboundMessage, sink: ReplySink, bot_username: str
    ) -> Batch | None:
        """
        处理提及机器人的翻译请求，支持 `@bot -> en, fr` 指定目标语言。

        始终以回复原消息的方式发送，并对无法处理的请求给出提示。
        """
        started = time.perf_counter()
        thread_id = message.message_id
        key = message.dedup_key

        # 提及本身是明确的翻译请求，不受最短长度限制，空文本会收到提示
        request = parse_mention_request(message.text, bot_username)
        verdict = evaluate(
            message.model_copy(update={"text": request.text}),
            self.cache.is_processed(key),
            min_length=1,
            opt_out_markers=self.settings.opt_out_markers,
        )
        if not verdict.eligible and verdict.reason != RejectReason.EMPTY_TEXT:
            logger.debug(f"Skipping mention {key}: {verdict.reason.value}")
            return None

        self.cache.mark_processed(key)

        try:
            target_languages: List[str] = request.target_languages or list(
                self.settings.target_languages
            )
            if request.target_languages:
                logger.info(f"Using custom target languages from mention: {target_languages}")

            if verdict.reason == RejectReason.EMPTY_TEXT:
                await sink(ReplyPayload(text=MENTION_EMPTY_TEXT_REPLY, thread_id=thread_id))
                return None

            source_language = await self.detect_language(request.text)
            if source_language == UNDETERMINED:
                await sink(ReplyPayload(text=MENTION_UNDETERMINED_REPLY, thread_id=thread_id))
                return None

            if not filter_target_languages(target_languages, source_language):
                await sink(
                    ReplyPayload(
                        text=MENTION_SAME_LANGUAGE_REPLY.format(source_language=source_language),
                        thread_id=thread_id,
                    )
                )
                return None

            batch = await self._translate_and_reply(
                message, request.text, source_language, target_languages, sink, thread_id
            )
            self._record(message, batch, started)
            return batch

        except Exception as err:
            latency_ms = (time.perf_counter() - started) * 1000
            logger.exception(f"Mention processing failed - {key} latency_ms={latency_ms:.0f}: {err}")
            self.metrics.record_failure(
                conversation_id=message.conversation_id,
                message_id=message.message_id,
                latency_ms=latency_ms,
                error_type="mention_error",
            )
            try:
                await sink(ReplyPayload(text=MENTION_ERROR_REPLY, thread_id=thread_id))
            except Exception as reply_error:
                logger.error(f"Failed to send error reply: {reply_error}")
            return None

    def stats(self) -> dict:
        return {"cache": self.cache.stats().model_dump(), **self.metrics.snapshot()}
