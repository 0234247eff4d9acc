# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 并发分发多语言翻译并汇总结果
"""
import asyncio
from typing import Awaitable, Callable, List, Sequence, TypeVar

from loguru import logger

from models import Batch, TranslationOutcome
from triggers.auto_translation.generation import GenerationClient
from triggers.auto_translation.retry import Sleep, describe_error, run_with_retry

T = TypeVar("T")


def filter_target_languages(target_languages: Sequence[str], source_language: str) -> List[str]:
    """排除源语言与重复项，保持原有顺序"""
    result = []
    for lang in target_languages:
        if lang != source_language and lang not in result:
            result.append(lang)
    return result


def translation_soft_failure(original_text: str) -> Callable[[str], str | None]:
    def check(translated: str) -> str | None:
        if not translated or not translated.strip():
            return "Translation returned empty result"
        if translated == original_text:
            return "Translation returned unchanged result"
        return None

    return check


async def bounded_call(
    limiter: asyncio.Semaphore, factory: Callable[[], Awaitable[T]], timeout: float
) -> T:
    """在全局并发上限内执行一次调用，超时后放弃等待并抛出 TimeoutError"""
    async with limiter:
        return await asyncio.wait_for(factory(), timeout=timeout)


class FanOutOrchestrator:
    def __init__(
        self,
        client: GenerationClient,
        *,
        timeout: float,
        max_attempts: int,
        limiter: asyncio.Semaphore,
        base_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.limiter = limiter
        self.base_delay = base_delay
        self.sleep = sleep

    async def translate_one(
        self, text: str, target_language: str, source_language: str | None
    ) -> TranslationOutcome:
        outcome = await run_with_retry(
            lambda: bounded_call(
                self.limiter,
                lambda: self.client.translate(text, target_language, source_language),
                self.timeout,
            ),
            self.max_attempts,
            is_soft_failure=translation_soft_failure(text),
            base_delay=self.base_delay,
            sleep=self.sleep,
            label=f"Translation to {target_language}",
        )
        if outcome.succeeded:
            return TranslationOutcome(
                target_language=target_language,
                text=outcome.value.strip(),
                succeeded=True,
                attempts=outcome.attempts,
            )
        if outcome.soft:
            logger.warning(f"Translation to {target_language} unusable: {outcome.error_detail}")
        return TranslationOutcome(
            target_language=target_language,
            succeeded=False,
            error_detail=outcome.error_detail,
            attempts=outcome.attempts,
        )

    async def fan_out(
        self, text: str, source_language: str, target_languages: Sequence[str]
    ) -> Batch:
        """
        为每个目标语言并发翻译，等待全部结束后按输入顺序返回。

        单个语言失败不会中断其他语言，失败以 `succeeded=False` 的结果体现。
        """
        targets = filter_target_languages(target_languages, source_language)
        if not targets:
            logger.debug(
                f"No target languages after filtering - source={source_language} "
                f"targets={list(target_languages)}"
            )
            return Batch(source_language=source_language)

        logger.debug(f"Starting translation to {len(targets)} languages: {targets}")

        results = await asyncio.gather(
            *[self.translate_one(text, lang, source_language) for lang in targets],
            return_exceptions=True,
        )

        outcomes = []
        for lang, result in zip(targets, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error(f"Translation to {lang} failed: {result}")
                result = TranslationOutcome(
                    target_language=lang, succeeded=False, error_detail=describe_error(result)
                )
            outcomes.append(result)

        return Batch(source_language=source_language, outcomes=outcomes)
