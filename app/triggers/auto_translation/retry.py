# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 带指数退避的重试执行器
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class Outcome(Generic[T]):
    succeeded: bool
    value: Optional[T] = None
    error_detail: str | None = None
    attempts: int = 0
    soft: bool = False
    """
    失败是否来自可用但无意义的结果（不会重试），而非异常
    """


def describe_error(error: BaseException | None) -> str:
    if error is None:
        return "Unknown error"
    if isinstance(error, asyncio.TimeoutError):
        return "Generation call timed out"
    return str(error) or type(error).__name__


def backoff_delay(attempt: int, base_delay: float = 1.0) -> float:
    """第 `attempt` 次（从 0 开始）尝试失败后的等待时间：1s, 2s, 4s..."""
    return base_delay * (2**attempt)


def _log_before_sleep(label: str, max_attempts: int) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        logger.warning(
            f"{label} attempt {retry_state.attempt_number}/{max_attempts} failed: "
            f"{describe_error(retry_state.outcome.exception())}, "
            f"retrying in {retry_state.next_action.sleep:.1f}s"
        )

    return log


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    *,
    is_soft_failure: Callable[[T], str | None] | None = None,
    base_delay: float = 1.0,
    sleep: Sleep = asyncio.sleep,
    label: str = "operation",
) -> Outcome[T]:
    """
    执行 operation，只有抛出异常（包括超时）才会重试。

    operation 正常返回但 `is_soft_failure` 给出错误描述时，视为软失败并立即返回，
    避免在“无需翻译”这类持续性结果上反复重试。

    Args:
        operation: 无参协程工厂，每次尝试调用一次
        max_attempts: 最大尝试次数（包含首次）
        is_soft_failure: 返回错误描述表示软失败，返回 None 表示成功
        base_delay: 退避基础时间（秒）
        sleep: 可替换的等待函数，便于测试
        label: 日志标签

    Returns:
        Outcome
    """
    max_attempts = max(1, max_attempts)
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay),
        # CancelledError 不是 Exception，会直接抛出
        retry=retry_if_exception_type(Exception),
        sleep=sleep,
        before_sleep=_log_before_sleep(label, max_attempts),
        reraise=False,
    )

    value = None
    attempts = 0
    try:
        async for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                value = await operation()
    except RetryError as err:
        last_error = describe_error(err.last_attempt.exception())
        logger.error(f"{label} failed after {max_attempts} attempts: {last_error}")
        return Outcome(succeeded=False, error_detail=last_error, attempts=max_attempts)

    if is_soft_failure and (detail := is_soft_failure(value)):
        return Outcome(succeeded=False, value=value, error_detail=detail, attempts=attempts, soft=True)

    if attempts > 1:
        logger.info(f"{label} succeeded after {attempts - 1} retries")
    return Outcome(succeeded=True, value=value, attempts=attempts)
