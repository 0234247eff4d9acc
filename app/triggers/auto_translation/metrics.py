# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 翻译指标采集，供健康检查接口读取
"""
import time
from collections import deque
from datetime import datetime, UTC
from typing import Callable, Deque, List

from loguru import logger
from pydantic import BaseModel, Field


class TranslationRecord(BaseModel):
    conversation_id: str
    message_id: str
    source_language: str
    target_languages: List[str] = Field(default_factory=list)
    latency_ms: float
    success: bool
    successful_translations: int = 0
    failed_translations: int = 0
    error_type: str | None = None
    recorded_at: float = Field(description="单调时钟时间戳，用于窗口统计")
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())


class SystemMetrics(BaseModel):
    qps: float = 0
    success_rate: float = 0
    avg_latency_ms: float = 0
    p95_latency_ms: float = 0
    sample_size: int = 0


class MetricsCollector:
    def __init__(
        self,
        window_seconds: float = 5 * 60,
        max_history: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self._clock = clock
        self._history: Deque[TranslationRecord] = deque(maxlen=max_history)
        self.last_latency_ms: float | None = None
        self.success_count = 0
        self.failure_count = 0
        self.translations_succeeded = 0
        self.translations_failed = 0

    def _record(self, record: TranslationRecord) -> TranslationRecord:
        self._history.append(record)
        self.last_latency_ms = record.latency_ms
        logger.bind(event="translation", **record.model_dump(exclude={"recorded_at"})).info(
            f"translation ok={record.success} src={record.source_language} "
            f"targets={record.target_languages} latency_ms={record.latency_ms:.0f}"
        )
        return record

    def record_batch(
        self,
        conversation_id: str,
        message_id: str,
        source_language: str,
        target_languages: List[str],
        latency_ms: float,
        successful_translations: int,
        failed_translations: int,
    ) -> TranslationRecord:
        self.success_count += 1
        self.translations_succeeded += successful_translations
        self.translations_failed += failed_translations
        return self._record(
            TranslationRecord(
                conversation_id=conversation_id,
                message_id=message_id,
                source_language=source_language,
                target_languages=target_languages,
                latency_ms=latency_ms,
                success=True,
                successful_translations=successful_translations,
                failed_translations=failed_translations,
                recorded_at=self._clock(),
            )
        )

    def record_failure(
        self,
        conversation_id: str,
        message_id: str,
        latency_ms: float,
        error_type: str,
        source_language: str = "unknown",
        target_languages: List[str] | None = None,
    ) -> TranslationRecord:
        self.failure_count += 1
        return self._record(
            TranslationRecord(
                conversation_id=conversation_id,
                message_id=message_id,
                source_language=source_language,
                target_languages=target_languages or [],
                latency_ms=latency_ms,
                success=False,
                error_type=error_type,
                recorded_at=self._clock(),
            )
        )

    def system_metrics(self) -> SystemMetrics:
        window_start = self._clock() - self.window_seconds
        recent = [r for r in self._history if r.recorded_at > window_start]
        if not recent:
            return SystemMetrics()

        latencies = sorted(r.latency_ms for r in recent)
        p95_index = min(int(len(latencies) * 0.95), len(latencies) - 1)

        return SystemMetrics(
            qps=len(recent) / self.window_seconds,
            success_rate=sum(1 for r in recent if r.success) / len(recent),
            avg_latency_ms=sum(latencies) / len(latencies),
            p95_latency_ms=latencies[p95_index],
            sample_size=len(recent),
        )

    def recent(self, limit: int = 50) -> List[TranslationRecord]:
        return list(self._history)[-limit:]

    def snapshot(self) -> dict:
        return {
            "last_latency_ms": self.last_latency_ms,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "translations_succeeded": self.translations_succeeded,
            "translations_failed": self.translations_failed,
            "window": self.system_metrics().model_dump(),
        }

    def clear(self) -> None:
        self._history.clear()
        self.last_latency_ms = None
        self.success_count = self.failure_count = 0
        self.translations_succeeded = self.translations_failed = 0
