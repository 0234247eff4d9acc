# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/12 10:00
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 健康检查与指标接口，只读取翻译流程的统计数据
"""
import platform
import time
from datetime import datetime, UTC
from typing import Any, List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mybot.task_manager import get_active_tasks_count
from settings import Settings
from triggers.auto_translation import TranslationPipeline

VERSION = "1.0.0"


class EnvironmentInfo(BaseModel):
    python_version: str
    target_langs: List[str]
    thread_mode: bool


class HealthCheckResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
    version: str
    environment: EnvironmentInfo
    cache: dict[str, Any]


def _now() -> str:
    return datetime.now(UTC).isoformat()


def create_health_app(pipeline: TranslationPipeline, settings: Settings) -> FastAPI:
    started_at = time.monotonic()

    app = FastAPI(title="auto-translation-bot", version=VERSION, docs_url=None, redoc_url=None)
    app.add_middleware(
        CORSMiddleware, allow_origins=["*"], allow_methods=["GET", "OPTIONS"], allow_headers=["*"]
    )

    def uptime() -> float:
        return time.monotonic() - started_at

    @app.get("/healthz", response_model=HealthCheckResponse)
    @app.get("/health", response_model=HealthCheckResponse)
    async def health():
        return HealthCheckResponse(
            status="ok",
            timestamp=_now(),
            uptime=uptime(),
            version=VERSION,
            environment=EnvironmentInfo(
                python_version=platform.python_version(),
                target_langs=settings.target_languages,
                thread_mode=settings.THREAD_MODE,
            ),
            cache=pipeline.cache.stats().model_dump(),
        )

    @app.get("/readiness")
    async def readiness():
        if settings.is_ready:
            return {"status": "ready", "timestamp": _now()}
        return JSONResponse(
            status_code=503,
            content={
                "status": "not ready",
                "reason": "Missing required configuration",
                "timestamp": _now(),
            },
        )

    @app.get("/liveness")
    async def liveness():
        return {"status": "alive", "timestamp": _now(), "uptime": uptime()}

    @app.get("/metrics")
    async def metrics():
        return {
            "timestamp": _now(),
            "uptime": uptime(),
            "active_tasks": get_active_tasks_count(),
            **pipeline.stats(),
            "recent": [r.model_dump() for r in pipeline.metrics.recent(20)],
        }

    return app
