# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 自动翻译功能模块
"""

from .dedup import DeduplicationCache
from .eligibility import evaluate
from .fan_out import FanOutOrchestrator, filter_target_languages
from .formatter import format_translation_results, split_long_message, render_reply
from .generation import GenerationClient
from .metrics import MetricsCollector
from .node import TranslationPipeline, ReplySink
from .retry import run_with_retry, Outcome

__all__ = [
    "DeduplicationCache",
    "evaluate",
    "FanOutOrchestrator",
    "filter_target_languages",
    "format_translation_results",
    "split_long_message",
    "render_reply",
    "GenerationClient",
    "MetricsCollector",
    "TranslationPipeline",
    "ReplySink",
    "run_with_retry",
    "Outcome",
]
