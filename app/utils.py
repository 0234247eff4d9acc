# -*- coding: utf-8 -*-
# Time       : 2023/8/19 17:19
# Author     : QIN2DIM
# GitHub     : https://github.com/QIN2DIM
# Description: 日志初始化与日志中的消息预览
from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo

from loguru import logger

STDOUT_FORMAT = (
    "<g>{time:YYYY-MM-DD HH:mm:ss}</g> | "
    "<lvl>{level:<8}</lvl>    | "
    "<c>{name}</c>:<c>{function}</c>:<c>{line}</c> | "
    "<n>{message}</n>"
)

# 文件 sink: 名称 -> (最低级别, 额外参数)
_FILE_SINKS = {
    "error": ("ERROR", {"rotation": "5 MB", "retention": "7 days"}),
    "runtime": ("TRACE", {"rotation": "5 MB", "retention": "7 days"}),
    "serialize": ("DEBUG", {"serialize": True, "rotation": "20 MB", "retention": "3 days"}),
}


def timezone_filter(record):
    """按 LOG_TIMEZONE 调整日志时间，默认 UTC"""
    record["time"] = record["time"].astimezone(ZoneInfo(os.getenv("LOG_TIMEZONE", "UTC")))
    return record


def init_log(level: str | None = None, **sink_channel: Path | str | None):
    """
    重置 loguru 的输出

    Args:
        level: 控制台日志级别，缺省读取 LOG_LEVEL
        **sink_channel: error / runtime / serialize 文件路径，未提供的 sink 不会启用
    """
    logger.remove()
    logger.add(
        sink=sys.stdout,
        colorize=True,
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format=STDOUT_FORMAT,
        diagnose=False,
        filter=timezone_filter,
    )

    for name, (sink_level, options) in _FILE_SINKS.items():
        if not (path := sink_channel.get(name)):
            continue
        logger.add(
            sink=path,
            level=sink_level,
            encoding="utf8",
            diagnose=False,
            filter=timezone_filter,
            **options,
        )

    return logger


def mask_text(text: str, should_mask: bool) -> str:
    """遮蔽除首尾两个字符以外的内容"""
    if not should_mask:
        return text
    if len(text) <= 4:
        return "***"
    return f"{text[:2]}***{text[-2:]}"


def preview_text(text: str | None, *, limit: int = 50, mask: bool = False) -> str:
    """用于日志的消息预览：截断并按需遮蔽"""
    if not text:
        return ""
    return mask_text(text[:limit], mask)
