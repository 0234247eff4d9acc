# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 生成式模型调用边界
"""
from abc import ABC, abstractmethod


class GenerationClient(ABC):
    """语言检测与翻译的外部调用。超时由调用方控制，实现方无需处理。"""

    @abstractmethod
    async def detect_language(self, text: str) -> str:
        """返回受支持的 ISO-639-1 代码或 `und`"""

    @abstractmethod
    async def translate(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> str:
        """返回译文"""
