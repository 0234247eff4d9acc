# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:40
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
import asyncio
from typing import Literal

from httpx import AsyncBaseTransport, AsyncClient
from loguru import logger

from gemini.models import GenerateContentRequest, GenerateContentResponse
from prompts import DETECT_LANGUAGE_PROMPT_TEMPLATE, TRANSLATE_PROMPT_TEMPLATE
from triggers.auto_translation import language_detector
from triggers.auto_translation.generation import GenerationClient

DETECTION_SAMPLE_LENGTH = 500


class GeminiClient(GenerationClient):
    def __init__(
        self,
        api_key: str,
        *,
        model_name: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        detection_backend: Literal["gemini", "langdetect"] = "gemini",
        transport: AsyncBaseTransport | None = None,
    ):
        self.model_name = model_name
        self.detection_backend = detection_backend
        headers = {"x-goog-api-key": api_key}
        self._client = AsyncClient(
            base_url=base_url, headers=headers, timeout=60, transport=transport
        )

    async def generate(self, prompt: str, **config) -> str:
        """
        调用 generateContent

        HTTP 错误直接抛出，由调用方决定是否重试。

        Args:
            prompt: 完整提示词
            **config: generationConfig，例如 temperature

        Returns:
            第一个候选的文本
        """
        payload = GenerateContentRequest.from_prompt(prompt, **config)
        response = await self._client.post(
            f"/models/{self.model_name}:generateContent", json=payload.dumps_params()
        )
        response.raise_for_status()
        return GenerateContentResponse(**response.json()).text

    async def detect_language(self, text: str) -> str:
        if self.detection_backend == "langdetect":
            return await asyncio.to_thread(language_detector.detect_language, text)

        prompt = DETECT_LANGUAGE_PROMPT_TEMPLATE.format(text=text[:DETECTION_SAMPLE_LENGTH])
        raw = await self.generate(prompt, temperature=0)

        detected = language_detector.normalize_language_code(raw)
        if detected == language_detector.UNDETERMINED:
            logger.warning(f"Invalid language code detected: {raw!r}. Defaulting to 'und'")
        return detected

    async def translate(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> str:
        source_info = f"from {source_language} " if source_language else ""
        prompt = TRANSLATE_PROMPT_TEMPLATE.format(
            source_info=source_info, target_language=target_language, text=text
        )
        return await self.generate(prompt)

    async def aclose(self):
        await self._client.aclose()
