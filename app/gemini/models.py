# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/7 05:41
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Gemini generateContent 请求与响应模型
"""
from typing import List

from pydantic import BaseModel, Field


class Part(BaseModel):
    text: str | None = None


class Content(BaseModel):
    role: str | None = Field(default=None, description="请求中为 user，响应中为 model")
    parts: List[Part] = Field(default_factory=list)


class GenerationConfig(BaseModel):
    temperature: float | None = None
    max_output_tokens: int | None = Field(default=None, serialization_alias="maxOutputTokens")


class GenerateContentRequest(BaseModel):
    contents: List[Content]
    generation_config: GenerationConfig | None = Field(
        default=None, serialization_alias="generationConfig"
    )

    @classmethod
    def from_prompt(cls, prompt: str, **config) -> "GenerateContentRequest":
        return cls(
            contents=[Content(role="user", parts=[Part(text=prompt)])],
            generation_config=GenerationConfig(**config) if config else None,
        )

    def dumps_params(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Candidate(BaseModel):
    content: Content | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class GenerateContentResponse(BaseModel):
    candidates: List[Candidate] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """拼接第一个候选的全部文本片段"""
        if not self.candidates or not self.candidates[0].content:
            return ""
        return "".join(p.text or "" for p in self.candidates[0].content.parts).strip()
