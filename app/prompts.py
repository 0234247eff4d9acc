# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/9 17:38
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 提示词模板
"""

# 语言检测提示词，只允许返回 ISO-639-1 代码
DETECT_LANGUAGE_PROMPT_TEMPLATE = """Detect the language of the following text and return ONLY the ISO-639-1 language code (e.g., 'en', 'ko', 'ja', 'zh', 'es', 'fr'). If the language cannot be determined or is mixed, return 'und'.

Text: "{text}"

Language code:"""

# 翻译提示词
TRANSLATE_PROMPT_TEMPLATE = """You are a professional translator. Translate the following text {source_info}to {target_language}.

CRITICAL REQUIREMENTS:
1. You MUST translate the text to {target_language}. DO NOT return the original text unchanged.
2. Preserve any code blocks (```) and inline code (`) exactly as they are
3. Keep all user mentions (@username), hashtags and links unchanged
4. Keep all emojis unchanged
5. Maintain the original formatting including line breaks and paragraph structure
6. Return ONLY the translated text without any additional commentary
7. Technical terms like "API", "ID" can remain in English

Text to translate: "{text}"

{target_language} translation:"""

# 提及模式下的用户提示
MENTION_EMPTY_TEXT_REPLY = "Please provide text to translate after mentioning me!"
MENTION_UNDETERMINED_REPLY = "Sorry, I couldn't detect the language of your text."
MENTION_SAME_LANGUAGE_REPLY = (
    "The detected language ({source_language}) is the same as all target languages."
)
MENTION_ERROR_REPLY = (
    "Sorry, I encountered an error while processing your request. Please try again."
)
