from pathlib import Path
from typing import Any, List, Literal
from urllib.request import getproxies

import dotenv
from loguru import logger
from pydantic import SecretStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from telegram.ext import Application

dotenv.load_dotenv()


PROJECT_DIR = Path(__file__).parent
LOG_DIR = PROJECT_DIR.joinpath("logs")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    TELEGRAM_BOT_API_TOKEN: SecretStr = Field(
        default="", description="通过 https://t.me/BotFather 获取机器人的 API_TOKEN"
    )

    GEMINI_API_KEY: SecretStr = Field(default="", description="Gemini API Key")

    GEMINI_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST 接口地址",
    )

    MODEL_NAME: str = Field(default="gemini-2.0-flash", description="用于检测与翻译的模型")

    DETECTION_BACKEND: Literal["gemini", "langdetect"] = Field(
        default="gemini",
        description="语言检测后端。`langdetect` 在本地检测，不消耗模型调用。",
    )

    TARGET_LANGS: str = Field(default="ko,ja", description="目标语言，逗号分隔的 ISO-639-1 代码")

    target_languages: List[str] = Field(
        default_factory=list, description="配置 TARGET_LANGS 后，语言代码被清洗到该列表方便使用"
    )

    THREAD_MODE: bool = Field(default=True, description="是否以回复原消息的方式发送翻译")

    GEN_TIMEOUT: float = Field(default=8.0, gt=0, description="单次模型调用超时（秒）")

    RETRY_MAX: int = Field(
        default=2, ge=0, description="首次调用失败（抛出异常或超时）后的最大重试次数"
    )

    RETRY_BASE_DELAY: float = Field(
        default=1.0, ge=0, description="指数退避的基础等待时间（秒），依次为 1s, 2s, 4s..."
    )

    MAX_INFLIGHT_CALLS: int = Field(
        default=16, gt=0, description="全局同时进行中的模型调用上限，防止突发流量下无限并发"
    )

    REPLY_MAX_LENGTH: int = Field(
        default=4000, gt=0, le=4096, description="单条回复的最大字符数，超出时拆分发送"
    )

    DEDUP_TTL_SECONDS: float = Field(default=600, gt=0, description="消息去重缓存的有效期（秒）")

    MIN_TEXT_LENGTH: int = Field(default=3, ge=1, description="触发翻译的最短文本长度")

    OPT_OUT_MARKERS: str = Field(
        default="/ignore,!ignore", description="包含这些标记（不区分大小写）的消息不会被翻译"
    )

    HTTP_REQUEST_TIMEOUT: float = Field(
        default=30.0, description="HTTP 请求超时时间（秒），用于 Telegram API 调用。"
    )

    HEALTH_HOST: str = Field(default="0.0.0.0", description="健康检查服务监听地址")

    HEALTH_PORT: int = Field(default=3000, description="健康检查服务监听端口")

    LOG_LEVEL: str = Field(default="INFO", description="日志级别")

    MASK_TEXT_IN_LOGS: bool = Field(default=False, description="日志中是否遮蔽消息原文")

    def model_post_init(self, context: Any, /) -> None:
        if not self.target_languages:
            self.target_languages = parse_language_list(self.TARGET_LANGS)
        if not self.target_languages:
            raise ValueError("TARGET_LANGS 至少需要配置一个目标语言")

    @property
    def max_attempts(self) -> int:
        return self.RETRY_MAX + 1

    @property
    def opt_out_markers(self) -> tuple[str, ...]:
        return tuple(m.strip().lower() for m in self.OPT_OUT_MARKERS.split(",") if m.strip())

    @property
    def is_ready(self) -> bool:
        return bool(
            self.TELEGRAM_BOT_API_TOKEN.get_secret_value()
            and self.GEMINI_API_KEY.get_secret_value()
            and self.target_languages
        )

    def get_default_application(self) -> Application:
        _base_builder = (
            Application.builder()
            .token(self.TELEGRAM_BOT_API_TOKEN.get_secret_value())
            .connect_timeout(self.HTTP_REQUEST_TIMEOUT)
            .write_timeout(self.HTTP_REQUEST_TIMEOUT)
            .read_timeout(self.HTTP_REQUEST_TIMEOUT)
        )
        if proxy_url := getproxies().get("http"):
            logger.success(f"使用代理: {proxy_url}")
            application = _base_builder.proxy(proxy_url).get_updates_proxy(proxy_url).build()
        else:
            application = _base_builder.build()

        return application


def parse_language_list(langs: str) -> list[str]:
    """解析逗号分隔的语言代码，去重并保持顺序"""
    result = []
    for lang in langs.split(","):
        lang = lang.strip().lower()
        if lang and lang not in result:
            result.append(lang)
    return result


settings = Settings()  # type: ignore
