# resume_translator/config.py
"""
resume-translator 的顶层配置（pydantic-settings）。

每个值都有安全的默认值；越界的数值会被钳制到允许范围内而不是报错。
"""

import enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from resume_translator.cache import CacheConfig


class BackendName(str, enum.Enum):
    DEEPSEEK = "deepseek"
    OPENROUTER = "openrouter"
    DEBUG = "debug"


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "console"] = "console"


MIN_MAX_CHARS = 10_000
MIN_CHUNK_CHARS = 1_000
MIN_CACHE_TTL = 60.0


class TranslatorConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    active_backend: BackendName = BackendName.DEEPSEEK
    max_chars: int = Field(default=200_000, description="单次请求允许的最大输入字符数")
    chunk_chars: int = Field(default=3_500, description="单个分块的最大字符数")
    cache_ttl: float = Field(default=24 * 3600, description="翻译结果缓存 TTL（秒）")

    cache: CacheConfig = Field(default_factory=CacheConfig)
    backend_configs: dict[str, dict[str, Any]] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("max_chars")
    @classmethod
    def _clamp_max_chars(cls, v: int) -> int:
        return max(MIN_MAX_CHARS, v)

    @field_validator("chunk_chars")
    @classmethod
    def _clamp_chunk_chars(cls, v: int) -> int:
        return max(MIN_CHUNK_CHARS, v)

    @field_validator("cache_ttl")
    @classmethod
    def _clamp_cache_ttl(cls, v: float) -> float:
        return max(MIN_CACHE_TTL, v)

    def backend_overrides(self, name: str | None = None) -> dict[str, Any]:
        """返回指定后端（缺省为活动后端）的配置覆盖项。"""
        return dict(self.backend_configs.get(name or self.active_backend.value, {}))
