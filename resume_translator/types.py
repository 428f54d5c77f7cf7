# resume_translator/types.py
"""本模块定义了翻译流水线中流转的核心数据类型。"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Provider(str, Enum):
    """表示一次翻译结果的来源。"""

    REMOTE = "remote"
    CACHE = "cache"
    FALLBACK = "fallback"
    NOOP = "noop"


class ChunkState(str, Enum):
    """单个分块在一次请求中的生命周期状态。"""

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    SUCCESS = "success"
    FAILURE = "failure"


class TranslationRequest(BaseModel):
    """
    一次已完成规范化的翻译请求。构造后不可变。

    `ttl` 以秒为单位。
    """

    model_config = ConfigDict(frozen=True)

    raw_text: str
    source_lang: str = "auto"
    target_lang: str
    is_html: bool = False
    temperature: float = 0.2
    model: str
    max_chars: int
    chunk_chars: int
    ttl: float
    domain: str = ""


class MaskRestore(BaseModel):
    """一个占位符与其原始值的对应关系。"""

    model_config = ConfigDict(frozen=True)

    token: str
    original_value: str


class MaskedText(BaseModel):
    """掩码后的文本及按插入顺序排列的还原列表。"""

    text: str
    restores: list[MaskRestore] = Field(default_factory=list)


class BackendReply(BaseModel):
    """翻译后端对单个分块的回复。"""

    text: str
    detected_lang: str | None = None


class TranslationResult(BaseModel):
    """
    `Translator.translate_text` 的返回结构。

    成功时 `translated_text` 有值；部分失败时 `ok` 为 False，
    `partial_text` 保存已成功分块的拼接结果，`failed_at_chunk_index`
    指向第一个失败的分块。
    """

    ok: bool
    translated_text: str | None = None
    partial_text: str | None = None
    failed_at_chunk_index: int | None = None
    error_code: str | None = None
    status: int | None = None
    provider: Provider | None = None
    chunks: int = 0
    cached: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)


class BatchItem(BaseModel):
    """批量翻译中的单个条目，可覆盖批次级别的参数。"""

    text: str
    target_lang: str | None = None
    source_lang: str | None = None
    is_html: bool | None = None
    domain: str | None = None


class StructureTranslation(BaseModel):
    """嵌套文档（如整份简历）的翻译结果。"""

    ok: bool
    payload: Any
    translated_count: int = 0
    failed_paths: list[str] = Field(default_factory=list)
