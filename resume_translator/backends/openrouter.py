# resume_translator/backends/openrouter.py
"""
通过 OpenRouter 聚合平台调用免费模型的翻译后端。

模型被要求返回 `{"text": ..., "detected": ...}` 形式的 JSON；无法解析时
按纯文本处理。
"""

import json
from typing import Any

import structlog
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from resume_translator.backends.chat import BaseChatBackendConfig, ChatCompletionsBackend
from resume_translator.exceptions import RemoteHTTPError
from resume_translator.remote import parse_structured_content
from resume_translator.types import BackendReply

logger = structlog.get_logger(__name__)


class OpenRouterBackendConfig(BaseSettings, BaseChatBackendConfig):
    """OpenRouter 后端的配置模型。"""

    model_config = SettingsConfigDict(
        env_prefix="RT_OPENROUTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("RT_OPENROUTER_API_KEY", "OPENROUTER_API_KEY"),
    )
    base_url: str = "https://openrouter.ai/api/v1"
    model: str = "deepseek/deepseek-r1:free"
    temperature: float = Field(default=0.1, ge=0, le=1)
    timeout: float = Field(default=30.0, ge=5.0)
    referer: str | None = None
    title: str | None = "AI Resume Builder"
    json_mode: bool = True


class OpenRouterBackend(ChatCompletionsBackend[OpenRouterBackendConfig]):
    """请求结构化 JSON 回复的 OpenRouter 后端。"""

    CONFIG_MODEL = OpenRouterBackendConfig
    VERSION = "1.1.0"

    def headers(self) -> dict[str, str]:
        headers = super().headers()
        if self.config.referer:
            headers["HTTP-Referer"] = self.config.referer
        if self.config.title:
            headers["X-Title"] = self.config.title
        return headers

    def build_messages(
        self,
        text: str,
        *,
        source_name: str,
        target_name: str,
        is_html: bool,
        domain: str,
    ) -> list[dict[str, str]]:
        system = "\n".join(
            [
                "You are a careful translator.",
                "Requirements:",
                "- Translate naturally, keep meaning and style.",
                "- Keep line breaks, lists, dashes and numbering.",
                "- Do NOT change markers like __KEEP_...__, they will be restored.",
                "- Do not translate or alter code, placeholders, URLs or e-mails.",
                "- This is HTML. Keep structure and attributes, translate visible text only."
                if is_html
                else "- This is plain text (not HTML).",
                "- If the source language is unknown, detect it yourself.",
                'Answer ONLY with JSON: {"text": "...", "detected": "<src-lang>"}',
            ]
        )
        user: dict[str, Any] = {
            "from": source_name,
            "to": target_name,
            "html": is_html,
            "text": text,
            "note": "Do not change __KEEP_*__ tokens and do not add new ones.",
        }
        if domain:
            user["section"] = domain
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": json.dumps(user, ensure_ascii=False)},
        ]

    def build_payload(
        self, text: str, messages: list[dict[str, str]], model: str, temperature: float
    ) -> dict[str, Any]:
        payload = super().build_payload(text, messages, model, temperature)
        if self.config.json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def _complete(self, payload: dict[str, Any]) -> str:
        try:
            return await super()._complete(payload)
        except RemoteHTTPError as e:
            # 部分免费模型不支持 response_format，去掉后重试一次
            if e.status != 400 or "response_format" not in payload:
                raise
            logger.info("模型不支持 response_format，改用自由格式重试", model=payload["model"])
            relaxed = {k: v for k, v in payload.items() if k != "response_format"}
            return await super()._complete(relaxed)

    def parse_reply(self, content: str) -> BackendReply:
        parsed = parse_structured_content(content)
        if parsed is None or not isinstance(parsed.get("text"), str):
            return BackendReply(text=content)
        detected = parsed.get("detected")
        return BackendReply(
            text=parsed["text"].strip(),
            detected_lang=detected if isinstance(detected, str) else None,
        )
