# resume_translator/backends/chat.py
"""OpenAI 兼容 chat-completions 接口的通用后端实现。"""

from abc import abstractmethod
from typing import Any, Generic, TypeVar

import httpx
import structlog
from pydantic import Field, SecretStr

from resume_translator.backends.base import BaseBackendConfig, BaseTranslationBackend
from resume_translator.exceptions import BackendNotConfiguredError
from resume_translator.remote import (
    RetryPolicyConfig,
    extract_message_content,
    post_chat_completion,
)
from resume_translator.types import BackendReply

logger = structlog.get_logger(__name__)


class BaseChatBackendConfig(BaseBackendConfig):
    """chat-completions 后端的公共配置。"""

    api_key: SecretStr | None = None
    base_url: str = "https://api.openai.com/v1"
    connect_timeout: float = Field(default=5.0, gt=0)
    max_tokens: int = Field(default=8000, gt=0, description="单次调用的输出 token 上限")
    retry_policy: RetryPolicyConfig = Field(default_factory=RetryPolicyConfig)


_ChatConfigType = TypeVar("_ChatConfigType", bound=BaseChatBackendConfig)


class ChatCompletionsBackend(
    BaseTranslationBackend[_ChatConfigType], Generic[_ChatConfigType]
):
    """
    通过 `POST {base_url}/chat/completions` 翻译分块。

    子类决定提示词 (`build_messages`) 与回复的解析方式 (`parse_reply`)。
    """

    def __init__(
        self, config: _ChatConfigType, client: httpx.AsyncClient | None = None
    ):
        super().__init__(config)
        self._client = client
        self._owns_client = client is None

    @property
    def is_configured(self) -> bool:
        key = self.config.api_key
        return key is not None and bool(key.get_secret_value().strip())

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    self.config.timeout, connect=self.config.connect_timeout
                )
            )
        return self._client

    async def initialize(self) -> None:
        if not self.is_configured:
            logger.warning(
                "后端未配置 API 密钥，翻译将回退为原文", backend=self.name
            )
        else:
            logger.info(
                "后端已就绪", backend=self.name, endpoint=self.endpoint, model=self.config.model
            )
        await super().initialize()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        await super().close()

    def headers(self) -> dict[str, str]:
        key = self.config.api_key
        if key is None or not self.is_configured:
            raise BackendNotConfiguredError(f"后端 '{self.name}' 未配置 API 密钥。")
        return {
            "Authorization": f"Bearer {key.get_secret_value()}",
            "Content-Type": "application/json",
        }

    def build_payload(
        self, text: str, messages: list[dict[str, str]], model: str, temperature: float
    ) -> dict[str, Any]:
        return {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": min(len(text) * 2 + 200, self.config.max_tokens),
            "stream": False,
        }

    @abstractmethod
    def build_messages(
        self,
        text: str,
        *,
        source_name: str,
        target_name: str,
        is_html: bool,
        domain: str,
    ) -> list[dict[str, str]]:
        """[子类实现] 构造发送给模型的消息列表。"""
        ...

    def parse_reply(self, content: str) -> BackendReply:
        return BackendReply(text=content)

    async def _complete(self, payload: dict[str, Any]) -> str:
        body = await post_chat_completion(
            self.client,
            self.endpoint,
            payload,
            headers=self.headers(),
            timeout=self.config.timeout,
            retry_policy=self.config.retry_policy,
        )
        return extract_message_content(body)

    async def _execute_translation(
        self,
        text: str,
        *,
        source_name: str,
        target_name: str,
        is_html: bool,
        temperature: float,
        model: str,
        domain: str,
    ) -> BackendReply:
        messages = self.build_messages(
            text,
            source_name=source_name,
            target_name=target_name,
            is_html=is_html,
            domain=domain,
        )
        payload = self.build_payload(text, messages, model, temperature)
        content = await self._complete(payload)
        return self.parse_reply(content)
