# resume_translator/backends/deepseek.py
"""直接调用 DeepSeek chat-completions 的翻译后端。"""

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from resume_translator.backends.chat import BaseChatBackendConfig, ChatCompletionsBackend
from resume_translator.types import BackendReply


class DeepSeekBackendConfig(BaseSettings, BaseChatBackendConfig):
    """DeepSeek 后端的配置模型。"""

    model_config = SettingsConfigDict(
        env_prefix="RT_DEEPSEEK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "RT_DEEPSEEK_API_KEY", "DEEPSEEK_API_KEY", "API_KEY_DEEPSEEK"
        ),
    )
    base_url: str = "https://api.deepseek.com"
    model: str = "deepseek-chat"
    timeout: float = Field(default=25.0, ge=5.0)


class DeepSeekBackend(ChatCompletionsBackend[DeepSeekBackendConfig]):
    """以纯文本形式取回译文的 DeepSeek 后端。"""

    CONFIG_MODEL = DeepSeekBackendConfig
    VERSION = "1.2.0"

    def build_messages(
        self,
        text: str,
        *,
        source_name: str,
        target_name: str,
        is_html: bool,
        domain: str,
    ) -> list[dict[str, str]]:
        system = [
            "You are a professional translator.",
            "Translate the user text to the requested target language.",
            "Preserve meaning, tone, numbers, names, and layout.",
            "Never change tokens of the form __KEEP_..__; they are restored later.",
        ]
        if is_html:
            system.append(
                "The input may contain HTML markup. Keep tags/attributes intact and "
                "translate only the human-readable text. Do not add or remove tags."
            )
        else:
            system.append("Input is plain text. Preserve line breaks.")
        if domain:
            system.append(f"The text belongs to the '{domain}' section of a resume.")
        system.append("Return ONLY the translated text with no explanations.")

        source_line = (
            f"Source language: {source_name}"
            if source_name.lower() != "auto"
            else "Source language: auto"
        )
        user = "\n".join(
            [source_line, f"Target language: {target_name}", "Text:", "<<<", text, ">>>"]
        )
        return [
            {"role": "system", "content": " ".join(system)},
            {"role": "user", "content": user},
        ]

    def parse_reply(self, content: str) -> BackendReply:
        text = content
        if text.startswith("<<<") and text.endswith(">>>"):
            text = text[3:-3].strip("\n")
        return BackendReply(text=text)
