# resume_translator/backends/debug.py
"""提供一个用于开发和测试的离线调试后端。"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from resume_translator.backends.base import BaseBackendConfig, BaseTranslationBackend
from resume_translator.exceptions import RemoteHTTPError
from resume_translator.types import BackendReply


class DebugBackendConfig(BaseSettings, BaseBackendConfig):
    """Debug 后端的配置模型。"""

    model_config = SettingsConfigDict(env_prefix="RT_DEBUG_", extra="ignore")

    model: str = "debug"
    mode: Literal["SUCCESS", "UPPER", "FAIL"] = Field(default="SUCCESS")
    fail_on_text: str | None = Field(default=None)
    fail_status: int = Field(default=503)
    configured: bool = Field(default=True, description="为 False 时模拟缺少凭据")
    translation_map: dict[str, str] = Field(default_factory=dict)


class DebugBackend(BaseTranslationBackend[DebugBackendConfig]):
    """一个简单的调试后端实现，记录收到的每个分块。"""

    CONFIG_MODEL = DebugBackendConfig
    VERSION = "1.0.0"

    def __init__(self, config: DebugBackendConfig):
        super().__init__(config)
        self.calls: list[str] = []

    @property
    def is_configured(self) -> bool:
        return self.config.configured

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
        self.calls.append(text)
        if self.config.mode == "FAIL" or (
            self.config.fail_on_text and self.config.fail_on_text in text
        ):
            raise RemoteHTTPError(
                f"remote_http_{self.config.fail_status}",
                status=self.config.fail_status,
                detail="DebugBackend 模拟失败",
            )
        if text in self.config.translation_map:
            return BackendReply(text=self.config.translation_map[text])
        if self.config.mode == "UPPER":
            # 占位符本身为大写
            return BackendReply(text=text.upper())
        return BackendReply(text=f"[{target_name}] {text}")
