# resume_translator/backends/base.py
"""
本模块定义了所有翻译后端必须继承的抽象基类（ABC）。

后端只负责“翻译一个分块”；掩码、分块、缓存与请求合并都由协调器完成。
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from resume_translator.exceptions import BackendNotConfiguredError
from resume_translator.types import BackendReply

_ConfigType = TypeVar("_ConfigType", bound="BaseBackendConfig")


class BaseBackendConfig(BaseModel):
    """所有后端配置模型的基类。"""

    model: str = "default"
    temperature: float = Field(default=0.2, ge=0, le=1)
    timeout: float = Field(default=25.0, gt=0, description="单次调用的截止时间（秒）")


class BaseTranslationBackend(ABC, Generic[_ConfigType]):
    """翻译后端的纯异步抽象基类。"""

    CONFIG_MODEL: type[_ConfigType]
    VERSION: str = "1.0.0"

    def __init__(self, config: _ConfigType):
        self.config = config
        self.initialized: bool = False

    @property
    def name(self) -> str:
        """从类名自动推断后端的名称。"""
        return self.__class__.__name__.replace("Backend", "").lower()

    @property
    def is_configured(self) -> bool:
        """后端是否具备发起调用所需的凭据。"""
        return True

    async def initialize(self) -> None:
        """异步初始化钩子，用于建立连接池等。"""
        self.initialized = True

    async def close(self) -> None:
        """异步关闭钩子，用于安全释放资源。"""
        self.initialized = False

    async def translate_chunk(
        self,
        text: str,
        *,
        source_name: str,
        target_name: str,
        is_html: bool = False,
        temperature: float | None = None,
        model: str | None = None,
        domain: str = "",
    ) -> BackendReply:
        """[模板方法] 翻译单个分块；缺少凭据时抛出 `BackendNotConfiguredError`。"""
        if not self.is_configured:
            raise BackendNotConfiguredError(f"后端 '{self.name}' 未配置 API 密钥。")
        return await self._execute_translation(
            text,
            source_name=source_name,
            target_name=target_name,
            is_html=is_html,
            temperature=self.config.temperature if temperature is None else temperature,
            model=model or self.config.model,
            domain=domain,
        )

    @abstractmethod
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
        """[子类实现] 真正执行单次翻译的逻辑。"""
        ...
