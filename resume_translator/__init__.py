# resume_translator/__init__.py
"""resume-translator: 简历构建服务的翻译流水线。

对远程大模型聚合接口的一层薄封装：掩码、分块、缓存、请求合并与重试。
"""

__version__ = "1.0.0"

from .bootstrap import create_translator
from .config import BackendName, TranslatorConfig
from .exceptions import TranslatorError
from .translator import Translator
from .types import BatchItem, Provider, TranslationResult

__all__ = [
    "__version__",
    "Translator",
    "TranslatorConfig",
    "BackendName",
    "TranslatorError",
    "TranslationResult",
    "BatchItem",
    "Provider",
    "create_translator",
]
