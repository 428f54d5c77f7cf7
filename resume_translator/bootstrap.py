# resume_translator/bootstrap.py
"""负责按配置装配翻译协调器及其依赖。"""

from typing import Any

import structlog

from resume_translator.backends.base import BaseTranslationBackend
from resume_translator.cache import TranslationCache
from resume_translator.config import TranslatorConfig
from resume_translator.registry import create_backend
from resume_translator.translator import Translator

logger = structlog.get_logger(__name__)


def create_translator(
    config: TranslatorConfig | None = None,
    backend: BaseTranslationBackend[Any] | None = None,
) -> Translator:
    """
    根据配置创建 `Translator`。

    这是进程启动时构造协调器的唯一入口；缓存在此创建，并随协调器的
    `initialize()` / `close()` 一起启动和关闭。
    """
    config = config or TranslatorConfig()
    if backend is None:
        name = config.active_backend.value
        backend = create_backend(name, config.backend_overrides(name))
    cache = TranslationCache(config.cache)
    logger.debug("已装配翻译协调器", backend=backend.name)
    return Translator(config=config, backend=backend, cache=cache)
