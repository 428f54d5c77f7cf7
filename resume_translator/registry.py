# resume_translator/registry.py
"""本模块负责动态发现和加载 `resume_translator.backends` 包下所有可用的翻译后端。"""

import importlib
import inspect
import pkgutil
from typing import Any

import structlog

from resume_translator.backends.base import BaseTranslationBackend
from resume_translator.exceptions import BackendNotFoundError

log = structlog.get_logger(__name__)
BACKEND_REGISTRY: dict[str, type[BaseTranslationBackend[Any]]] = {}


def discover_backends() -> None:
    """
    动态发现 `resume_translator.backends` 包下的所有具体后端并注册。

    此函数是幂等的，只在首次调用时执行发现操作。抽象基类不会被注册。
    """
    if BACKEND_REGISTRY:
        return

    import resume_translator.backends

    skipped: list[dict[str, str]] = []
    for module_info in pkgutil.iter_modules(resume_translator.backends.__path__):
        module_name = module_info.name
        if module_name in ("base", "chat") or module_name.startswith("_"):
            continue
        try:
            module = importlib.import_module(f"resume_translator.backends.{module_name}")
        except ImportError as e:
            skipped.append({"backend": module_name, "missing_dependency": str(e.name)})
            continue
        for _, attr in inspect.getmembers(module, inspect.isclass):
            if (
                issubclass(attr, BaseTranslationBackend)
                and not inspect.isabstract(attr)
                and attr.__module__ == module.__name__
            ):
                name = attr.__name__.replace("Backend", "").lower()
                BACKEND_REGISTRY[name] = attr

    log.debug(
        "后端发现完成",
        registered=sorted(BACKEND_REGISTRY),
        skipped=skipped or None,
    )


def create_backend(
    name: str, overrides: dict[str, Any] | None = None
) -> BaseTranslationBackend[Any]:
    """按名称创建后端实例；配置来自环境变量，`overrides` 优先。"""
    discover_backends()
    backend_class = BACKEND_REGISTRY.get(name)
    if backend_class is None:
        raise BackendNotFoundError(
            f"后端 '{name}' 未在注册表中找到。可用: {', '.join(sorted(BACKEND_REGISTRY))}"
        )
    config = backend_class.CONFIG_MODEL(**(overrides or {}))
    return backend_class(config)
