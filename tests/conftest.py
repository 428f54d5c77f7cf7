# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

from collections.abc import Generator
from typing import Any

import pytest
from pytest_mock import MockerFixture
from rich.console import Console

from resume_translator.backends.debug import DebugBackend, DebugBackendConfig
from resume_translator.cache import TranslationCache
from resume_translator.config import TranslatorConfig
from resume_translator.translator import Translator

_CREDENTIAL_ENV = (
    "RT_DEEPSEEK_API_KEY",
    "DEEPSEEK_API_KEY",
    "API_KEY_DEEPSEEK",
    "RT_OPENROUTER_API_KEY",
    "OPENROUTER_API_KEY",
    "RT_ACTIVE_BACKEND",
)


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture(autouse=True)
def isolate_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """确保宿主环境中的真实 API 密钥不会泄漏进测试。"""
    for name in _CREDENTIAL_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> TranslatorConfig:
    """提供一个使用调试后端的默认配置。"""
    return TranslatorConfig(active_backend="debug")


@pytest.fixture
def debug_backend() -> DebugBackend:
    """提供一个成功模式的调试后端。"""
    return DebugBackend(DebugBackendConfig())


@pytest.fixture
def translator(config: TranslatorConfig, debug_backend: DebugBackend) -> Translator:
    """提供一个带独立缓存的协调器实例。"""
    return Translator(config, debug_backend, cache=TranslationCache(config.cache))
