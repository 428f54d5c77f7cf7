# tests/unit/test_config.py
"""针对 `resume_translator.config` 模块的单元测试。"""

import pytest

from resume_translator.cache import CHUNKS, TRANSLATIONS
from resume_translator.config import BackendName, TranslatorConfig


def test_defaults() -> None:
    config = TranslatorConfig()
    assert config.active_backend is BackendName.DEEPSEEK
    assert config.max_chars == 200_000
    assert config.chunk_chars == 3_500
    assert config.cache_ttl == 24 * 3600
    assert config.cache.categories[TRANSLATIONS].maxsize == 1000
    assert CHUNKS in config.cache.categories
    assert config.logging.level == "INFO"


def test_out_of_range_values_are_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    """测试越界的数值被钳制到下限，而不是导致启动失败。"""
    monkeypatch.setenv("RT_MAX_CHARS", "50")
    monkeypatch.setenv("RT_CHUNK_CHARS", "10")
    monkeypatch.setenv("RT_CACHE_TTL", "1")

    config = TranslatorConfig()

    assert config.max_chars == 10_000
    assert config.chunk_chars == 1_000
    assert config.cache_ttl == 60


def test_nested_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RT_ACTIVE_BACKEND", "openrouter")
    monkeypatch.setenv("RT_LOGGING__LEVEL", "DEBUG")
    monkeypatch.setenv("RT_CACHE__SWEEP_INTERVAL", "30")

    config = TranslatorConfig()

    assert config.active_backend is BackendName.OPENROUTER
    assert config.logging.level == "DEBUG"
    assert config.cache.sweep_interval == 30


def test_backend_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RT_BACKEND_CONFIGS", '{"debug": {"mode": "UPPER"}}')
    config = TranslatorConfig(active_backend="debug")

    assert config.backend_overrides() == {"mode": "UPPER"}
    assert config.backend_overrides("deepseek") == {}
