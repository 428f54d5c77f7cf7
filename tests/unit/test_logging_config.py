# tests/unit/test_logging_config.py
"""针对 `resume_translator.logging_config` 模块的单元测试。"""

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from resume_translator.logging_config import RichLineRenderer, redact_secrets, setup_logging


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_redact_secrets() -> None:
    event = {
        "event": "calling",
        "api_key": "sk-123",
        "Authorization": "Bearer sk-123",
        "detail": "header was Bearer abc.def-123 sent",
        "chunk": 1,
    }
    redacted = redact_secrets(None, "info", event)

    assert redacted["api_key"] == "***"
    assert redacted["Authorization"] == "***"
    assert redacted["detail"] == "header was Bearer *** sent"
    assert redacted["chunk"] == 1


def test_rich_line_renderer() -> None:
    renderer = RichLineRenderer(show_timestamp=False, show_logger_name=True)
    line = renderer(
        None,
        "warning",
        {"event": "重试", "level": "warning", "logger": "resume_translator.remote", "attempt": 1},
    )
    assert "WARNING" in line
    assert "重试" in line
    assert "attempt=1" in line
    assert "(resume_translator.remote)" in line


def test_rich_line_renderer_truncates_long_values() -> None:
    renderer = RichLineRenderer(show_timestamp=False, kv_truncate_at=10)
    line = renderer(None, "info", {"event": "x", "text": "y" * 50})
    assert "…" in line
    assert "y" * 20 not in line


@pytest.mark.usefixtures("restore_logging")
def test_json_logging_redacts_credentials(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(log_level="INFO", log_format="json")
    structlog.get_logger("resume_translator.tests").info("远程调用", api_key="sk-secret")

    lines = [ln for ln in capsys.readouterr().err.splitlines() if ln.strip()]
    record = json.loads(lines[-1])
    assert record["event"] == "远程调用"
    assert record["api_key"] == "***"
    assert record["level"] == "info"
    assert "sk-secret" not in lines[-1]
    assert logging.getLogger("resume_translator").level == logging.INFO
