# tests/unit/cli/test_cli.py
"""针对 `resume-translate` 命令行的测试。"""

import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

import resume_translator
from resume_translator.cli import app

runner = CliRunner()
ENV = {"RT_ACTIVE_BACKEND": "debug", "RT_LOGGING__LEVEL": "WARNING"}


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"v{resume_translator.__version__}" in result.output


def test_translate_text() -> None:
    result = runner.invoke(app, ["translate", "Hello", "--to", "de"], env=ENV)
    assert result.exit_code == 0, result.output
    assert "[German] Hello" in result.output
    assert "provider=remote" in result.output


def test_translate_backend_option_overrides_config() -> None:
    result = runner.invoke(
        app, ["translate", "Hello", "--backend", "debug"], env={"RT_DEBUG_MODE": "UPPER"}
    )
    assert result.exit_code == 0, result.output
    assert "HELLO" in result.output


def test_translate_from_file(tmp_path: Path) -> None:
    source = tmp_path / "summary.txt"
    source.write_text("Team lead", encoding="utf-8")
    result = runner.invoke(app, ["translate", "--file", str(source), "-t", "kk"], env=ENV)
    assert result.exit_code == 0, result.output
    assert "[Kazakh] Team lead" in result.output


def test_translate_without_text_fails() -> None:
    result = runner.invoke(app, ["translate"], env=ENV)
    assert result.exit_code == 1


def test_translate_remote_failure_exits_non_zero() -> None:
    result = runner.invoke(app, ["translate", "Hello"], env={**ENV, "RT_DEBUG_MODE": "FAIL"})
    assert result.exit_code == 1
    assert "remote_http_error" in result.output


def test_translate_invalid_target() -> None:
    result = runner.invoke(app, ["translate", "Hello", "--to", "123"], env=ENV)
    assert result.exit_code == 1
    assert "target_invalid" in result.output


def test_translate_partial_failure_prints_prefix() -> None:
    text = "Alpha. " * 100 + "\n\n" + "FAIL " * 100
    result = runner.invoke(
        app,
        ["translate", text],
        env={**ENV, "RT_CHUNK_CHARS": "1000", "RT_DEBUG_FAIL_ON_TEXT": "FAIL"},
    )
    assert result.exit_code == 1
    assert "[Russian] Alpha." in result.output
    assert "FAIL FAIL" not in result.output


def test_batch(tmp_path: Path) -> None:
    items = tmp_path / "items.json"
    items.write_text(
        json.dumps(["Hello", {"text": "Hola", "target_lang": "de"}]), encoding="utf-8"
    )
    result = runner.invoke(app, ["batch", str(items)], env=ENV)
    assert result.exit_code == 0, result.output
    assert "[Russian] Hello" in result.output
    assert "[German] Hola" in result.output


def test_batch_reports_failed_items(tmp_path: Path) -> None:
    items = tmp_path / "items.json"
    items.write_text(json.dumps(["Hello", {"text": "Hi", "target_lang": "123"}]))
    result = runner.invoke(app, ["batch", str(items)], env=ENV)
    assert result.exit_code == 1
    assert "target_invalid" in result.output


def test_batch_rejects_non_array(tmp_path: Path) -> None:
    items = tmp_path / "items.json"
    items.write_text("{}")
    result = runner.invoke(app, ["batch", str(items)], env=ENV)
    assert result.exit_code == 1


def test_languages() -> None:
    result = runner.invoke(app, ["languages"])
    assert result.exit_code == 0
    assert "kk" in result.output
    assert "Қазақша" in result.output


@pytest.mark.parametrize(
    "text, code, native",
    [("Привет", "ru", "Русский"), ("Сәлем", "kk", "Қазақша"), ("Hello", "en", "English")],
)
def test_detect(text: str, code: str, native: str) -> None:
    result = runner.invoke(app, ["detect", text], env=ENV)
    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[0] == code
    assert native in result.output


def test_detect_without_text_fails() -> None:
    result = runner.invoke(app, ["detect"], env=ENV)
    assert result.exit_code == 1
