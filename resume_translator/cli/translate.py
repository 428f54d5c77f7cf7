# resume_translator/cli/translate.py
"""翻译相关的 CLI 命令。"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from resume_translator.bootstrap import create_translator
from resume_translator.cli.state import State
from resume_translator.config import BackendName
from resume_translator.exceptions import TranslatorError
from resume_translator.languages import SUPPORTED_LANGUAGES, detect_lang
from resume_translator.registry import create_backend
from resume_translator.translator import Translator
from resume_translator.types import BatchItem, TranslationResult

console = Console()


def _build_translator(state: State, backend: Optional[BackendName]) -> Translator:
    config = state.config
    if backend is None:
        return create_translator(config)
    instance = create_backend(backend.value, config.backend_overrides(backend.value))
    return create_translator(config, backend=instance)


async def _run_single(
    translator: Translator, text: str, target: str, source: str, html: bool, domain: str
) -> TranslationResult:
    async with translator:
        return await translator.translate_text(text, target, source, html, domain)


async def _run_batch(
    translator: Translator, items: list[Any], target: str, source: str
) -> list[TranslationResult]:
    batch = [BatchItem(**it) if isinstance(it, dict) else str(it) for it in items]
    async with translator:
        return await translator.translate_many(batch, target, source)


def translate(
    ctx: typer.Context,
    text: Annotated[Optional[str], typer.Argument(help="要翻译的文本。")] = None,
    target: Annotated[str, typer.Option("--to", "-t", help="目标语言代码。")] = "ru",
    source: Annotated[str, typer.Option("--from", "-s", help="源语言代码或 auto。")] = "auto",
    file: Annotated[
        Optional[Path], typer.Option("--file", "-f", help="从文件读取待翻译文本。")
    ] = None,
    html: Annotated[bool, typer.Option("--html", help="输入为 HTML。")] = False,
    domain: Annotated[str, typer.Option("--domain", help="简历段落（提示用）。")] = "",
    backend: Annotated[
        Optional[BackendName], typer.Option("--backend", "-b", help="覆盖活动后端。")
    ] = None,
) -> None:
    """翻译一段文本并输出译文。"""
    if file is not None:
        text = file.read_text(encoding="utf-8")
    if not text:
        console.print("[bold red]❌ 请提供文本参数或 --file。[/bold red]")
        raise typer.Exit(code=1)

    state: State = ctx.obj
    translator = _build_translator(state, backend)
    try:
        result = asyncio.run(_run_single(translator, text, target, source, html, domain))
    except TranslatorError as e:
        console.print(f"[bold red]❌ 翻译失败 ({e.code}): {e}[/bold red]")
        raise typer.Exit(code=1) from e

    if not result.ok:
        console.print(
            f"[bold yellow]⚠️ 部分失败：第 {result.failed_at_chunk_index} 个分块出错 "
            f"(status={result.status})[/bold yellow]"
        )
        typer.echo(result.partial_text or "")
        raise typer.Exit(code=1)

    typer.echo(result.translated_text)
    console.print(f"[dim]provider={result.provider.value if result.provider else '-'}[/dim]")


def batch(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="JSON 文件：字符串或条目对象的数组。")],
    target: Annotated[str, typer.Option("--to", "-t", help="目标语言代码。")] = "ru",
    source: Annotated[str, typer.Option("--from", "-s", help="源语言代码或 auto。")] = "auto",
    backend: Annotated[
        Optional[BackendName], typer.Option("--backend", "-b", help="覆盖活动后端。")
    ] = None,
) -> None:
    """顺序翻译 JSON 数组中的每个条目，以 JSON 输出结果。"""
    try:
        items = json.loads(file.read_text(encoding="utf-8"))
        if not isinstance(items, list):
            raise TypeError("批量输入必须是一个 JSON 数组。")
    except (OSError, json.JSONDecodeError, TypeError) as e:
        console.print(f"[bold red]❌ 输入文件错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    state: State = ctx.obj
    translator = _build_translator(state, backend)
    results = asyncio.run(_run_batch(translator, items, target, source))
    typer.echo(
        json.dumps(
            [r.model_dump(mode="json", exclude_none=True) for r in results],
            ensure_ascii=False,
            indent=2,
        )
    )
    if not all(r.ok for r in results):
        raise typer.Exit(code=1)


def languages() -> None:
    """列出界面支持的语言。"""
    table = Table(title="支持的语言")
    table.add_column("代码", style="cyan")
    table.add_column("名称")
    table.add_column("本地名称")
    for code, (name, native) in SUPPORTED_LANGUAGES.items():
        table.add_row(code, name, native)
    console.print(table)


def detect(
    text: Annotated[Optional[str], typer.Argument(help="要识别的文本。")] = None,
    file: Annotated[
        Optional[Path], typer.Option("--file", "-f", help="从文件读取文本。")
    ] = None,
) -> None:
    """按字符集粗略识别文本语言，输出语言代码。"""
    if file is not None:
        text = file.read_text(encoding="utf-8")
    if not text or not text.strip():
        console.print("[bold red]❌ 请提供文本参数或 --file。[/bold red]")
        raise typer.Exit(code=1)

    code = detect_lang(text) or "en"
    typer.echo(code)
    _, native = SUPPORTED_LANGUAGES[code]
    console.print(f"[dim]{native} (heuristic)[/dim]")
