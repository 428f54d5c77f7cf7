# resume_translator/cli/main.py
"""resume-translator CLI 的主入口点。"""

from typing import Annotated, Optional

import typer
from rich.console import Console

import resume_translator
from resume_translator.cli.state import State
from resume_translator.cli.translate import batch, detect, languages, translate
from resume_translator.config import TranslatorConfig
from resume_translator.logging_config import setup_logging

app = typer.Typer(
    name="resume-translate",
    help="简历翻译流水线：掩码、分块、缓存与重试。",
    add_completion=False,
    no_args_is_help=True,
)

app.command("translate")(translate)
app.command("batch")(batch)
app.command("languages")(languages)
app.command("detect")(detect)

console = Console()


def version_callback(value: bool) -> None:
    """处理 --version 选项的回调函数。"""
    if value:
        console.print(
            f"resume-translator [bold cyan]v{resume_translator.__version__}[/bold cyan]"
        )
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="显示版本信息并退出。",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """主回调函数，在任何子命令执行前加载配置并初始化日志。"""
    try:
        config = TranslatorConfig()
        setup_logging(log_level=config.logging.level, log_format=config.logging.format)
        ctx.obj = State(config=config)
    except Exception as e:
        console.print("[bold red]❌ 启动失败：无法加载配置或初始化日志。[/bold red]")
        console.print(f"[dim]{e}[/dim]")
        raise typer.Exit(code=1) from e
