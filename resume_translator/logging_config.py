# resume_translator/logging_config.py
"""
本模块负责集中配置项目的日志系统。

控制台模式使用 Rich 渲染单行彩色日志，JSON 模式用于生产环境。
所有模式都会先经过凭据脱敏处理器，确保 API 密钥等不会出现在日志中。
"""

import logging
import re
from collections.abc import MutableMapping
from typing import Any, Literal

import structlog
from rich.console import Console
from rich.text import Text
from structlog.typing import Processor

SENSITIVE_KEYS = frozenset(
    {"api_key", "authorization", "token", "secret", "password", "headers"}
)
_BEARER = re.compile(r"Bearer\s+[A-Za-z0-9._\-]+")
REDACTED = "***"


def redact_secrets(
    logger: Any, name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """把敏感字段的值替换为 `***`，并抹去字符串中的 Bearer 令牌。"""
    for key in list(event_dict):
        value = event_dict[key]
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, str) and "Bearer" in value:
            event_dict[key] = _BEARER.sub(f"Bearer {REDACTED}", value)
    return event_dict


class RichLineRenderer:
    """一个 structlog 处理器，把日志渲染为对齐的单行 Rich 文本。"""

    _LEVEL_STYLES = {
        "debug": ("blue", "DEBUG   "),
        "info": ("green", "INFO    "),
        "warning": ("yellow", "WARNING "),
        "error": ("bold red", "ERROR   "),
        "critical": ("bold magenta", "CRITICAL"),
    }

    def __init__(
        self,
        show_timestamp: bool = True,
        show_logger_name: bool = True,
        kv_truncate_at: int = 120,
    ):
        self._console = Console()
        self._show_timestamp = show_timestamp
        self._show_logger_name = show_logger_name
        self._kv_truncate_at = kv_truncate_at

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = str(event_dict.pop("event", "")).strip()
        if not event:
            return ""
        timestamp = event_dict.pop("timestamp", "")
        level = event_dict.pop("level", "info").lower()
        logger_name = event_dict.pop("logger", "")
        exception = event_dict.pop("exception", None)
        style, level_text = self._LEVEL_STYLES.get(level, ("default", level.upper()))

        line = Text()
        if self._show_timestamp and timestamp:
            line.append(f"{timestamp} ", style="dim")
        line.append(level_text, style=style)
        line.append(f" {event}")
        for key, value in sorted(event_dict.items()):
            value_repr = repr(value)
            if len(value_repr) > self._kv_truncate_at:
                value_repr = value_repr[: self._kv_truncate_at] + "…"
            line.append(f" {key}=", style="dim")
            line.append(value_repr, style="bright_white")
        if self._show_logger_name and logger_name:
            line.append(f" ({logger_name})", style="cyan dim")

        with self._console.capture() as capture:
            self._console.print(line, soft_wrap=True)
        rendered = capture.get().rstrip()
        if exception:
            rendered = f"{rendered}\n{exception}"
        return rendered


def setup_logging(
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    show_timestamp: bool = True,
    show_logger_name: bool = True,
) -> None:
    """
    配置全局的 structlog 日志系统。这是整个应用的日志配置入口。

    Args:
        log_level: 本项目日志的最低级别 (DEBUG, INFO, WARNING, ERROR)。
        log_format: 'console' 用于开发环境的彩色单行输出，'json' 用于生产环境。
        show_timestamp: 控制台模式下是否显示时间戳。
        show_logger_name: 控制台模式下是否显示记录器名称。

    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_secrets,
    ]

    if log_format == "console":
        processors.append(
            RichLineRenderer(
                show_timestamp=show_timestamp, show_logger_name=show_logger_name
            )
        )
    else:
        processors[3] = structlog.processors.TimeStamper(fmt="iso", utc=True)
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(handler)
    # 第三方库只输出 WARNING 及以上
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger("resume_translator")
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.get_logger("resume_translator.logging_config").debug(
        "日志系统已配置完成", log_format=log_format, app_log_level=log_level.upper()
    )
