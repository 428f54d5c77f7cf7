# resume_translator/masking.py
"""
本模块负责在把文本交给翻译模型之前，把代码、URL、邮箱、模板占位符等
“不可翻译”的片段替换为不透明的占位符，并在翻译完成后将其还原。

掩码由一组有序、相互独立的纯转换阶段 (`MaskStage`) 组成。阶段顺序固定，
后面的阶段不会再次匹配前面阶段产生的占位符。
"""

import re
from dataclasses import dataclass

from resume_translator.types import MaskedText, MaskRestore

TOKEN_PREFIX = "__KEEP_"
TOKEN_PATTERN = re.compile(r"__KEEP_[A-Z]+_\d+__")

_OPEN_TAG = re.compile(r"<\w+[^>]*>")
_CLOSE_TAG = re.compile(r"</\w+>")


@dataclass(frozen=True)
class MaskStage:
    """
    一个掩码阶段：用 `pattern` 查找片段，把第 `value_group` 组替换为占位符。

    `value_group` 为 0 时替换整个匹配；不为 0 时只替换该组，匹配中的其余
    文本（如 HTML 属性名与引号）原样保留。
    """

    name: str
    kind: str
    pattern: re.Pattern[str]
    value_group: int = 0
    html_only: bool = False

    def apply(self, text: str, restores: list[MaskRestore]) -> str:
        """对 `text` 执行本阶段，并把新的还原项追加到 `restores`。"""

        def _replace(match: re.Match[str]) -> str:
            value = match.group(self.value_group)
            # 已含占位符的片段保持不变
            if TOKEN_PREFIX in value:
                return match.group(0)
            token = f"__KEEP_{self.kind}_{len(restores)}__"
            restores.append(MaskRestore(token=token, original_value=value))
            if self.value_group == 0:
                return token
            whole = match.group(0)
            start, end = match.span(self.value_group)
            offset = match.start()
            return whole[: start - offset] + token + whole[end - offset :]

        return self.pattern.sub(_replace, text)


MASK_STAGES: tuple[MaskStage, ...] = (
    MaskStage("code_fence", "BLOCK", re.compile(r"```[\s\S]*?```")),
    MaskStage("inline_code", "INLINE", re.compile(r"`[^`]+`")),
    MaskStage(
        "url", "URL", re.compile(r"""\b(?:https?://|www\.)[^\s<>"'`]+\b""", re.IGNORECASE)
    ),
    MaskStage(
        "email", "MAIL", re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
    ),
    MaskStage("double_brace", "P", re.compile(r"\{\{[^{}]+\}\}")),
    MaskStage("numeric_brace", "P", re.compile(r"\{[0-9]+\}")),
    MaskStage("named_brace", "P", re.compile(r"\{[a-zA-Z_][\w-]*\}")),
    MaskStage("printf", "P", re.compile(r"%[sdifo]", re.IGNORECASE)),
    MaskStage("printf_positional", "P", re.compile(r"%[0-9]+\$[sdifo]", re.IGNORECASE)),
    MaskStage("dollar_positional", "P", re.compile(r"\$[0-9]+\b")),
    MaskStage("colon_identifier", "P", re.compile(r":[a-zA-Z_][\w-]*")),
    MaskStage(
        "html_attribute",
        "ATTR",
        re.compile(r"""\s(?:href|src)=(["'])([^"']+)\1""", re.IGNORECASE),
        value_group=2,
        html_only=True,
    ),
)


def is_likely_html(text: str) -> bool:
    """文本中同时存在开标签和闭标签时，视为 HTML。"""
    return bool(_OPEN_TAG.search(text) and _CLOSE_TAG.search(text))


def mask_protect(
    raw: str, is_html: bool = False, stages: tuple[MaskStage, ...] = MASK_STAGES
) -> MaskedText:
    """按固定顺序执行所有掩码阶段，返回掩码文本与还原列表。"""
    text = raw
    restores: list[MaskRestore] = []
    html = is_html or is_likely_html(raw)
    for stage in stages:
        if stage.html_only and not html:
            continue
        text = stage.apply(text, restores)
    return MaskedText(text=text, restores=restores)


def unmask(text: str, restores: list[MaskRestore]) -> str:
    """按插入的逆序还原所有占位符；同一占位符的每次出现都会被替换。"""
    out = text
    for restore in reversed(restores):
        out = out.replace(restore.token, restore.original_value)
    return out
