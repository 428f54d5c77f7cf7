# resume_translator/chunking.py
"""
本模块把超长文本切分为适合翻译模型处理的分块。

切分优先发生在空行分隔的段落边界，其次是句子边界（句末标点后跟空白），
只有单个句子仍然超长时才会硬切。每个分块都记录了它在原文中紧随其后的
分隔符，因此 `join_chunks` 可以无损地重建原文。
"""

import re
from dataclasses import dataclass

from resume_translator.masking import TOKEN_PATTERN

_PARAGRAPH_SPLIT = re.compile(r"(\n{2,})")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])(\s+)")


@dataclass(frozen=True)
class Chunk:
    """原文中的一段连续子串，以及紧随其后的原始分隔符。"""

    text: str
    separator: str = ""


@dataclass
class _Piece:
    text: str
    separator: str


def _pairs(parts: list[str]) -> list[_Piece]:
    """把 `re.split` 带捕获组的结果转为 (文本, 其后分隔符) 序列。"""
    pieces = []
    for i in range(0, len(parts), 2):
        sep = parts[i + 1] if i + 1 < len(parts) else ""
        pieces.append(_Piece(parts[i], sep))
    # 以分隔符结尾时 split 会多出一个空片段，其前一片段已持有该分隔符
    if len(pieces) > 1 and not pieces[-1].text:
        pieces.pop()
    # 以分隔符开头时首个片段为空，把该分隔符并入下一片段的开头
    if len(pieces) > 1 and not pieces[0].text:
        lead = pieces.pop(0)
        pieces[0].text = lead.separator + pieces[0].text
    return pieces


def _hard_cut(text: str, max_chars: int) -> list[str]:
    """按长度硬切，切点不会落在占位符内部。"""
    tokens = [m.span() for m in TOKEN_PATTERN.finditer(text)]
    out = []
    start = 0
    while len(text) - start > max_chars:
        cut = start + max_chars
        for t_start, t_end in tokens:
            if t_start < cut < t_end and t_start > start:
                cut = t_start
                break
        out.append(text[start:cut])
        start = cut
    out.append(text[start:])
    return out


class _Packer:
    """贪心地把相邻片段合并为不超过上限的分块。"""

    def __init__(self, max_chars: int):
        self.max_chars = max_chars
        self.chunks: list[Chunk] = []
        self._buf: list[_Piece] = []

    def _buf_len(self) -> int:
        if not self._buf:
            return 0
        body = sum(len(p.text) for p in self._buf)
        seps = sum(len(p.separator) for p in self._buf[:-1])
        return body + seps

    def add(self, piece: _Piece) -> None:
        if self._buf:
            candidate = (
                self._buf_len() + len(self._buf[-1].separator) + len(piece.text)
            )
            if candidate > self.max_chars:
                self.flush()
        self._buf.append(piece)

    def flush(self) -> None:
        if not self._buf:
            return
        text = "".join(p.text + p.separator for p in self._buf[:-1])
        text += self._buf[-1].text
        self.chunks.append(Chunk(text, self._buf[-1].separator))
        self._buf = []


def split_into_chunks(text: str, max_chars: int) -> list[Chunk]:
    """
    把文本切分为分块。

    Args:
        text: 待切分的（通常已掩码的）文本。
        max_chars: 单个分块的最大字符数。

    Returns:
        有序的分块列表；文本未超过上限时，返回仅含原文的单元素列表。

    """
    if max_chars <= 0:
        raise ValueError("max_chars 必须为正数")
    if len(text) <= max_chars:
        return [Chunk(text)]

    packer = _Packer(max_chars)
    for para in _pairs(_PARAGRAPH_SPLIT.split(text)):
        if len(para.text) <= max_chars:
            packer.add(para)
            continue

        # 超长段落：先冲刷缓冲区，再按句子切分，句子之间不与其他段落合并
        packer.flush()
        sentences = _pairs(_SENTENCE_SPLIT.split(para.text))
        sentences[-1].separator += para.separator
        for sentence in sentences:
            if len(sentence.text) <= max_chars:
                packer.add(sentence)
                continue
            packer.flush()
            slices = _hard_cut(sentence.text, max_chars)
            for piece in slices[:-1]:
                packer.chunks.append(Chunk(piece))
            packer.add(_Piece(slices[-1], sentence.separator))
        packer.flush()
    packer.flush()
    return packer.chunks


def join_chunks(chunks: list[Chunk], texts: list[str] | None = None) -> str:
    """
    用原始分隔符重新拼接分块。

    传入 `texts` 时（例如译文），以其替换各分块的文本，分隔符保持不变。
    """
    bodies = texts if texts is not None else [c.text for c in chunks]
    if len(bodies) != len(chunks):
        raise ValueError("texts 与 chunks 的数量必须一致")
    return "".join(body + chunk.separator for body, chunk in zip(bodies, chunks))
