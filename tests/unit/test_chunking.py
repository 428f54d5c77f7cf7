# tests/unit/test_chunking.py
"""针对 `resume_translator.chunking` 模块的单元测试。"""

import pytest

from resume_translator.chunking import Chunk, join_chunks, split_into_chunks


def test_short_text_is_a_single_chunk() -> None:
    chunks = split_into_chunks("Hello world.", 100)
    assert chunks == [Chunk("Hello world.")]


def test_paragraphs_are_packed_greedily() -> None:
    """测试相邻段落在不超过上限时被合并到同一个分块。"""
    text = "A" * 40 + "\n\n" + "B" * 40 + "\n\n" + "C" * 40
    chunks = split_into_chunks(text, 100)

    assert [c.text for c in chunks] == ["A" * 40 + "\n\n" + "B" * 40, "C" * 40]
    assert chunks[0].separator == "\n\n"
    assert join_chunks(chunks) == text


def test_long_paragraph_falls_back_to_sentences() -> None:
    text = "One two three. Four five six! Seven eight nine? Ten."
    chunks = split_into_chunks(text, 20)

    assert [c.text for c in chunks] == [
        "One two three.",
        "Four five six!",
        "Seven eight nine?",
        "Ten.",
    ]
    assert [c.separator for c in chunks] == [" ", " ", " ", ""]
    assert join_chunks(chunks) == text


def test_overlong_sentence_is_hard_cut() -> None:
    text = "x" * 250
    chunks = split_into_chunks(text, 100)
    assert [len(c.text) for c in chunks] == [100, 100, 50]
    assert join_chunks(chunks) == text


def test_hard_cut_never_splits_a_placeholder() -> None:
    """测试硬切点落在占位符内部时，会前移到占位符之前。"""
    token = "__KEEP_URL_0__"
    text = "a" * 95 + token + "b" * 95
    chunks = split_into_chunks(text, 100)

    assert chunks[0].text == "a" * 95
    assert token in chunks[1].text
    assert all(token in c.text or "KEEP" not in c.text for c in chunks)
    assert join_chunks(chunks) == text


def test_wide_paragraph_gaps_are_preserved() -> None:
    text = "First paragraph here.\n\n\n\nSecond paragraph here."
    chunks = split_into_chunks(text, 25)
    assert chunks[0].separator == "\n\n\n\n"
    assert join_chunks(chunks) == text


@pytest.mark.parametrize("limit", [15, 40, 120, 1000])
def test_chunks_respect_limit_and_rejoin_losslessly(limit: int) -> None:
    text = "\n\n".join(
        " ".join(f"Sentence {p}.{s} has words!" for s in range(6)) for p in range(5)
    ) + "\n" + "z" * 130
    chunks = split_into_chunks(text, limit)

    assert all(0 < len(c.text) <= limit for c in chunks)
    assert join_chunks(chunks) == text


def test_join_chunks_uses_replacement_texts() -> None:
    chunks = [Chunk("a", "\n\n"), Chunk("b", "")]
    assert join_chunks(chunks, ["A", "B"]) == "A\n\nB"


def test_join_chunks_rejects_length_mismatch() -> None:
    with pytest.raises(ValueError):
        join_chunks([Chunk("a")], ["A", "B"])


def test_non_positive_limit_is_rejected() -> None:
    with pytest.raises(ValueError):
        split_into_chunks("text", 0)


def test_trailing_whitespace_does_not_create_empty_chunks() -> None:
    text = "Lead the team. " * 10 + "\n\n" + "Ship it. " * 10
    chunks = split_into_chunks(text, 40)

    assert all(c.text for c in chunks)
    assert join_chunks(chunks) == text


def test_leading_blank_lines_are_folded_into_first_chunk() -> None:
    """测试以空行开头的文本不会产生空分块，开头的换行归入第一个分块。"""
    text = "\n\nFirst para.\n\nSecond para."
    chunks = split_into_chunks(text, 20)

    assert [c.text for c in chunks] == ["\n\nFirst para.", "Second para."]
    assert all(c.text for c in chunks)
    assert join_chunks(chunks) == text


def test_leading_blank_lines_before_long_paragraph() -> None:
    text = "\n\n" + "Word " * 300 + "end."
    chunks = split_into_chunks(text, 1000)

    assert all(c.text.strip() for c in chunks)
    assert chunks[0].text.startswith("\n\n")
    assert join_chunks(chunks) == text
