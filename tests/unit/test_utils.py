# tests/unit/test_utils.py
"""针对 `resume_translator.utils` 模块的单元测试。"""

from resume_translator.utils import fingerprint


def test_fingerprint_is_deterministic() -> None:
    assert fingerprint("a", "b", 1) == fingerprint("a", "b", "1")
    assert len(fingerprint("x")) == 64


def test_fingerprint_separates_fields() -> None:
    """测试字段边界参与计算，拼接结果相同的不同输入不会冲突。"""
    assert fingerprint("ab", "c") != fingerprint("a", "bc")
    assert fingerprint("Russian", "Hello") != fingerprint("Russian", "Hello ")
