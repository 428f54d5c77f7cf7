# resume_translator/utils.py
"""本模块包含项目范围内的通用工具函数。"""

import hashlib
import json
from typing import Any


def fingerprint(*parts: Any) -> str:
    """为一组字段生成确定性的 SHA-256 指纹，用作缓存与请求合并的键。"""
    payload = json.dumps(
        [str(p) for p in parts], ensure_ascii=False, separators=(",", ":")
    ).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
