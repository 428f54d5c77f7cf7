# resume_translator/languages.py
"""
本模块包含语言代码的规范化、校验与显示名称查询。
校验采用 `langcodes` 库判断 BCP 47 标签。
"""

import re

from langcodes import Language
from langcodes.tag_parser import LanguageTagError

from resume_translator.exceptions import TargetLanguageError

AUTO = "auto"

# 简历界面支持的语言：代码 -> (英文名, 本地名)
SUPPORTED_LANGUAGES: dict[str, tuple[str, str]] = {
    "en": ("English", "English"),
    "ru": ("Russian", "Русский"),
    "kk": ("Kazakh", "Қазақша"),
    "es": ("Spanish", "Español"),
    "fr": ("French", "Français"),
    "de": ("German", "Deutsch"),
    "zh": ("Chinese", "中文"),
}

LANG_NAMES: dict[str, str] = {
    "ru": "Russian",
    "en": "English",
    "kk": "Kazakh",
    "uk": "Ukrainian",
    "tr": "Turkish",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "pt": "Portuguese",
    "pl": "Polish",
    "ar": "Arabic",
    "zh": "Chinese",
    "zh-cn": "Chinese (Simplified)",
    "zh-tw": "Chinese (Traditional)",
    "ja": "Japanese",
    "ko": "Korean",
}

_ALIASES: dict[str, str] = {
    "kz": "kk",
    "kk-kz": "kk",
    "ru-ru": "ru",
    "en-us": "en",
    "en-gb": "en",
}

# 语言子标签应该由 2-3 个字母组成 (BCP 47)
LANGUAGE_SUBTAG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}$")


def normalize_lang(value: str | None) -> str:
    """规范化语言代码：空值与 'auto' 归为 'auto'，常见地区变体归并为主语言。"""
    code = (value or "").strip().lower().replace("_", "-")
    if not code or code == AUTO:
        return AUTO
    return _ALIASES.get(code, code)


def lang_to_name(code_or_name: str) -> str:
    """返回用于提示词的语言名称；未知代码按首字母大写原样返回。"""
    code = normalize_lang(code_or_name)
    if code == AUTO:
        return AUTO
    return LANG_NAMES.get(code, code[:1].upper() + code[1:])


def _is_known_name(value: str) -> bool:
    lowered = value.strip().lower()
    return any(name.lower() == lowered for name in LANG_NAMES.values())


def validate_lang_code(value: str | None, *, allow_auto: bool = False) -> str:
    """
    校验语言代码并返回其规范形式。

    接受已知代码、已知语言名称（如 "Russian"）以及 `langcodes` 认可的
    BCP 47 标签；其余情况抛出 `TargetLanguageError`。
    """
    code = normalize_lang(value)
    if code == AUTO:
        if allow_auto:
            return AUTO
        raise TargetLanguageError("缺少目标语言。")
    if code in LANG_NAMES or _is_known_name(code):
        return code
    try:
        lang = Language.get(code)
        if not lang.language or not LANGUAGE_SUBTAG_PATTERN.match(lang.language):
            raise LanguageTagError(f"Tag '{code}' lacks a valid 2-3 letter language subtag.")
    except LanguageTagError as e:
        raise TargetLanguageError(f"提供的语言代码 '{value}' 格式无效。原因: {e}") from e
    return code


_CYRILLIC = re.compile(r"[\u0400-\u04FF]")
_KAZAKH_LETTERS = re.compile(r"[ӘәІіҢңҒғҮүҰұҚқӨөҺһ]")
_CJK = re.compile(r"[\u4E00-\u9FFF]")
_ROMANCE_MARKS = re.compile(r"[áéíóúñü]", re.IGNORECASE)
_GERMAN_MARKS = re.compile(r"[äöüß]", re.IGNORECASE)


def detect_lang(text: str, *, strict: bool = False) -> str | None:
    """
    基于字符集的轻量语言识别。

    西里尔字母中出现哈萨克语特有字母时判为 'kk'，否则为 'ru'；汉字判为 'zh'。
    拉丁文本依据变音符号粗略区分 'es' / 'fr' / 'de'，没有任何信号时为 'en'。

    Args:
        text: 待识别的文本。
        strict: 为 True 时只返回由文字系统确定的结果 ('ru' / 'kk' / 'zh')，
            其余情况返回 None。

    """
    if _CYRILLIC.search(text):
        return "kk" if _KAZAKH_LETTERS.search(text) else "ru"
    if _CJK.search(text):
        return "zh"
    if strict:
        return None
    if _ROMANCE_MARKS.search(text):
        return "es" if "ñ" in text.lower() else "fr"
    if _GERMAN_MARKS.search(text):
        return "de"
    return "en"
