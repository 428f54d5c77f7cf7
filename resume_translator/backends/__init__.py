# resume_translator/backends/__init__.py
"""可插拔的翻译后端。每个模块提供一个 `BaseTranslationBackend` 子类。"""
