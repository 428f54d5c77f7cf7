# resume_translator/cli/__init__.py
"""resume-translator 命令行接口。"""

from resume_translator.cli.main import app

__all__ = ["app"]
