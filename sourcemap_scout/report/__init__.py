# File: sourcemap_scout/report/__init__.py
"""sourcemap_scout.report: генерация отчётов (JSON и HTML) по результату аудита."""

from __future__ import annotations

from pathlib import Path

from .html_report import render_html
from .json_report import render_json

#: Каталог с шаблонами, поставляемыми вместе с пакетом.
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

__all__ = ["render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
