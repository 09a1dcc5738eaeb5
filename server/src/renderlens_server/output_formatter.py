"""Syntax-highlighted display of captured node output."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name

_CSS_CLASS = "renderlens-output"


def _formatter() -> HtmlFormatter:
    return HtmlFormatter(cssclass=_CSS_CLASS, style="default")


def format_output_html(output: str | None) -> str:
    """Render captured markup as highlighted HTML for the details view."""
    lexer = get_lexer_by_name("html")
    return highlight(output or "", lexer, _formatter())


def output_css() -> str:
    return _formatter().get_style_defs(f".{_CSS_CLASS}")
