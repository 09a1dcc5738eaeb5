"""The snippet appended to every instrumented page."""

from __future__ import annotations

import html

from .config import DebuggerConfig

DEBUGGING_SNIPPET_TEMPLATE = """
<script>window.renderlensEvaluationTrace = __EVALUATION_TRACE__;</script>
<script src="__BASE_URL__snippet.js"></script>
"""


def render_debugging_snippet(encoded_trace: str, config: DebuggerConfig) -> str:
    """Fill the snippet with the base URL and the double encoded trace."""
    return (
        DEBUGGING_SNIPPET_TEMPLATE
        .replace("__BASE_URL__", html.escape(config.base_url, quote=True))
        .replace("__EVALUATION_TRACE__", encoded_trace)
    )
