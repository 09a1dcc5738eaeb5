"""Tests for the page snippet, the served scripts and the observer page."""

from __future__ import annotations

import json

from renderlens_server.config import DebuggerConfig
from renderlens_server.debugger_page import render_debugger_js, render_debugger_page
from renderlens_server.output_formatter import format_output_html, output_css
from renderlens_server.snippet import render_debugging_snippet
from renderlens_server.snippet_js import render_snippet_js, settings_json
from renderlens_shared.settings import ClientSettings


def test_snippet_embeds_trace_and_script() -> None:
    snippet = render_debugging_snippet('"{}"', DebuggerConfig())

    assert 'window.renderlensEvaluationTrace = "{}";' in snippet
    assert '<script src="/_renderlens/snippet.js"></script>' in snippet


def test_snippet_uses_configured_base_url() -> None:
    snippet = render_debugging_snippet('"{}"', DebuggerConfig(base_url="https://cdn.example.com/rl/"))
    assert '<script src="https://cdn.example.com/rl/snippet.js"></script>' in snippet


def test_settings_json_round_trips() -> None:
    settings = ClientSettings(channel_scope="scope-x", inspect_delay_ms=5)
    decoded = json.loads(settings_json(settings))
    assert decoded["channel_scope"] == "scope-x"
    assert decoded["inspect_delay_ms"] == 5


def test_snippet_js_is_filled_in() -> None:
    source = render_snippet_js(DebuggerConfig())

    assert "__SETTINGS__" not in source
    assert "__DEBUGGER_URL__" not in source
    assert '"/_renderlens/debugger"' in source
    assert "function renderlensBuildChannel" in source
    assert "function renderlensFindEnclosingToken" in source


def test_debugger_page_is_filled_in() -> None:
    page = render_debugger_page(DebuggerConfig(), title="<debug>")

    assert "<title>&lt;debug&gt;</title>" in page
    assert 'class="evaluation-tree"' in page
    assert ".renderlens-output" in page
    assert "__DEBUGGER_JS__" not in page
    assert "__OUTPUT_CSS__" not in page


def test_debugger_js_carries_parameter_names() -> None:
    source = render_debugger_js(DebuggerConfig())

    assert '"__renderlens-debugger-expression"' in source
    assert '"/_renderlens/api/format-output"' in source
    assert "__PARAMETERS__" not in source


def test_debugger_tree_listeners_accept_pointer_events_on_nested_labels() -> None:
    source = render_debugger_js(DebuggerConfig())

    assert "e.target.matches('li > span')" not in source
    assert source.count("e.target.closest('li > span')") == 3


def test_format_output_html_highlights_markup() -> None:
    highlighted = format_output_html("<p class=\"x\">hi</p>")

    assert highlighted.startswith('<div class="renderlens-output">')
    assert "&lt;" in highlighted
    assert format_output_html(None).startswith('<div class="renderlens-output">')
    assert ".renderlens-output" in output_css()
