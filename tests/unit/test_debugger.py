"""Tests for the post-process dispatch of the debugger facade."""

from __future__ import annotations

import json

from renderlens_server.config import DebuggerConfig
from renderlens_server.debugger import Debugger
from renderlens_server.demo import render_demo
from renderlens_server.recorder import OutputRef


def _rendered() -> tuple[Debugger, str]:
    debugger = Debugger()
    return debugger, render_demo(debugger)


def test_post_process_passes_through_without_a_trace() -> None:
    assert Debugger().post_process("<p>x</p>", {}) == "<p>x</p>"


def test_post_process_passes_through_for_nested_renders() -> None:
    debugger = Debugger()
    debugger.begin_cycle("outer")
    debugger.set_config({})
    debugger.begin_cycle("outer/inner")

    assert debugger.post_process("<p>x</p>") == "<p>x</p>"
    assert debugger.trace.root.array_path is None


def test_post_process_appends_snippet() -> None:
    debugger, output = _rendered()
    result = debugger.post_process(output, {})

    assert result.startswith(output)
    assert "window.renderlensEvaluationTrace = " in result
    assert '<script src="/_renderlens/snippet.js"></script>' in result


def test_post_process_serves_debugger_page() -> None:
    debugger, output = _rendered()
    result = debugger.post_process(output, {"__renderlens-debugger": ""})

    assert 'class="evaluation-tree"' in result
    assert "BEGIN_" not in result


def test_post_process_evaluates_expression() -> None:
    debugger, output = _rendered()
    result = debugger.post_process(output, {
        "__renderlens-debugger-expression": "name",
        "__renderlens-debugger-currentArrayPath": ".children[0]",
    })
    assert json.loads(result) == "visitor"


def test_expression_results_that_are_not_json_are_displayed_as_strings() -> None:
    debugger, output = _rendered()
    result = debugger.post_process(output, {
        "__renderlens-debugger-expression": "this",
        "__renderlens-debugger-currentArrayPath": ".children[0].children[0]",
    })
    assert json.loads(result).startswith("Value(")


def test_expression_errors_are_reported_as_json() -> None:
    debugger, output = _rendered()
    result = json.loads(debugger.post_process(output, {
        "__renderlens-debugger-expression": "name",
        "__renderlens-debugger-currentArrayPath": ".children[42]",
    }))
    assert result["error"] == "TracePathError"
    assert ".children[42]" in result["message"]


def test_custom_parameter_names() -> None:
    debugger = Debugger(DebuggerConfig(debugger_parameter="debug"))
    output = render_demo(debugger)
    assert 'class="evaluation-tree"' in debugger.post_process(output, {"debug": "1"})


def test_serialized_trace_has_computed_paths_after_post_process() -> None:
    debugger, output = _rendered()
    debugger.post_process(output, {})
    payload = debugger.serialized_trace()

    assert payload["children"][0]["arrayPath"] == ".children[0]"
    assert payload["children"][0]["relativePath"] == "/page"


def test_reset_starts_a_new_pass() -> None:
    debugger, _ = _rendered()
    debugger.reset()
    assert debugger.trace.is_empty

    debugger.begin_cycle("x")
    debugger.set_config({})
    debugger.before_evaluate({})
    ref = OutputRef("<p>x</p>")
    debugger.end_cycle(ref)
    assert ref.value == "<!--BEGIN_0--><p>x</p><!--END_0-->"


def test_expression_results_with_unencodable_keys_are_reported_as_json() -> None:
    debugger, output = _rendered()
    result = json.loads(debugger.post_process(output, {
        "__renderlens-debugger-expression": "{(1, 2): name}",
        "__renderlens-debugger-currentArrayPath": ".children[0]",
    }))
    assert result["error"] == "TypeError"
    assert "tuple" in result["message"]


def test_non_finite_expression_results_are_reported_as_json() -> None:
    debugger, output = _rendered()
    result = json.loads(debugger.post_process(output, {
        "__renderlens-debugger-expression": "1e999 - 1e999",
        "__renderlens-debugger-currentArrayPath": ".children[0]",
    }))
    assert result["error"] == "ValueError"
