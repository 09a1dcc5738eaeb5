"""Debugger facade called by the host renderer.

It works in two phases. While the host renders, the lifecycle hooks collect
the evaluation trace. When the outermost render returns, ``post_process``
computes the derived paths and, depending on the request arguments, appends
the debugging snippet, replaces the page with the observer view, or answers
an expression evaluation request.

The debugger assumes rendering is deterministic: reloading a URL triggers the
same rendering, so token numbers stay stable across reloads.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from .config import DebuggerConfig
from .debugger_page import render_debugger_page
from .exceptions import RenderLensError
from .expression import ExpressionEvaluator, PythonExpressionEvaluator, evaluate_at_path
from .path_computer import compute_paths
from .recorder import OutputRef, TraceRecorder
from .snippet import render_debugging_snippet
from .trace_node import Trace, context_value_as_string
from .trace_serializer import encode_trace_for_page, serialize_trace

logger = logging.getLogger(__name__)


class RenderHooks(Protocol):
    """Capability interface the host renderer drives."""

    def begin_cycle(self, path: str) -> None:
        ...

    def set_config(self, configuration: Mapping[str, Any] | None) -> None:
        ...

    def before_evaluate(self, context: Mapping[str, Any], object_handle: Any = None) -> None:
        ...

    def end_cycle(self, output_ref: OutputRef, should_render: bool = True) -> None:
        ...

    def post_process(self, output: str, request_args: Mapping[str, str] | None = None) -> str:
        ...


class Debugger:
    """Records one rendering pass and post-processes its output.

    Attributes:
        config: Debugger configuration.
        evaluator: Collaborator used for ad-hoc expressions.
        recorder: Recorder of the current pass.
    """

    def __init__(
        self,
        config: DebuggerConfig | None = None,
        evaluator: ExpressionEvaluator | None = None,
    ) -> None:
        self.config = config or DebuggerConfig()
        self.evaluator = evaluator or PythonExpressionEvaluator()
        self.recorder = TraceRecorder(self.config.suppressing_object_types)

    @property
    def trace(self) -> Trace:
        return self.recorder.trace

    def reset(self) -> None:
        """Start a new rendering pass with a fresh recorder."""
        self.recorder = TraceRecorder(self.config.suppressing_object_types)

    def begin_cycle(self, path: str) -> None:
        self.recorder.begin(path)

    def set_config(self, configuration: Mapping[str, Any] | None) -> None:
        self.recorder.set_configuration(configuration)

    def before_evaluate(self, context: Mapping[str, Any], object_handle: Any = None) -> None:
        self.recorder.before_evaluate(context, object_handle)

    def end_cycle(self, output_ref: OutputRef, should_render: bool = True) -> None:
        self.recorder.end(output_ref, should_render)

    def post_process(self, output: str, request_args: Mapping[str, str] | None = None) -> str:
        """Entry point at the end of the outermost render.

        Nested renders (stack deeper than the envelope) pass through untouched.
        """
        if self.recorder.depth != 1:
            return output

        compute_paths(self.trace)
        args = request_args or {}
        if args.get(self.config.expression_parameter):
            return self.render_expression(
                args[self.config.expression_parameter],
                args.get(self.config.array_path_parameter, ""),
            )
        if self.config.debugger_parameter in args:
            return render_debugger_page(self.config)
        return output + self.render_debugging_snippet()

    def serialized_trace(self) -> dict[str, Any]:
        return serialize_trace(self.trace)

    def render_debugging_snippet(self) -> str:
        return render_debugging_snippet(encode_trace_for_page(self.trace), self.config)

    def render_expression(self, expression: str, array_path: str) -> str:
        """JSON-encoded result of ``expression`` at ``array_path``."""
        try:
            result = evaluate_at_path(self.trace, array_path, expression, self.evaluator)
        except RenderLensError as exc:
            logger.warning("Expression %r at %r failed: %s", expression, array_path, exc)
            return json.dumps({"error": type(exc).__name__, "message": str(exc)})
        try:
            return json.dumps(result, default=context_value_as_string, allow_nan=False)
        except (TypeError, ValueError) as exc:
            logger.warning("Result of %r at %r is not encodable: %s", expression, array_path, exc)
            return json.dumps({"error": type(exc).__name__, "message": str(exc)})
