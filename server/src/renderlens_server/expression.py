"""Ad-hoc expression evaluation against a recorded node."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Protocol

from .exceptions import ExpressionEvaluationError, TracePathError
from .trace_node import ROOT_INDEX, Trace

_SEGMENT_PATTERN = re.compile(r"^children\.(\d+)$")


class ExpressionEvaluator(Protocol):
    def evaluate(self, expression: str, variables: Mapping[str, Any]) -> Any:
        ...


class PythonExpressionEvaluator:
    """Evaluates a Python expression with the node context as its namespace.

    Removing builtins only keeps names like ``open`` out of reach; it is not a
    sandbox, since object introspection still reaches every loaded class. Any
    client that can POST to the page can run code, so serve the debugger on a
    loopback host only, or inject an evaluator for a restricted language.
    """

    def evaluate(self, expression: str, variables: Mapping[str, Any]) -> Any:
        namespace: dict[str, Any] = dict(variables)
        namespace["__builtins__"] = {}
        try:
            code = compile(expression, "<renderlens-expression>", "eval")
            return eval(code, namespace)  # noqa: S307
        except Exception as exc:  # noqa: BLE001
            raise ExpressionEvaluationError(expression, exc) from exc


def normalize_array_path(array_path: str) -> str:
    """Turn ``.children[2].children[0]`` into ``children.2.children.0``."""
    return array_path.replace("[", ".").replace("]", "").strip(".")


def resolve_array_path(trace: Trace, array_path: str) -> int:
    """Return the arena index addressed by a serialized-tree array path."""
    if trace.is_empty:
        raise TracePathError(array_path, "trace is empty")
    index = ROOT_INDEX
    normalized = normalize_array_path(array_path or "")
    if not normalized:
        return index

    parts = normalized.split(".")
    if len(parts) % 2:
        raise TracePathError(array_path, "expected children[<n>] segments")
    for position in range(0, len(parts), 2):
        match = _SEGMENT_PATTERN.match(f"{parts[position]}.{parts[position + 1]}")
        if match is None:
            raise TracePathError(array_path, f"unexpected segment {parts[position]!r}")
        child = int(match.group(1))
        children = trace[index].children
        if child >= len(children):
            raise TracePathError(array_path, f"no child {child} below {trace[index].full_path!r}")
        index = children[child]
    return index


def evaluate_at_path(
    trace: Trace,
    array_path: str,
    expression: str,
    evaluator: ExpressionEvaluator,
) -> Any:
    """Evaluate ``expression`` with the context captured at ``array_path``.

    ``this`` is bound to the object that was being rendered there.
    """
    node = trace[resolve_array_path(trace, array_path)]
    variables = dict(node.context)
    variables["this"] = node.object_handle
    return evaluator.evaluate(expression, variables)
