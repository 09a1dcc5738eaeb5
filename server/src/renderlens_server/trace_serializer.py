"""Transfer-safe projection of a finished trace.

The projection is a fresh tree of plain dicts and lists, so the canonical
trace stays untouched. Object handles and the reserved configuration keys are
left out to keep the payload small and JSON-encodable.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from .path_computer import META_KEY, OBJECT_TYPE_KEY
from .trace_node import ROOT_INDEX, Trace, context_value_as_string

RESERVED_CONFIGURATION_KEYS = (META_KEY, OBJECT_TYPE_KEY)
_JSON_SCALARS = (str, int, float, bool, type(None))


def _json_safe(value: Any, _seen: frozenset[int] = frozenset()) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return context_value_as_string(value)
    if isinstance(value, _JSON_SCALARS):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        if id(value) in _seen:
            # Self-referencing container.
            return context_value_as_string(value)
        seen = _seen | {id(value)}
        if isinstance(value, Mapping):
            return {str(key): _json_safe(item, seen) for key, item in value.items()}
        return [_json_safe(item, seen) for item in value]
    return context_value_as_string(value)


def _clean_configuration(configuration: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if configuration is None:
        return None
    return {
        str(key): _json_safe(value)
        for key, value in configuration.items()
        if key not in RESERVED_CONFIGURATION_KEYS
    }


def _clean_meta(meta: Mapping[str, Any] | None) -> dict[str, Any]:
    if not meta:
        return {}
    return {str(key): _json_safe(value) for key, value in meta.items() if key != "class"}


def serialize_node(trace: Trace, index: int) -> dict[str, Any]:
    node = trace[index]
    payload: dict[str, Any] = {
        "fullPath": node.full_path,
        "configuration": _clean_configuration(node.configuration),
        "output": _json_safe(node.output),
        "context": _json_safe(node.context),
        "token": node.token,
        "children": [serialize_node(trace, child) for child in node.children],
        "condensedPath": node.condensed_path,
        "relativePath": node.relative_path,
        "arrayPath": node.array_path,
        "objectType": node.object_type,
        "implementationClassName": node.implementation_class_name,
        "contextAsString": dict(node.context_as_string or {}),
        "metaConfiguration": _clean_meta(node.meta_configuration),
    }
    if node.marker_suppression_saved is not None:
        payload["markerSuppressionSaved"] = node.marker_suppression_saved
    return payload


def serialize_trace(trace: Trace) -> dict[str, Any]:
    """Project ``trace`` into its wire shape, rooted at the envelope."""
    if trace.is_empty:
        return {}
    return serialize_node(trace, ROOT_INDEX)


def encode_trace_for_page(trace: Trace) -> str:
    """Double JSON encoding, safe to embed as a JavaScript string literal.

    ``<`` is escaped so captured markup cannot close the surrounding script.
    """
    encoded = json.dumps(serialize_trace(trace), allow_nan=False)
    return json.dumps(encoded).replace("<", "\\u003c")
