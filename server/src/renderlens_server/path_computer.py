"""Derived paths and display fields over a finished trace."""

from __future__ import annotations

import re

from .trace_node import ROOT_INDEX, Trace, context_value_as_string

TYPE_ANNOTATION_PATTERN = re.compile(r"<[^>]+>")
META_KEY = "__meta"
OBJECT_TYPE_KEY = "__objectType"


def condense_path(full_path: str) -> str:
    """Drop ``<Type>`` annotations from a renderer path."""
    return TYPE_ANNOTATION_PATTERN.sub("", full_path)


def relative_path(condensed_path: str, parent_condensed_path: str) -> str:
    prefix = f"{parent_condensed_path}/"
    if parent_condensed_path and condensed_path.startswith(prefix):
        return condensed_path[len(prefix):]
    return f"/{condensed_path}"


def child_array_path(parent_array_path: str, child_index: int) -> str:
    return f"{parent_array_path}.children[{child_index}]"


def _class_name(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    return str(value)


def compute_paths(trace: Trace) -> None:
    """Add the computed properties to every node of ``trace`` in place."""
    if trace.is_empty:
        return
    _compute(trace, ROOT_INDEX, "", "")


def _compute(trace: Trace, index: int, parent_path: str, array_path: str) -> None:
    node = trace[index]
    configuration = node.configuration or {}
    meta = configuration.get(META_KEY)
    meta = dict(meta) if isinstance(meta, dict) else {}

    node.implementation_class_name = _class_name(meta.get("class"))
    node.meta_configuration = meta
    node.object_type = configuration.get(OBJECT_TYPE_KEY) or ""
    node.context_as_string = {
        str(key): context_value_as_string(value) for key, value in node.context.items()
    }

    node.array_path = array_path
    node.condensed_path = condense_path(node.full_path)
    node.relative_path = relative_path(node.condensed_path, parent_path)

    for position, child in enumerate(node.children):
        _compute(trace, child, node.condensed_path, child_array_path(array_path, position))
