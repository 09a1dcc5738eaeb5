"""Navigation over a serialized trace on the observer side."""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from typing import Any

_ARRAY_PATH_SEGMENT = re.compile(r"\.children\[(\d+)\]")


def iter_nodes(tree: dict[str, Any], array_path: str = "") -> Iterator[tuple[str, dict[str, Any]]]:
    """Yield ``(array_path, node)`` depth-first.

    Paths are rebuilt while walking, so they are valid even for nodes whose
    ``arrayPath`` field was never filled.
    """
    if not tree:
        return
    yield array_path, tree
    for position, child in enumerate(tree.get("children") or []):
        yield from iter_nodes(child, f"{array_path}.children[{position}]")


def node_at(tree: dict[str, Any], array_path: str) -> dict[str, Any] | None:
    """Follow an array path such as ``.children[2].children[0]``."""
    node = tree
    consumed = 0
    for match in _ARRAY_PATH_SEGMENT.finditer(array_path):
        if match.start() != consumed:
            return None
        consumed = match.end()
        children = node.get("children") or []
        position = int(match.group(1))
        if position >= len(children):
            return None
        node = children[position]
    if consumed != len(array_path):
        return None
    return node


def array_path_for_token(tree: dict[str, Any], token: int) -> str | None:
    for array_path, node in iter_nodes(tree):
        if node.get("token") == token:
            return array_path
    return None


def array_paths_with_same_value(tree: dict[str, Any], key: str, value: Any) -> list[str]:
    """Every node whose ``key`` field equals ``value`` (compared as JSON)."""
    expected = json.dumps(value, sort_keys=True)
    matches = []
    for array_path, node in iter_nodes(tree):
        if node.get(key) and json.dumps(node[key], sort_keys=True) == expected:
            matches.append(array_path)
    return matches


def render_outline(tree: dict[str, Any]) -> list[str]:
    """One line per node: indentation, relative path, object type, token."""
    lines = []
    for array_path, node in iter_nodes(tree):
        depth = array_path.count(".children[")
        label = node.get("relativePath") or node.get("fullPath") or ""
        line = "  " * depth + label
        if node.get("objectType"):
            line += f" <{node['objectType']}>"
        if node.get("token") is not None:
            line += f" #{node['token']}"
        lines.append(line)
    return lines
