"""Trace data model.

A trace is an arena of :class:`TraceNode` entries addressed by index. Index 0
is the envelope created on the first ``begin`` of a rendering pass; every
rendering invocation appends one node and links it into its parent's
``children`` list.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

ROOT_INDEX = 0


@dataclass(frozen=True)
class ScalarValue:
    text: str


@dataclass(frozen=True)
class CollectionValue:
    pass


@dataclass(frozen=True)
class OpaqueReference:
    type_name: str


ContextValue = Union[ScalarValue, CollectionValue, OpaqueReference]

_COLLECTION_TYPES = (list, tuple, set, frozenset)


def _has_display_form(value: Any) -> bool:
    cls = type(value)
    return cls.__str__ is not object.__str__ or cls.__repr__ is not object.__repr__


def _type_name(value: Any) -> str:
    cls = type(value)
    module = cls.__module__
    if module in (None, "builtins"):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def classify_context_value(value: Any) -> ContextValue:
    if value is None:
        return ScalarValue("")
    if isinstance(value, (str, int, float, bool)):
        return ScalarValue(str(value))
    if isinstance(value, (_COLLECTION_TYPES, Mapping)):
        return CollectionValue()
    if _has_display_form(value):
        return ScalarValue(str(value))
    return OpaqueReference(_type_name(value))


def format_context_value(value: ContextValue) -> str:
    if isinstance(value, ScalarValue):
        return value.text
    if isinstance(value, CollectionValue):
        return "(array)"
    return f"(object){value.type_name}"


def context_value_as_string(value: Any) -> str:
    return format_context_value(classify_context_value(value))


@dataclass
class TraceNode:
    """One recorded rendering invocation."""

    full_path: str
    configuration: dict[str, Any] | None = None
    context: dict[str, Any] = field(default_factory=dict)
    output: str | None = None
    token: int | None = None
    children: list[int] = field(default_factory=list)
    marker_suppression_saved: bool | None = None
    object_handle: Any = None

    # Filled in by the path computer after recording.
    condensed_path: str | None = None
    relative_path: str | None = None
    array_path: str | None = None
    object_type: str | None = None
    implementation_class_name: str | None = None
    context_as_string: dict[str, str] | None = None
    meta_configuration: dict[str, Any] | None = None


class Trace:
    """Arena of trace nodes for one rendering pass."""

    def __init__(self) -> None:
        self.nodes: list[TraceNode] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> TraceNode:
        return self.nodes[index]

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def root(self) -> TraceNode:
        return self.nodes[ROOT_INDEX]

    def add(self, node: TraceNode) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def invocation_count(self) -> int:
        """Number of recorded invocations, the envelope excluded."""
        return max(len(self.nodes) - 1, 0)

    def children_of(self, index: int) -> list[TraceNode]:
        return [self.nodes[child] for child in self.nodes[index].children]

    def walk(self, index: int = ROOT_INDEX) -> Iterator[tuple[int, TraceNode]]:
        """Yield ``(index, node)`` depth-first in document order."""
        if self.is_empty:
            return
        pending = [index]
        while pending:
            current = pending.pop()
            node = self.nodes[current]
            yield current, node
            pending.extend(reversed(node.children))

    def tokens(self) -> list[int]:
        """Tokens of all wrapped nodes, in assignment order."""
        return sorted(node.token for _, node in self.walk() if node.token is not None)
