"""Trace recorder driven by the host renderer's lifecycle calls.

The recorder mirrors the renderer's call stack with an explicit stack of
arena indices. Per invocation the host calls, in this order::

    begin(path)
    set_configuration(config)
    before_evaluate(context, object_handle)   # only if setup succeeded
    end(output_ref, should_render)

Out-of-order calls are a contract violation of the host and are not
detected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from renderlens_shared.markers import collapse_whitespace, strip_markers, wrap_with_markers

from .marker_controller import MarkerController
from .trace_node import ROOT_INDEX, Trace, TraceNode

logger = logging.getLogger(__name__)

# Returned by case-like renderers when no branch matched.
NO_MATCH = "Neos_Fusion__Case__NoMatch"


@dataclass
class OutputRef:
    """Mutable holder for rendered output, rewritten in place by ``end``."""

    value: Any = None


class TraceRecorder:
    """Builds one trace tree for exactly one rendering pass.

    Attributes:
        trace: The arena being built.
        markers: Marker emission policy shared by all nodes of the pass.
    """

    def __init__(self, suppressing_object_types: Iterable[str] = ()) -> None:
        self.trace = Trace()
        self.markers = MarkerController(suppressing_object_types)
        self._stack: list[int] = []
        self._token_counter = 0

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def next_token(self) -> int:
        return self._token_counter

    def _top(self) -> TraceNode:
        return self.trace[self._stack[-1]]

    def begin(self, path: str) -> None:
        if self.trace.is_empty:
            logger.debug("Starting trace at %s", path)
            self._stack.append(self.trace.add(TraceNode(full_path=path)))

        index = self.trace.add(TraceNode(full_path=path))
        self._top().children.append(index)
        self._stack.append(index)

    def set_configuration(self, configuration: Mapping[str, Any] | None) -> None:
        node = self._top()
        node.configuration = dict(configuration) if configuration is not None else None
        self.markers.enter(node, node.configuration)

    def before_evaluate(self, context: Mapping[str, Any], object_handle: Any = None) -> None:
        node = self._top()
        node.context = dict(context)
        node.object_handle = object_handle

    def end(self, output_ref: OutputRef, should_render: bool = True) -> None:
        node = self._top()
        output = output_ref.value
        if should_render and isinstance(output, str) and output != NO_MATCH:
            collapsed = collapse_whitespace(output)
            node.output = strip_markers(collapsed)
            if self.markers.enabled:
                node.token = self._token_counter
                self._token_counter += 1
                output_ref.value = wrap_with_markers(collapsed, node.token)

        self.markers.leave(node)
        self._stack.pop()

    def is_complete(self) -> bool:
        """True once every begun invocation has ended."""
        return self.depth == 1 and self._stack[0] == ROOT_INDEX
