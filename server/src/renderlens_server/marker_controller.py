"""Marker emission policy.

Markers must never land inside text that becomes an attribute value or a tag
name, or inside a structural wrapper. Nodes of such object types switch
marker emission off for themselves and every descendant until their own
``end`` runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .trace_node import TraceNode

logger = logging.getLogger(__name__)

OBJECT_TYPE_KEY = "__objectType"


class MarkerController:
    """Tracks whether markers are currently emitted.

    Attributes:
        enabled: True while marker emission is allowed.
        suppressing_object_types: Object types that disable markers for their subtree.
    """

    def __init__(self, suppressing_object_types: Iterable[str]) -> None:
        self.enabled = True
        self.suppressing_object_types = frozenset(suppressing_object_types)

    def suppresses(self, configuration: Mapping[str, Any] | None) -> bool:
        if not configuration:
            return False
        return configuration.get(OBJECT_TYPE_KEY) in self.suppressing_object_types

    def enter(self, node: TraceNode, configuration: Mapping[str, Any] | None) -> None:
        """Apply the policy for a node whose configuration just became known."""
        if not self.suppresses(configuration):
            return
        node.marker_suppression_saved = self.enabled
        if self.enabled:
            logger.debug("Suppressing markers below %s", node.full_path)
        self.enabled = False

    def leave(self, node: TraceNode) -> None:
        """Restore the flag saved by :meth:`enter`, if this node saved one."""
        if node.marker_suppression_saved is not None:
            self.enabled = node.marker_suppression_saved
