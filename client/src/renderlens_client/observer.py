"""The observer view context.

Shows the navigation tree of the trace received from the instrumented page,
keeps the hovered and selected tree node, and forwards hover and select
interactions to the page so it can style the matching output.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from renderlens_shared.settings import ClientSettings

from .channel import Channel, MessagePort, build_channel
from .expression_client import ExpressionClient
from .trace_view import array_path_for_token, array_paths_with_same_value, node_at, render_outline

logger = logging.getLogger(__name__)


class ObserverView:
    """Detached debugger view opened by the instrumented page.

    Attributes:
        tree: Working copy of the serialized trace.
        outline: Rendered navigation tree, one line per node.
        highlighted_path: Array path of the hovered tree node.
        selected_path: Array path of the selected tree node.
        details: Node whose details are displayed.
        details_path: Array path of ``details``.
        matching_paths: Nodes sharing the displayed node's context.
        inspect_active: State of the inspect-mode toggle.
        connected: True once the channel handshake completed.
    """

    def __init__(
        self,
        port: MessagePort,
        origin: str,
        page_url: str | None = None,
        settings: ClientSettings | None = None,
        expression_client: ExpressionClient | None = None,
    ) -> None:
        self.settings = settings or ClientSettings()
        self.page_url = page_url
        self.tree: dict[str, Any] = {}
        self.outline: list[str] = []
        self.highlighted_path: str | None = None
        self.selected_path: str | None = None
        self.details: dict[str, Any] | None = None
        self.details_path: str | None = None
        self.matching_paths: list[str] = []
        self.inspect_active = False
        self.connected = False
        self.channel: Channel | None = None
        self._port = port
        self._origin = origin
        self._expression_client = expression_client or ExpressionClient()

    def start(self) -> None:
        channel = build_channel(
            self._port,
            self._origin,
            self.settings.channel_scope,
            on_ready=self._connected,
        )
        channel.bind("updateEvaluationTrace", self.update_evaluation_trace)
        channel.bind("highlightElement", lambda token: self._mark_token(token, select=False))
        channel.bind("selectElement", lambda token: self._mark_token(token, select=True))
        self.channel = channel

    def _connected(self) -> None:
        self.connected = True

    def update_evaluation_trace(self, encoded_trace: str) -> None:
        self.tree = json.loads(encoded_trace)
        self.outline = render_outline(self.tree)
        self.highlighted_path = None
        self.selected_path = None
        self.details = None
        self.details_path = None

    def hover_node(self, array_path: str) -> None:
        self._mark(array_path, send=True, select=False)

    def select_node(self, array_path: str) -> None:
        self._mark(array_path, send=True, select=True)

    def leave_node(self) -> None:
        self.highlighted_path = None
        if self.selected_path is not None:
            self._mark(self.selected_path, send=False, select=True)
        if self.channel is not None:
            self.channel.call("unhighlightElements")

    def toggle_inspect(self) -> None:
        method = "deactivateInspectMode" if self.inspect_active else "activateInspectMode"
        if self.channel is not None:
            self.channel.call(method)
        self.inspect_active = not self.inspect_active

    def show_matching_context(self) -> list[str]:
        """Mark every node rendered with the same context as the displayed one."""
        if self.details is None:
            self.matching_paths = []
        else:
            self.matching_paths = array_paths_with_same_value(
                self.tree, "contextAsString", self.details.get("contextAsString")
            )
        return self.matching_paths

    def evaluate_expression(self, expression: str) -> Any:
        if self.page_url is None:
            raise ValueError("page_url is required to evaluate expressions")
        return self._expression_client.evaluate(
            self.page_url, expression, self.details_path or ""
        )

    def _mark_token(self, token: Any, select: bool) -> None:
        array_path = array_path_for_token(self.tree, int(token))
        if array_path is None:
            logger.debug("No tree node for token %s", token)
            return
        self._mark(array_path, send=False, select=select)

    def _mark(self, array_path: str, send: bool, select: bool) -> None:
        node = node_at(self.tree, array_path)
        if node is None:
            logger.warning("No tree node at %r", array_path)
            return
        if select:
            self.selected_path = array_path
        else:
            self.highlighted_path = array_path
        self.details = node
        self.details_path = array_path

        token = node.get("token")
        if send and self.channel is not None and token is not None:
            self.channel.call("selectElement" if select else "highlightElement", token)
