"""The instrumented page context.

Owns the rendered document and its highlight state, opens the channel to the
observer view and answers its highlight, select and inspect requests. An open
debugger is remembered in session storage so that a reload reopens it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, MutableMapping

from bs4 import BeautifulSoup, PageElement

from renderlens_shared.settings import ClientSettings

from .channel import Channel, MessagePort, build_channel
from .enclosing_token import find_enclosing_token
from .inspect_mode import PointerTracker
from .span_resolver import HighlightState

logger = logging.getLogger(__name__)

ACTIVATE_LABEL = "Activate Debugger"
DEACTIVATE_LABEL = "Deactivate Debugger"


class InstrumentedPage:
    """Host-side context of the debugger.

    Attributes:
        document: The rendered, marker-carrying document.
        encoded_trace: Serialized trace as a JSON string, sent to the observer.
        session_storage: Per-session key/value store surviving reloads.
        highlights: Hover and selection state of ``document``.
        button_label: Text of the activate/deactivate button.
    """

    def __init__(
        self,
        document: BeautifulSoup,
        encoded_trace: str,
        session_storage: MutableMapping[str, str],
        open_observer: Callable[[], MessagePort],
        origin: str,
        settings: ClientSettings | None = None,
    ) -> None:
        self.document = document
        self.encoded_trace = encoded_trace
        self.session_storage = session_storage
        self.settings = settings or ClientSettings()
        self.origin = origin
        self.highlights = HighlightState(self.settings)
        self.button_label = ACTIVATE_LABEL
        self.channel: Channel | None = None
        self._open_observer = open_observer
        self.tracker = PointerTracker(
            resolve=self.find_enclosing_token,
            on_hover=self._hovered,
            on_click=self._clicked,
            delay_ms=self.settings.inspect_delay_ms,
        )

    def load(self) -> None:
        """Run the page-load check; reopens the debugger if it was active."""
        if self.session_storage.get(self.settings.session_flag):
            self.open_channel()

    def toggle(self) -> None:
        """The activate/deactivate button."""
        if self.channel is not None:
            self.close_channel()
        else:
            self.open_channel()

    def open_channel(self) -> None:
        port = self._open_observer()
        self.session_storage[self.settings.session_flag] = "true"
        channel = build_channel(port, self.origin, self.settings.channel_scope)
        channel.bind("highlightElement", lambda token: self.highlight_element(token, False))
        channel.bind("selectElement", lambda token: self.highlight_element(token, True))
        channel.bind("unhighlightElements", lambda _params: self.highlights.unhighlight(False))
        channel.bind("activateInspectMode", lambda _params: self.tracker.activate())
        channel.bind("deactivateInspectMode", lambda _params: self.tracker.deactivate())
        self.channel = channel

        channel.call("updateEvaluationTrace", self.encoded_trace)
        # Inspect mode starts right away when the debugger opens.
        self.tracker.activate()
        self.button_label = DEACTIVATE_LABEL
        logger.debug("Debugger channel opened")

    def close_channel(self) -> None:
        if self.channel is not None:
            self.channel.destroy()
        self.channel = None
        self.session_storage.pop(self.settings.session_flag, None)
        self.button_label = ACTIVATE_LABEL
        self.tracker.deactivate()
        self.highlights.clear()

    def highlight_element(self, token: int, select: bool = False) -> None:
        self.highlights.highlight(self.document, int(token), select)

    def find_enclosing_token(self, node: PageElement) -> int | None:
        return find_enclosing_token(self.document, node)

    def pointer_moved(self, target: PageElement) -> None:
        self.tracker.pointer_moved(target)

    def clicked(self, target: PageElement) -> None:
        self.tracker.clicked(target)

    def _hovered(self, token: int) -> None:
        self.highlight_element(token, False)
        if self.channel is not None:
            self.channel.call("highlightElement", token)

    def _clicked(self, token: int) -> None:
        self.highlight_element(token, True)
        if self.channel is not None:
            self.channel.call("selectElement", token)
