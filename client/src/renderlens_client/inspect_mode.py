"""Pointer tracking for inspect mode.

Resolving the enclosing token walks the whole document, so pointer moves are
debounced: the delay restarts whenever the hovered target changes and the
lookup runs only once the pointer rests on one target.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from bs4 import PageElement

logger = logging.getLogger(__name__)

TokenCallback = Callable[[int], None]


class PointerTracker:
    """Debounced hover resolution plus immediate click resolution.

    Attributes:
        active: True while pointer events are being tracked.
        delay_s: Rest time before a hover lookup runs.
    """

    def __init__(
        self,
        resolve: Callable[[PageElement], int | None],
        on_hover: TokenCallback,
        on_click: TokenCallback,
        delay_ms: int = 20,
    ) -> None:
        self._resolve = resolve
        self._on_hover = on_hover
        self._on_click = on_click
        self.delay_s = delay_ms / 1000.0
        self.active = False
        self._last_target: PageElement | None = None
        self._timer: asyncio.TimerHandle | None = None

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        self.active = False
        self._cancel_timer()
        self._last_target = None

    def pointer_moved(self, target: PageElement) -> None:
        if not self.active:
            return
        if target is self._last_target:
            return
        self._last_target = target
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay_s, self._fire, target)

    def clicked(self, target: PageElement) -> None:
        if not self.active:
            return
        token = self._resolve(target)
        if token is not None:
            self._on_click(token)

    def _fire(self, target: PageElement) -> None:
        self._timer = None
        token = self._resolve(target)
        if token is None:
            logger.debug("Pointer target is outside every instrumented region")
            return
        self._on_hover(token)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
