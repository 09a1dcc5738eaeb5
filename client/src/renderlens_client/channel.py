"""Asynchronous RPC between two execution contexts.

The instrumented page and the observer view share no memory. They exchange
JSON text messages over a pair of :class:`MessagePort` objects; a
:class:`Channel` on each side turns those messages into fire-and-forget calls
with an optional success callback.

Wire format::

    {"scope": s, "id": n, "method": m, "params": p}     call
    {"scope": s, "id": n, "result": r}                  acknowledgment
    {"scope": s, "id": n, "error": e, "message": text}  failed call
    {"scope": s, "method": "__ready"}                   handshake

Calls carry no timeout. A call whose peer is gone simply never acknowledges.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from collections.abc import Callable
from typing import Any

from .exceptions import ChannelClosedError

logger = logging.getLogger(__name__)

READY_METHOD = "__ready"

Handler = Callable[[Any], Any]
SuccessCallback = Callable[[Any], None]


class MessagePort:
    """One end of a duplex text pipe. Messages are tagged with the sender origin."""

    def __init__(self, origin: str) -> None:
        self.origin = origin
        self.closed = False
        self._peer: MessagePort | None = None
        self._inbox: asyncio.Queue[tuple[str, str] | None] = asyncio.Queue()

    def post_message(self, text: str) -> None:
        if self.closed:
            raise ChannelClosedError("Port is closed")
        peer = self._peer
        if peer is None or peer.closed:
            logger.debug("Dropping message for closed peer: %.80s", text)
            return
        peer._inbox.put_nowait((self.origin, text))

    async def receive(self) -> tuple[str, str] | None:
        """Next ``(sender_origin, text)``, or None once this port is closed."""
        if self.closed and self._inbox.empty():
            return None
        return await self._inbox.get()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._inbox.put_nowait(None)


def create_port_pair(origin: str, peer_origin: str | None = None) -> tuple[MessagePort, MessagePort]:
    """Create two connected ports, as opening a window from a page would."""
    first = MessagePort(origin)
    second = MessagePort(peer_origin if peer_origin is not None else origin)
    first._peer = second
    second._peer = first
    return first, second


class Channel:
    """Scoped, origin-checked RPC endpoint on top of a :class:`MessagePort`.

    Attributes:
        port: The local port.
        origin: The only origin messages are accepted from.
        scope: Channel name both sides must share.
        ready: True once the peer has answered the handshake.
    """

    def __init__(
        self,
        port: MessagePort,
        origin: str,
        scope: str,
        on_ready: Callable[[], None] | None = None,
    ) -> None:
        self.port = port
        self.origin = origin
        self.scope = scope
        self.ready = False
        self._on_ready = on_ready
        self._handlers: dict[str, Handler] = {}
        self._pending: dict[int, SuccessCallback | None] = {}
        self._ids = itertools.count(1)
        self._task: asyncio.Task[None] | None = None

    def bind(self, method: str, handler: Handler) -> None:
        self._handlers[method] = handler

    def unbind(self, method: str) -> None:
        self._handlers.pop(method, None)

    def call(
        self,
        method: str,
        params: Any = None,
        success: SuccessCallback | None = None,
    ) -> None:
        call_id = next(self._ids)
        self._pending[call_id] = success
        self._send({"id": call_id, "method": method, "params": params})

    def start(self) -> asyncio.Task[None]:
        """Start pumping messages; must run inside an event loop."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self.run())
            self._send({"method": READY_METHOD})
        return self._task

    def destroy(self) -> None:
        self._pending.clear()
        self._handlers.clear()
        self.port.close()

    async def run(self) -> None:
        while True:
            message = await self.port.receive()
            if message is None:
                return
            sender_origin, text = message
            self._dispatch(sender_origin, text)

    def _send(self, payload: dict[str, Any]) -> None:
        payload["scope"] = self.scope
        try:
            self.port.post_message(json.dumps(payload))
        except ChannelClosedError:
            logger.debug("Channel %s is closed; %s not sent", self.scope, payload.get("method"))

    def _dispatch(self, sender_origin: str, text: str) -> None:
        if sender_origin != self.origin:
            logger.warning("Ignoring message from unexpected origin %s", sender_origin)
            return
        try:
            message = json.loads(text)
        except ValueError:
            logger.warning("Ignoring malformed channel message: %.80s", text)
            return
        if not isinstance(message, dict) or message.get("scope") != self.scope:
            return

        method = message.get("method")
        if method == READY_METHOD:
            self._handle_ready()
            return
        if method is not None:
            self._handle_call(message.get("id"), method, message.get("params"))
            return
        self._handle_response(message)

    def _handle_ready(self) -> None:
        if self.ready:
            return
        self.ready = True
        # Answer once so a peer that started after our first handshake becomes ready too.
        self._send({"method": READY_METHOD})
        if self._on_ready is not None:
            self._on_ready()

    def _handle_call(self, call_id: Any, method: str, params: Any) -> None:
        handler = self._handlers.get(method)
        if handler is None:
            logger.debug("No handler bound for %s on %s", method, self.scope)
            self._send({"id": call_id, "error": "method_not_found", "message": method})
            return
        try:
            result = handler(params)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Channel handler %s failed", method)
            self._send({"id": call_id, "error": type(exc).__name__, "message": str(exc)})
            return
        self._send({"id": call_id, "result": result})

    def _handle_response(self, message: dict[str, Any]) -> None:
        call_id = message.get("id")
        if not isinstance(call_id, int) or call_id not in self._pending:
            return
        success = self._pending.pop(call_id)
        if "error" in message:
            logger.warning(
                "Channel call failed on %s: %s (%s)",
                self.scope,
                message.get("error"),
                message.get("message"),
            )
            return
        if success is not None:
            success(message.get("result"))


def build_channel(
    port: MessagePort,
    origin: str,
    scope: str,
    on_ready: Callable[[], None] | None = None,
) -> Channel:
    """Create and start a channel; call from inside the event loop."""
    channel = Channel(port, origin, scope, on_ready=on_ready)
    channel.start()
    return channel
