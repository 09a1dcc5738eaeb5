"""Tests for debounced pointer tracking."""

from __future__ import annotations

import asyncio

from renderlens_client.inspect_mode import PointerTracker


class Recorder:
    def __init__(self, tokens) -> None:
        self.tokens = tokens
        self.resolved = []
        self.hovered = []
        self.clicked = []

    def resolve(self, target):
        self.resolved.append(target)
        return self.tokens.get(target)

    def tracker(self, delay_ms: int = 5) -> PointerTracker:
        return PointerTracker(self.resolve, self.hovered.append, self.clicked.append, delay_ms=delay_ms)


def test_inactive_tracker_ignores_events() -> None:
    async def scenario():
        recorder = Recorder({"a": 1})
        tracker = recorder.tracker()
        tracker.pointer_moved("a")
        tracker.clicked("a")
        await asyncio.sleep(0.02)
        return recorder

    recorder = asyncio.run(scenario())
    assert recorder.resolved == []
    assert recorder.hovered == []
    assert recorder.clicked == []


def test_hover_resolves_once_pointer_rests() -> None:
    async def scenario():
        recorder = Recorder({"a": 1, "b": 2})
        tracker = recorder.tracker()
        tracker.activate()
        tracker.pointer_moved("a")
        tracker.pointer_moved("b")
        tracker.pointer_moved("b")
        await asyncio.sleep(0.03)
        return recorder

    recorder = asyncio.run(scenario())
    assert recorder.resolved == ["b"]
    assert recorder.hovered == [2]


def test_hover_outside_instrumented_regions_does_nothing() -> None:
    async def scenario():
        recorder = Recorder({})
        tracker = recorder.tracker()
        tracker.activate()
        tracker.pointer_moved("x")
        await asyncio.sleep(0.03)
        return recorder

    recorder = asyncio.run(scenario())
    assert recorder.resolved == ["x"]
    assert recorder.hovered == []


def test_click_resolves_immediately() -> None:
    recorder = Recorder({"a": 1})
    tracker = recorder.tracker()
    tracker.activate()
    tracker.clicked("a")
    tracker.clicked("nowhere")
    assert recorder.clicked == [1]


def test_deactivate_cancels_pending_lookup() -> None:
    async def scenario():
        recorder = Recorder({"a": 1})
        tracker = recorder.tracker()
        tracker.activate()
        tracker.pointer_moved("a")
        tracker.deactivate()
        await asyncio.sleep(0.03)
        return recorder, tracker

    recorder, tracker = asyncio.run(scenario())
    assert recorder.hovered == []
    assert not tracker.active
