"""Pytest fixtures for shared test state."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from renderlens_server.recorder import OutputRef, TraceRecorder


class Invocation:
    """Scripted rendering invocation: renders its children, then its own text."""

    def __init__(
        self,
        path: str,
        object_type: str = "Neos.Fusion:Value",
        before: str = "",
        after: str = "",
        children: list["Invocation"] | None = None,
        context: Mapping[str, Any] | None = None,
        handle: Any = None,
    ) -> None:
        self.path = path
        self.object_type = object_type
        self.before = before
        self.after = after
        self.children = children or []
        self.context = dict(context or {})
        self.handle = handle

    def render(self, recorder: TraceRecorder, parent_path: str = "") -> str:
        full_path = f"{parent_path}/{self.path}" if parent_path else self.path
        full_path = f"{full_path}<{self.object_type}>"
        recorder.begin(full_path)
        recorder.set_configuration({"__objectType": self.object_type})
        recorder.before_evaluate(self.context, self.handle)
        text = self.before + "".join(child.render(recorder, full_path) for child in self.children)
        output = OutputRef(text + self.after)
        recorder.end(output)
        return output.value


@pytest.fixture
def render() -> Callable[[Invocation], tuple[TraceRecorder, str]]:
    """Render a scripted invocation tree through a fresh recorder."""

    def _render(tree: Invocation, suppressing=("Neos.Fusion:Tag", "Neos.Fusion:Attributes")):
        recorder = TraceRecorder(suppressing)
        output = tree.render(recorder)
        return recorder, output

    return _render
