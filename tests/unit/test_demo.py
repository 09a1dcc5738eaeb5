"""Tests for the demo host renderer."""

from __future__ import annotations

from renderlens_server.demo import (
    Attributes,
    Case,
    DemoRuntime,
    Join,
    Loop,
    Tag,
    Value,
)
from renderlens_server.recorder import NO_MATCH, TraceRecorder


class Hooks:
    """Records lifecycle calls without wrapping anything."""

    def __init__(self) -> None:
        self.calls = []

    def begin_cycle(self, path):
        self.calls.append(("begin", path))

    def set_config(self, configuration):
        self.calls.append(("config", configuration["__objectType"]))

    def before_evaluate(self, context, object_handle=None):
        self.calls.append(("evaluate", type(object_handle).__name__))

    def end_cycle(self, output_ref, should_render=True):
        self.calls.append(("end", output_ref.value))

    def post_process(self, output, request_args=None):
        return output


def test_value_fills_and_escapes_placeholders() -> None:
    hooks = Hooks()
    output = DemoRuntime(hooks).render("v", Value("<b>{name}</b>{missing}"), {"name": "<x>"})

    assert output == "<b>&lt;x&gt;</b>"
    assert hooks.calls == [
        ("begin", "v<Neos.Fusion:Value>"),
        ("config", "Neos.Fusion:Value"),
        ("evaluate", "Value"),
        ("end", "<b>&lt;x&gt;</b>"),
    ]


def test_case_without_match_returns_sentinel() -> None:
    hooks = Hooks()
    case = Case([(lambda context: False, Value("x"))])
    assert DemoRuntime(hooks).render("c", case, {}) == NO_MATCH


def test_case_renders_first_matching_branch() -> None:
    case = Case([
        (lambda context: context["n"] > 5, Value("big")),
        (lambda context: True, Value("small")),
    ])
    hooks = Hooks()
    assert DemoRuntime(hooks).render("c", case, {"n": 1}) == "small"
    assert ("begin", "c<Neos.Fusion:Case>/branch1<Neos.Fusion:Value>") in hooks.calls


def test_join_skips_no_match_parts() -> None:
    join = Join([("a", Value("A")), ("b", Case([])), ("c", Value("C"))])
    assert DemoRuntime(Hooks()).render("j", join, {}) == "AC"


def test_loop_binds_item_name() -> None:
    loop = Loop("items", "item", Value("<li>{item}</li>"))
    assert DemoRuntime(Hooks()).render("l", loop, {"items": [1, 2]}) == "<ul><li>1</li><li>2</li></ul>"
    assert DemoRuntime(Hooks()).render("l", loop, {}) == "<ul></ul>"


def test_tag_with_attributes_under_recorder() -> None:
    recorder = TraceRecorder(["Neos.Fusion:Tag", "Neos.Fusion:Attributes"])

    class RecorderHooks:
        begin_cycle = staticmethod(recorder.begin)
        set_config = staticmethod(recorder.set_configuration)
        before_evaluate = staticmethod(recorder.before_evaluate)
        end_cycle = staticmethod(recorder.end)

    tag = Tag("a", Value("link"), Attributes({"href": "/x?a=1&b=2"}))
    output = DemoRuntime(RecorderHooks()).render("t", tag, {})

    assert output == '<a href="/x?a=1&amp;b=2">link</a>'
    assert recorder.trace.tokens() == []
