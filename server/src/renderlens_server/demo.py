"""A small component-tree renderer driving the debugger hooks.

It stands in for a real template runtime: every component evaluation is one
begin/configure/evaluate/end cycle, nested exactly like the component tree.
"""

from __future__ import annotations

import html
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from .debugger import RenderHooks
from .recorder import NO_MATCH, OutputRef


class Component:
    object_type = "Neos.Fusion:Value"

    def configuration(self) -> dict[str, Any]:
        return {"__objectType": self.object_type, "__meta": {"class": type(self)}}

    def evaluate(self, runtime: "DemoRuntime", path: str, context: Mapping[str, Any]) -> Any:
        raise NotImplementedError


@dataclass
class Value(Component):
    """Raw markup; ``{name}`` placeholders are filled from the context."""

    template: str

    def configuration(self) -> dict[str, Any]:
        config = super().configuration()
        config["value"] = self.template
        return config

    def evaluate(self, runtime, path, context):
        escaped = {key: html.escape(str(value)) for key, value in context.items()}
        return self.template.format_map(_Defaulting(escaped))


@dataclass
class Join(Component):
    """Concatenates named children in order."""

    parts: list[tuple[str, Component]]
    object_type = "Neos.Fusion:Join"

    def evaluate(self, runtime, path, context):
        rendered = []
        for name, part in self.parts:
            output = runtime.render(f"{path}/{name}", part, context)
            if isinstance(output, str) and output != NO_MATCH:
                rendered.append(output)
        return "".join(rendered)


@dataclass
class Loop(Component):
    """Renders ``item_renderer`` once per entry of ``context[items]``."""

    items: str
    item_name: str
    item_renderer: Component
    object_type = "Neos.Fusion:Loop"

    def evaluate(self, runtime, path, context):
        rendered = []
        for item in context.get(self.items) or []:
            item_context = dict(context)
            item_context[self.item_name] = item
            rendered.append(runtime.render(f"{path}/itemRenderer", self.item_renderer, item_context))
        return "<ul>" + "".join(rendered) + "</ul>"


@dataclass
class Attributes(Component):
    values: dict[str, str]
    object_type = "Neos.Fusion:Attributes"

    def evaluate(self, runtime, path, context):
        return "".join(
            f' {name}="{html.escape(value, quote=True)}"' for name, value in self.values.items()
        )


@dataclass
class Tag(Component):
    tag_name: str
    content: Component
    attributes: Attributes = field(default_factory=lambda: Attributes({}))
    object_type = "Neos.Fusion:Tag"

    def evaluate(self, runtime, path, context):
        attributes = runtime.render(f"{path}/attributes", self.attributes, context)
        content = runtime.render(f"{path}/content", self.content, context)
        return f"<{self.tag_name}{attributes}>{content}</{self.tag_name}>"


@dataclass
class Case(Component):
    """First matching branch wins; no match yields the ``NO_MATCH`` sentinel."""

    branches: list[tuple[Callable[[Mapping[str, Any]], bool], Component]]
    object_type = "Neos.Fusion:Case"

    def evaluate(self, runtime, path, context):
        for position, (condition, renderer) in enumerate(self.branches):
            if condition(context):
                return runtime.render(f"{path}/branch{position}", renderer, context)
        return NO_MATCH


class _Defaulting(dict):
    def __missing__(self, key: str) -> str:
        return ""


class DemoRuntime:
    """Evaluates a component tree, reporting every evaluation to ``hooks``."""

    def __init__(self, hooks: RenderHooks) -> None:
        self.hooks = hooks

    def render(self, path: str, component: Component, context: Mapping[str, Any]) -> Any:
        self.hooks.begin_cycle(f"{path}<{component.object_type}>")
        self.hooks.set_config(component.configuration())
        self.hooks.before_evaluate(context, component)
        output = OutputRef(component.evaluate(self, f"{path}<{component.object_type}>", context))
        self.hooks.end_cycle(output, True)
        return output.value


def demo_page() -> Component:
    body = Join([
        ("header", Value("<header><h1>{title}</h1></header>")),
        ("intro", Value("<p class=\"intro\">Hello {name}!</p>")),
        ("items", Loop("items", "item", Value("<li>{item}</li>"))),
        ("badge", Tag("span", Value("new"), Attributes({"class": "badge"}))),
        ("teaser", Case([(lambda context: bool(context.get("teaser")), Value("<p>{teaser}</p>"))])),
    ])
    return Join([
        ("head", Value("<!DOCTYPE html><html><head><title>{title}</title></head><body>")),
        ("body", body),
        ("foot", Value("</body></html>")),
    ])


def demo_context() -> dict[str, Any]:
    return {
        "title": "renderlens demo",
        "name": "visitor",
        "items": ["first", "second", "third"],
        "teaser": None,
    }


def render_demo(hooks: RenderHooks) -> str:
    return DemoRuntime(hooks).render("page", demo_page(), demo_context())
