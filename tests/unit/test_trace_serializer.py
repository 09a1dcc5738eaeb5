"""Tests for the transfer-safe trace projection."""

from __future__ import annotations

import json

from conftest import Invocation

from renderlens_server.path_computer import compute_paths
from renderlens_server.recorder import OutputRef, TraceRecorder
from renderlens_server.trace_node import Trace
from renderlens_server.trace_serializer import (
    encode_trace_for_page,
    serialize_node,
    serialize_trace,
)


class Opaque:
    __slots__ = ()


def _recorded(render):
    tree = Invocation(
        "page",
        before="<div>",
        after="</div>",
        children=[Invocation("a", before="<script>x</script>", context={"obj": Opaque()})],
        context={"name": "World"},
    )
    recorder, _ = render(tree)
    compute_paths(recorder.trace)
    return recorder.trace


def test_empty_trace_serializes_to_empty_object() -> None:
    assert serialize_trace(Trace()) == {}


def test_serialize_trace_is_rooted_at_the_envelope(render) -> None:
    payload = serialize_trace(_recorded(render))

    assert payload["arrayPath"] == ""
    assert payload["token"] is None
    assert len(payload["children"]) == 1
    page = payload["children"][0]
    assert page["fullPath"] == "page<Neos.Fusion:Value>"
    assert page["token"] == 1
    assert page["output"] == "<div><script>x</script></div>"
    assert page["context"] == {"name": "World"}
    assert page["contextAsString"] == {"name": "World"}
    assert page["objectType"] == "Neos.Fusion:Value"
    assert page["arrayPath"] == ".children[0]"
    assert page["children"][0]["relativePath"] == "a"


def test_configuration_drops_reserved_keys(render) -> None:
    page = serialize_trace(_recorded(render))["children"][0]
    assert page["configuration"] == {}


def test_unencodable_context_values_become_display_strings(render) -> None:
    child = serialize_trace(_recorded(render))["children"][0]["children"][0]
    assert child["context"] == {"obj": f"(object){Opaque.__module__}.Opaque"}
    json.dumps(child)


def test_meta_class_is_not_transferred() -> None:
    recorder = TraceRecorder()
    recorder.begin("page<Vendor:Page>")
    recorder.set_configuration({
        "__objectType": "Vendor:Page",
        "__meta": {"class": Opaque, "cache": {"mode": "cached"}},
        "value": "x",
    })
    recorder.before_evaluate({})
    recorder.end(OutputRef("x"))
    compute_paths(recorder.trace)
    node = serialize_node(recorder.trace, 1)

    assert node["configuration"] == {"value": "x"}
    assert node["metaConfiguration"] == {"cache": {"mode": "cached"}}
    assert node["implementationClassName"] == f"{Opaque.__module__}.Opaque"


def test_marker_suppression_flag_is_transferred_when_saved(render) -> None:
    recorder, _ = render(Invocation("tag", object_type="Neos.Fusion:Tag"))
    compute_paths(recorder.trace)
    payload = serialize_trace(recorder.trace)

    assert "markerSuppressionSaved" not in payload
    assert payload["children"][0]["markerSuppressionSaved"] is True


def test_encode_trace_for_page_is_a_double_encoded_safe_literal(render) -> None:
    trace = _recorded(render)
    encoded = encode_trace_for_page(trace)

    assert "<" not in encoded
    assert encoded.startswith('"')
    assert json.loads(json.loads(encoded)) == serialize_trace(trace)


def _strict_loads(text: str):
    def reject(constant: str):
        raise ValueError(f"non-JSON constant {constant}")

    return json.loads(text, parse_constant=reject)


def test_non_finite_floats_are_sent_as_display_strings(render) -> None:
    recorder, _ = render(Invocation(
        "price",
        context={"price": float("nan"), "limits": [float("inf"), -float("inf"), 1.5]},
    ))
    compute_paths(recorder.trace)

    payload = _strict_loads(json.loads(encode_trace_for_page(recorder.trace)))
    node = payload["children"][0]
    assert node["context"] == {"price": "nan", "limits": ["inf", "-inf", 1.5]}
    assert node["contextAsString"]["price"] == "nan"


def test_self_referencing_context_values_are_cut_off(render) -> None:
    loop: dict = {"name": "loop"}
    loop["self"] = loop
    items: list = [1]
    items.append(items)
    recorder, _ = render(Invocation("page", context={"loop": loop, "items": items}))
    compute_paths(recorder.trace)

    node = serialize_trace(recorder.trace)["children"][0]
    assert node["context"]["loop"] == {"name": "loop", "self": "(array)"}
    assert node["context"]["items"] == [1, "(array)"]
    json.loads(json.loads(encode_trace_for_page(recorder.trace)))


def test_serializing_leaves_the_recorded_trace_untouched() -> None:
    handle = Opaque()
    recorder = TraceRecorder()
    recorder.begin("page<Vendor:Page>")
    recorder.set_configuration({
        "__objectType": "Vendor:Page",
        "__meta": {"class": Opaque, "cache": {"mode": "cached"}},
        "value": ["x"],
    })
    recorder.before_evaluate({"items": ["a", "b"]}, handle)
    recorder.end(OutputRef("x"))
    compute_paths(recorder.trace)

    payload = serialize_trace(recorder.trace)
    page = payload["children"][0]
    page["configuration"]["value"].append("y")
    page["context"]["items"].clear()
    page["metaConfiguration"]["cache"]["mode"] = "uncached"
    page["contextAsString"]["items"] = "changed"
    encode_trace_for_page(recorder.trace)

    node = recorder.trace[1]
    assert node.configuration["__meta"]["class"] is Opaque
    assert node.configuration["__objectType"] == "Vendor:Page"
    assert node.configuration["value"] == ["x"]
    assert node.meta_configuration["class"] is Opaque
    assert node.meta_configuration["cache"] == {"mode": "cached"}
    assert node.object_handle is handle
    assert node.context["items"] == ["a", "b"]
    assert node.context_as_string["items"] == "(array)"
