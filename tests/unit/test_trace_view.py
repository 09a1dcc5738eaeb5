"""Tests for observer-side navigation of a serialized trace."""

from __future__ import annotations

from renderlens_client.trace_view import (
    array_path_for_token,
    array_paths_with_same_value,
    iter_nodes,
    node_at,
    render_outline,
)

TREE = {
    "relativePath": "/page",
    "token": None,
    "children": [
        {
            "relativePath": "/page",
            "objectType": "Vendor:Page",
            "token": 3,
            "contextAsString": {"node": "home"},
            "children": [
                {"relativePath": "a", "token": 0, "contextAsString": {"node": "home"}},
                {"relativePath": "b", "token": None, "contextAsString": {"node": "x"}, "children": []},
            ],
        }
    ],
}


def test_iter_nodes_builds_array_paths() -> None:
    assert [path for path, _ in iter_nodes(TREE)] == [
        "",
        ".children[0]",
        ".children[0].children[0]",
        ".children[0].children[1]",
    ]
    assert list(iter_nodes({})) == []


def test_node_at() -> None:
    assert node_at(TREE, "") is TREE
    assert node_at(TREE, ".children[0].children[1]")["relativePath"] == "b"
    assert node_at(TREE, ".children[1]") is None
    assert node_at(TREE, ".children[0]junk") is None
    assert node_at(TREE, "junk.children[0]") is None


def test_array_path_for_token() -> None:
    assert array_path_for_token(TREE, 0) == ".children[0].children[0]"
    assert array_path_for_token(TREE, 3) == ".children[0]"
    assert array_path_for_token(TREE, 99) is None


def test_array_paths_with_same_value() -> None:
    assert array_paths_with_same_value(TREE, "contextAsString", {"node": "home"}) == [
        ".children[0]",
        ".children[0].children[0]",
    ]


def test_render_outline() -> None:
    assert render_outline(TREE) == [
        "/page",
        "  /page <Vendor:Page> #3",
        "    a #0",
        "    b",
    ]
