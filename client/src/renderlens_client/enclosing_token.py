"""Find the token whose span innermost-encloses a node of the document.

The document is flattened into an ordered marker stream, for example::

    BEGIN_1, BEGIN_2, END_2, CURRENTNODE, END_1

and the innermost balanced BEGIN/END pair around ``CURRENTNODE`` is found by
a backward scan for BEGIN candidates, each checked against a forward scan for
its END.
"""

from __future__ import annotations

import logging

from bs4 import Comment, PageElement

from renderlens_shared.markers import CURRENT_NODE, is_marker_data, parse_marker_data

from .dom import iter_document

logger = logging.getLogger(__name__)


def build_token_stream(document: PageElement, target: PageElement) -> list[str]:
    stream: list[str] = []
    for node in iter_document(document):
        if isinstance(node, Comment) and is_marker_data(str(node)):
            stream.append(str(node))
        elif node is target:
            stream.append(CURRENT_NODE)
    return stream


def is_properly_nested(stream: list[str]) -> bool:
    """True if every END closes the most recent open BEGIN with the same token."""
    open_tokens: list[int] = []
    for entry in stream:
        marker = parse_marker_data(entry)
        if marker is None:
            continue
        kind, token = marker
        if kind == "BEGIN":
            open_tokens.append(token)
        elif not open_tokens or open_tokens.pop() != token:
            return False
    return not open_tokens


def enclosing_token_in_stream(stream: list[str]) -> int | None:
    try:
        current = stream.index(CURRENT_NODE)
    except ValueError:
        return None

    for position in range(current - 1, -1, -1):
        candidate = parse_marker_data(stream[position])
        if candidate is None or candidate[0] != "BEGIN":
            continue
        for entry in stream[current + 1:]:
            marker = parse_marker_data(entry)
            if marker is not None and marker == ("END", candidate[1]):
                return candidate[1]
    return None


def find_enclosing_token(document: PageElement, target: PageElement) -> int | None:
    """Token of the innermost instrumented span containing ``target``.

    Returns None when ``target`` lies outside every span, and also when the
    markers of the document are not properly nested.
    """
    stream = build_token_stream(document, target)
    if not is_properly_nested(stream):
        logger.warning("Marker stream is not properly nested; no enclosing token resolved")
        return None
    return enclosing_token_in_stream(stream)
