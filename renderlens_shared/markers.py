"""Marker comment format shared by the recorder and the DOM resolvers.

A rendered node is wrapped as ``<!--BEGIN_<token>-->text<!--END_<token>-->``.
Inside a parsed document the comment data is ``BEGIN_<token>`` or
``END_<token>``.
"""

from __future__ import annotations

import re

BEGIN_PREFIX = "BEGIN_"
END_PREFIX = "END_"
CURRENT_NODE = "CURRENTNODE"

BEGIN_TEMPLATE = "<!--BEGIN_{}-->"
END_TEMPLATE = "<!--END_{}-->"

# Anything marker-shaped, not only tokens we issued ourselves.
MARKER_COMMENT_PATTERN = re.compile(r"<!--(BEGIN|END)_[A-Z0-9_]*-->")
MARKER_DATA_PATTERN = re.compile(r"^(BEGIN|END)_(\d+)$")
WHITESPACE_PATTERN = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text)


def strip_markers(text: str) -> str:
    return MARKER_COMMENT_PATTERN.sub("", text)


def normalize_output(text: str) -> str:
    """Collapse whitespace runs and drop marker comments from rendered text."""
    return strip_markers(collapse_whitespace(text))


def wrap_with_markers(text: str, token: int) -> str:
    return BEGIN_TEMPLATE.format(token) + text + END_TEMPLATE.format(token)


def begin_data(token: int) -> str:
    return f"{BEGIN_PREFIX}{token}"


def end_data(token: int) -> str:
    return f"{END_PREFIX}{token}"


def is_marker_data(data: str) -> bool:
    return data.startswith(BEGIN_PREFIX) or data.startswith(END_PREFIX)


def parse_marker_data(data: str) -> tuple[str, int] | None:
    """Split comment data into ``("BEGIN" | "END", token)``.

    Returns None for anything that is not a well-formed marker.
    """
    match = MARKER_DATA_PATTERN.match(data)
    if match is None:
        return None
    return match.group(1), int(match.group(2))
