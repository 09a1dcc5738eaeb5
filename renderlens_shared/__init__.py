"""Shared helpers for renderlens server and client."""

from .markers import (  # noqa: F401
    BEGIN_PREFIX,
    CURRENT_NODE,
    END_PREFIX,
    begin_data,
    collapse_whitespace,
    end_data,
    is_marker_data,
    normalize_output,
    parse_marker_data,
    strip_markers,
    wrap_with_markers,
)
from .settings import ClientSettings  # noqa: F401
