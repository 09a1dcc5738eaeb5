"""Settings shared by the instrumented page and the observer view."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClientSettings:
    """Names and timings both browser contexts must agree on.

    Attributes:
        highlighted_class: CSS class for transient hover highlighting.
        selected_class: CSS class for the persistent selection.
        channel_scope: Scope name of the cross-context channel.
        session_flag: Session storage key remembering an open debugger.
        inspect_delay_ms: Pointer rest time before the enclosing token is resolved.
    """

    highlighted_class: str = "renderlens-highlighted"
    selected_class: str = "renderlens-selected"
    channel_scope: str = "renderlens-debugger"
    session_flag: str = "renderlens-debugger-active"
    inspect_delay_ms: int = 20
