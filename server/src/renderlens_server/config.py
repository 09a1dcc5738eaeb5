"""Debugger configuration.

The two product generations of the debugger differ only in naming (the
structural object types that suppress markers), so they are profiles of one
configuration rather than separate implementations.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

from renderlens_shared.settings import ClientSettings

PROFILE_ENV = "RENDERLENS_PROFILE"
BASE_URL_ENV = "RENDERLENS_BASE_URL"
INSPECT_DELAY_ENV = "RENDERLENS_INSPECT_DELAY_MS"

SUPPRESSING_OBJECT_TYPES: dict[str, frozenset[str]] = {
    "neos": frozenset({
        "Neos.Fusion:Attributes",
        "Neos.Fusion:Tag",
        "Neos.Neos:ContentElementWrapping",
    }),
    "typo3": frozenset({
        "TYPO3.TypoScript:Attributes",
        "TYPO3.TypoScript:Tag",
        "TYPO3.Neos:ContentElementWrapping",
    }),
}
DEFAULT_PROFILE = "neos"


@dataclass(frozen=True)
class DebuggerConfig:
    """Server-side debugger settings.

    Attributes:
        profile: Naming profile the suppressing object types were taken from.
        suppressing_object_types: Object types that switch markers off for their subtree.
        debugger_parameter: Request argument asking for the full debugger page.
        expression_parameter: Request argument carrying an ad-hoc expression.
        array_path_parameter: Request argument addressing the node to evaluate against.
        base_url: Public URL prefix the snippet loads its scripts from.
        client: Settings shared with the browser contexts.
    """

    profile: str = DEFAULT_PROFILE
    suppressing_object_types: frozenset[str] = field(
        default_factory=lambda: SUPPRESSING_OBJECT_TYPES[DEFAULT_PROFILE]
    )
    debugger_parameter: str = "__renderlens-debugger"
    expression_parameter: str = "__renderlens-debugger-expression"
    array_path_parameter: str = "__renderlens-debugger-currentArrayPath"
    base_url: str = "/_renderlens/"
    client: ClientSettings = field(default_factory=ClientSettings)


def config_for_profile(profile: str, **overrides) -> DebuggerConfig:
    """Build a configuration for a naming profile (``neos`` or ``typo3``)."""
    key = profile.strip().lower()
    if key not in SUPPRESSING_OBJECT_TYPES:
        raise ValueError(
            f"Unknown profile {profile!r}; expected one of {sorted(SUPPRESSING_OBJECT_TYPES)}"
        )
    config = DebuggerConfig(
        profile=key,
        suppressing_object_types=SUPPRESSING_OBJECT_TYPES[key],
    )
    return replace(config, **overrides) if overrides else config


def load_config(profile: str | None = None) -> DebuggerConfig:
    """Read configuration from the environment.

    An explicit ``profile`` argument wins over ``RENDERLENS_PROFILE``.
    """
    if profile is None:
        profile = os.environ.get(PROFILE_ENV, DEFAULT_PROFILE)
    overrides: dict[str, object] = {}

    base_url = os.environ.get(BASE_URL_ENV)
    if base_url:
        overrides["base_url"] = base_url if base_url.endswith("/") else f"{base_url}/"

    delay = os.environ.get(INSPECT_DELAY_ENV)
    if delay is not None and delay.strip():
        try:
            delay_ms = int(delay)
        except ValueError as exc:
            raise ValueError(f"{INSPECT_DELAY_ENV} must be an integer, got {delay!r}") from exc
        if delay_ms < 0:
            raise ValueError(f"{INSPECT_DELAY_ENV} must be >= 0")
        overrides["client"] = ClientSettings(inspect_delay_ms=delay_ms)

    return config_for_profile(profile, **overrides)
