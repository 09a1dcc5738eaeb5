"""Port discovery file for the debugger server.

Tools that want to reach a running debugger server read the port it actually
bound (it may differ from the requested one) from ``~/.renderlens/port``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

DISCOVERY_DIR = ".renderlens"


def get_discovery_file_path() -> Path:
    return Path.home() / DISCOVERY_DIR / "port"


def write_port_file(port: int, port_file: Optional[Path] = None) -> Path:
    """Write ``port`` and return the file it was written to."""
    target = port_file or get_discovery_file_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(str(port))
    return target


def read_port_file(port_file: Optional[Path] = None) -> Optional[int]:
    """Return the recorded port, or None if missing, unreadable or out of range."""
    target = port_file or get_discovery_file_path()
    try:
        port = int(target.read_text().strip())
    except (OSError, ValueError):
        return None
    if not 1 <= port <= 65535:
        return None
    return port


def clear_port_file(port: int, port_file: Optional[Path] = None) -> None:
    """Remove the file if it still names ``port``; another server may own it now."""
    target = port_file or get_discovery_file_path()
    if read_port_file(target) == port:
        target.unlink(missing_ok=True)
