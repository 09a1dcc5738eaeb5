"""Tests for port discovery functionality."""

from __future__ import annotations

from pathlib import Path

from renderlens_server.port_discovery import (
    clear_port_file,
    get_discovery_file_path,
    read_port_file,
    write_port_file,
)


def test_discovery_file_lives_in_home_directory() -> None:
    path = get_discovery_file_path()
    assert path == Path.home() / ".renderlens" / "port"


def test_write_port_file_creates_directory(tmp_path: Path) -> None:
    port_file = tmp_path / "subdir" / "port"
    assert write_port_file(5175, port_file) == port_file
    assert port_file.read_text() == "5175"


def test_read_port_file(tmp_path: Path) -> None:
    port_file = tmp_path / "port"
    write_port_file(8080, port_file)
    assert read_port_file(port_file) == 8080


def test_read_port_file_rejects_garbage(tmp_path: Path) -> None:
    port_file = tmp_path / "port"
    assert read_port_file(port_file) is None
    port_file.write_text("not a port")
    assert read_port_file(port_file) is None
    port_file.write_text("70000")
    assert read_port_file(port_file) is None


def test_clear_port_file_only_removes_own_port(tmp_path: Path) -> None:
    port_file = tmp_path / "port"
    write_port_file(8080, port_file)

    clear_port_file(9090, port_file)
    assert port_file.exists()

    clear_port_file(8080, port_file)
    assert not port_file.exists()
    clear_port_file(8080, port_file)
