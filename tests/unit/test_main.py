"""Tests for the server command line entry point."""

from __future__ import annotations

import pytest

from renderlens_server.__main__ import main, parse_args
from renderlens_server.debugger_server import DebuggerServer


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RENDERLENS_PROFILE", "RENDERLENS_BASE_URL", "RENDERLENS_INSPECT_DELAY_MS"):
        monkeypatch.delenv(name, raising=False)


def test_parse_args_defaults() -> None:
    args = parse_args([])
    assert args.port == 5175
    assert args.host == "127.0.0.1"
    assert args.profile is None


def test_parse_args_rejects_unknown_profile() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--profile", "plone"])


def test_main_starts_server_with_profile(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    started = {}

    def fake_start(self) -> None:
        started["profile"] = self.config.profile
        started["port"] = self.requested_port

    monkeypatch.setattr(DebuggerServer, "start", fake_start)
    main(["--profile", "typo3", "--port", "0"])

    assert started == {"profile": "typo3", "port": 0}
    out = capsys.readouterr().out
    assert "Template Rendering Debugger" in out
    assert "profile: typo3" in out


def test_main_rejects_invalid_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RENDERLENS_INSPECT_DELAY_MS", "-5")
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2
