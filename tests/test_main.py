from __future__ import annotations

import logging
import runpy

import finchart.cli as cli_mod
import finchart.utils as utils_mod
from finchart.utils import setup_logging


def test_python_m_entrypoint_invokes_cli_app(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    called = {"value": False}

    def _fake_app() -> None:
        called["value"] = True

    monkeypatch.setattr(cli_mod, "app", _fake_app)
    runpy.run_module("finchart.__main__", run_name="__main__")

    assert called["value"] is True


def test_setup_logging_is_idempotent(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    root = logging.Logger("isolated-root")
    monkeypatch.setattr(utils_mod.logging, "getLogger", lambda name=None: root)

    setup_logging("debug")
    setup_logging("debug")

    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG
