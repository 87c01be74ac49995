"""Shared pytest fixtures for the adfmd test suite."""

from __future__ import annotations

import json
import socket
from pathlib import Path
from typing import Any, Dict

import pytest

from adfmd.config import ENV_PREFIXES, SETTING_TYPES


@pytest.fixture(autouse=True)
def _disable_network(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent network access during the test suite.

    The converter never needs the network; any attempt signals a regression,
    so the common socket entry points raise a helpful error if triggered.
    """

    def _guard(*args: object, **kwargs: object) -> socket.socket:  # type: ignore[override]
        raise RuntimeError("Network access is disabled during tests.")

    monkeypatch.setattr(socket, "socket", _guard)
    monkeypatch.setattr(socket, "create_connection", _guard)


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep a stray ``adfmd.yaml`` or ``ADFMD_*`` variable from leaking into tests."""

    monkeypatch.chdir(tmp_path)
    for key in SETTING_TYPES:
        for prefix in ENV_PREFIXES:
            monkeypatch.delenv(f"{prefix}{key.upper()}", raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the shared fixtures directory."""

    return Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def golden_dir() -> Path:
    return Path(__file__).resolve().parent / "golden"


@pytest.fixture
def load_json() -> "LoadJSONFn":
    """Helper fixture to load JSON fixtures by filename."""

    def _loader(path: str | Path) -> Dict[str, Any]:
        file_path = Path(path)
        with file_path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    return _loader


class LoadJSONFn:
    """Protocol-like helper for typing the ``load_json`` fixture."""

    def __call__(
        self, path: str | Path
    ) -> Dict[str, Any]:  # pragma: no cover - documentation only
        ...
