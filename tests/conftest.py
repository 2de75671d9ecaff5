"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest

from docustyle.ai.credentials import CredentialManager
from docustyle.templates import build_simple_template
from tests.helpers import FakeCapabilities, StaticProvider


@pytest.fixture
def simple_template():
    return build_simple_template()


@pytest.fixture
def fake_capabilities() -> FakeCapabilities:
    return FakeCapabilities()


@pytest.fixture
def credentials() -> CredentialManager:
    """Credential manager with no fallback key; call ``check()`` to resolve it."""

    return CredentialManager(StaticProvider(True), fallback_available=False)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for name in [key for key in os.environ if key.startswith("DOCUSTYLE_")]:
        monkeypatch.delenv(name)
    monkeypatch.setenv("DOCUSTYLE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("DOCUSTYLE_DATA_DIR", str(tmp_path / "data"))
