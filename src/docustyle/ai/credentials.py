"""Credential availability tracking for AI operations."""

from __future__ import annotations

import inspect
import logging
import os
from dataclasses import replace
from enum import Enum
from typing import Awaitable, Callable, List, Protocol, Union

from ..services.settings import Settings, SettingsStore

LOGGER = logging.getLogger(__name__)

FALLBACK_KEY_ENV = "DOCUSTYLE_API_KEY"

KeyPrompt = Callable[[], Union[str, None, Awaitable[Union[str, None]]]]
SettingsListener = Callable[[Settings], Union[None, Awaitable[None]]]
StateListener = Callable[["CredentialState"], None]


class CredentialState(Enum):
    UNKNOWN = "unknown"
    PRESENT = "present"
    ABSENT = "absent"


class CredentialProvider(Protocol):
    """Source of truth for whether a usable credential is configured."""

    async def has_credential(self) -> bool:
        ...

    async def select(self) -> bool:
        """Let the user pick a credential; ``False`` when cancelled."""
        ...


class SettingsCredentialProvider:
    """Reads the API key from :class:`Settings` and stores newly selected keys."""

    def __init__(
        self,
        settings: Settings,
        *,
        store: SettingsStore | None = None,
        prompt: KeyPrompt | None = None,
        on_settings_changed: SettingsListener | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._prompt = prompt
        self._on_settings_changed = on_settings_changed

    @property
    def settings(self) -> Settings:
        return self._settings

    async def has_credential(self) -> bool:
        return bool(self._settings.api_key.strip())

    async def select(self) -> bool:
        if self._prompt is None:
            raise RuntimeError("No credential selector is available in this environment")
        result = self._prompt()
        if inspect.isawaitable(result):
            result = await result
        key = (result or "").strip()
        if not key:
            return False
        updated = replace(self._settings, api_key=key)
        if self._store is not None:
            self._store.save(updated)
        self._settings = updated
        if self._on_settings_changed is not None:
            result = self._on_settings_changed(updated)
            if inspect.isawaitable(result):
                await result
        return True


class CredentialManager:
    """Tri-state credential tracker read by the orchestrator before every call."""

    def __init__(
        self,
        provider: CredentialProvider,
        *,
        fallback_available: bool | None = None,
    ) -> None:
        self._provider = provider
        self._state = CredentialState.UNKNOWN
        if fallback_available is None:
            fallback_available = bool(os.environ.get(FALLBACK_KEY_ENV, "").strip())
        self._fallback_available = fallback_available
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> CredentialState:
        return self._state

    @property
    def has_fallback(self) -> bool:
        return self._fallback_available

    def is_usable(self) -> bool:
        if self._state is CredentialState.PRESENT:
            return True
        if self._state is CredentialState.UNKNOWN:
            return self._fallback_available
        return False

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    async def check(self) -> CredentialState:
        try:
            present = await self._provider.has_credential()
        except Exception as exc:
            LOGGER.warning("Credential check failed: %s", exc)
            present = False
        self._set_state(CredentialState.PRESENT if present else CredentialState.ABSENT)
        return self._state

    async def select(self) -> bool:
        """Run credential selection; state only changes on success."""

        try:
            selected = await self._provider.select()
        except Exception as exc:
            LOGGER.warning("Credential selection failed: %s", exc)
            return False
        if not selected:
            LOGGER.info("Credential selection cancelled")
            return False
        self._set_state(CredentialState.PRESENT)
        return True

    def mark_invalid(self) -> None:
        self._set_state(CredentialState.ABSENT)

    def _set_state(self, state: CredentialState) -> None:
        if state is self._state:
            return
        LOGGER.info("Credential state %s -> %s", self._state.value, state.value)
        self._state = state
        for listener in list(self._listeners):
            listener(state)


__all__ = [
    "CredentialManager",
    "CredentialProvider",
    "CredentialState",
    "FALLBACK_KEY_ENV",
    "SettingsCredentialProvider",
]
