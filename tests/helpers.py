"""Shared test helpers and stub classes.

Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, List


class FakeCapabilities:
    """Records capability calls and returns a canned result or raises ``error``.

    Set ``gate`` to an :class:`asyncio.Event` to hold calls in flight until the
    test releases them.
    """

    def __init__(self, *, result: str = "<p>AI</p>", error: BaseException | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: List[tuple[str, tuple[Any, ...]]] = []
        self.gate: asyncio.Event | None = None

    async def _respond(self, name: str, *args: Any) -> str:
        self.calls.append((name, args))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result

    async def refine(self, content: str, instruction: str) -> str:
        return await self._respond("refine", content, instruction)

    async def restructure(self, content: str) -> str:
        return await self._respond("restructure", content)

    async def extract_text(self, image_base64: str, mime_type: str) -> str:
        return await self._respond("extract_text", image_base64, mime_type)

    async def summarize_footnotes(self, content: str) -> str:
        return await self._respond("summarize_footnotes", content)


class StaticProvider:
    """Credential provider with a fixed answer and a scripted selection result."""

    def __init__(self, present: bool = True, *, select_result: bool | BaseException = True) -> None:
        self.present = present
        self.select_result = select_result
        self.select_calls = 0

    async def has_credential(self) -> bool:
        return self.present

    async def select(self) -> bool:
        self.select_calls += 1
        if isinstance(self.select_result, BaseException):
            raise self.select_result
        return self.select_result


class FakeCompletionClient:
    """Stand-in for :class:`AIClient` exposing only ``complete``."""

    def __init__(self, reply: str = "", *, error: BaseException | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[list[dict[str, Any]]] = []

    async def complete(self, messages, **kwargs: Any) -> str:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.reply


def make_completion(text: str | None) -> SimpleNamespace:
    message = SimpleNamespace(content=text)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])
