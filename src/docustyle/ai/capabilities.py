"""The four AI capabilities consumed by the orchestrator.

Each capability takes text (or an image) and returns text. Failures surface
as tagged :class:`~docustyle.errors.CapabilityError` subclasses instead of
being inferred from message substrings.
"""

from __future__ import annotations

import base64
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Protocol

import httpx
from openai import AuthenticationError, NotFoundError, PermissionDeniedError, OpenAIError

from ..errors import CredentialInvalidError, TransientOperationFailure
from . import prompts

LOGGER = logging.getLogger(__name__)

_CREDENTIAL_ERRORS: tuple[type[BaseException], ...] = (
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
)
_FENCE_PATTERN = re.compile(r"^\s*```[a-zA-Z]*\s*\n(?P<body>.*?)\n?```\s*$", re.DOTALL)


class CompletionClient(Protocol):
    async def complete(self, messages: List[Mapping[str, Any]], **kwargs: Any) -> str:
        ...


@dataclass(slots=True, frozen=True)
class ImagePayload:
    """Captured image bytes plus MIME type."""

    data: bytes
    mime_type: str = "image/jpeg"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


class DocumentCapabilities:
    """Refine, restructure, extract and summarize via an OpenAI-compatible client."""

    def __init__(self, client: CompletionClient) -> None:
        self._client = client

    @property
    def client(self) -> CompletionClient:
        return self._client

    def update_client(self, client: CompletionClient) -> CompletionClient:
        """Swap the underlying AI client (e.g., after a new API key is selected).

        Returns the previous client so the caller can close it.
        """

        previous, self._client = self._client, client
        return previous

    async def refine(self, content: str, instruction: str) -> str:
        if not content.strip():
            return content
        result = await self._run("refine", prompts.refine_messages(content, instruction))
        return result or content

    async def restructure(self, content: str) -> str:
        if not content.strip():
            return content
        result = await self._run("restructure", prompts.restructure_messages(content))
        return result or content

    async def extract_text(self, image_base64: str, mime_type: str) -> str:
        if not image_base64.strip():
            return ""
        return await self._run("extract_text", prompts.extract_text_messages(image_base64, mime_type))

    async def summarize_footnotes(self, content: str) -> str:
        if not prompts.strip_tags(content).strip():
            return ""
        return await self._run("summarize_footnotes", prompts.footnote_messages(content))

    async def _run(self, capability: str, messages: List[Mapping[str, Any]]) -> str:
        try:
            text = await self._client.complete(messages)
        except _CREDENTIAL_ERRORS as exc:
            LOGGER.warning("AI %s rejected the configured credential: %s", capability, exc)
            raise CredentialInvalidError(
                capability=capability,
                details={"status_code": getattr(exc, "status_code", None)},
            ) from exc
        except (OpenAIError, httpx.HTTPError) as exc:
            LOGGER.error("AI %s failed: %s", capability, exc)
            raise TransientOperationFailure(
                message=f"AI {capability} request failed: {exc}",
                capability=capability,
            ) from exc
        return _strip_code_fence(text or "")


def _strip_code_fence(text: str) -> str:
    match = _FENCE_PATTERN.match(text)
    return match.group("body").strip() if match else text.strip()


__all__ = ["CompletionClient", "DocumentCapabilities", "ImagePayload"]
