"""Single-flight orchestration of AI capability calls.

The orchestrator gates every call on the credential state, allows at most
one call in flight, commits the result to the document content only on
success and classifies failures into credential or transient outcomes. No
AI error propagates past :meth:`AIOperationOrchestrator.invoke`.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from ..errors import (
    ConfigurationRequiredError,
    CredentialInvalidError,
    ErrorCode,
    OperationInProgressError,
)
from .capabilities import ImagePayload
from .credentials import CredentialManager

LOGGER = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = (
    "Si è verificato un errore durante la chiamata AI. "
    "Verifica la tua connessione e la validità della chiave."
)
CREDENTIAL_INVALID_MESSAGE = "La chiave API non è più valida o è scaduta. Selezionala nuovamente."
CONFIGURATION_REQUIRED_MESSAGE = "Configura prima una Chiave API nelle Impostazioni."
BUSY_MESSAGE = "Un'operazione AI è già in corso."


class Capability(Enum):
    """AI capabilities and how their result is written back."""

    REFINE = "refine"
    RESTRUCTURE = "restructure"
    EXTRACT_TEXT = "extract_text"
    SUMMARIZE_FOOTNOTES = "summarize_footnotes"

    @property
    def appends(self) -> bool:
        return self in (Capability.EXTRACT_TEXT, Capability.SUMMARIZE_FOOTNOTES)


class OperationStatus(Enum):
    SUCCEEDED = "succeeded"
    CONFIGURATION_REQUIRED = ErrorCode.CONFIGURATION_REQUIRED
    CREDENTIAL_INVALID = ErrorCode.CREDENTIAL_INVALID
    FAILED = ErrorCode.TRANSIENT_FAILURE
    BUSY = ErrorCode.OPERATION_IN_PROGRESS


@dataclass(slots=True, frozen=True)
class OperationOutcome:
    """Result of one orchestrated call, including user-facing messaging."""

    status: OperationStatus
    capability: str
    content: str
    text: str = ""
    message: str = ""
    route_to_setup: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status is OperationStatus.SUCCEEDED


class SupportsContent(Protocol):
    content: str


Runner = Callable[[], Awaitable[str]]


class AIOperationOrchestrator:
    """Gates, executes and commits AI capability calls for one document."""

    def __init__(
        self,
        document: SupportsContent,
        capabilities: Any,
        credentials: CredentialManager,
        *,
        default_instruction: str = "",
        on_busy_changed: Callable[[bool], None] | None = None,
        on_route_to_setup: Callable[[], None] | None = None,
    ) -> None:
        self._document = document
        self._capabilities = capabilities
        self._credentials = credentials
        self._default_instruction = default_instruction
        self._on_busy_changed = on_busy_changed
        self._on_route_to_setup = on_route_to_setup
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def credentials(self) -> CredentialManager:
        return self._credentials

    def ensure_idle(self) -> None:
        """Raise :class:`OperationInProgressError` while a call is in flight."""

        if self._busy:
            raise OperationInProgressError()

    async def invoke(self, capability: Capability | str, *args: Any) -> OperationOutcome:
        """Run ``capability`` with ``args``; text capabilities default to the current content."""

        resolved = Capability(capability)
        function = getattr(self._capabilities, resolved.value)
        call_args = args or self._default_args(resolved)

        async def _run() -> str:
            return await function(*call_args)

        return await self._execute(resolved.value, _run, appends=resolved.appends)

    async def refine(self, instruction: str | None = None) -> OperationOutcome:
        return await self.invoke(
            Capability.REFINE, self._document.content, instruction or self._default_instruction
        )

    async def restructure(self) -> OperationOutcome:
        return await self.invoke(Capability.RESTRUCTURE, self._document.content)

    async def summarize_footnotes(self) -> OperationOutcome:
        return await self.invoke(Capability.SUMMARIZE_FOOTNOTES, self._document.content)

    async def extract_text(self, payload: ImagePayload) -> OperationOutcome:
        return await self.invoke(Capability.EXTRACT_TEXT, payload.to_base64(), payload.mime_type)

    async def scan_image(self, payload: ImagePayload) -> OperationOutcome:
        """Extract text from ``payload``, restructure it and append the result."""

        async def _run() -> str:
            extracted = await self._capabilities.extract_text(payload.to_base64(), payload.mime_type)
            if not extracted.strip():
                return ""
            return await self._capabilities.restructure(extracted)

        return await self._execute("scan_image", _run, appends=True)

    async def _execute(self, name: str, runner: Runner, *, appends: bool) -> OperationOutcome:
        # Gate check and busy transition must stay free of awaits.
        if not self._credentials.is_usable():
            LOGGER.info("AI %s blocked: %s", name, ConfigurationRequiredError())
            self._route_to_setup()
            return self._outcome(
                OperationStatus.CONFIGURATION_REQUIRED,
                name,
                message=CONFIGURATION_REQUIRED_MESSAGE,
                route_to_setup=True,
            )
        if self._busy:
            LOGGER.info("AI %s rejected: another operation is in flight", name)
            return self._outcome(OperationStatus.BUSY, name, message=BUSY_MESSAGE)
        self._busy = True

        try:
            self._notify_busy(True)
            try:
                text = await runner()
            except CredentialInvalidError as exc:
                LOGGER.warning("AI %s failed with invalid credential: %s", name, exc)
                self._credentials.mark_invalid()
                self._route_to_setup()
                return self._outcome(
                    OperationStatus.CREDENTIAL_INVALID,
                    name,
                    message=CREDENTIAL_INVALID_MESSAGE,
                    route_to_setup=True,
                )
            except Exception as exc:
                LOGGER.error("AI %s failed: %s", name, exc, exc_info=True)
                return self._outcome(OperationStatus.FAILED, name, message=GENERIC_FAILURE_MESSAGE)

            text = text or ""
            if appends:
                if text.strip():
                    addition = _footnote_block(text) if name == Capability.SUMMARIZE_FOOTNOTES.value else text
                    self._document.content = self._document.content + addition
            elif text:
                self._document.content = text
            LOGGER.debug("AI %s committed %d character(s)", name, len(text))
            return self._outcome(OperationStatus.SUCCEEDED, name, text=text)
        finally:
            self._busy = False
            self._notify_busy(False)

    def _default_args(self, capability: Capability) -> tuple[Any, ...]:
        if capability is Capability.REFINE:
            return (self._document.content, self._default_instruction)
        if capability is Capability.EXTRACT_TEXT:
            raise TypeError("extract_text requires image data and a MIME type")
        return (self._document.content,)

    def _outcome(
        self,
        status: OperationStatus,
        capability: str,
        *,
        text: str = "",
        message: str = "",
        route_to_setup: bool = False,
    ) -> OperationOutcome:
        return OperationOutcome(
            status=status,
            capability=capability,
            content=self._document.content,
            text=text,
            message=message,
            route_to_setup=route_to_setup,
        )

    def _notify_busy(self, busy: bool) -> None:
        if self._on_busy_changed is None:
            return
        try:
            self._on_busy_changed(busy)
        except Exception:
            LOGGER.warning("Busy listener failed (busy=%s)", busy, exc_info=True)

    def _route_to_setup(self) -> None:
        if self._on_route_to_setup is not None:
            self._on_route_to_setup()


def _footnote_block(text: str) -> str:
    items = [line.strip() for line in text.splitlines() if line.strip()]
    if not items:
        return ""
    rendered = "".join(f"<li>{html.escape(item)}</li>" for item in items)
    return f'<hr><section class="footnotes"><h2>Note</h2><ol>{rendered}</ol></section>'


__all__ = [
    "AIOperationOrchestrator",
    "Capability",
    "OperationOutcome",
    "OperationStatus",
]
