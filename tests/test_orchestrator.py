"""Tests for single-flight AI orchestration."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from docustyle.ai.capabilities import ImagePayload
from docustyle.ai.credentials import CredentialManager, CredentialState
from docustyle.ai.orchestrator import (
    AIOperationOrchestrator,
    Capability,
    OperationStatus,
)
from docustyle.errors import CredentialInvalidError, OperationInProgressError, TransientOperationFailure
from tests.helpers import FakeCapabilities, StaticProvider

ORIGINAL = "<p>Bozza</p>"


async def _present_credentials() -> CredentialManager:
    manager = CredentialManager(StaticProvider(True), fallback_available=False)
    await manager.check()
    return manager


def _orchestrator(capabilities, credentials, **kwargs):
    document = SimpleNamespace(content=ORIGINAL)
    return document, AIOperationOrchestrator(
        document, capabilities, credentials, default_instruction="Più formale", **kwargs
    )


@pytest.mark.asyncio
async def test_refine_replaces_content_on_success() -> None:
    capabilities = FakeCapabilities(result="<p>Rifinito</p>")
    busy_changes: list[bool] = []
    document, orchestrator = _orchestrator(
        capabilities, await _present_credentials(), on_busy_changed=busy_changes.append
    )

    outcome = await orchestrator.refine()

    assert outcome.succeeded
    assert document.content == "<p>Rifinito</p>"
    assert outcome.content == "<p>Rifinito</p>"
    assert capabilities.calls == [("refine", (ORIGINAL, "Più formale"))]
    assert busy_changes == [True, False]


@pytest.mark.asyncio
async def test_unusable_credentials_block_without_calling_capabilities() -> None:
    capabilities = FakeCapabilities()
    routed: list[bool] = []
    credentials = CredentialManager(StaticProvider(False), fallback_available=False)
    document, orchestrator = _orchestrator(
        capabilities, credentials, on_route_to_setup=lambda: routed.append(True)
    )

    outcome = await orchestrator.restructure()

    assert outcome.status is OperationStatus.CONFIGURATION_REQUIRED
    assert outcome.route_to_setup is True
    assert routed == [True]
    assert capabilities.calls == []
    assert document.content == ORIGINAL
    assert orchestrator.busy is False


@pytest.mark.asyncio
async def test_unknown_state_with_fallback_is_allowed() -> None:
    capabilities = FakeCapabilities()
    credentials = CredentialManager(StaticProvider(), fallback_available=True)
    _, orchestrator = _orchestrator(capabilities, credentials)

    assert (await orchestrator.restructure()).succeeded


@pytest.mark.asyncio
async def test_second_call_while_busy_is_rejected() -> None:
    capabilities = FakeCapabilities(result="<p>Primo</p>")
    capabilities.gate = asyncio.Event()
    document, orchestrator = _orchestrator(capabilities, await _present_credentials())

    first = asyncio.create_task(orchestrator.refine())
    await asyncio.sleep(0)
    assert orchestrator.busy is True

    second = await orchestrator.restructure()
    with pytest.raises(OperationInProgressError):
        orchestrator.ensure_idle()

    capabilities.gate.set()
    outcome = await first

    assert second.status is OperationStatus.BUSY
    assert outcome.succeeded
    assert [name for name, _ in capabilities.calls] == ["refine"]
    assert document.content == "<p>Primo</p>"
    assert orchestrator.busy is False


@pytest.mark.asyncio
async def test_transient_failure_leaves_content_and_clears_busy() -> None:
    capabilities = FakeCapabilities(error=TransientOperationFailure(capability="refine"))
    credentials = await _present_credentials()
    document, orchestrator = _orchestrator(capabilities, credentials)

    outcome = await orchestrator.refine()

    assert outcome.status is OperationStatus.FAILED
    assert outcome.message
    assert outcome.route_to_setup is False
    assert document.content == ORIGINAL
    assert orchestrator.busy is False
    assert credentials.state is CredentialState.PRESENT


@pytest.mark.asyncio
async def test_unexpected_exception_is_reported_as_failure() -> None:
    capabilities = FakeCapabilities(error=RuntimeError("boom"))
    document, orchestrator = _orchestrator(capabilities, await _present_credentials())

    outcome = await orchestrator.summarize_footnotes()

    assert outcome.status is OperationStatus.FAILED
    assert document.content == ORIGINAL


@pytest.mark.asyncio
async def test_invalid_credential_routes_to_setup_and_gates_next_call() -> None:
    capabilities = FakeCapabilities(error=CredentialInvalidError(capability="refine"))
    credentials = await _present_credentials()
    routed: list[bool] = []
    document, orchestrator = _orchestrator(
        capabilities, credentials, on_route_to_setup=lambda: routed.append(True)
    )

    first = await orchestrator.refine()
    second = await orchestrator.refine()

    assert first.status is OperationStatus.CREDENTIAL_INVALID
    assert first.route_to_setup is True
    assert credentials.state is CredentialState.ABSENT
    assert second.status is OperationStatus.CONFIGURATION_REQUIRED
    assert len(capabilities.calls) == 1
    assert routed == [True, True]
    assert document.content == ORIGINAL


@pytest.mark.asyncio
async def test_footnotes_are_appended_as_escaped_section() -> None:
    capabilities = FakeCapabilities(result="Nota A\n\nNota <B>")
    document, orchestrator = _orchestrator(capabilities, await _present_credentials())

    outcome = await orchestrator.summarize_footnotes()

    assert outcome.succeeded
    assert document.content.startswith(ORIGINAL + "<hr><section")
    assert "<li>Nota A</li><li>Nota &lt;B&gt;</li>" in document.content


@pytest.mark.asyncio
async def test_blank_append_result_leaves_content() -> None:
    capabilities = FakeCapabilities(result="  ")
    document, orchestrator = _orchestrator(capabilities, await _present_credentials())

    outcome = await orchestrator.summarize_footnotes()

    assert outcome.succeeded
    assert document.content == ORIGINAL


@pytest.mark.asyncio
async def test_extract_text_appends_result() -> None:
    capabilities = FakeCapabilities(result="<p>Testo</p>")
    document, orchestrator = _orchestrator(capabilities, await _present_credentials())
    payload = ImagePayload(b"image-bytes", mime_type="image/png")

    await orchestrator.extract_text(payload)

    assert document.content == ORIGINAL + "<p>Testo</p>"
    assert capabilities.calls == [("extract_text", (payload.to_base64(), "image/png"))]


@pytest.mark.asyncio
async def test_scan_image_extracts_then_restructures() -> None:
    capabilities = FakeCapabilities(result="<p>Struttura</p>")
    document, orchestrator = _orchestrator(capabilities, await _present_credentials())

    outcome = await orchestrator.scan_image(ImagePayload(b"jpeg"))

    assert outcome.capability == "scan_image"
    assert [name for name, _ in capabilities.calls] == ["extract_text", "restructure"]
    assert document.content == ORIGINAL + "<p>Struttura</p>"


@pytest.mark.asyncio
async def test_invoke_defaults_to_document_content() -> None:
    capabilities = FakeCapabilities()
    _, orchestrator = _orchestrator(capabilities, await _present_credentials())

    await orchestrator.invoke("restructure")

    assert capabilities.calls == [("restructure", (ORIGINAL,))]
    with pytest.raises(TypeError):
        await orchestrator.invoke(Capability.EXTRACT_TEXT)


def test_capability_write_back_modes() -> None:
    assert Capability.EXTRACT_TEXT.appends is True
    assert Capability.SUMMARIZE_FOOTNOTES.appends is True
    assert Capability.REFINE.appends is False
    assert Capability.RESTRUCTURE.appends is False


@pytest.mark.asyncio
async def test_failing_busy_listener_does_not_wedge_orchestrator() -> None:
    capabilities = FakeCapabilities(result="<p>Rifinito</p>")
    notified: list[bool] = []

    def listener(busy: bool) -> None:
        notified.append(busy)
        raise RuntimeError("listener exploded")

    document, orchestrator = _orchestrator(
        capabilities, await _present_credentials(), on_busy_changed=listener
    )

    first = await orchestrator.refine()
    assert first.succeeded
    assert orchestrator.busy is False

    second = await orchestrator.restructure()
    assert second.succeeded
    assert orchestrator.busy is False
    assert notified == [True, False, True, False]
    assert len(capabilities.calls) == 2
