"""Tests for the document session façade."""

from __future__ import annotations

import asyncio

import pytest

from docustyle.ai.credentials import CredentialManager
from docustyle.errors import NotFoundError, OperationInProgressError
from docustyle.layout import Orientation, set_margin
from docustyle.services.projects import MemoryStorage, ProjectStore
from docustyle.session import DocumentSession
from docustyle.templates import build_thesis_template
from tests.helpers import StaticProvider


class _BoldFormatter:
    def apply(self, command: str, value: str | None, content: str) -> str:
        assert command == "bold"
        return f"<b>{content}</b>"


@pytest.fixture
def session(fake_capabilities, credentials) -> DocumentSession:
    return DocumentSession(
        capabilities=fake_capabilities,
        credentials=credentials,
        projects=ProjectStore(MemoryStorage()),
        default_instruction="Più formale",
    )


def test_session_starts_from_default_template(session: DocumentSession) -> None:
    assert session.content.startswith("<h1>Titolo Documento</h1>")
    assert session.layout.margins.top == 20
    assert session.metrics.css_width == "210mm"


def test_set_field_and_update_layout(session: DocumentSession) -> None:
    session.set_field("margins.top", "35")
    session.update_layout(set_margin, "left", 12)
    session.set_field("orientation", "landscape")

    assert session.layout.margins.top == 35
    assert session.layout.margins.left == 12
    assert session.layout.orientation is Orientation.LANDSCAPE
    assert session.metrics.css_width == "297mm"


def test_apply_layout_only_keeps_content(session: DocumentSession) -> None:
    session.content = "<p>X</p>"

    session.apply_layout_only("thesis")

    assert session.content == "<p>X</p>"
    assert session.layout == build_thesis_template().settings


def test_apply_template_replaces_content(session: DocumentSession) -> None:
    session.content = "<p>X</p>"

    session.apply_template(build_thesis_template())

    assert session.content == build_thesis_template().initial_content


def test_page_labels_follow_layout(session: DocumentSession) -> None:
    session.apply_layout_only("thesis")
    session.set_field("page_numbering.start_page", 4)

    assert [label.number for label in session.page_labels(2)] == [4, 5]


def test_projects_round_trip_through_session(session: DocumentSession) -> None:
    session.set_field("margins.bottom", 33)
    session.content = "<p>Salvato</p>"
    project = session.save_project("Relazione")

    session.apply_template("professional")
    session.load_project(project.id)

    assert session.content == "<p>Salvato</p>"
    assert session.layout.margins.bottom == 33

    session.delete_project(project.id)
    with pytest.raises(NotFoundError):
        session.load_project(project.id)


def test_format_content_routes_through_formatter(session: DocumentSession) -> None:
    session.content = "testo"

    assert session.format_content(_BoldFormatter(), "bold") == "<b>testo</b>"


def test_export_formats(session: DocumentSession) -> None:
    assert session.export("TXT").mime_type == "text/plain"
    assert session.export("html").filename == "documento.html"
    assert session.print_document().filename == "stampa.html"
    with pytest.raises(ValueError):
        session.export("pdf")


@pytest.mark.asyncio
async def test_content_replacement_is_rejected_while_ai_is_busy(
    session: DocumentSession, fake_capabilities
) -> None:
    await session.check_credentials()
    fake_capabilities.gate = asyncio.Event()
    original = session.content

    task = asyncio.create_task(session.refine())
    await asyncio.sleep(0)

    assert session.busy is True
    with pytest.raises(OperationInProgressError):
        session.apply_template("thesis")
    with pytest.raises(OperationInProgressError):
        session.format_content(_BoldFormatter(), "bold")
    session.apply_layout_only("thesis")

    fake_capabilities.gate.set()
    outcome = await task

    assert outcome.succeeded
    assert session.content == "<p>AI</p>"
    assert fake_capabilities.calls == [("refine", (original, "Più formale"))]
    assert session.busy is False


@pytest.mark.asyncio
async def test_restructure_without_credentials_is_blocked(fake_capabilities) -> None:
    session = DocumentSession(
        capabilities=fake_capabilities,
        credentials=CredentialManager(StaticProvider(False), fallback_available=False),
        projects=ProjectStore(MemoryStorage()),
    )
    await session.check_credentials()

    outcome = await session.restructure()

    assert outcome.route_to_setup is True
    assert fake_capabilities.calls == []
