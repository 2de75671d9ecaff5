"""Editing session holding the current layout, content and AI runtime.

All mutable editor state lives on one :class:`DocumentSession` passed to
callers explicitly. Layout edits go through the pure setters in
:mod:`docustyle.layout.setters`; AI edits go through the session's
:class:`AIOperationOrchestrator`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .ai.credentials import CredentialManager
from .ai.orchestrator import AIOperationOrchestrator, OperationOutcome
from .export import EXPORTERS, ExportArtifact, export_print
from .layout import setters
from .layout.models import DerivedMetrics, LayoutModel
from .layout.pagination import PageLabel, page_labels
from .services.projects import Project, ProjectStore
from .templates import Template, TemplateCatalog, apply_layout_only, apply_template, template_catalog

LOGGER = logging.getLogger(__name__)


class DocumentSession:
    """Owns the (layout, content) pair and mediates every mutation of it."""

    def __init__(
        self,
        *,
        capabilities: Any,
        credentials: CredentialManager,
        projects: ProjectStore | None = None,
        catalog: TemplateCatalog | None = None,
        template: Template | None = None,
        default_instruction: str = "",
        on_busy_changed: Callable[[bool], None] | None = None,
        on_route_to_setup: Callable[[], None] | None = None,
    ) -> None:
        self._catalog = catalog or template_catalog
        initial = template or self._catalog.default()
        self.layout: LayoutModel = initial.settings
        self.content: str = initial.initial_content
        self._projects = projects or ProjectStore()
        self._orchestrator = AIOperationOrchestrator(
            self,
            capabilities,
            credentials,
            default_instruction=default_instruction,
            on_busy_changed=on_busy_changed,
            on_route_to_setup=on_route_to_setup,
        )

    @property
    def ai(self) -> AIOperationOrchestrator:
        return self._orchestrator

    @property
    def projects(self) -> ProjectStore:
        return self._projects

    @property
    def catalog(self) -> TemplateCatalog:
        return self._catalog

    @property
    def metrics(self) -> DerivedMetrics:
        return self.layout.metrics

    @property
    def busy(self) -> bool:
        return self._orchestrator.busy

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def update_layout(self, setter: Callable[..., LayoutModel], *args: Any, **kwargs: Any) -> LayoutModel:
        """Apply one of the layout setters to the current layout."""

        self.layout = setter(self.layout, *args, **kwargs)
        return self.layout

    def set_field(self, field_path: str, value: Any) -> LayoutModel:
        return self.update_layout(setters.update_layout, field_path, value)

    def page_labels(self, page_count: int) -> list[PageLabel]:
        return page_labels(self.layout.page_numbering, page_count)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def format_content(self, formatter: Any, command: str, value: str | None = None) -> str:
        """Route an inline formatting command through an external formatter."""

        self._orchestrator.ensure_idle()
        self.content = formatter.apply(command, value, self.content)
        return self.content

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def apply_template(self, template: Template | str) -> None:
        """Replace layout and content; rejected while an AI call is in flight."""

        resolved = self._resolve_template(template)
        self._orchestrator.ensure_idle()
        self.layout, self.content = apply_template(resolved)
        LOGGER.info("Applied template %s", resolved.id)

    def apply_layout_only(self, template: Template | str) -> None:
        resolved = self._resolve_template(template)
        self.layout = apply_layout_only(resolved)
        LOGGER.info("Applied layout of template %s", resolved.id)

    def _resolve_template(self, template: Template | str) -> Template:
        return template if isinstance(template, Template) else self._catalog.get(template)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    def save_project(self, name: str) -> Project:
        return self._projects.save(name, self.layout, self.content)

    def load_project(self, project_id: str) -> None:
        layout, content = self._projects.load(project_id)
        self._orchestrator.ensure_idle()
        self.layout, self.content = layout, content

    def delete_project(self, project_id: str) -> None:
        self._projects.delete(project_id)

    # ------------------------------------------------------------------
    # AI
    # ------------------------------------------------------------------
    async def check_credentials(self) -> None:
        await self._orchestrator.credentials.check()

    async def select_credential(self) -> bool:
        return await self._orchestrator.credentials.select()

    async def refine(self, instruction: str | None = None) -> OperationOutcome:
        return await self._orchestrator.refine(instruction)

    async def restructure(self) -> OperationOutcome:
        return await self._orchestrator.restructure()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export(self, export_format: str) -> ExportArtifact:
        try:
            exporter = EXPORTERS[export_format.strip().lower()]
        except KeyError:
            raise ValueError(f"Unsupported export format: {export_format!r}") from None
        return exporter(self.layout, self.content)

    def print_document(self) -> ExportArtifact:
        return export_print(self.layout, self.content)


__all__ = ["DocumentSession"]
