"""Template registry, the predefined templates and apply helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Mapping

from ..layout.models import (
    FONT_CATALOG,
    LayoutModel,
    Margins,
    NumberPosition,
    Orientation,
    PageFormat,
    PageNumbering,
)
from .models import Template


def build_simple_template() -> Template:
    return Template(
        id="simple",
        name="Documento Semplice",
        description="Layout pulito e minimale. Margini standard 20mm, interlinea 1.15.",
        icon="fa-align-left",
        settings=LayoutModel(
            format=PageFormat.A4,
            orientation=Orientation.PORTRAIT,
            margins=Margins(top=20, bottom=20, left=20, right=20),
            line_height=1.15,
            paragraph_spacing_px=10,
            font_family=FONT_CATALOG["Inter"],
            first_line_indent_mm=0.0,
            font_size_body_pt=11,
            font_size_h1_pt=20,
            font_size_h2_pt=16,
            page_numbering=PageNumbering(enabled=False),
        ),
        initial_content="<h1>Titolo Documento</h1><p>Inserisci qui il tuo testo semplice...</p>",
    )


def build_professional_template() -> Template:
    return Template(
        id="professional",
        name="Documento Professionale",
        description="Relazione formale istituzionale. Margini 25-30mm, font istituzionale.",
        icon="fa-briefcase",
        settings=LayoutModel(
            format=PageFormat.A4,
            orientation=Orientation.PORTRAIT,
            margins=Margins(top=25, bottom=25, left=30, right=20),
            line_height=1.3,
            paragraph_spacing_px=12,
            font_family=FONT_CATALOG["Roboto"],
            first_line_indent_mm=12.0,
            font_size_body_pt=12,
            font_size_h1_pt=18,
            font_size_h2_pt=14,
            page_numbering=PageNumbering(enabled=True, position=NumberPosition.BOTTOM_RIGHT),
        ),
        initial_content=(
            "<h1>Relazione Professionale</h1><h2>Sintesi Esecutiva</h2>"
            "<p>Questo layout segue le regole della videoscrittura professionale moderna...</p>"
        ),
    )


def build_thesis_template() -> Template:
    return Template(
        id="thesis",
        name="Documento Tesi",
        description=(
            "Standard accademico: margine rilegatura 40mm, interlinea 1.5, numerazione tesi."
        ),
        icon="fa-graduation-cap",
        settings=LayoutModel(
            format=PageFormat.A4,
            orientation=Orientation.PORTRAIT,
            margins=Margins(top=30, bottom=30, left=40, right=25),
            line_height=1.5,
            paragraph_spacing_px=8,
            font_family=FONT_CATALOG["Merriweather"],
            first_line_indent_mm=15.0,
            font_size_body_pt=12,
            font_size_h1_pt=16,
            font_size_h2_pt=14,
            page_numbering=PageNumbering(enabled=True, position=NumberPosition.BOTTOM_CENTER),
        ),
        initial_content=(
            '<h1 style="text-align:center">TITOLO TESI DI LAUREA</h1><h2>Introduzione</h2>'
            "<p>Analisi metodologica e impaginazione accademica...</p>"
        ),
    )


def predefined_templates() -> List[Template]:
    return [build_simple_template(), build_professional_template(), build_thesis_template()]


class TemplateCatalog:
    """Registry that resolves templates by id, preserving registration order."""

    def __init__(self, templates: Iterable[Template] | None = None, *, default_id: str = "simple") -> None:
        self._templates: Dict[str, Template] = {}
        self._default_id = default_id.strip().lower()
        for template in templates if templates is not None else predefined_templates():
            self.register(template)
        if not self._templates:
            self.register(build_simple_template())
        if self._default_id not in self._templates:
            self._default_id = next(iter(self._templates))

    def register(self, template: Template, *, overwrite: bool = True) -> None:
        key = template.id.strip().lower()
        if not overwrite and key in self._templates:
            raise ValueError(f"Template '{template.id}' already registered")
        self._templates[key] = template

    def available(self) -> List[Template]:
        return list(self._templates.values())

    def ids(self) -> List[str]:
        return list(self._templates)

    def get(self, template_id: str) -> Template:
        key = (template_id or "").strip().lower()
        try:
            return self._templates[key]
        except KeyError:
            raise KeyError(f"Unknown template '{template_id}'") from None

    def default(self) -> Template:
        return self._templates[self._default_id]

    def import_templates(self, source: str | Path) -> List[Template]:
        """Register templates from a JSON file holding one object or a list."""

        payload = json.loads(Path(source).read_text(encoding="utf-8"))
        entries = payload if isinstance(payload, list) else [payload]
        imported: List[Template] = []
        for entry in entries:
            if not isinstance(entry, Mapping):
                raise ValueError("Template file entries must be JSON objects")
            template = Template.from_dict(entry)
            self.register(template)
            imported.append(template)
        return imported


def apply_template(template: Template) -> tuple[LayoutModel, str]:
    """Return the template's layout and seed content, replacing both."""

    return template.settings, template.initial_content


def apply_layout_only(template: Template) -> LayoutModel:
    """Return the template's layout; content stays with the caller."""

    return template.settings


template_catalog = TemplateCatalog()


__all__ = [
    "TemplateCatalog",
    "apply_layout_only",
    "apply_template",
    "build_professional_template",
    "build_simple_template",
    "build_thesis_template",
    "predefined_templates",
    "template_catalog",
]
