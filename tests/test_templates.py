"""Tests for the template catalog and apply helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docustyle.layout import FONT_CATALOG, NumberPosition
from docustyle.templates import (
    Template,
    TemplateCatalog,
    apply_layout_only,
    apply_template,
    build_professional_template,
    build_simple_template,
    predefined_templates,
    template_catalog,
)


def test_predefined_templates_keep_their_order() -> None:
    assert [template.id for template in predefined_templates()] == ["simple", "professional", "thesis"]
    assert template_catalog.ids() == ["simple", "professional", "thesis"]


def test_thesis_template_values() -> None:
    thesis = template_catalog.get("thesis")
    settings = thesis.settings

    assert (settings.margins.top, settings.margins.bottom, settings.margins.left, settings.margins.right) == (
        30,
        30,
        40,
        25,
    )
    assert settings.line_height == 1.5
    assert settings.font_family == FONT_CATALOG["Merriweather"]
    assert settings.first_line_indent_mm == 15.0
    assert settings.page_numbering.enabled is True
    assert settings.page_numbering.position is NumberPosition.BOTTOM_CENTER


def test_professional_numbering_is_bottom_right() -> None:
    numbering = build_professional_template().settings.page_numbering

    assert numbering.enabled is True
    assert numbering.position is NumberPosition.BOTTOM_RIGHT


def test_apply_template_replaces_layout_and_content() -> None:
    professional = build_professional_template()

    layout, content = apply_template(professional)

    assert layout == professional.settings
    assert content == professional.initial_content
    assert content.startswith("<h1>Relazione Professionale</h1>")


def test_apply_layout_only_leaves_content_alone() -> None:
    content = "<p>X</p>"

    layout = apply_layout_only(template_catalog.get("thesis"))

    assert layout.line_height == 1.5
    assert content == "<p>X</p>"


def test_catalog_lookup_is_case_insensitive_and_reports_unknown_ids() -> None:
    assert template_catalog.get(" Simple ").id == "simple"
    with pytest.raises(KeyError):
        template_catalog.get("memo")


def test_catalog_default_falls_back_to_first_registered() -> None:
    professional = build_professional_template()
    catalog = TemplateCatalog([professional], default_id="missing")

    assert catalog.default() is professional


def test_register_without_overwrite_rejects_duplicates() -> None:
    catalog = TemplateCatalog()

    with pytest.raises(ValueError):
        catalog.register(build_simple_template(), overwrite=False)


def test_import_templates_from_json(tmp_path: Path) -> None:
    entry = build_simple_template().to_dict()
    entry.update({"id": "memo", "name": "Memo", "initialContent": "<p>Memo</p>"})
    source = tmp_path / "templates.json"
    source.write_text(json.dumps([entry]), encoding="utf-8")
    catalog = TemplateCatalog()

    imported = catalog.import_templates(source)

    assert [template.id for template in imported] == ["memo"]
    assert catalog.get("memo").initial_content == "<p>Memo</p>"
    assert Template.from_dict(entry).settings == build_simple_template().settings
