"""Field-level updates for :class:`LayoutModel`.

Every setter takes the current model plus one change and returns a new,
complete model. Numeric input runs through :func:`parse_or_zero`, so
unparsable text becomes ``0`` instead of raising.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from .models import (
    FONT_CATALOG,
    LayoutModel,
    NumberPosition,
    Orientation,
    PageFormat,
    PageNumbering,
    parse_or_zero,
)

__all__ = [
    "MARGIN_SIDES",
    "FONT_SIZE_KINDS",
    "PAGE_NUMBERING_KEYS",
    "set_margin",
    "set_line_height",
    "set_font_size",
    "set_page_numbering",
    "set_format",
    "set_orientation",
    "set_font_family",
    "set_paragraph_spacing",
    "set_first_line_indent",
    "set_paragraph_border",
    "update_layout",
]

MARGIN_SIDES: tuple[str, ...] = ("top", "bottom", "left", "right")
FONT_SIZE_KINDS: dict[str, str] = {
    "body": "font_size_body_pt",
    "h1": "font_size_h1_pt",
    "h2": "font_size_h2_pt",
}
PAGE_NUMBERING_KEYS: tuple[str, ...] = ("enabled", "start_page", "end_page", "position")
_TRUE_VALUES = {"1", "true", "yes", "on"}


def set_margin(layout: LayoutModel, side: str, value: Any) -> LayoutModel:
    key = side.strip().lower()
    if key not in MARGIN_SIDES:
        raise ValueError(f"Unknown margin side: {side!r}")
    millimetres = max(0, parse_or_zero(value))
    return replace(layout, margins=replace(layout.margins, **{key: millimetres}))


def set_line_height(layout: LayoutModel, value: Any) -> LayoutModel:
    return replace(layout, line_height=parse_or_zero(value, float))


def set_font_size(layout: LayoutModel, kind: str, value: Any) -> LayoutModel:
    attribute = FONT_SIZE_KINDS.get(kind.strip().lower())
    if attribute is None:
        raise ValueError(f"Unknown font size kind: {kind!r}")
    return replace(layout, **{attribute: parse_or_zero(value)})


def set_page_numbering(layout: LayoutModel, key: str, value: Any) -> LayoutModel:
    """Update one page-numbering field, keeping ``end_page >= start_page``."""

    current = layout.page_numbering
    normalized = key.strip().lower().replace("-", "_")
    normalized = {"startpage": "start_page", "endpage": "end_page"}.get(normalized, normalized)
    if normalized not in PAGE_NUMBERING_KEYS:
        raise ValueError(f"Unknown page numbering key: {key!r}")

    if normalized == "enabled":
        updated = replace(current, enabled=_coerce_bool(value))
    elif normalized == "position":
        updated = replace(current, position=NumberPosition(value))
    elif normalized == "start_page":
        start_page = max(1, parse_or_zero(value))
        end_page = current.end_page
        if end_page is not None and end_page < start_page:
            end_page = start_page
        updated = replace(current, start_page=start_page, end_page=end_page)
    else:
        end_page = parse_or_zero(value) or None
        if end_page is not None:
            end_page = max(end_page, current.start_page)
        updated = replace(current, end_page=end_page)
    return replace(layout, page_numbering=updated)


def set_format(layout: LayoutModel, page_format: PageFormat | str) -> LayoutModel:
    return replace(layout, format=PageFormat(page_format))


def set_orientation(layout: LayoutModel, orientation: Orientation | str) -> LayoutModel:
    return replace(layout, orientation=Orientation(orientation))


def set_font_family(layout: LayoutModel, font: str) -> LayoutModel:
    """Select a catalog font by display name or CSS stack."""

    if font in FONT_CATALOG:
        return replace(layout, font_family=FONT_CATALOG[font])
    if font in FONT_CATALOG.values():
        return replace(layout, font_family=font)
    raise ValueError(f"Font {font!r} is not part of the font catalog")


def set_paragraph_spacing(layout: LayoutModel, value: Any) -> LayoutModel:
    return replace(layout, paragraph_spacing_px=max(0, parse_or_zero(value)))


def set_first_line_indent(layout: LayoutModel, value: Any) -> LayoutModel:
    return replace(layout, first_line_indent_mm=max(0.0, parse_or_zero(value, float)))


def set_paragraph_border(
    layout: LayoutModel,
    *,
    width: Any | None = None,
    color: str | None = None,
    padding: Any | None = None,
) -> LayoutModel:
    updates: dict[str, Any] = {}
    if width is not None:
        updates["paragraph_border_width"] = max(0, parse_or_zero(width))
    if color is not None:
        updates["paragraph_border_color"] = color.strip() or layout.paragraph_border_color
    if padding is not None:
        updates["paragraph_padding"] = max(0, parse_or_zero(padding))
    return replace(layout, **updates) if updates else layout


def update_layout(layout: LayoutModel, field_path: str, value: Any) -> LayoutModel:
    """Dispatch a dotted ``field_path`` (``margins.top``, ``font_size.h1``) to its setter."""

    head, _, tail = field_path.strip().partition(".")
    head = head.lower().replace("-", "_")
    if head == "margins" and tail:
        return set_margin(layout, tail, value)
    if head == "font_size" and tail:
        return set_font_size(layout, tail, value)
    if head == "page_numbering" and tail:
        return set_page_numbering(layout, tail, value)
    if head == "paragraph_border" and tail.lower() in {"width", "color", "padding"}:
        return set_paragraph_border(layout, **{tail.lower(): value})
    simple = {
        "format": set_format,
        "orientation": set_orientation,
        "line_height": set_line_height,
        "font_family": set_font_family,
        "paragraph_spacing": set_paragraph_spacing,
        "first_line_indent": set_first_line_indent,
    }
    setter = simple.get(head)
    if setter is None or tail:
        raise ValueError(f"Unknown layout field: {field_path!r}")
    return setter(layout, value)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)
