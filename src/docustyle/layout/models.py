"""Data structures describing page format, margins and typography."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

__all__ = [
    "PageFormat",
    "Orientation",
    "NumberPosition",
    "Margins",
    "PageNumbering",
    "LayoutModel",
    "DerivedMetrics",
    "FORMAT_DIMENSIONS",
    "FONT_CATALOG",
    "derive_metrics",
    "parse_or_zero",
]


class PageFormat(Enum):
    """Paper formats supported by the layout engine."""

    A4 = "A4"
    A5 = "A5"
    LETTER = "Letter"


class Orientation(Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class NumberPosition(Enum):
    """Compass anchors for page-number labels."""

    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_CENTER = "bottom-center"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def vertical(self) -> str:
        return self.value.split("-", 1)[0]

    @property
    def horizontal(self) -> str:
        return self.value.split("-", 1)[1]


# Portrait (width, height) in millimetres.
FORMAT_DIMENSIONS: dict[PageFormat, tuple[float, float]] = {
    PageFormat.A4: (210.0, 297.0),
    PageFormat.A5: (148.0, 210.0),
    PageFormat.LETTER: (215.9, 279.4),
}

FONT_CATALOG: dict[str, str] = {
    "Inter": "'Inter', sans-serif",
    "Montserrat": "'Montserrat', sans-serif",
    "Roboto": "'Roboto', sans-serif",
    "Playfair Display": "'Playfair Display', serif",
    "Merriweather": "'Merriweather', serif",
    "Lora": "'Lora', serif",
    "System Mono": "monospace",
}


def parse_or_zero(value: Any, kind: type = int) -> int | float:
    """Coerce user input to a number, mapping anything unparsable to ``0``.

    Integers truncate the way form controls do (``"12.7"`` becomes ``12``),
    floats keep their fraction. ``None``, empty strings, NaN and garbage
    all become ``0``.
    """

    if isinstance(value, bool):
        return kind(int(value))
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value or "").strip()
        if not text:
            return kind(0)
        try:
            number = float(text)
        except ValueError:
            return kind(0)
    if not math.isfinite(number):
        return kind(0)
    return kind(int(number)) if kind is int else kind(number)


@dataclass(slots=True, frozen=True)
class DerivedMetrics:
    """Physical page size computed from format and orientation."""

    width_mm: float
    height_mm: float

    @property
    def css_width(self) -> str:
        return _mm(self.width_mm)

    @property
    def css_height(self) -> str:
        return _mm(self.height_mm)


def derive_metrics(page_format: PageFormat, orientation: Orientation) -> DerivedMetrics:
    """Return the page size for ``page_format`` rotated to ``orientation``."""

    width, height = FORMAT_DIMENSIONS[PageFormat(page_format)]
    if Orientation(orientation) is Orientation.LANDSCAPE:
        width, height = height, width
    return DerivedMetrics(width_mm=width, height_mm=height)


@dataclass(slots=True, frozen=True)
class Margins:
    """Page margins in millimetres."""

    top: int = 20
    bottom: int = 20
    left: int = 20
    right: int = 20

    def to_dict(self) -> dict[str, int]:
        return {"top": self.top, "bottom": self.bottom, "left": self.left, "right": self.right}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Margins":
        return cls(
            top=max(0, parse_or_zero(payload.get("top", 20))),
            bottom=max(0, parse_or_zero(payload.get("bottom", 20))),
            left=max(0, parse_or_zero(payload.get("left", 20))),
            right=max(0, parse_or_zero(payload.get("right", 20))),
        )


@dataclass(slots=True, frozen=True)
class PageNumbering:
    """Print-time page-number configuration."""

    enabled: bool = False
    start_page: int = 1
    end_page: int | None = None
    position: NumberPosition = NumberPosition.BOTTOM_CENTER

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "startPage": self.start_page,
            "endPage": self.end_page,
            "position": self.position.value,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PageNumbering":
        start_page = max(1, parse_or_zero(payload.get("startPage", 1)))
        end_page = parse_or_zero(payload.get("endPage")) or None
        if end_page is not None:
            end_page = max(end_page, start_page)
        return cls(
            enabled=bool(payload.get("enabled", False)),
            start_page=start_page,
            end_page=end_page,
            position=NumberPosition(payload.get("position") or NumberPosition.BOTTOM_CENTER.value),
        )


@dataclass(slots=True, frozen=True)
class LayoutModel:
    """Complete page and typography parameters for a document.

    Instances are immutable; the functions in :mod:`docustyle.layout.setters`
    return updated copies.
    """

    format: PageFormat = PageFormat.A4
    orientation: Orientation = Orientation.PORTRAIT
    margins: Margins = field(default_factory=Margins)
    line_height: float = 1.15
    paragraph_spacing_px: int = 10
    font_family: str = FONT_CATALOG["Inter"]
    first_line_indent_mm: float = 0.0
    font_size_body_pt: int = 11
    font_size_h1_pt: int = 20
    font_size_h2_pt: int = 16
    page_numbering: PageNumbering = field(default_factory=PageNumbering)
    paragraph_border_width: int = 0
    paragraph_border_color: str = "#e5e7eb"
    paragraph_padding: int = 0

    @property
    def metrics(self) -> DerivedMetrics:
        return derive_metrics(self.format, self.orientation)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted camelCase layout."""

        return {
            "format": self.format.value,
            "orientation": self.orientation.value,
            "margins": self.margins.to_dict(),
            "lineHeight": self.line_height,
            "paragraphSpacing": self.paragraph_spacing_px,
            "fontFamily": self.font_family,
            "paragraphBorderWidth": self.paragraph_border_width,
            "paragraphBorderColor": self.paragraph_border_color,
            "paragraphPadding": self.paragraph_padding,
            "firstLineIndent": self.first_line_indent_mm,
            "fontSizeBody": self.font_size_body_pt,
            "fontSizeH1": self.font_size_h1_pt,
            "fontSizeH2": self.font_size_h2_pt,
            "pageNumbering": self.page_numbering.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LayoutModel":
        """Rebuild a model from :meth:`to_dict` output.

        Missing keys fall back to defaults so older payloads still load;
        unknown enum values raise ``ValueError``.
        """

        defaults = cls()
        margins = payload.get("margins")
        numbering = payload.get("pageNumbering")
        return cls(
            format=PageFormat(payload.get("format", defaults.format.value)),
            orientation=Orientation(payload.get("orientation", defaults.orientation.value)),
            margins=Margins.from_dict(margins) if isinstance(margins, Mapping) else defaults.margins,
            line_height=parse_or_zero(payload.get("lineHeight", defaults.line_height), float),
            paragraph_spacing_px=parse_or_zero(
                payload.get("paragraphSpacing", defaults.paragraph_spacing_px)
            ),
            font_family=str(payload.get("fontFamily") or defaults.font_family),
            first_line_indent_mm=parse_or_zero(
                payload.get("firstLineIndent", defaults.first_line_indent_mm), float
            ),
            font_size_body_pt=parse_or_zero(payload.get("fontSizeBody", defaults.font_size_body_pt)),
            font_size_h1_pt=parse_or_zero(payload.get("fontSizeH1", defaults.font_size_h1_pt)),
            font_size_h2_pt=parse_or_zero(payload.get("fontSizeH2", defaults.font_size_h2_pt)),
            page_numbering=(
                PageNumbering.from_dict(numbering)
                if isinstance(numbering, Mapping)
                else defaults.page_numbering
            ),
            paragraph_border_width=parse_or_zero(
                payload.get("paragraphBorderWidth", defaults.paragraph_border_width)
            ),
            paragraph_border_color=str(
                payload.get("paragraphBorderColor") or defaults.paragraph_border_color
            ),
            paragraph_padding=parse_or_zero(
                payload.get("paragraphPadding", defaults.paragraph_padding)
            ),
        )


def _mm(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text}mm"
