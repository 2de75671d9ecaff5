"""Page layout model, field setters and print pagination."""

from .models import (
    FONT_CATALOG,
    FORMAT_DIMENSIONS,
    DerivedMetrics,
    LayoutModel,
    Margins,
    NumberPosition,
    Orientation,
    PageFormat,
    PageNumbering,
    derive_metrics,
    parse_or_zero,
)
from .pagination import PageLabel, page_label, page_labels, print_stylesheet
from .setters import (
    set_first_line_indent,
    set_font_family,
    set_font_size,
    set_format,
    set_line_height,
    set_margin,
    set_orientation,
    set_page_numbering,
    set_paragraph_border,
    set_paragraph_spacing,
    update_layout,
)

__all__ = [
    "FONT_CATALOG",
    "FORMAT_DIMENSIONS",
    "DerivedMetrics",
    "LayoutModel",
    "Margins",
    "NumberPosition",
    "Orientation",
    "PageFormat",
    "PageLabel",
    "PageNumbering",
    "derive_metrics",
    "page_label",
    "page_labels",
    "parse_or_zero",
    "print_stylesheet",
    "set_first_line_indent",
    "set_font_family",
    "set_font_size",
    "set_format",
    "set_line_height",
    "set_margin",
    "set_orientation",
    "set_page_numbering",
    "set_paragraph_border",
    "set_paragraph_spacing",
    "update_layout",
]
