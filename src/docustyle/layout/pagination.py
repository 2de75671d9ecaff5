"""Print-time page numbering rules and the print stylesheet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .models import LayoutModel, NumberPosition, PageNumbering

__all__ = ["PageLabel", "page_label", "page_labels", "print_stylesheet"]

_MARGIN_BOXES = {
    NumberPosition.TOP_LEFT: "@top-left",
    NumberPosition.TOP_CENTER: "@top-center",
    NumberPosition.TOP_RIGHT: "@top-right",
    NumberPosition.BOTTOM_LEFT: "@bottom-left",
    NumberPosition.BOTTOM_CENTER: "@bottom-center",
    NumberPosition.BOTTOM_RIGHT: "@bottom-right",
}


@dataclass(slots=True, frozen=True)
class PageLabel:
    """Number shown on one physical page."""

    index: int
    number: int
    position: NumberPosition

    @property
    def text(self) -> str:
        return str(self.number)


def page_label(numbering: PageNumbering, index: int) -> PageLabel | None:
    """Return the label for the 0-based physical page ``index``.

    ``None`` when numbering is disabled or the number would pass ``end_page``.
    """

    if index < 0:
        raise ValueError("Page index must be non-negative")
    if not numbering.enabled:
        return None
    number = numbering.start_page + index
    if numbering.end_page is not None and number > numbering.end_page:
        return None
    return PageLabel(index=index, number=number, position=numbering.position)


def page_labels(numbering: PageNumbering, page_count: int) -> List[PageLabel]:
    """Labels for the first ``page_count`` physical pages, stopping at ``end_page``."""

    labels: List[PageLabel] = []
    for index in range(max(0, page_count)):
        label = page_label(numbering, index)
        if label is None:
            break
        labels.append(label)
    return labels


def print_stylesheet(layout: LayoutModel) -> str:
    """Render the layout as CSS paged-media rules.

    The first page resets the ``page`` counter to ``start_page - 1`` so the
    automatic increment lands on ``start_page``. The end-page cutoff has no
    CSS equivalent; callers that know the page count use :func:`page_labels`.
    """

    metrics = layout.metrics
    margins = layout.margins
    lines = [
        "@page {",
        f"  size: {metrics.css_width} {metrics.css_height};",
        f"  margin: {margins.top}mm {margins.right}mm {margins.bottom}mm {margins.left}mm;",
    ]
    numbering = layout.page_numbering
    if numbering.enabled:
        lines.append(f"  {_MARGIN_BOXES[numbering.position]} {{")
        lines.append("    content: counter(page);")
        lines.append(f"    font-size: {max(1, layout.font_size_body_pt - 2)}pt;")
        lines.append("  }")
    lines.append("}")
    if numbering.enabled and numbering.start_page > 1:
        lines.append(f"@page :first {{ counter-reset: page {numbering.start_page - 1}; }}")
    return "\n".join(lines)
