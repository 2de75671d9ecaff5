"""Tests for page-number labels and the print stylesheet."""

from __future__ import annotations

import pytest

from docustyle.layout import (
    LayoutModel,
    NumberPosition,
    PageNumbering,
    page_label,
    page_labels,
    print_stylesheet,
    set_orientation,
)


def test_disabled_numbering_has_no_labels() -> None:
    numbering = PageNumbering(enabled=False)

    assert page_label(numbering, 0) is None
    assert page_labels(numbering, 5) == []


def test_labels_start_at_start_page() -> None:
    numbering = PageNumbering(enabled=True, start_page=3, position=NumberPosition.TOP_LEFT)

    labels = page_labels(numbering, 3)

    assert [label.text for label in labels] == ["3", "4", "5"]
    assert [label.index for label in labels] == [0, 1, 2]
    assert all(label.position is NumberPosition.TOP_LEFT for label in labels)


def test_labels_stop_after_end_page() -> None:
    numbering = PageNumbering(enabled=True, start_page=2, end_page=4)

    assert [label.number for label in page_labels(numbering, 10)] == [2, 3, 4]
    assert page_label(numbering, 3) is None


def test_negative_index_is_rejected() -> None:
    with pytest.raises(ValueError):
        page_label(PageNumbering(enabled=True), -1)


def test_print_stylesheet_uses_page_size_and_margins() -> None:
    css = print_stylesheet(set_orientation(LayoutModel(), "landscape"))

    assert "size: 297mm 210mm;" in css
    assert "margin: 20mm 20mm 20mm 20mm;" in css
    assert "counter(page)" not in css


def test_print_stylesheet_places_page_counter() -> None:
    layout = LayoutModel(
        page_numbering=PageNumbering(enabled=True, start_page=5, position=NumberPosition.BOTTOM_RIGHT)
    )

    css = print_stylesheet(layout)

    assert "@bottom-right {" in css
    assert "content: counter(page);" in css
    assert "font-size: 9pt;" in css
    assert "@page :first { counter-reset: page 4; }" in css
