"""Tests for the layout data model and derived page metrics."""

from __future__ import annotations

import pytest

from docustyle.layout import (
    LayoutModel,
    Margins,
    NumberPosition,
    Orientation,
    PageFormat,
    PageNumbering,
    derive_metrics,
    parse_or_zero,
)


@pytest.mark.parametrize(
    ("page_format", "orientation", "expected"),
    [
        (PageFormat.A4, Orientation.PORTRAIT, (210.0, 297.0)),
        (PageFormat.A4, Orientation.LANDSCAPE, (297.0, 210.0)),
        (PageFormat.A5, Orientation.PORTRAIT, (148.0, 210.0)),
        (PageFormat.A5, Orientation.LANDSCAPE, (210.0, 148.0)),
        (PageFormat.LETTER, Orientation.PORTRAIT, (215.9, 279.4)),
        (PageFormat.LETTER, Orientation.LANDSCAPE, (279.4, 215.9)),
    ],
)
def test_derive_metrics_covers_every_format(page_format, orientation, expected) -> None:
    metrics = derive_metrics(page_format, orientation)

    assert (metrics.width_mm, metrics.height_mm) == expected


def test_derive_metrics_accepts_enum_values() -> None:
    metrics = derive_metrics("Letter", "landscape")

    assert metrics.css_width == "279.4mm"
    assert metrics.css_height == "215.9mm"


def test_css_dimensions_drop_trailing_zeroes() -> None:
    metrics = LayoutModel().metrics

    assert metrics.css_width == "210mm"
    assert metrics.css_height == "297mm"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("35", 35), ("12.7", 12), (7, 7), (3.9, 3), ("", 0), (None, 0), ("abc", 0), ("nan", 0), ("inf", 0), (float("-inf"), 0)],
)
def test_parse_or_zero_integers(raw, expected) -> None:
    assert parse_or_zero(raw) == expected


def test_parse_or_zero_floats_keep_fraction() -> None:
    assert parse_or_zero("1.5", float) == 1.5
    assert parse_or_zero(float("nan"), float) == 0.0
    assert parse_or_zero(" ", float) == 0.0


def test_layout_round_trips_through_camel_case_payload() -> None:
    layout = LayoutModel(
        format=PageFormat.A5,
        orientation=Orientation.LANDSCAPE,
        margins=Margins(top=10, bottom=12, left=14, right=16),
        line_height=1.5,
        first_line_indent_mm=7.5,
        page_numbering=PageNumbering(
            enabled=True, start_page=3, end_page=9, position=NumberPosition.TOP_RIGHT
        ),
        paragraph_border_width=2,
        paragraph_border_color="#000000",
        paragraph_padding=4,
    )

    payload = layout.to_dict()

    assert payload["format"] == "A5"
    assert payload["lineHeight"] == 1.5
    assert payload["firstLineIndent"] == 7.5
    assert payload["pageNumbering"] == {
        "enabled": True,
        "startPage": 3,
        "endPage": 9,
        "position": "top-right",
    }
    assert LayoutModel.from_dict(payload) == layout


def test_from_dict_fills_missing_keys_with_defaults() -> None:
    layout = LayoutModel.from_dict({"format": "Letter"})

    assert layout.format is PageFormat.LETTER
    assert layout.margins == Margins()
    assert layout.page_numbering == PageNumbering()
    assert layout.font_size_body_pt == 11


def test_from_dict_rejects_unknown_format() -> None:
    with pytest.raises(ValueError):
        LayoutModel.from_dict({"format": "B5"})


def test_page_numbering_from_dict_clamps_end_page() -> None:
    numbering = PageNumbering.from_dict({"enabled": True, "startPage": 5, "endPage": 2})

    assert numbering.start_page == 5
    assert numbering.end_page == 5


def test_number_position_splits_anchor() -> None:
    assert NumberPosition.BOTTOM_RIGHT.vertical == "bottom"
    assert NumberPosition.BOTTOM_RIGHT.horizontal == "right"
