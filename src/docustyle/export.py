"""Best-effort export of document content to text, HTML and Word HTML."""

from __future__ import annotations

import html
from dataclasses import dataclass
from html.parser import HTMLParser
from pathlib import Path
from typing import List

from .layout.models import LayoutModel
from .layout.pagination import print_stylesheet
from .utils import file_io

__all__ = [
    "ExportArtifact",
    "html_to_text",
    "layout_css",
    "export_text",
    "export_html",
    "export_doc",
    "export_print",
    "EXPORTERS",
]

_BLOCK_TAGS = {
    "p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "ul", "ol",
    "blockquote", "section", "article", "table", "tr", "pre", "hr",
}
_SKIPPED_TAGS = {"script", "style", "head", "title"}
_WORD_HEADER = (
    "<html xmlns:o='urn:schemas-microsoft-com:office:office' "
    "xmlns:w='urn:schemas-microsoft-com:office:word' "
    "xmlns='http://www.w3.org/TR/REC-html40'>"
    "<head><meta charset='utf-8'><title>Export DOC</title></head><body>"
)
_WORD_FOOTER = "</body></html>"


@dataclass(slots=True, frozen=True)
class ExportArtifact:
    """Bytes ready for download or printing."""

    data: bytes
    mime_type: str
    filename: str

    def write_to(self, directory: Path | str, filename: str | None = None) -> Path:
        return file_io.write_bytes(Path(directory) / (filename or self.filename), self.data)


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: List[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs) -> None:  # type: ignore[override]
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag == "br":
            self._parts.append("\n")
        elif tag in _BLOCK_TAGS:
            self._break()

    def handle_endtag(self, tag: str) -> None:
        if tag in _SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in _BLOCK_TAGS:
            self._break()

    def handle_data(self, data: str) -> None:
        if not self._skip_depth:
            self._parts.append(data)

    def _break(self) -> None:
        if self._parts and not self._parts[-1].endswith("\n"):
            self._parts.append("\n")

    def text(self) -> str:
        lines = [line.strip() for line in "".join(self._parts).splitlines()]
        return "\n".join(line for line in lines if line)


def html_to_text(content: str) -> str:
    parser = _TextExtractor()
    parser.feed(content)
    parser.close()
    return parser.text()


def layout_css(layout: LayoutModel) -> str:
    """Inline styling for the page box and body elements."""

    margins = layout.margins
    metrics = layout.metrics
    spacing = layout.paragraph_spacing_px
    border = (
        f"border: {layout.paragraph_border_width}px solid {layout.paragraph_border_color}; "
        f"padding: {layout.paragraph_padding}px; "
        if layout.paragraph_border_width
        else ""
    )
    return "\n".join(
        [
            ".page {",
            f"  width: {metrics.css_width};",
            f"  min-height: {metrics.css_height};",
            f"  padding: {margins.top}mm {margins.right}mm {margins.bottom}mm {margins.left}mm;",
            f"  font-family: {layout.font_family};",
            f"  line-height: {layout.line_height:g};",
            f"  font-size: {layout.font_size_body_pt}pt;",
            "  text-align: justify;",
            "  box-sizing: border-box;",
            "}",
            f".page p {{ margin: 0 0 {spacing}px 0; text-indent: {layout.first_line_indent_mm:g}mm; {border}}}",
            f".page h1 {{ font-size: {layout.font_size_h1_pt}pt; margin: 0 0 {spacing * 2}px 0; }}",
            f".page h2 {{ font-size: {layout.font_size_h2_pt}pt; margin: 0 0 {spacing}px 0; }}",
            "@media print { .page { width: auto; min-height: 0; padding: 0; } }",
        ]
    )


def export_text(content: str, *, filename: str = "documento.txt") -> ExportArtifact:
    return ExportArtifact(html_to_text(content).encode("utf-8"), "text/plain", filename)


def export_html(
    layout: LayoutModel,
    content: str,
    *,
    title: str = "Documento",
    filename: str = "documento.html",
) -> ExportArtifact:
    document = "\n".join(
        [
            "<!DOCTYPE html>",
            "<html>",
            "<head>",
            "<meta charset='utf-8'>",
            f"<title>{html.escape(title)}</title>",
            "<style>",
            print_stylesheet(layout),
            layout_css(layout),
            "</style>",
            "</head>",
            "<body>",
            f"<div class='page'>{content}</div>",
            "</body>",
            "</html>",
        ]
    )
    return ExportArtifact(document.encode("utf-8"), "text/html", filename)


def export_doc(content: str, *, filename: str = "documento.doc") -> ExportArtifact:
    return ExportArtifact(
        (_WORD_HEADER + content + _WORD_FOOTER).encode("utf-8"), "application/msword", filename
    )


def export_print(layout: LayoutModel, content: str, *, title: str = "Documento") -> ExportArtifact:
    """HTML document handed to the system print dialog."""

    return export_html(layout, content, title=title, filename="stampa.html")


EXPORTERS = {
    "txt": lambda layout, content: export_text(content),
    "html": export_html,
    "doc": lambda layout, content: export_doc(content),
}
