"""
core.printing.document

Turns a document definition (a plain dict) into a PDF file.

A document definition looks like:

    {
        "title": "Summary",
        "subtitle": "Printed on 2025-01-31",
        "content": [
            {"text": "Loan transactions:", "style": "sectionHeader"},
            {"table": {"header_rows": 1,
                       "body": [["Date", "Description"], ["01/01", "Deposit"]]}},
            {"text": "Some closing remark"},
        ],
    }

The pipeline treats the definition as opaque; only the renderer reads it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Protocol
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


# Definition style name -> ReportLab sample stylesheet name
STYLE_MAP = {
    "title": "Title",
    "subtitle": "Heading4",
    "sectionHeader": "Heading2",
    "subSectionHeader": "Heading3",
    "body": "BodyText",
    "tableHeader": "Heading5",
    "tableCell": "BodyText",
}


class DocumentRenderer(Protocol):
    """Writes `doc_definition` as a PDF at `path`. May raise on failure."""

    def render(self, doc_definition: Dict[str, Any], path: Path) -> None:
        ...


class ReportLabRenderer:
    """
    Renders document definitions with ReportLab Platypus on A4 paper.

    Unknown style names fall back to body text; unknown block types are
    rendered as their string form so nothing is silently dropped.
    """

    def __init__(self, pagesize=A4, margin: float = 2 * cm) -> None:
        self.pagesize = pagesize
        self.margin = margin
        self.styles = getSampleStyleSheet()

    def render(self, doc_definition: Dict[str, Any], path: Path) -> None:
        doc = SimpleDocTemplate(
            str(path),
            pagesize=self.pagesize,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=doc_definition.get("title", ""),
        )
        doc.build(self.build_story(doc_definition))

    def build_story(self, doc_definition: Dict[str, Any]) -> List[Flowable]:
        story: List[Flowable] = []

        if doc_definition.get("title"):
            story.append(self._paragraph(doc_definition["title"], "title"))
        if doc_definition.get("subtitle"):
            story.append(self._paragraph(doc_definition["subtitle"], "subtitle"))

        for block in doc_definition.get("content", []):
            if isinstance(block, dict) and "table" in block:
                story.append(self._table(block["table"]))
                story.append(Spacer(1, 0.4 * cm))
            elif isinstance(block, dict):
                story.append(self._paragraph(block.get("text", ""), block.get("style", "body")))
            else:
                story.append(self._paragraph(str(block), "body"))

        return story

    def _paragraph(self, text: Any, style: str) -> Paragraph:
        style_name = STYLE_MAP.get(style, "BodyText")
        return Paragraph(escape(str(text)), self.styles[style_name])

    def _table(self, table_def: Dict[str, Any]) -> Flowable:
        header_rows = int(table_def.get("header_rows", 1))
        rows = []
        for row_index, row in enumerate(table_def.get("body", [])):
            default_style = "tableHeader" if row_index < header_rows else "tableCell"
            cells = []
            for cell in row:
                if isinstance(cell, dict):
                    cells.append(self._paragraph(cell.get("text", ""), cell.get("style", default_style)))
                else:
                    cells.append(self._paragraph(cell, default_style))
            rows.append(cells)

        if not rows:
            return Spacer(1, 0)

        table = Table(rows, repeatRows=header_rows)
        commands = [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cccccc")),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
        if header_rows:
            commands.append(
                ("BACKGROUND", (0, 0), (-1, header_rows - 1), colors.HexColor("#f0f0f0"))
            )
        table.setStyle(TableStyle(commands))
        return table
