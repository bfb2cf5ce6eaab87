from __future__ import annotations

import io
from datetime import date
from typing import Any, List, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from travel_desk.core.config import Settings
from travel_desk.shared.time import parse_date

MARGIN = 40
FOOTER_RESERVE = 80
HEADER_HEIGHT = 90
MISSING = "—"

PRIMARY = colors.HexColor("#1E3A8A")
ACCENT = colors.HexColor("#B8860B")
LIGHT_FILL = colors.HexColor("#F3F4F6")
BORDER = colors.HexColor("#D1D5DB")
TEXT = colors.HexColor("#111827")
MUTED = colors.HexColor("#6B7280")


def format_display_date(value: Any) -> str:
    """'Mon, Jan 5, 2026' for anything parseable, a dash otherwise."""
    parsed = parse_date(value)
    if parsed is None:
        return MISSING
    return parsed.strftime("%a, %b ") + f"{parsed.day}, {parsed.year}"


def format_short_date(value: Any) -> str:
    parsed = value if isinstance(value, date) else parse_date(value)
    if parsed is None:
        return MISSING
    return f"{parsed.month:02d}/{parsed.day:02d}/{parsed.year}"


def format_currency(amount: float, decimals: int = 0) -> str:
    formatted = f"${abs(amount):,.{decimals}f}"
    return f"-{formatted}" if amount < 0 else formatted


class PdfPageWriter:
    """Top-down cursor over a reportlab canvas with branded header and footer on every page.

    `y` is measured from the top edge; `ensure_space` starts a new page when the next block
    would run into the footer area.
    """

    def __init__(self, settings: Settings, title: str) -> None:
        self.settings = settings
        self.title = title
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4, invariant=1)
        self.canvas.setTitle(title)
        self.canvas.setAuthor(settings.agency_name)
        self.width, self.height = A4
        self.content_width = self.width - 2 * MARGIN
        self.page_number = 1
        self.y = 0.0
        self.draw_header()

    def _y(self, offset: float) -> float:
        return self.height - offset

    def draw_header(self) -> None:
        c = self.canvas
        c.setFillColor(PRIMARY)
        c.rect(0, self._y(HEADER_HEIGHT - 10), self.width, HEADER_HEIGHT - 10, stroke=0, fill=1)
        c.setFillColor(colors.white)
        c.setFont("Helvetica-Bold", 18)
        c.drawString(MARGIN, self._y(35), self.settings.agency_name)
        c.setFont("Helvetica-Oblique", 10)
        c.drawString(MARGIN, self._y(52), self.settings.agency_tagline)
        c.setFont("Helvetica-Bold", 12)
        c.drawRightString(self.width - MARGIN, self._y(35), self.title)
        c.setFont("Helvetica", 9)
        c.drawRightString(self.width - MARGIN, self._y(52), f"Page {self.page_number}")
        c.setFillColor(TEXT)
        self.y = HEADER_HEIGHT + 20

    def draw_footer(self) -> None:
        c = self.canvas
        c.setStrokeColor(BORDER)
        c.line(MARGIN, 50, self.width - MARGIN, 50)
        c.setFillColor(MUTED)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(MARGIN, 36, self.settings.agency_short_name)
        c.setFont("Helvetica", 8)
        contact = f"{self.settings.agency_email}  |  {self.settings.agency_phone}  |  {self.settings.agency_website}"
        c.drawRightString(self.width - MARGIN, 36, contact)
        c.setFillColor(TEXT)

    def new_page(self) -> None:
        self.draw_footer()
        self.canvas.showPage()
        self.page_number += 1
        self.draw_header()

    def ensure_space(self, required: float) -> bool:
        if self.y + required > self.height - FOOTER_RESERVE:
            self.new_page()
            return True
        return False

    def section_title(self, title: str) -> None:
        self.ensure_space(40)
        c = self.canvas
        c.setFillColor(PRIMARY)
        c.rect(MARGIN, self._y(self.y + 18), self.content_width, 20, stroke=0, fill=1)
        c.setFillColor(colors.white)
        c.setFont("Helvetica-Bold", 10)
        c.drawString(MARGIN + 8, self._y(self.y + 12), title)
        c.setFillColor(TEXT)
        self.y += 32

    def label_value(self, label: str, value: str, label_width: float = 120) -> None:
        lines = simpleSplit(value or MISSING, "Helvetica", 10, self.content_width - label_width - 10)
        self.ensure_space(14 * len(lines) + 2)
        c = self.canvas
        c.setFont("Helvetica-Bold", 10)
        c.drawString(MARGIN + 8, self._y(self.y), label)
        c.setFont("Helvetica", 10)
        for line in lines:
            c.drawString(MARGIN + label_width, self._y(self.y), line)
            self.y += 14
        self.y += 2

    def paragraph(
        self,
        value: str,
        font: str = "Helvetica",
        size: float = 9,
        indent: float = 8,
        leading: Optional[float] = None,
    ) -> None:
        leading = leading or size + 3
        lines = simpleSplit(value, font, size, self.content_width - indent)
        for line in lines:
            self.ensure_space(leading)
            self.canvas.setFont(font, size)
            self.canvas.drawString(MARGIN + indent, self._y(self.y), line)
            self.y += leading

    def boxed_text(self, lines: Sequence[str], fill: Any = LIGHT_FILL, title: Optional[str] = None) -> None:
        height = 14 * len(lines) + (18 if title else 0) + 12
        self.ensure_space(height + 8)
        c = self.canvas
        c.setFillColor(fill)
        c.setStrokeColor(BORDER)
        c.rect(MARGIN, self._y(self.y + height), self.content_width, height, stroke=1, fill=1)
        c.setFillColor(TEXT)
        cursor = self.y + 16
        if title:
            c.setFont("Helvetica-Bold", 10)
            c.drawString(MARGIN + 10, self._y(cursor), title)
            cursor += 18
        c.setFont("Helvetica", 9)
        for line in lines:
            c.drawString(MARGIN + 10, self._y(cursor), line)
            cursor += 14
        self.y += height + 10

    def _row(self, cells: Sequence[str], widths: Sequence[float], font: str, fill: Any = None) -> None:
        wrapped: List[List[str]] = [
            simpleSplit(cell or "", font, 9, max(width - 8, 10)) or [""] for cell, width in zip(cells, widths)
        ]
        height = 12 * max(len(lines) for lines in wrapped) + 8
        c = self.canvas
        if fill is not None:
            c.setFillColor(fill)
            c.rect(MARGIN, self._y(self.y + height), sum(widths), height, stroke=0, fill=1)
        c.setStrokeColor(BORDER)
        c.line(MARGIN, self._y(self.y + height), MARGIN + sum(widths), self._y(self.y + height))
        c.setFillColor(TEXT)
        c.setFont(font, 9)
        x = MARGIN
        for lines, width in zip(wrapped, widths):
            line_y = self.y + 14
            for line in lines:
                c.drawString(x + 4, self._y(line_y), line)
                line_y += 12
            x += width
        self.y += height

    def _row_height(self, cells: Sequence[str], widths: Sequence[float], font: str) -> float:
        lines = [len(simpleSplit(cell or "", font, 9, max(width - 8, 10)) or [""]) for cell, width in zip(cells, widths)]
        return 12 * max(lines) + 8

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        fractions: Sequence[float],
        footer_row: Optional[Sequence[str]] = None,
    ) -> None:
        """Grid with a repeated header row whenever the table continues on a new page."""
        widths = [self.content_width * fraction for fraction in fractions]
        self.ensure_space(self._row_height(headers, widths, "Helvetica-Bold") + 20)
        self._row(headers, widths, "Helvetica-Bold", fill=LIGHT_FILL)
        for row in rows:
            if self.ensure_space(self._row_height(row, widths, "Helvetica")):
                self._row(headers, widths, "Helvetica-Bold", fill=LIGHT_FILL)
            self._row(row, widths, "Helvetica")
        if footer_row is not None:
            if self.ensure_space(self._row_height(footer_row, widths, "Helvetica-Bold")):
                self._row(headers, widths, "Helvetica-Bold", fill=LIGHT_FILL)
            self._row(footer_row, widths, "Helvetica-Bold", fill=LIGHT_FILL)
        self.y += 12

    def spacer(self, amount: float = 10) -> None:
        self.y += amount

    def finish(self) -> bytes:
        self.draw_footer()
        self.canvas.showPage()
        self.canvas.save()
        return self.buffer.getvalue()
