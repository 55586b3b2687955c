"""PDF layout for monthly transaction reports.

The document is drawn directly onto a ``reportlab`` canvas: a title block, the
summary totals, a six column table and a footer. Rows flow onto new pages when
the cursor reaches the bottom margin.
"""
from __future__ import annotations

import io
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from reportlab.lib.colors import Color
from reportlab.pdfgen import canvas

from branch_reports.schemas.transaction import TransactionRecord
from branch_reports.services.errors import RenderFailureError
from branch_reports.services.transactions import ReportSummary

logger = logging.getLogger(__name__)

PAGE_WIDTH = 595
PAGE_HEIGHT = 842
MARGIN = 50
BOTTOM_LIMIT = MARGIN + 50
ROW_PITCH = 15

COLUMN_HEADERS = ("Date", "TX #", "From - To", "Amount", "Method", "Status")
COLUMN_WIDTHS = (60, 65, 140, 80, 80, 70)

PLACEHOLDER = "N/A"

REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"

_TITLE_COLOR = Color(0.1, 0.1, 0.1)
_META_COLOR = Color(0.3, 0.3, 0.3)
_HEADER_COLOR = Color(0.2, 0.2, 0.2)
_RULE_COLOR = Color(0.8, 0.8, 0.8)
_FOOTER_COLOR = Color(0.5, 0.5, 0.5)
_SUMMARY_COLOR = Color(0, 0, 0)

_AMOUNT_PRECISION = Decimal("0.001")


def format_amount(amount: Decimal | int | float | str) -> str:
    """Group thousands with commas and keep at most three significant decimals."""

    value = Decimal(str(amount)).quantize(_AMOUNT_PRECISION, rounding=ROUND_HALF_UP)
    text = f"{value:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def format_date(value: date | None) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value:%d/%m/%Y}"


def format_timestamp(value: datetime) -> str:
    return f"{value:%d/%m/%Y, %H:%M:%S}"


def truncate(value: str | None, length: int) -> str:
    # Character count, not rendered width.
    return (value or PLACEHOLDER)[:length]


def from_to_label(from_branch: str | None, to_branch: str | None) -> str:
    label = f"{truncate(from_branch, 10)} - {truncate(to_branch, 10)}"
    if len(label) > 20:
        return label[:18] + "..."
    return label


def row_cells(record: TransactionRecord) -> list[str]:
    """Return the six table cells for one transaction."""

    return [
        format_date(record.transaction_date),
        truncate(record.transaction_number, 10),
        from_to_label(record.from_branch_name, record.to_branch_name),
        f"{format_amount(record.amount)} {record.currency}",
        truncate(record.transfer_method, 12),
        (record.status or PLACEHOLDER).upper(),
    ]


@dataclass(slots=True, frozen=True)
class RenderedReport:
    """Serialized PDF and the number of pages it spans."""

    content: bytes
    page_count: int

    @property
    def size(self) -> int:
        return len(self.content)


class MonthlyReportRenderer:
    """Draws the monthly transaction report onto a paginated canvas."""

    def __init__(
        self,
        *,
        repeat_header: bool = False,
        canvas_factory: Callable[..., Any] | None = None,
        now_fn: Callable[[], datetime] | None = None,
    ) -> None:
        self._repeat_header = repeat_header
        self._canvas_factory = canvas_factory or canvas.Canvas
        self._now_fn = now_fn or datetime.now

    def render(
        self,
        transactions: Sequence[TransactionRecord],
        *,
        branch_name: str,
        period: str,
        summary: ReportSummary | None = None,
    ) -> RenderedReport:
        try:
            return self._render(transactions, branch_name=branch_name, period=period, summary=summary)
        except RenderFailureError:
            raise
        except Exception as exc:
            logger.exception("report rendering failed", extra={"branch_name": branch_name, "period": period})
            raise RenderFailureError(f"Failed to generate PDF: {exc}") from exc

    def _render(
        self,
        transactions: Sequence[TransactionRecord],
        *,
        branch_name: str,
        period: str,
        summary: ReportSummary | None,
    ) -> RenderedReport:
        if summary is None:
            summary = ReportSummary(
                transaction_count=len(transactions),
                total_amount=sum((record.amount for record in transactions), Decimal("0")),
                currency=transactions[0].currency if transactions else "AFN",
            )
        buffer = io.BytesIO()
        pdf = self._canvas_factory(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
        pdf.setTitle(f"Monthly Transaction Report {period}")
        page_count = 1
        y = PAGE_HEIGHT - MARGIN

        self._text(pdf, MARGIN, y, "Monthly Transaction Report", BOLD_FONT, 20, _TITLE_COLOR)
        y -= 30
        self._text(pdf, MARGIN, y, f"Branch: {branch_name or PLACEHOLDER}", REGULAR_FONT, 12, _META_COLOR)
        y -= 20
        self._text(pdf, MARGIN, y, f"Period: {period}", REGULAR_FONT, 12, _META_COLOR)
        y -= 30

        self._text(
            pdf, MARGIN, y, f"Total Transactions: {summary.transaction_count}", BOLD_FONT, 11, _SUMMARY_COLOR
        )
        y -= 18
        self._text(
            pdf,
            MARGIN,
            y,
            f"Total Amount: {format_amount(summary.total_amount)} {summary.currency}",
            BOLD_FONT,
            11,
            _SUMMARY_COLOR,
        )
        y -= 35

        self._rule(pdf, y)
        y -= 20
        y = self._header_row(pdf, y)

        for record in transactions:
            if y < BOTTOM_LIMIT:
                pdf.showPage()
                page_count += 1
                y = PAGE_HEIGHT - MARGIN
                if self._repeat_header:
                    y = self._header_row(pdf, y)
            x = MARGIN
            for cell, width in zip(row_cells(record), COLUMN_WIDTHS):
                self._text(pdf, x, y, cell, REGULAR_FONT, 8, _META_COLOR)
                x += width
            y -= ROW_PITCH

        y -= 10
        self._rule(pdf, y)
        y -= 20
        self._text(
            pdf,
            MARGIN,
            y,
            f"Generated on: {format_timestamp(self._now_fn())}",
            REGULAR_FONT,
            8,
            _FOOTER_COLOR,
        )

        pdf.showPage()
        pdf.save()
        content = buffer.getvalue()
        if not content:
            raise RenderFailureError("Failed to generate PDF")
        return RenderedReport(content=content, page_count=page_count)

    def _header_row(self, pdf: Any, y: float) -> float:
        x = MARGIN
        for header, width in zip(COLUMN_HEADERS, COLUMN_WIDTHS):
            self._text(pdf, x, y, header, BOLD_FONT, 9, _HEADER_COLOR)
            x += width
        return y - 18

    @staticmethod
    def _text(pdf: Any, x: float, y: float, text: str, font: str, size: int, color: Color) -> None:
        pdf.setFont(font, size)
        pdf.setFillColor(color)
        pdf.drawString(x, y, text)

    @staticmethod
    def _rule(pdf: Any, y: float) -> None:
        pdf.setStrokeColor(_RULE_COLOR)
        pdf.setLineWidth(1)
        pdf.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)


__all__ = [
    "COLUMN_HEADERS",
    "COLUMN_WIDTHS",
    "MARGIN",
    "MonthlyReportRenderer",
    "PAGE_HEIGHT",
    "PAGE_WIDTH",
    "RenderedReport",
    "format_amount",
    "format_date",
    "format_timestamp",
    "from_to_label",
    "row_cells",
    "truncate",
]
