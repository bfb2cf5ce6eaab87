from __future__ import annotations

from datetime import date
from typing import List, Optional

from travel_desk.core.config import Settings
from travel_desk.exports.pdf_layout import MISSING, PdfPageWriter, format_currency, format_short_date
from travel_desk.schemas.bookings import CostingLine, DocumentExtras, NormalizedBooking
from travel_desk.shared.time import parse_date

INVOICE_TERMS = "Due on receipt"


def invoice_number(booking: NormalizedBooking) -> str:
    return booking.id[-6:].upper() if booking.id else "000000"


def invoice_filename(booking: NormalizedBooking, settings: Settings) -> str:
    return f"{settings.document_prefix}-Invoice-{invoice_number(booking)}.pdf"


def invoice_dates(booking: NormalizedBooking, extras: DocumentExtras, today: Optional[date] = None) -> tuple[date, date]:
    """Issue and due dates, each falling back through the booking dates."""
    issued = parse_date(booking.dates.booking) or parse_date(booking.dates.departure) or today or date.today()
    due_source = extras.payment_due.date if extras.payment_due is not None else ""
    due = parse_date(due_source) or parse_date(booking.dates.return_date) or issued
    return issued, due


def line_description(row: CostingLine) -> str:
    product = (row.label or "").upper()
    quantity = f"{row.quantity:g}"
    if "ADULT" in product:
        return f"{product} {quantity} ADULTS"
    if "INFANT" in product:
        return f"{product} {quantity} INFANT"
    return f"{product} {quantity} {'unit' if row.quantity == 1 else 'units'}"


def _line_items(booking: NormalizedBooking, issued: date) -> List[List[str]]:
    return [
        [
            str(index),
            format_short_date(issued),
            (row.label or MISSING).upper(),
            line_description(row),
            f"{row.quantity:g}",
            format_currency(row.sale_per_qty, 2),
            format_currency(row.total_sale, 2),
        ]
        for index, row in enumerate(booking.costing_rows, start=1)
    ]


def render_invoice(
    booking: NormalizedBooking,
    extras: DocumentExtras,
    settings: Settings,
    today: Optional[date] = None,
) -> bytes:
    issued, due = invoice_dates(booking, extras, today)
    total = booking.totals.total_sale
    received = extras.payment_received.amount if extras.payment_received is not None else 0.0
    balance = total - received

    page = PdfPageWriter(settings, "INVOICE")
    page.section_title("Bill to")
    page.label_value("Customer:", booking.customer.name)
    page.label_value("Email:", booking.customer.email)
    page.label_value("Phone:", booking.customer.phone)
    page.spacer()

    page.section_title("Invoice details")
    page.label_value("Invoice no.:", invoice_number(booking))
    page.label_value("Terms:", INVOICE_TERMS)
    page.label_value("Invoice date:", format_short_date(issued))
    page.label_value("Due date:", format_short_date(due))
    page.spacer()

    page.table(
        ["#", "Date", "Product or service", "Description", "Qty", "Rate", "Amount"],
        _line_items(booking, issued),
        [0.05, 0.13, 0.2, 0.26, 0.08, 0.14, 0.14],
    )

    summary = [f"Total: {format_currency(total, 2)}"]
    if received > 0:
        summary.append(f"Payment: -{format_currency(received, 2)}")
    summary.append(f"Balance due: {format_currency(balance, 2)}")
    if balance > 0:
        summary.append("Overdue")
    page.boxed_text(summary, title="Summary")
    page.paragraph(f"Terms: {INVOICE_TERMS}", font="Helvetica-Oblique", size=9)
    return page.finish()
