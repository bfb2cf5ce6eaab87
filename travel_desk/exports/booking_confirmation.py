from __future__ import annotations

from typing import List

from travel_desk.analytics.booking_normalizer import ROUTE_SEPARATOR
from travel_desk.core.config import Settings
from travel_desk.exports.pdf_layout import (
    MISSING,
    PdfPageWriter,
    format_currency,
    format_display_date,
)
from travel_desk.schemas.bookings import DocumentExtras, NormalizedBooking, PaymentRecord

PAYMENT_METHOD_LABELS = {
    "credit_card": "Credit Card",
    "bank_transfer": "Bank Transfer",
    "cash": "Cash",
    "installments": "Installments",
}

IMPORTANT_NOTICE = (
    "Please ensure all travel documents are valid for at least 6 months. "
    "Arrive at the airport 3 hours before departure. "
    "Contact your agent for any changes or cancellations."
)

TERMS = [
    ("FLIGHT POLICIES", [
        "Cancellation / Refund / Date Change: An estimated penalty of $250 or more from the airline as per "
        "their policy + $100 service fee per person from the company.",
        "Flights can be Cancelled / Changed without any fee within 24 hours time span.",
        "Change of flight can only be done with same airline.",
        "Airline is responsible for the schedule change or layover time change.",
        "In case of a no show all the round trip will be cancelled by the airline and there will be no refund.",
    ]),
    ("LAND PACKAGE POLICIES", [
        "Land package cancellations must be informed at least one week before travel; otherwise, a 50% charge "
        "applies (except for December and Ramadan bookings).",
        "If an HCN is issued at the time of booking, no refund will be provided for that particular hotel, "
        "including hotels outside of Makkah and Madinah.",
        "Full amount will be refunded in case of any emergency.",
    ]),
    ("VISA POLICIES", [
        "No Visa amount will be refunded if the visa is issued.",
    ]),
    ("TRANSPORTATION POLICIES", [
        "Transportation is fully refundable before traveling.",
        "Only the transportation included in the package will be provided; any additional services will incur "
        "extra charges.",
    ]),
]

PAYMENT_OPTIONS = [
    ("Payment Options for the tickets:", ["1. Credit Card", "2. Zelle", "3. Wire Transfer / Bank Deposit"]),
    ("Payment Options for the Land Package:", ["1. Zelle", "2. Bank Deposit", "3. Wire Transfer"]),
]
MERCHANT_NOTE = "Note: In case of payment of land package through credit card there will be a Merchant charge."


def confirmation_filename(booking: NormalizedBooking, settings: Settings) -> str:
    return f"{settings.document_prefix}-Booking-{booking.id}.pdf"


def payment_method_label(method: str) -> str:
    return PAYMENT_METHOD_LABELS.get(method, method.replace("_", " ").title() if method else MISSING)


def masked_card(extras: DocumentExtras) -> str:
    digits = "".join(ch for ch in extras.card_number if ch.isdigit())
    if digits:
        return f"**** **** **** {digits[-4:]}"
    if extras.card_last4:
        return f"**** **** **** {extras.card_last4}"
    return ""


def _payment_lines(record: PaymentRecord, date_label: str) -> List[str]:
    lines = [
        f"Amount: {format_currency(record.amount)}",
        f"Method: {(record.method or MISSING).replace('_', ' ').upper()}",
    ]
    if record.date:
        lines.append(f"{date_label}: {format_display_date(record.date)}")
    if record.reference:
        lines.append(f"Ref: {record.reference}")
    if record.notes:
        lines.append(f"Notes: {record.notes}")
    return lines


def _reference(page: PdfPageWriter, booking: NormalizedBooking) -> None:
    page.boxed_text(
        [
            f"Reference: {booking.id or MISSING}",
            f"Status: {booking.status.upper()}    Approval: {booking.approval_status.upper()}",
        ],
        title="Booking Reference",
    )


def _profit_summary(page: PdfPageWriter, booking: NormalizedBooking) -> None:
    page.ensure_space(80)
    totals = booking.totals
    page.boxed_text(
        [
            f"Total Cost: {format_currency(totals.total_cost)}        Total Sale: {format_currency(totals.total_sale)}",
            f"Profit: {format_currency(totals.profit)}",
        ],
        title="PROFIT SUMMARY",
    )


def _traveler(page: PdfPageWriter, booking: NormalizedBooking, extras: DocumentExtras) -> None:
    page.ensure_space(120)
    page.section_title("TRAVELER INFORMATION")
    page.label_value("Full Name:", booking.customer.name)
    page.label_value("Email Address:", booking.customer.email)
    page.label_value("Contact Number:", booking.customer.phone)
    page.label_value("Assigned Agent:", booking.agent.name or "Not Assigned")
    if extras.passengers:
        detail = extras.passengers
        if extras.adults or extras.children:
            detail = f"{detail} (Adults: {extras.adults or 0}, Children: {extras.children or 0})"
        page.label_value("Passengers:", detail)
    page.spacer()


def _dates(page: PdfPageWriter, booking: NormalizedBooking) -> None:
    page.ensure_space(100)
    page.section_title("TRAVEL DATES & PACKAGE")
    page.label_value("Booking Date:", format_display_date(booking.dates.booking))
    page.label_value("Departure:", format_display_date(booking.dates.departure))
    page.label_value("Return:", format_display_date(booking.dates.return_date))
    page.label_value("Package:", booking.package)
    page.spacer()


def _flight(page: PdfPageWriter, booking: NormalizedBooking) -> None:
    flight = booking.flight
    if not (flight.route or flight.pnr or flight.itinerary):
        return
    page.ensure_space(100)
    page.section_title("FLIGHT INFORMATION")
    if flight.route:
        page.label_value("Route:", flight.route.replace(ROUTE_SEPARATOR, " to "))
    page.label_value("Class:", flight.flight_class.replace("_", " ").title())
    if flight.pnr:
        page.label_value("PNR:", flight.pnr)
    if flight.itinerary:
        page.paragraph("Itinerary:", font="Helvetica-Bold", size=10)
        for line in flight.itinerary.splitlines():
            if line.strip():
                page.paragraph(line.strip(), font="Courier", size=8, indent=16)
    page.spacer()


def _hotels(page: PdfPageWriter, booking: NormalizedBooking) -> None:
    if not booking.hotels:
        return
    page.ensure_space(80)
    page.section_title("HOTEL INFORMATION")
    page.table(
        ["Hotel Name", "Room Type", "Check-In Date", "Check-Out Date"],
        [
            [
                hotel.name or MISSING,
                hotel.room_type or MISSING,
                format_display_date(hotel.check_in),
                format_display_date(hotel.check_out),
            ]
            for hotel in booking.hotels
        ],
        [0.34, 0.2, 0.23, 0.23],
    )


def _visas(page: PdfPageWriter, booking: NormalizedBooking) -> None:
    if not booking.visas:
        return
    page.ensure_space(80)
    page.section_title("VISA INFORMATION")
    page.table(
        ["Passenger Name", "Nationality", "Visa Type"],
        [
            [visa.name or MISSING, visa.nationality or MISSING, (visa.visa_type or MISSING).title()]
            for visa in booking.visas
        ],
        [0.45, 0.3, 0.25],
    )


def _transport(page: PdfPageWriter, booking: NormalizedBooking, extras: DocumentExtras) -> None:
    if not (booking.transport_legs or extras.pickup_location):
        return
    page.ensure_space(80)
    page.section_title("TRANSPORTATION DETAILS")
    if extras.transport_type:
        page.label_value("Transport Type:", extras.transport_type.title())
    if extras.pickup_location:
        page.label_value("Pickup Location:", extras.pickup_location)
    if booking.transport_legs:
        page.table(
            ["From", "To", "Vehicle", "Date", "Time"],
            [
                [
                    leg.from_location or MISSING,
                    leg.to or MISSING,
                    leg.vehicle_type or MISSING,
                    format_display_date(leg.date),
                    leg.time or MISSING,
                ]
                for leg in booking.transport_legs
            ],
            [0.24, 0.24, 0.16, 0.22, 0.14],
        )


def _pricing(page: PdfPageWriter, booking: NormalizedBooking) -> None:
    if not booking.costing_rows:
        return
    page.ensure_space(150)
    page.section_title("PRICING BREAKDOWN")
    page.table(
        ["Service / Item", "Qty", "Unit Price", "Total"],
        [
            [
                row.label or MISSING,
                f"{row.quantity:g}",
                format_currency(row.sale_per_qty),
                format_currency(row.total_sale),
            ]
            for row in booking.costing_rows
        ],
        [0.46, 0.12, 0.21, 0.21],
        footer_row=["", "", "TOTAL:", format_currency(booking.totals.total_sale)],
    )


def _payments(page: PdfPageWriter, extras: DocumentExtras) -> None:
    if extras.payment_received is None and extras.payment_due is None:
        return
    page.ensure_space(150)
    page.section_title("PAYMENT INFORMATION")
    if extras.payment_received is not None:
        page.boxed_text(_payment_lines(extras.payment_received, "Date"), title="PAYMENT RECEIVED")
    if extras.payment_due is not None:
        page.boxed_text(_payment_lines(extras.payment_due, "Due"), title="PAYMENT DUE")


def _card(page: PdfPageWriter, extras: DocumentExtras) -> None:
    page.ensure_space(100)
    page.section_title("CREDIT CARD INFORMATION")
    card = masked_card(extras)
    if not (card or extras.cardholder_name):
        page.paragraph("No credit card information provided", font="Helvetica-Oblique", size=10)
        page.spacer()
        return
    page.label_value("Payment Method:", payment_method_label(extras.payment_method))
    page.label_value("Cardholder Name:", extras.cardholder_name)
    page.label_value("Card Number:", card)
    page.label_value("Expiry Date:", extras.expiry_date)
    page.spacer()


def _notice(page: PdfPageWriter) -> None:
    page.ensure_space(70)
    page.section_title("IMPORTANT NOTICE")
    page.paragraph(IMPORTANT_NOTICE, size=9)
    page.spacer()


def _terms(page: PdfPageWriter) -> None:
    page.ensure_space(60)
    page.section_title("TERMS AND CONDITIONS")
    for heading, items in TERMS:
        page.paragraph(heading, font="Helvetica-Bold", size=9)
        for item in items:
            page.paragraph(f"• {item}", size=8, indent=16)
        page.spacer(4)
    page.paragraph("PAYMENT OPTIONS", font="Helvetica-Bold", size=9)
    for heading, items in PAYMENT_OPTIONS:
        page.paragraph(heading, font="Helvetica-Bold", size=8, indent=16)
        for item in items:
            page.paragraph(item, size=8, indent=24)
    page.paragraph(MERCHANT_NOTE, font="Helvetica-Oblique", size=8, indent=16)


def render_booking_confirmation(booking: NormalizedBooking, extras: DocumentExtras, settings: Settings) -> bytes:
    """Full booking confirmation as PDF bytes."""
    page = PdfPageWriter(settings, "BOOKING CONFIRMATION")
    _reference(page, booking)
    _profit_summary(page, booking)
    _traveler(page, booking, extras)
    _dates(page, booking)
    _flight(page, booking)
    _hotels(page, booking)
    _visas(page, booking)
    _transport(page, booking, extras)
    _pricing(page, booking)
    _payments(page, extras)
    _card(page, extras)
    _notice(page)
    _terms(page)
    return page.finish()
