from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from travel_desk.analytics.agent_resolver import extract_booking_agent_id
from travel_desk.core.errors import PayloadError
from travel_desk.models.bookings import CurrentUser
from travel_desk.schemas.booking_form import (
    BookingFormData,
    CostingRow,
    HotelEntry,
    TransportLeg,
    VisaEntry,
    empty_hotels,
    starter_costing_rows,
)
from travel_desk.shared.coerce import dig, first_list, first_text, mappings, text, to_number
from travel_desk.shared.time import clean_date, to_iso_datetime, utc_now

_NON_ALNUM = re.compile(r"[^A-Z0-9]")
_NON_DIGIT = re.compile(r"\D")


def sanitize_pnr(value: str) -> str:
    return _NON_ALNUM.sub("", (value or "").upper())[:6]


def capitalize_visa_type(value: str, default: str) -> str:
    value = (value or "").strip()
    if not value:
        return default
    return value[0].upper() + value[1:].lower()


def _iso(value: str) -> str:
    return to_iso_datetime(value) or ""


def _number_text(value: Any) -> str:
    number = to_number(value)
    if not number:
        return ""
    return str(int(number)) if number.is_integer() else str(number)


def costing_row_payload(row: CostingRow) -> Dict[str, Any]:
    qty = to_number(row.quantity)
    cpq = to_number(row.cost_per_qty)
    spq = to_number(row.sale_per_qty)
    label = (row.label or "").strip()
    return {
        "item": label,
        "label": label,
        "quantity": qty,
        "costPerQty": cpq,
        "salePerQty": spq,
        "totalCost": qty * cpq,
        "totalSale": qty * spq,
        "profit": qty * spq - qty * cpq,
    }


def _leg_payload(leg: TransportLeg) -> Dict[str, Any]:
    return {
        "from": leg.from_location or "",
        "to": leg.to or "",
        "vehicleType": leg.vehicle_type or "Sedan",
        "date": _iso(leg.date),
        "time": leg.time or "",
    }


def _resolve_agent(form: BookingFormData, user: Optional[CurrentUser]) -> Optional[str]:
    explicit = (form.agent or "").strip()
    if explicit:
        return explicit
    if user is None:
        return None
    return user.agent_id or user.id or None


def build_booking_payload(
    form: BookingFormData,
    user: Optional[CurrentUser],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Expand one wizard draft into the booking document the API stores.

    Both the current nested shape and every legacy flat field are written, so readers of
    either schema generation find what they expect.
    """
    customer_name = (form.name or "").strip()
    customer_email = (form.email or "").strip()
    package = (form.package or "").strip()
    if not customer_name:
        raise PayloadError("name", "Customer name is required")
    if not customer_email:
        raise PayloadError("email", "Customer email is required")
    if not package:
        raise PayloadError("package", "Package is required")

    agent_id = _resolve_agent(form, user)
    booking_date = to_iso_datetime(form.date) or to_iso_datetime(form.departure_date) or to_iso_datetime(
        now or utc_now()
    )
    package_price = to_number(form.package_price)
    explicit_total = to_number(form.total_amount)

    rows = [costing_row_payload(row) for row in form.costing_rows]
    sum_cost = sum(row["totalCost"] for row in rows)
    sum_sale = sum(row["totalSale"] for row in rows)
    sum_profit = sum_sale - sum_cost
    # An explicit total overrides the flat amount only; structured totals stay summed.
    headline_amount = explicit_total or sum_sale
    payment_method = form.payment_method or "credit_card"

    pnr = (form.pnr or (form.pnrs[0] if form.pnrs else "") or "").upper()
    pnr_sources = form.pnrs or ([form.pnr] if form.pnr else [])
    pnrs = [value for value in (sanitize_pnr(item) for item in pnr_sources) if value]
    itinerary = form.flights_itinerary or ""
    legs = [_leg_payload(leg) for leg in form.legs]
    visa_type = capitalize_visa_type(form.visa_type, "Umrah")

    payload: Dict[str, Any] = {
        "customerName": customer_name,
        "customerEmail": customer_email,
        "contactNumber": form.contact_number or "",
        "passengers": form.passengers or "",
        "adults": form.adults or "",
        "children": form.children or "",
        "agent": agent_id,
        "agentId": agent_id,
        "customerGroup": customer_email,
        "package": package,
        "pricing": {
            "packageName": package,
            "packagePrice": package_price,
            "additionalServices": form.additional_services or "",
            "totalAmount": headline_amount,
            "paymentMethod": payment_method,
            "table": rows,
            "totals": {
                "totalCostPrice": sum_cost,
                "totalSalePrice": sum_sale,
                "profit": sum_profit,
            },
        },
        "costing": {
            "rows": rows,
            "totals": {
                "totalCost": sum_cost,
                "totalSale": sum_sale,
                "profit": sum_profit,
            },
        },
        "packagePrice": package_price,
        "additionalServices": form.additional_services or "",
        "totalAmount": headline_amount,
        "amount": headline_amount,
        "paymentMethod": payment_method,
        "date": booking_date,
        "departureDate": _iso(form.departure_date),
        "returnDate": _iso(form.return_date),
        "flight": {
            "itinerary": itinerary,
            "departureCity": form.departure_city or "",
            "arrivalCity": form.arrival_city or "",
            "departureDate": _iso(form.departure_date),
            "returnDate": _iso(form.return_date),
            "flightClass": form.flight_class or "economy",
            "pnr": (form.pnr or "").upper(),
        },
        "flights": {
            "raw": itinerary,
            "itineraryLines": [line for line in itinerary.split("\n") if line],
        },
        "pnr": pnr,
        "pnrs": pnrs,
        "departureCity": form.departure_city or "",
        "arrivalCity": form.arrival_city or "",
        "flightClass": form.flight_class or "economy",
        "hotels": [
            {
                "name": hotel.hotel_name or hotel.name or "",
                "hotelName": hotel.hotel_name or hotel.name or "",
                "roomType": hotel.room_type or "",
                "checkIn": _iso(hotel.check_in),
                "checkOut": _iso(hotel.check_out),
            }
            for hotel in form.hotels
        ],
        "hotel": {
            "name": form.hotel_name or "",
            "hotelName": form.hotel_name or "",
            "roomType": form.room_type or "",
            "checkIn": _iso(form.check_in),
            "checkOut": _iso(form.check_out),
        },
        "visas": {
            "count": len(form.visas),
            "passengers": [
                {
                    "fullName": visa.name or "",
                    "name": visa.name or "",
                    "nationality": visa.nationality or "",
                    "visaType": capitalize_visa_type(visa.visa_type, "Tourist"),
                }
                for visa in form.visas
            ],
        },
        "visa": {
            "visaType": visa_type,
            "nationality": form.nationality or "",
            "passportNumber": form.passport_number or "",
        },
        "visaType": visa_type,
        "nationality": form.nationality or "",
        "transport": {
            "legs": legs,
            "transportType": form.transport_type or "bus",
            "pickupLocation": form.pickup_location or "",
        },
        "transportation": {
            "count": len(legs),
            "legs": [dict(leg) for leg in legs],
        },
        "payment": {
            "method": payment_method,
            "cardLast4": _NON_DIGIT.sub("", form.card_number or "")[-4:],
            "cardholderName": form.cardholder_name or "",
            "expiryDate": form.expiry_date or "",
        },
        "cardNumber": form.card_number or "",
        "expiryDate": form.expiry_date or "",
        "cvv": form.cvv or "",
        "cardholderName": form.cardholder_name or "",
        "status": "pending",
        "approvalStatus": "pending",
    }

    if (form.payment_received_amount or "").strip():
        received: Dict[str, Any] = {
            "amount": to_number(form.payment_received_amount),
            "method": form.payment_received_method or "credit_card",
        }
        if to_iso_datetime(form.payment_received_date):
            received["date"] = to_iso_datetime(form.payment_received_date)
        if form.payment_received_reference:
            received["reference"] = form.payment_received_reference
        payload["paymentReceived"] = received
    if (form.payment_due_amount or "").strip():
        due: Dict[str, Any] = {
            "amount": to_number(form.payment_due_amount),
            "method": form.payment_due_method or "credit_card",
        }
        if to_iso_datetime(form.payment_due_date):
            due["dueDate"] = to_iso_datetime(form.payment_due_date)
        if form.payment_due_notes:
            due["notes"] = form.payment_due_notes
        payload["paymentDue"] = due
    return payload


def _seed_hotels(raw: Mapping[str, Any]) -> List[HotelEntry]:
    entries = first_list(raw, "hotels")
    if entries is None:
        legacy = raw.get("hotel")
        entries = [legacy] if isinstance(legacy, Mapping) else []
    hotels = []
    for entry in mappings(entries):
        name = first_text(entry, "name", "hotelName")
        hotels.append(
            HotelEntry(
                hotel_name=name,
                name=name,
                room_type=text(entry.get("roomType")),
                check_in=clean_date(entry.get("checkIn")),
                check_out=clean_date(entry.get("checkOut")),
            )
        )
    return hotels or empty_hotels()


def _seed_visas(raw: Mapping[str, Any]) -> List[VisaEntry]:
    entries = first_list(raw, "visas.passengers", "visas")
    default_type = "tourist"
    if entries is None:
        legacy = raw.get("visa")
        entries = [legacy] if isinstance(legacy, Mapping) else []
        default_type = "umrah"
    return [
        VisaEntry(
            name=first_text(entry, "fullName", "name"),
            nationality=text(entry.get("nationality")),
            visa_type=(text(entry.get("visaType")) or default_type).lower(),
        )
        for entry in mappings(entries)
    ]


def _seed_legs(raw: Mapping[str, Any]) -> List[TransportLeg]:
    entries = first_list(raw, "transport.legs", "transportation.legs") or []
    return [
        TransportLeg(
            from_location=text(entry.get("from")),
            to=text(entry.get("to")),
            vehicle_type=text(entry.get("vehicleType")) or "Sedan",
            date=clean_date(entry.get("date")),
            time=text(entry.get("time")),
        )
        for entry in mappings(entries)
    ]


def _seed_costing(raw: Mapping[str, Any]) -> List[CostingRow]:
    entries = first_list(raw, "pricing.table", "costing.rows") or []
    rows = [
        CostingRow(
            label=first_text(entry, "label", "item"),
            quantity=to_number(entry.get("quantity")),
            cost_per_qty=to_number(entry.get("costPerQty")),
            sale_per_qty=to_number(entry.get("salePerQty")),
        )
        for entry in mappings(entries)
    ]
    return rows or starter_costing_rows()


def _first_amount(raw: Mapping[str, Any], *paths: str) -> float:
    for path in paths:
        amount = to_number(dig(raw, path))
        if amount:
            return amount
    return 0.0


def _seed_total_amount(raw: Mapping[str, Any], rows: List[CostingRow]) -> str:
    """Stored headline total, kept only when it overrides the summed sale of `rows`.

    A total equal to the row sum is left blank so later row edits carry through to `amount`.
    """
    stored = _first_amount(
        raw,
        "totalAmount",
        "amount",
        "pricing.totalAmount",
        "costing.totals.totalSale",
        "pricing.totals.totalSalePrice",
    )
    row_sale = sum(costing_row_payload(row)["totalSale"] for row in rows)
    if abs(stored - row_sale) < 0.005:
        return ""
    return _number_text(stored)


def form_data_from_booking(raw: Mapping[str, Any]) -> BookingFormData:
    """Seed a wizard draft from a stored booking for full editing."""
    costing_rows = _seed_costing(raw)
    visas = _seed_visas(raw)
    legs = _seed_legs(raw)
    pnr = first_text(raw, "pnr", "flight.pnr")
    raw_pnrs = raw.get("pnrs") if isinstance(raw.get("pnrs"), list) else []
    pnrs = [text(value) for value in raw_pnrs if text(value)] or ([pnr] if pnr else [])
    received = raw.get("paymentReceived") if isinstance(raw.get("paymentReceived"), Mapping) else {}
    due = raw.get("paymentDue") if isinstance(raw.get("paymentDue"), Mapping) else {}
    return BookingFormData(
        name=first_text(raw, "customerName"),
        email=first_text(raw, "customerEmail"),
        contact_number=first_text(raw, "contactNumber"),
        passengers=first_text(raw, "passengers"),
        adults=first_text(raw, "adults"),
        children=first_text(raw, "children"),
        agent=extract_booking_agent_id(raw) or "",
        card_number=first_text(raw, "cardNumber"),
        expiry_date=first_text(raw, "expiryDate", "payment.expiryDate"),
        cvv=first_text(raw, "cvv"),
        cardholder_name=first_text(raw, "cardholderName", "payment.cardholderName"),
        departure_city=first_text(raw, "flight.departureCity", "departureCity"),
        arrival_city=first_text(raw, "flight.arrivalCity", "arrivalCity"),
        departure_date=clean_date(first_text(raw, "departureDate", "flight.departureDate")),
        return_date=clean_date(first_text(raw, "returnDate", "flight.returnDate")),
        flight_class=first_text(raw, "flight.flightClass", "flightClass") or "economy",
        pnr=pnr,
        pnrs=pnrs,
        flights_itinerary=first_text(raw, "flights.raw", "flight.itinerary"),
        hotel_name=first_text(raw, "hotel.name", "hotel.hotelName"),
        room_type=first_text(raw, "hotel.roomType"),
        check_in=clean_date(dig(raw, "hotel.checkIn")),
        check_out=clean_date(dig(raw, "hotel.checkOut")),
        hotels=_seed_hotels(raw),
        visa_type=(first_text(raw, "visa.visaType", "visaType") or "umrah").lower(),
        passport_number=first_text(raw, "visa.passportNumber", "passportNumber"),
        nationality=first_text(raw, "visa.nationality", "nationality"),
        visas_count=len(visas),
        visas=visas,
        transport_type=first_text(raw, "transport.transportType") or "bus",
        pickup_location=first_text(raw, "transport.pickupLocation"),
        legs_count=len(legs),
        legs=legs,
        package=first_text(raw, "package"),
        package_price=_number_text(_first_amount(raw, "packagePrice", "pricing.packagePrice")),
        additional_services=first_text(raw, "additionalServices", "pricing.additionalServices"),
        payment_method=first_text(raw, "paymentMethod", "pricing.paymentMethod") or "credit_card",
        costing_rows=costing_rows,
        total_amount=_seed_total_amount(raw, costing_rows),
        payment_received_amount=_number_text(received.get("amount")),
        payment_received_method=text(received.get("method")) or "credit_card",
        payment_received_date=clean_date(received.get("date")),
        payment_received_reference=text(received.get("reference")),
        payment_due_amount=_number_text(due.get("amount")),
        payment_due_method=text(due.get("method")) or "credit_card",
        payment_due_date=clean_date(due.get("dueDate")),
        payment_due_notes=text(due.get("notes")),
        date=clean_date(raw.get("date")),
    )
