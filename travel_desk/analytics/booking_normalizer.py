from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from travel_desk.analytics.agent_resolver import (
    UNASSIGNED,
    extract_booking_agent_id,
    resolve_agent_name,
)
from travel_desk.models.bookings import CurrentUser
from travel_desk.schemas.bookings import (
    APPROVAL_STATUSES,
    BOOKING_STATUSES,
    AgentRef,
    BookingDates,
    CostingLine,
    CostingTotals,
    CustomerInfo,
    DocumentExtras,
    FlightInfo,
    HotelStay,
    NormalizedBooking,
    PaymentRecord,
    TransportLegInfo,
    VisaPassenger,
)
from travel_desk.shared.coerce import dig, extract_record_id, first_list, first_text, mappings, text, to_number
from travel_desk.shared.time import clean_date

ROUTE_SEPARATOR = " → "

# Ordered source paths per canonical field; the first non-empty value wins.
# Canonical paths are listed too so already-normalized records pass through unchanged.
CUSTOMER_NAME_SOURCES = ("customerName", "customer", "customer.name")
CUSTOMER_EMAIL_SOURCES = ("customerEmail", "email", "customer.email")
CUSTOMER_PHONE_SOURCES = ("contactNumber", "phone", "customer.phone")
AGENT_NAME_SOURCES = ("agentName", "agent.name")
PACKAGE_SOURCES = ("package", "pricing.packageName")
BOOKING_DATE_SOURCES = ("date", "dates.booking")
DEPARTURE_DATE_SOURCES = ("departureDate", "flight.departureDate", "dates.departure")
RETURN_DATE_SOURCES = ("returnDate", "flight.returnDate", "dates.return")
CREATED_DATE_SOURCES = ("createdAt", "dates.created", "date")
DEPARTURE_CITY_SOURCES = ("flight.departureCity", "departureCity")
ARRIVAL_CITY_SOURCES = ("flight.arrivalCity", "arrivalCity")
FLIGHT_CLASS_SOURCES = ("flight.flightClass", "flightClass", "flight.class")
PNR_SOURCES = ("flight.pnr", "pnr")
ITINERARY_SOURCES = ("flights.raw", "flight.itinerary")
LEG_SOURCES = ("transport.legs", "transportation.legs", "transportLegs")
COSTING_ROW_SOURCES = ("pricing.table", "costing.rows", "costingRows")
# (path, cost key, sale key) for stored totals, used only when there are no line items
STRUCTURED_TOTAL_SOURCES = (
    ("costing.totals", "totalCost", "totalSale"),
    ("pricing.totals", "totalCostPrice", "totalSalePrice"),
    ("totals", "totalCost", "totalSale"),
)
FLAT_AMOUNT_SOURCES = ("amount", "totalAmount", "pricing.totalAmount")
PAYMENT_METHOD_SOURCES = ("flightPayments.mode", "payment.method", "paymentMethod", "pricing.paymentMethod")


def _as_mapping(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, NormalizedBooking):
        return raw.model_dump(by_alias=True)
    if isinstance(raw, Mapping):
        return raw
    return {}


def _choose(value: Any, allowed: Sequence[str]) -> str:
    candidate = text(value).lower()
    return candidate if candidate in allowed else "pending"


def _clean_pnr(value: str) -> str:
    return "".join(value.split()).upper()


def _has_content(entry: Mapping[str, Any], keys: Iterable[str]) -> bool:
    return any(text(entry.get(key)) for key in keys)


def _flight(raw: Mapping[str, Any]) -> FlightInfo:
    route = first_text(raw, "flight.route")
    if not route:
        cities = [first_text(raw, *DEPARTURE_CITY_SOURCES), first_text(raw, *ARRIVAL_CITY_SOURCES)]
        route = ROUTE_SEPARATOR.join(city for city in cities if city)
    pnr = first_text(raw, *PNR_SOURCES)
    if not pnr:
        pnrs = raw.get("pnrs")
        if isinstance(pnrs, list) and pnrs:
            pnr = text(pnrs[0])
    return FlightInfo(
        route=route,
        flight_class=first_text(raw, *FLIGHT_CLASS_SOURCES),
        pnr=_clean_pnr(pnr),
        itinerary=first_text(raw, *ITINERARY_SOURCES),
    )


def _hotels(raw: Mapping[str, Any]) -> List[HotelStay]:
    entries = first_list(raw, "hotels")
    if entries is None:
        legacy = raw.get("hotel")
        has_legacy = isinstance(legacy, Mapping) and _has_content(
            legacy, ("name", "hotelName", "roomType", "checkIn", "checkOut")
        )
        entries = [legacy] if has_legacy else []
    return [
        HotelStay(
            name=first_text(entry, "name", "hotelName"),
            room_type=text(entry.get("roomType")),
            check_in=clean_date(entry.get("checkIn")),
            check_out=clean_date(entry.get("checkOut")),
        )
        for entry in mappings(entries)
    ]


def _visas(raw: Mapping[str, Any], customer_name: str) -> List[VisaPassenger]:
    flat_type = text(raw.get("visaType"))
    entries = first_list(raw, "visas", "visas.passengers")
    if entries is None:
        legacy = raw.get("visa")
        # visaType alone is a form default, not evidence of a passenger
        if isinstance(legacy, Mapping) and _has_content(legacy, ("name", "fullName", "nationality", "passportNumber")):
            return [
                VisaPassenger(
                    name=first_text(legacy, "fullName", "name") or customer_name,
                    nationality=text(legacy.get("nationality")),
                    visa_type=text(legacy.get("visaType")) or flat_type,
                )
            ]
        return []
    return [
        VisaPassenger(
            name=first_text(entry, "name", "fullName", "passengerName"),
            nationality=text(entry.get("nationality")),
            visa_type=text(entry.get("visaType")) or flat_type,
        )
        for entry in mappings(entries)
    ]


def _legs(raw: Mapping[str, Any]) -> List[TransportLegInfo]:
    entries = first_list(raw, *LEG_SOURCES) or []
    return [
        TransportLegInfo(
            from_location=text(entry.get("from")),
            to=text(entry.get("to")),
            vehicle_type=text(entry.get("vehicleType")),
            date=clean_date(entry.get("date")),
            time=text(entry.get("time")),
        )
        for entry in mappings(entries)
    ]


def build_costing_line(label: str, quantity: Any, cost_per_qty: Any, sale_per_qty: Any) -> CostingLine:
    qty = to_number(quantity)
    cpq = to_number(cost_per_qty)
    spq = to_number(sale_per_qty)
    total_cost = qty * cpq
    total_sale = qty * spq
    return CostingLine(
        label=label,
        quantity=qty,
        cost_per_qty=cpq,
        sale_per_qty=spq,
        total_cost=total_cost,
        total_sale=total_sale,
        profit=total_sale - total_cost,
    )


def _costing_rows(raw: Mapping[str, Any]) -> List[CostingLine]:
    entries = first_list(raw, *COSTING_ROW_SOURCES) or []
    # Stored per-row totals are ignored; they drift from quantity * price in older records.
    return [
        build_costing_line(
            first_text(entry, "label", "item"),
            entry.get("quantity"),
            entry.get("costPerQty"),
            entry.get("salePerQty"),
        )
        for entry in mappings(entries)
    ]


def sum_costing(rows: Iterable[CostingLine]) -> CostingTotals:
    total_cost = 0.0
    total_sale = 0.0
    for row in rows:
        total_cost += row.total_cost
        total_sale += row.total_sale
    return CostingTotals(total_cost=total_cost, total_sale=total_sale, profit=total_sale - total_cost)


def _totals(raw: Mapping[str, Any], rows: List[CostingLine]) -> CostingTotals:
    if rows:
        return sum_costing(rows)
    for path, cost_key, sale_key in STRUCTURED_TOTAL_SOURCES:
        stored = dig(raw, path)
        if not isinstance(stored, Mapping):
            continue
        total_cost = to_number(stored.get(cost_key))
        total_sale = to_number(stored.get(sale_key))
        if total_cost or total_sale:
            return CostingTotals(total_cost=total_cost, total_sale=total_sale, profit=total_sale - total_cost)
    for path in FLAT_AMOUNT_SOURCES:
        amount = to_number(dig(raw, path))
        if amount:
            return CostingTotals(total_cost=0.0, total_sale=amount, profit=amount)
    return CostingTotals()


def normalize_booking(
    raw: Any,
    agents: Iterable[Any] = (),
    current_user: Optional[CurrentUser] = None,
) -> NormalizedBooking:
    """Reconcile one booking record, whatever schema generation it came from, into the canonical shape.

    Never raises on malformed input: missing or garbage fields fall back to empty strings,
    empty lists and zero amounts.
    """
    source = _as_mapping(raw)
    customer = CustomerInfo(
        name=first_text(source, *CUSTOMER_NAME_SOURCES),
        email=first_text(source, *CUSTOMER_EMAIL_SOURCES),
        phone=first_text(source, *CUSTOMER_PHONE_SOURCES),
    )

    agent_id = extract_booking_agent_id(source)
    if agent_id:
        agent_name = resolve_agent_name(
            agent_id,
            agents,
            fallback_name=first_text(source, *AGENT_NAME_SOURCES),
            current_user=current_user,
        )
    else:
        agent_name = UNASSIGNED

    rows = _costing_rows(source)
    return NormalizedBooking(
        id=extract_record_id(source) or "",
        customer=customer,
        agent=AgentRef(id=agent_id, name=agent_name),
        package=first_text(source, *PACKAGE_SOURCES),
        status=_choose(source.get("status"), BOOKING_STATUSES),
        approval_status=_choose(source.get("approvalStatus"), APPROVAL_STATUSES),
        dates=BookingDates(
            booking=clean_date(first_text(source, *BOOKING_DATE_SOURCES)),
            departure=clean_date(first_text(source, *DEPARTURE_DATE_SOURCES)),
            return_date=clean_date(first_text(source, *RETURN_DATE_SOURCES)),
            created=clean_date(first_text(source, *CREATED_DATE_SOURCES)),
        ),
        flight=_flight(source),
        hotels=_hotels(source),
        visas=_visas(source, customer.name),
        transport_legs=_legs(source),
        costing_rows=rows,
        totals=_totals(source, rows),
    )


def normalize_bookings(
    raws: Iterable[Any],
    agents: Iterable[Any] = (),
    current_user: Optional[CurrentUser] = None,
) -> List[NormalizedBooking]:
    roster = list(agents)
    return [normalize_booking(raw, roster, current_user) for raw in raws]


def _payment_record(value: Any, date_key: str) -> Optional[PaymentRecord]:
    if not isinstance(value, Mapping):
        return None
    return PaymentRecord(
        amount=to_number(value.get("amount")),
        method=text(value.get("method")),
        date=clean_date(value.get(date_key)),
        reference=text(value.get("reference")),
        notes=text(value.get("notes")),
    )


def extract_document_extras(raw: Any) -> DocumentExtras:
    source = _as_mapping(raw)
    legs = first_list(source, *LEG_SOURCES) or []
    first_leg_vehicle = text(legs[0].get("vehicleType")) if legs and isinstance(legs[0], Mapping) else ""
    return DocumentExtras(
        payment_method=first_text(source, *PAYMENT_METHOD_SOURCES),
        card_number=first_text(source, "cardNumber", "payment.cardNumber"),
        card_last4=first_text(source, "payment.cardLast4", "cardLast4"),
        cardholder_name=first_text(source, "payment.cardholderName", "cardholderName"),
        expiry_date=first_text(source, "payment.expiryDate", "expiryDate"),
        payment_received=_payment_record(source.get("paymentReceived"), "date"),
        payment_due=_payment_record(source.get("paymentDue"), "dueDate"),
        passengers=text(source.get("passengers")),
        adults=text(source.get("adults")),
        children=text(source.get("children")),
        pickup_location=first_text(source, "transport.pickupLocation", "pickupLocation"),
        transport_type=first_leg_vehicle or first_text(source, "transport.transportType", "transportType"),
    )


def booking_search_text(booking: NormalizedBooking) -> Dict[str, str]:
    return {
        "customer": booking.customer.name.lower(),
        "id": booking.id.lower(),
        "package": booking.package.lower(),
        "email": booking.customer.email.lower(),
        "pnr": booking.flight.pnr.lower(),
    }
