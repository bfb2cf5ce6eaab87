from __future__ import annotations

from datetime import datetime, timezone

import pytest

from travel_desk.core.errors import PayloadError
from travel_desk.models.bookings import CurrentUser
from travel_desk.schemas.booking_form import BookingFormData
from travel_desk.services.booking_payload import (
    build_booking_payload,
    capitalize_visa_type,
    form_data_from_booking,
    sanitize_pnr,
)

NOW = datetime(2026, 1, 7, 9, 30, tzinfo=timezone.utc)
AGENT = CurrentUser(id="user-1", name="Sara Khan", role="agent", agent_id="agent-1")


def ann_lee_form(**overrides) -> BookingFormData:
    values = {
        "name": "Ann Lee",
        "email": "ann@example.com",
        "package": "Umrah Gold",
        "departure_date": "2026-03-01",
        "pnr": "abc12d",
        "visas": [{"name": "Ann Lee", "nationality": "US", "visaType": "umrah"}],
        "visas_count": 1,
        "legs": [{"from": "JED", "to": "Makkah", "date": "2026-03-01", "time": "10:00"}],
        "legs_count": 1,
        "costing_rows": [{"label": "Flights", "quantity": 2, "costPerQty": 100, "salePerQty": 150}],
        "card_number": "4111 1111 1111 1234",
    }
    values.update(overrides)
    return BookingFormData(**values)


def test_payload_sums_costing_rows():
    payload = build_booking_payload(ann_lee_form(), AGENT, now=NOW)
    assert payload["costing"]["totals"] == {"totalCost": 200, "totalSale": 300, "profit": 100}
    assert payload["pricing"]["totals"]["totalSalePrice"] == 300
    assert payload["amount"] == 300
    row = payload["costing"]["rows"][0]
    assert row["item"] == row["label"] == "Flights"
    assert row["profit"] == 100


def test_explicit_total_only_overrides_flat_amounts():
    payload = build_booking_payload(ann_lee_form(total_amount="500"), AGENT, now=NOW)
    assert payload["amount"] == 500
    assert payload["totalAmount"] == 500
    assert payload["pricing"]["totalAmount"] == 500
    assert payload["costing"]["totals"]["totalSale"] == 300


def test_legacy_mirrors_are_written():
    payload = build_booking_payload(ann_lee_form(), AGENT, now=NOW)
    assert payload["agent"] == payload["agentId"] == "agent-1"
    assert payload["customerGroup"] == "ann@example.com"
    assert payload["pnr"] == "ABC12D"
    assert payload["pnrs"] == ["ABC12D"]
    assert payload["visas"]["passengers"][0]["visaType"] == "Umrah"
    assert payload["visaType"] == "Umrah"
    assert payload["transport"]["legs"] == payload["transportation"]["legs"]
    assert payload["transport"]["legs"][0]["vehicleType"] == "Sedan"
    assert payload["payment"]["cardLast4"] == "1234"
    assert payload["status"] == "pending"
    assert payload["approvalStatus"] == "pending"
    assert "paymentReceived" not in payload


def test_dates_are_iso_and_booking_date_falls_back():
    payload = build_booking_payload(ann_lee_form(), AGENT, now=NOW)
    assert payload["departureDate"] == "2026-03-01T00:00:00.000Z"
    assert payload["date"] == "2026-03-01T00:00:00.000Z"
    payload = build_booking_payload(ann_lee_form(departure_date=""), AGENT, now=NOW)
    assert payload["date"] == "2026-01-07T09:30:00.000Z"


def test_explicit_agent_wins_over_current_user():
    payload = build_booking_payload(ann_lee_form(agent="agent-9"), AGENT, now=NOW)
    assert payload["agentId"] == "agent-9"


def test_payment_tracking_is_optional():
    form = ann_lee_form(
        payment_received_amount="100",
        payment_received_method="cash",
        payment_received_date="2026-01-06",
        payment_due_amount="200",
        payment_due_notes="balance before travel",
    )
    payload = build_booking_payload(form, AGENT, now=NOW)
    assert payload["paymentReceived"] == {"amount": 100, "method": "cash", "date": "2026-01-06T00:00:00.000Z"}
    assert payload["paymentDue"]["notes"] == "balance before travel"
    assert "dueDate" not in payload["paymentDue"]


@pytest.mark.parametrize("field", ["name", "email", "package"])
def test_required_fields(field):
    with pytest.raises(PayloadError) as excinfo:
        build_booking_payload(ann_lee_form(**{field: "  "}), AGENT, now=NOW)
    assert excinfo.value.field == field
    assert excinfo.value.code == "payload_incomplete"


def test_text_helpers():
    assert sanitize_pnr(" ab-c 12d 99") == "ABC12D"
    assert capitalize_visa_type("TOURIST", "Umrah") == "Tourist"
    assert capitalize_visa_type("", "Umrah") == "Umrah"


def test_form_seed_from_stored_booking():
    stored = build_booking_payload(ann_lee_form(total_amount="500"), AGENT, now=NOW)
    form = form_data_from_booking({"_id": "b1", **stored})
    assert form.name == "Ann Lee"
    assert form.agent == "agent-1"
    assert form.departure_date == "2026-03-01"
    assert form.pnrs == ["ABC12D"]
    assert [visa.visa_type for visa in form.visas] == ["umrah"]
    assert form.visas_count == 1
    assert form.legs[0].from_location == "JED"
    assert form.costing_rows[0].sale_per_qty == 150
    assert form.total_amount == "500"


def test_form_seed_uses_starter_rows_for_legacy_records():
    form = form_data_from_booking({"customerName": "Omar Ali", "hotel": {"name": "Pullman Zamzam"}})
    assert [row.label for row in form.costing_rows][:2] == ["Flights", "Makkah Hotel"]
    assert form.hotels[0].hotel_name == "Pullman Zamzam"
    assert form.visas == []


def test_form_seed_leaves_derived_total_blank_so_row_edits_carry_through():
    stored = build_booking_payload(ann_lee_form(), AGENT, now=NOW)
    assert stored["amount"] == 300
    form = form_data_from_booking({"_id": "b1", **stored})
    assert form.total_amount == ""

    rows = list(form.costing_rows)
    rows[0] = rows[0].model_copy(update={"quantity": 4})
    edited = build_booking_payload(form.model_copy(update={"costing_rows": rows}), AGENT, now=NOW)
    assert edited["costing"]["totals"]["totalSale"] == 600
    assert edited["amount"] == 600
    assert edited["totalAmount"] == 600
