from __future__ import annotations

import pytest

from travel_desk.analytics.booking_normalizer import (
    booking_search_text,
    extract_document_extras,
    normalize_booking,
)
from travel_desk.models.bookings import AgentRecord


def ann_lee_record():
    return {
        "_id": "65f1c0ffee0000000000abcd",
        "customerName": "Ann Lee",
        "customerEmail": "ann@example.com",
        "agentId": "agent-1",
        "package": "Umrah Gold",
        "status": "confirmed",
        "amount": 500,
        "costing": {
            "rows": [
                {"label": "Flights", "quantity": 2, "costPerQty": 100, "salePerQty": 150},
            ],
        },
        "createdAt": "2026-01-05T10:00:00Z",
    }


def test_costing_rows_override_flat_amount():
    booking = normalize_booking(ann_lee_record(), [AgentRecord(id="agent-1", name="Sara Khan")])
    assert booking.totals.total_cost == 200
    assert booking.totals.total_sale == 300
    assert booking.totals.profit == 100
    assert booking.agent.name == "Sara Khan"
    assert booking.dates.created == "2026-01-05"


def test_profit_identity_holds_per_row_and_total():
    booking = normalize_booking(ann_lee_record())
    for row in booking.costing_rows:
        assert row.profit == row.total_sale - row.total_cost
    assert booking.totals.profit == booking.totals.total_sale - booking.totals.total_cost


def test_normalization_is_idempotent():
    once = normalize_booking(ann_lee_record(), [AgentRecord(id="agent-1", name="Sara Khan")])
    twice = normalize_booking(once)
    assert twice == once


def test_flat_amount_used_when_no_rows_or_structured_totals():
    booking = normalize_booking({"_id": "b1", "totalAmount": "$1,250"})
    assert booking.totals.total_sale == 1250
    assert booking.totals.total_cost == 0
    assert booking.totals.profit == 1250


def test_structured_totals_used_when_rows_missing():
    booking = normalize_booking({"pricing": {"totals": {"totalCostPrice": 80, "totalSalePrice": 120}}})
    assert booking.totals.profit == 40


def test_garbage_input_never_raises():
    booking = normalize_booking(
        {
            "customerName": {"unexpected": True},
            "status": "archived",
            "approvalStatus": None,
            "createdAt": "not-a-date",
            "hotels": "Hilton",
            "costing": {"rows": [{"label": "Visa", "quantity": "abc", "salePerQty": None}]},
        }
    )
    assert booking.customer.name == ""
    assert booking.status == "pending"
    assert booking.approval_status == "pending"
    assert booking.dates.created == ""
    assert booking.hotels == []
    assert booking.costing_rows[0].total_sale == 0
    assert normalize_booking(None).id == ""


def test_legacy_singletons_become_lists():
    booking = normalize_booking(
        {
            "customerName": "Omar Ali",
            "hotel": {"name": "Pullman Zamzam", "checkIn": "2026-02-01", "checkOut": "2026-02-05"},
            "visa": {"nationality": "US", "visaType": "Umrah"},
            "flight": {"departureCity": "JFK", "arrivalCity": "MED", "pnr": " ab c12d "},
            "transportation": {"legs": [{"from": "Airport", "to": "Hotel", "vehicleType": "GMC"}]},
        }
    )
    assert [hotel.name for hotel in booking.hotels] == ["Pullman Zamzam"]
    assert booking.visas[0].name == "Omar Ali"
    assert booking.visas[0].visa_type == "Umrah"
    assert booking.flight.route == "JFK → MED"
    assert booking.flight.pnr == "ABC12D"
    assert booking.transport_legs[0].vehicle_type == "GMC"


def test_visa_type_alone_is_not_a_passenger():
    booking = normalize_booking({"visa": {"visaType": "Umrah"}, "visaType": "Umrah"})
    assert booking.visas == []


def test_missing_agent_is_unassigned():
    booking = normalize_booking({"agentId": None, "agent": "undefined"})
    assert booking.agent.id is None
    assert booking.agent.name == "Unassigned"


def test_document_extras():
    extras = extract_document_extras(
        {
            "cardNumber": "4111 1111 1111 1234",
            "payment": {"cardholderName": "Ann Lee", "method": "credit_card"},
            "paymentReceived": {"amount": "100", "method": "cash", "date": "2026-01-06"},
            "transport": {"pickupLocation": "Jeddah Airport", "transportType": "bus"},
        }
    )
    assert extras.cardholder_name == "Ann Lee"
    assert extras.payment_method == "credit_card"
    assert extras.payment_received is not None
    assert extras.payment_received.amount == 100
    assert extras.payment_due is None
    assert extras.pickup_location == "Jeddah Airport"
    assert extras.transport_type == "bus"


def test_search_text_is_lowercased():
    booking = normalize_booking(ann_lee_record())
    values = booking_search_text(booking)
    assert values["customer"] == "ann lee"
    assert values["package"] == "umrah gold"


NON_FINITE_VALUES = [float("nan"), float("inf"), "1e400", "Infinity", "-inf", "abc", True]


@pytest.mark.parametrize("value", NON_FINITE_VALUES)
def test_non_finite_row_amounts_become_zero(value):
    booking = normalize_booking(
        {
            "_id": "b1",
            "amount": value,
            "costingRows": [{"label": "Flights", "quantity": value, "costPerQty": value, "salePerQty": value}],
        }
    )
    row = booking.costing_rows[0]
    assert (row.quantity, row.cost_per_qty, row.sale_per_qty) == (0.0, 0.0, 0.0)
    assert (row.total_cost, row.total_sale, row.profit) == (0.0, 0.0, 0.0)
    totals = booking.totals
    assert (totals.total_cost, totals.total_sale, totals.profit) == (0.0, 0.0, 0.0)
    assert totals.profit == totals.total_sale - totals.total_cost


@pytest.mark.parametrize("value", NON_FINITE_VALUES)
def test_non_finite_stored_totals_become_zero(value):
    booking = normalize_booking(
        {
            "_id": "b1",
            "amount": value,
            "totalAmount": value,
            "pricing": {"totals": {"totalCostPrice": value, "totalSalePrice": value}, "totalAmount": value},
        }
    )
    totals = booking.totals
    assert (totals.total_cost, totals.total_sale, totals.profit) == (0.0, 0.0, 0.0)
    assert totals.profit == totals.total_sale - totals.total_cost


def test_booking_id_accepts_extended_json_references():
    assert normalize_booking({"_id": {"$oid": "65f1c0ffee0000000000abcd"}}).id == "65f1c0ffee0000000000abcd"
    assert normalize_booking({"id": " b7 "}).id == "b7"
    assert normalize_booking({"_id": "undefined"}).id == ""
