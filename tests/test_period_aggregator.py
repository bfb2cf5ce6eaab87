from __future__ import annotations

from datetime import date

import pytest

from travel_desk.analytics.period_aggregator import (
    aggregate_by_agent,
    aggregate_by_period,
    filter_by_period,
)
from travel_desk.core.errors import BadRequestError
from travel_desk.schemas.bookings import AgentRef, BookingDates, CostingTotals, NormalizedBooking

TODAY = date(2026, 1, 7)


def booking(created: str, sale: float = 0, cost: float = 0, agent: AgentRef | None = None) -> NormalizedBooking:
    return NormalizedBooking(
        dates=BookingDates(created=created),
        totals=CostingTotals(total_cost=cost, total_sale=sale, profit=sale - cost),
        agent=agent or AgentRef(),
    )


def test_year_has_twelve_zeroed_buckets():
    points = aggregate_by_period([], "year", "count", TODAY)
    assert [point.label for point in points][:3] == ["Jan", "Feb", "Mar"]
    assert len(points) == 12
    assert all(point.value == 0 for point in points)


def test_year_excludes_other_years():
    bookings = [booking("2026-03-10", sale=100), booking("2025-03-10", sale=50)]
    points = aggregate_by_period(bookings, "year", "revenue", TODAY)
    assert points[2].value == 100


def test_month_buckets_by_day():
    bookings = [booking("2026-01-05"), booking("2026-01-05"), booking("2025-12-05")]
    points = aggregate_by_period(bookings, "month", "count", TODAY)
    assert len(points) == 31
    assert points[4].label == "5"
    assert points[4].value == 2
    assert sum(point.value for point in points) == 2


def test_week_labels_and_buckets():
    bookings = [booking("2026-01-05", sale=300, cost=200)]
    points = aggregate_by_period(bookings, "week", "profit", TODAY)
    assert len(points) == 7
    assert points[-1].label == "Wed, Jan 7"
    assert points[-3].label == "Mon, Jan 5"
    assert points[-3].value == 100


def test_unparseable_dates_land_in_no_bucket_but_pass_overview_filter():
    undated = booking("")
    points = aggregate_by_period([undated], "year", "count", TODAY)
    assert sum(point.value for point in points) == 0
    assert filter_by_period([undated, booking("2025-06-01")], "year", TODAY) == [undated]


def test_unknown_period_raises():
    with pytest.raises(BadRequestError):
        aggregate_by_period([], "decade", "count", TODAY)


def test_aggregate_by_agent_orders_and_drops_zero_groups():
    sara = AgentRef(id="a1", name="Sara Khan")
    bilal = AgentRef(id="a2", name="Bilal Ahmed")
    bookings = [
        booking("2026-01-01", sale=100, agent=sara),
        booking("2026-01-01", sale=400, agent=bilal),
        booking("2026-01-01", sale=0, agent=AgentRef(id="a3", name="Idle Agent")),
        booking("2026-01-01", sale=250),
    ]
    points = aggregate_by_agent(bookings, "revenue")
    assert [(point.label, point.value) for point in points] == [
        ("Bilal Ahmed", 400),
        ("Unassigned", 250),
        ("Sara Khan", 100),
    ]


def test_aggregate_by_agent_resolves_against_roster():
    bookings = [booking("2026-01-01", agent=AgentRef(id="a1", name="Unknown Agent"))]
    points = aggregate_by_agent(bookings, "count", agents=[{"_id": "a1", "name": "Sara Khan"}])
    assert points[0].label == "Sara Khan"
