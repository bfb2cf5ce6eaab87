from __future__ import annotations

from datetime import date
from typing import List

from travel_desk.core.errors import ForbiddenError
from travel_desk.models.bookings import InquiryRecord
from travel_desk.schemas.dashboard import DashboardFilters
from travel_desk.services.dashboard_service import DashboardService
from tests.stubs import (
    ADMIN,
    StubAgentsRepository,
    StubBookingsRepository,
    StubUsersRepository,
    record,
)

TODAY = date(2026, 1, 7)


class StubInquiriesRepository:
    def __init__(self, inquiries: List[InquiryRecord], fail: bool = False) -> None:
        self.inquiries = inquiries
        self.fail = fail

    def list_inquiries(self) -> List[InquiryRecord]:
        if self.fail:
            raise ForbiddenError()
        return self.inquiries


def build_service(inquiries_fail: bool = False) -> DashboardService:
    records = [
        record("b1", "agent-1", status="confirmed", approvalStatus="approved", createdAt="2026-01-05", amount=300),
        record("b2", "agent-2", createdAt="2026-01-06", amount=200),
        record("b3", "agent-1", status="confirmed", createdAt="2025-12-20", amount=900),
        record("b4", None, createdAt="not-a-date", amount=50),
    ]
    inquiries = [
        InquiryRecord(id="i1", status="pending", approval_status="pending", created_at="2026-01-02"),
        InquiryRecord(id="i2", status="responded", created_at="2026-01-03"),
        InquiryRecord(id="i3", status="closed", created_at=None),
    ]
    return DashboardService(
        bookings_repository=StubBookingsRepository(records),
        agents_repository=StubAgentsRepository(),
        inquiries_repository=StubInquiriesRepository(inquiries, fail=inquiries_fail),
        users_repository=StubUsersRepository(ADMIN),
    )


def test_month_summary():
    stats = build_service().get_summary(DashboardFilters(period="month"), today=TODAY)
    assert stats.period_label == "this month"
    # b4 has no usable date and is still counted
    assert stats.total_bookings == 3
    assert stats.confirmed_bookings == 1
    assert stats.pending_approvals == 3
    assert stats.active_inquiries == 1
    assert stats.resolved_inquiries == 1
    assert stats.total_profit == 300
    assert stats.total_revenue == 300


def test_summary_survives_inquiry_failure():
    stats = build_service(inquiries_fail=True).get_summary(DashboardFilters(period="year"), today=TODAY)
    assert stats.active_inquiries == 0
    assert stats.pending_approvals == 2


def test_performance_series():
    series = build_service().get_performance(DashboardFilters(period="year", metric="revenue"), today=TODAY)
    assert len(series.points) == 12
    assert series.points[0].value == 500


def test_agent_breakdown():
    series = build_service().get_agent_breakdown(DashboardFilters(period="month", metric="revenue"), today=TODAY)
    assert [(point.label, point.value) for point in series.points] == [
        ("Sara Khan", 300),
        ("Bilal Ahmed", 200),
        ("Unassigned", 50),
    ]
