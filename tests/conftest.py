from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from travel_desk.api.dependencies import (
    get_bookings_service,
    get_dashboard_service,
    get_documents_service,
    get_users_repository,
)
from travel_desk.core.errors import ForbiddenError, NotFoundError
from travel_desk.main import create_app
from travel_desk.models.bookings import CurrentUser
from travel_desk.schemas.booking_form import BookingFormData
from travel_desk.schemas.bookings import (
    AgentRef,
    BookingGroup,
    BookingListFilters,
    BookingSummary,
    CostingTotals,
    CustomerInfo,
    NormalizedBooking,
)
from travel_desk.schemas.dashboard import DashboardFilters, DashboardSeries, DashboardStats, SeriesPoint
from travel_desk.services.documents_service import INVOICE_DENIED, RenderedDocument
from travel_desk.shared.response import Pagination, paginate_list


def sample_booking(booking_id: str = "65f1c0ffee0000000000abcd", status: str = "confirmed") -> NormalizedBooking:
    return NormalizedBooking(
        id=booking_id,
        customer=CustomerInfo(name="Ann Lee", email="ann@example.com", phone="555-0100"),
        agent=AgentRef(id="agent-1", name="Sara Khan"),
        package="Umrah Gold",
        status=status,
        totals=CostingTotals(total_cost=200, total_sale=300, profit=100),
    )


class FakeBookingsService:
    def __init__(self) -> None:
        self.created: List[BookingFormData] = []

    def list_bookings(self, filters: BookingListFilters):
        return paginate_list([sample_booking()], filters.page, filters.page_size)

    def get_summary(self, filters: BookingListFilters) -> BookingSummary:
        _ = filters
        return BookingSummary(
            total_bookings=1, total_revenue=300, confirmed_count=1, pending_count=0, cancelled_count=0
        )

    def list_groups(self, filters: BookingListFilters) -> List[BookingGroup]:
        _ = filters
        booking = sample_booking()
        return [
            BookingGroup(
                key="Ann Lee (ann@example.com)",
                customer_name="Ann Lee",
                customer_email="ann@example.com",
                booking_count=1,
                total_sale=300,
                bookings=[booking],
            )
        ]

    def get_booking(self, booking_id: str) -> NormalizedBooking:
        if booking_id == "missing":
            raise NotFoundError("Booking not found")
        return sample_booking(booking_id)

    def get_booking_form(self, booking_id: str) -> BookingFormData:
        _ = booking_id
        return BookingFormData(name="Ann Lee", email="ann@example.com", package="Umrah Gold")

    def create_bookings(self, drafts: List[BookingFormData]) -> List[NormalizedBooking]:
        self.created.extend(drafts)
        return [sample_booking(f"new-{index}", status="pending") for index, _ in enumerate(drafts)]

    def update_booking(self, booking_id: str, draft: BookingFormData) -> NormalizedBooking:
        booking = sample_booking(booking_id, status="pending")
        return booking.model_copy(update={"package": draft.package})

    def update_status(self, booking_id: str, status: str) -> NormalizedBooking:
        return sample_booking(booking_id, status=status)

    def delete_booking(self, booking_id: str) -> str:
        return booking_id


class FakeDashboardService:
    def get_summary(self, filters: DashboardFilters) -> DashboardStats:
        return DashboardStats(
            period=filters.period,
            period_label=f"this {filters.period}",
            total_bookings=4,
            confirmed_bookings=2,
            pending_approvals=3,
            active_inquiries=1,
            resolved_inquiries=2,
            total_profit=250,
            total_revenue=900,
        )

    def get_performance(self, filters: DashboardFilters) -> DashboardSeries:
        points = [SeriesPoint(label=month, value=0) for month in ("Jan", "Feb", "Mar")]
        return DashboardSeries(period=filters.period, metric=filters.metric, points=points)

    def get_agent_breakdown(self, filters: DashboardFilters) -> DashboardSeries:
        points = [SeriesPoint(label="Sara Khan", value=2), SeriesPoint(label="Unassigned", value=1)]
        return DashboardSeries(period=filters.period, metric=filters.metric, points=points)


class FakeDocumentsService:
    def render_confirmation(self, booking_id: str) -> RenderedDocument:
        return RenderedDocument(filename=f"Mustafa-Travel-Booking-{booking_id}.pdf", content=b"%PDF-1.4 fake")

    def render_invoice(self, booking_id: str, today: Optional[Any] = None) -> RenderedDocument:
        _ = today
        if booking_id == "locked":
            raise ForbiddenError(INVOICE_DENIED)
        return RenderedDocument(filename="Mustafa-Travel-Invoice-00ABCD.pdf", content=b"%PDF-1.4 fake")


class FakeUsersRepository:
    def get_current_user(self) -> CurrentUser:
        return CurrentUser(id="user-1", name="Sara Khan", role="agent", agent_id="agent-1")


@pytest.fixture()
def client() -> TestClient:
    app = create_app()
    app.dependency_overrides[get_bookings_service] = FakeBookingsService
    app.dependency_overrides[get_dashboard_service] = FakeDashboardService
    app.dependency_overrides[get_documents_service] = FakeDocumentsService
    app.dependency_overrides[get_users_repository] = FakeUsersRepository
    return TestClient(app)


@pytest.fixture()
def complete_form() -> Dict[str, Any]:
    return {
        "name": "Ann Lee",
        "email": "ann@example.com",
        "contactNumber": "555-0100",
        "passengers": "2",
        "cardholderName": "Ann Lee",
        "departureCity": "JFK",
        "arrivalCity": "JED",
        "departureDate": "2026-03-01",
        "returnDate": "2026-03-15",
        "hotels": [{"hotelName": "Hilton Makkah", "checkIn": "2026-03-02", "checkOut": "2026-03-08"}],
        "package": "Umrah Gold",
        "costingRows": [
            {"label": "Flights", "quantity": 2, "costPerQty": 100, "salePerQty": 150},
        ],
    }
