from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from travel_desk.analytics.booking_normalizer import normalize_bookings
from travel_desk.analytics.period_aggregator import aggregate_by_agent, aggregate_by_period, filter_by_period
from travel_desk.core.errors import ForbiddenError, NotFoundError, UpstreamError
from travel_desk.models.bookings import InquiryRecord
from travel_desk.repositories.agents_repository import AgentsRepository
from travel_desk.repositories.bookings_repository import BookingsRepository
from travel_desk.repositories.inquiries_repository import InquiriesRepository
from travel_desk.repositories.users_repository import UsersRepository
from travel_desk.schemas.bookings import NormalizedBooking
from travel_desk.schemas.dashboard import DashboardFilters, DashboardSeries, DashboardStats
from travel_desk.services.bookings_service import load_agents, load_scoped_records
from travel_desk.shared.time import parse_date, period_label, resolve_period_window

logger = logging.getLogger(__name__)

RESOLVED_INQUIRY_STATUSES = {"responded", "closed"}


class DashboardService:
    def __init__(
        self,
        bookings_repository: BookingsRepository,
        agents_repository: AgentsRepository,
        inquiries_repository: InquiriesRepository,
        users_repository: UsersRepository,
    ) -> None:
        self.bookings_repository = bookings_repository
        self.agents_repository = agents_repository
        self.inquiries_repository = inquiries_repository
        self.users_repository = users_repository

    def _bookings(self) -> List[NormalizedBooking]:
        user = self.users_repository.get_current_user()
        agents = load_agents(self.agents_repository)
        return normalize_bookings(load_scoped_records(self.bookings_repository, user), agents, user)

    def _inquiries(self) -> List[InquiryRecord]:
        try:
            return self.inquiries_repository.list_inquiries()
        except (ForbiddenError, NotFoundError, UpstreamError) as exc:
            logger.warning("inquiries unavailable: %s", exc.message)
            return []

    def get_summary(self, filters: DashboardFilters, today: Optional[date] = None) -> DashboardStats:
        start, end = resolve_period_window(filters.period, today)
        bookings = filter_by_period(self._bookings(), filters.period, today)
        inquiries = []
        for inquiry in self._inquiries():
            created = parse_date(inquiry.created_at)
            if created is not None and start <= created <= end:
                inquiries.append(inquiry)

        confirmed = [booking for booking in bookings if booking.status == "confirmed"]
        pending_bookings = sum(1 for booking in bookings if booking.approval_status == "pending")
        pending_inquiries = sum(1 for inquiry in inquiries if inquiry.approval_status == "pending")
        return DashboardStats(
            period=filters.period,
            period_label=period_label(filters.period),
            total_bookings=len(bookings),
            confirmed_bookings=len(confirmed),
            pending_approvals=pending_bookings + pending_inquiries,
            active_inquiries=sum(1 for inquiry in inquiries if inquiry.status == "pending"),
            resolved_inquiries=sum(1 for inquiry in inquiries if inquiry.status in RESOLVED_INQUIRY_STATUSES),
            total_profit=round(sum(booking.totals.profit for booking in confirmed), 2),
            total_revenue=round(sum(booking.totals.total_sale for booking in confirmed), 2),
        )

    def get_performance(self, filters: DashboardFilters, today: Optional[date] = None) -> DashboardSeries:
        points = aggregate_by_period(self._bookings(), filters.period, filters.metric, today)
        return DashboardSeries(period=filters.period, metric=filters.metric, points=points)

    def get_agent_breakdown(self, filters: DashboardFilters, today: Optional[date] = None) -> DashboardSeries:
        bookings = filter_by_period(self._bookings(), filters.period, today)
        points = aggregate_by_agent(bookings, filters.metric)
        return DashboardSeries(period=filters.period, metric=filters.metric, points=points)
