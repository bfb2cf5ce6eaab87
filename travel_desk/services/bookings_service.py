from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Tuple

from travel_desk.analytics.agent_resolver import extract_booking_agent_id
from travel_desk.analytics.booking_normalizer import booking_search_text, normalize_booking, normalize_bookings
from travel_desk.core.errors import ForbiddenError, NotFoundError, UpstreamError
from travel_desk.models.bookings import AgentRecord, CurrentUser
from travel_desk.repositories.agents_repository import AgentsRepository
from travel_desk.repositories.bookings_repository import BookingsRepository
from travel_desk.repositories.users_repository import UsersRepository
from travel_desk.schemas.booking_form import BookingFormData
from travel_desk.schemas.bookings import BookingGroup, BookingListFilters, BookingSummary, NormalizedBooking
from travel_desk.services.booking_payload import form_data_from_booking
from travel_desk.services.booking_wizard import BookingWizard
from travel_desk.shared.response import Pagination, paginate_list

logger = logging.getLogger(__name__)


def load_agents(repository: AgentsRepository) -> List[AgentRecord]:
    """Agent roster for name resolution; an unavailable roster degrades to an empty one."""
    try:
        return repository.list_agents()
    except (ForbiddenError, NotFoundError, UpstreamError) as exc:
        logger.warning("agent roster unavailable: %s", exc.message)
        return []


def load_scoped_records(repository: BookingsRepository, user: CurrentUser) -> List[Mapping[str, Any]]:
    if user.is_admin:
        return repository.list_bookings()
    records = repository.list_bookings(mine_only=True)
    return [record for record in records if user.owns_agent_id(extract_booking_agent_id(record))]


def _matches(booking: NormalizedBooking, filters: BookingListFilters) -> bool:
    if filters.status != "all" and booking.status != filters.status:
        return False
    term = (filters.search or "").strip().lower()
    if not term:
        return True
    return any(term in value for value in booking_search_text(booking).values())


class BookingsService:
    def __init__(
        self,
        bookings_repository: BookingsRepository,
        agents_repository: AgentsRepository,
        users_repository: UsersRepository,
    ) -> None:
        self.bookings_repository = bookings_repository
        self.agents_repository = agents_repository
        self.users_repository = users_repository

    def _load(self) -> Tuple[CurrentUser, List[AgentRecord], List[NormalizedBooking]]:
        user = self.users_repository.get_current_user()
        agents = load_agents(self.agents_repository)
        records = load_scoped_records(self.bookings_repository, user)
        return user, agents, normalize_bookings(records, agents, user)

    def _filtered(self, filters: BookingListFilters) -> List[NormalizedBooking]:
        _, _, bookings = self._load()
        return [booking for booking in bookings if _matches(booking, filters)]

    def list_bookings(self, filters: BookingListFilters) -> Tuple[List[NormalizedBooking], Pagination]:
        return paginate_list(self._filtered(filters), filters.page, filters.page_size)

    def get_summary(self, filters: BookingListFilters) -> BookingSummary:
        bookings = self._filtered(filters)
        return BookingSummary(
            total_bookings=len(bookings),
            total_revenue=round(sum(booking.totals.total_sale for booking in bookings), 2),
            confirmed_count=sum(1 for booking in bookings if booking.status == "confirmed"),
            pending_count=sum(1 for booking in bookings if booking.status == "pending"),
            cancelled_count=sum(1 for booking in bookings if booking.status == "cancelled"),
        )

    def list_groups(self, filters: BookingListFilters) -> List[BookingGroup]:
        groups: Dict[str, List[NormalizedBooking]] = {}
        for booking in self._filtered(filters):
            key = f"{booking.customer.name} ({booking.customer.email})"
            groups.setdefault(key, []).append(booking)
        return [
            BookingGroup(
                key=key,
                customer_name=members[0].customer.name,
                customer_email=members[0].customer.email,
                booking_count=len(members),
                total_sale=round(sum(member.totals.total_sale for member in members), 2),
                bookings=members,
            )
            for key, members in groups.items()
        ]

    def get_booking(self, booking_id: str) -> NormalizedBooking:
        user = self.users_repository.get_current_user()
        raw = self.bookings_repository.get_booking(booking_id)
        if not raw:
            raise NotFoundError("Booking not found")
        return normalize_booking(raw, load_agents(self.agents_repository), user)

    def get_booking_form(self, booking_id: str) -> BookingFormData:
        raw = self.bookings_repository.get_booking(booking_id)
        if not raw:
            raise NotFoundError("Booking not found")
        return form_data_from_booking(raw)

    def create_bookings(self, drafts: List[BookingFormData]) -> List[NormalizedBooking]:
        """Validate every draft first, then create them one after another."""
        user = self.users_repository.get_current_user()
        payloads = BookingWizard(drafts).build_payloads(user)
        agents = load_agents(self.agents_repository)
        created: List[NormalizedBooking] = []
        for index, payload in enumerate(payloads):
            stored = self.bookings_repository.create_booking(payload)
            logger.info("created booking %s of %s", index + 1, len(payloads))
            created.append(normalize_booking({**payload, **stored}, agents, user))
        return created

    def update_booking(self, booking_id: str, draft: BookingFormData) -> NormalizedBooking:
        user = self.users_repository.get_current_user()
        payload = BookingWizard([draft], booking_id=booking_id).build_payloads(user)[0]
        stored = self.bookings_repository.update_booking(booking_id, payload)
        return normalize_booking({**payload, "_id": booking_id, **stored}, load_agents(self.agents_repository), user)

    def update_status(self, booking_id: str, status: str) -> NormalizedBooking:
        user = self.users_repository.get_current_user()
        stored = self.bookings_repository.update_booking(booking_id, {"status": status})
        record = {"_id": booking_id, **stored, "status": status}
        return normalize_booking(record, load_agents(self.agents_repository), user)

    def delete_booking(self, booking_id: str) -> str:
        self.bookings_repository.delete_booking(booking_id)
        logger.info("deleted booking %s", booking_id)
        return booking_id
