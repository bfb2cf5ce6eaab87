from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Tuple

from pydantic import BaseModel

from travel_desk.analytics.agent_resolver import extract_booking_agent_id
from travel_desk.analytics.booking_normalizer import extract_document_extras, normalize_booking
from travel_desk.core.config import Settings
from travel_desk.core.errors import ForbiddenError, NotFoundError
from travel_desk.exports.booking_confirmation import confirmation_filename, render_booking_confirmation
from travel_desk.exports.invoice import invoice_filename, render_invoice
from travel_desk.repositories.agents_repository import AgentsRepository
from travel_desk.repositories.bookings_repository import BookingsRepository
from travel_desk.repositories.users_repository import UsersRepository
from travel_desk.schemas.bookings import DocumentExtras, NormalizedBooking
from travel_desk.services.bookings_service import load_agents

logger = logging.getLogger(__name__)

PDF_DENIED = (
    "You do not have permission to generate this PDF. Only the booking owner or admin can generate PDFs."
)
INVOICE_DENIED = (
    "You do not have permission to generate this invoice. Only the booking owner or admin can generate invoices."
)


class RenderedDocument(BaseModel):
    filename: str
    content: bytes
    media_type: str = "application/pdf"


class DocumentsService:
    def __init__(
        self,
        bookings_repository: BookingsRepository,
        agents_repository: AgentsRepository,
        users_repository: UsersRepository,
        settings: Settings,
    ) -> None:
        self.bookings_repository = bookings_repository
        self.agents_repository = agents_repository
        self.users_repository = users_repository
        self.settings = settings

    def _load(self, booking_id: str, denied_message: str) -> Tuple[NormalizedBooking, DocumentExtras]:
        user = self.users_repository.get_current_user()
        try:
            raw = self.bookings_repository.get_booking(booking_id)
        except ForbiddenError as exc:
            raise ForbiddenError(denied_message) from exc
        if not raw:
            raise NotFoundError("Booking not found")
        if not user.has_admin_role and not user.owns_agent_id(extract_booking_agent_id(raw)):
            logger.info("document export denied booking=%s user=%s", booking_id, user.id)
            raise ForbiddenError(denied_message)
        booking = normalize_booking(raw, load_agents(self.agents_repository), user)
        return booking, extract_document_extras(raw)

    def render_confirmation(self, booking_id: str) -> RenderedDocument:
        booking, extras = self._load(booking_id, PDF_DENIED)
        return RenderedDocument(
            filename=confirmation_filename(booking, self.settings),
            content=render_booking_confirmation(booking, extras, self.settings),
        )

    def render_invoice(self, booking_id: str, today: Optional[date] = None) -> RenderedDocument:
        booking, extras = self._load(booking_id, INVOICE_DENIED)
        return RenderedDocument(
            filename=invoice_filename(booking, self.settings),
            content=render_invoice(booking, extras, self.settings, today),
        )
