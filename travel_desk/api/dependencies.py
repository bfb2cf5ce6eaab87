from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header

from travel_desk.core.api_client import BookingApiClient
from travel_desk.core.config import get_settings
from travel_desk.core.credentials import InMemoryCredentialStore
from travel_desk.repositories.agents_repository import AgentsRepository
from travel_desk.repositories.bookings_repository import BookingsRepository
from travel_desk.repositories.inquiries_repository import InquiriesRepository
from travel_desk.repositories.users_repository import UsersRepository
from travel_desk.services.bookings_service import BookingsService
from travel_desk.services.dashboard_service import DashboardService
from travel_desk.services.documents_service import DocumentsService


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer":
        return token
    return authorization


def get_booking_api_client(
    authorization: Optional[str] = Header(default=None),
    x_company_id: Optional[str] = Header(default=None),
) -> BookingApiClient:
    credentials = InMemoryCredentialStore(token=_bearer_token(authorization), company_id=x_company_id)
    return BookingApiClient(credentials=credentials)


def get_bookings_repository(client: BookingApiClient = Depends(get_booking_api_client)) -> BookingsRepository:
    return BookingsRepository(client)


def get_agents_repository(client: BookingApiClient = Depends(get_booking_api_client)) -> AgentsRepository:
    return AgentsRepository(client)


def get_inquiries_repository(client: BookingApiClient = Depends(get_booking_api_client)) -> InquiriesRepository:
    return InquiriesRepository(client)


def get_users_repository(client: BookingApiClient = Depends(get_booking_api_client)) -> UsersRepository:
    return UsersRepository(client)


def get_bookings_service(
    bookings_repository: BookingsRepository = Depends(get_bookings_repository),
    agents_repository: AgentsRepository = Depends(get_agents_repository),
    users_repository: UsersRepository = Depends(get_users_repository),
) -> BookingsService:
    return BookingsService(
        bookings_repository=bookings_repository,
        agents_repository=agents_repository,
        users_repository=users_repository,
    )


def get_dashboard_service(
    bookings_repository: BookingsRepository = Depends(get_bookings_repository),
    agents_repository: AgentsRepository = Depends(get_agents_repository),
    inquiries_repository: InquiriesRepository = Depends(get_inquiries_repository),
    users_repository: UsersRepository = Depends(get_users_repository),
) -> DashboardService:
    return DashboardService(
        bookings_repository=bookings_repository,
        agents_repository=agents_repository,
        inquiries_repository=inquiries_repository,
        users_repository=users_repository,
    )


def get_documents_service(
    bookings_repository: BookingsRepository = Depends(get_bookings_repository),
    agents_repository: AgentsRepository = Depends(get_agents_repository),
    users_repository: UsersRepository = Depends(get_users_repository),
) -> DocumentsService:
    return DocumentsService(
        bookings_repository=bookings_repository,
        agents_repository=agents_repository,
        users_repository=users_repository,
        settings=get_settings(),
    )
