from __future__ import annotations

from travel_desk.core.api_client import BookingApiClient
from travel_desk.models.bookings import CurrentUser
from travel_desk.shared.coerce import unwrap_record


class UsersRepository:
    def __init__(self, client: BookingApiClient) -> None:
        self.client = client

    def get_current_user(self) -> CurrentUser:
        return CurrentUser.from_raw(unwrap_record(self.client.get("/api/auth/me"), "data"))
