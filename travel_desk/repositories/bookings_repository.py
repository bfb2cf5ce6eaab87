from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from travel_desk.core.api_client import BookingApiClient
from travel_desk.shared.coerce import unwrap_record, unwrap_records

BOOKINGS_PATH = "/api/bookings"
MY_BOOKINGS_PATH = "/api/bookings/my"


class BookingsRepository:
    def __init__(self, client: BookingApiClient) -> None:
        self.client = client

    def list_bookings(self, mine_only: bool = False) -> List[Mapping[str, Any]]:
        payload = self.client.get(MY_BOOKINGS_PATH if mine_only else BOOKINGS_PATH)
        return unwrap_records(payload, "data", "bookings")

    def get_booking(self, booking_id: str) -> Mapping[str, Any]:
        payload = self.client.get(f"{BOOKINGS_PATH}/{booking_id}")
        return unwrap_record(payload, "data", "booking")

    def create_booking(self, payload: Dict[str, Any]) -> Mapping[str, Any]:
        return unwrap_record(self.client.post(BOOKINGS_PATH, payload), "data", "booking")

    def update_booking(self, booking_id: str, payload: Dict[str, Any]) -> Mapping[str, Any]:
        return unwrap_record(self.client.put(f"{BOOKINGS_PATH}/{booking_id}", payload), "data", "booking")

    def delete_booking(self, booking_id: str) -> Optional[Any]:
        return self.client.delete(f"{BOOKINGS_PATH}/{booking_id}")
