from __future__ import annotations

from typing import List

from travel_desk.core.api_client import BookingApiClient
from travel_desk.models.bookings import InquiryRecord
from travel_desk.shared.coerce import unwrap_records


class InquiriesRepository:
    def __init__(self, client: BookingApiClient) -> None:
        self.client = client

    def list_inquiries(self) -> List[InquiryRecord]:
        rows = unwrap_records(self.client.get("/api/inquiries"), "data", "inquiries")
        return [InquiryRecord.from_raw(row) for row in rows]
