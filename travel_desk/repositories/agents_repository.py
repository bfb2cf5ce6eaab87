from __future__ import annotations

from typing import List

from travel_desk.core.api_client import BookingApiClient
from travel_desk.models.bookings import AgentRecord
from travel_desk.shared.coerce import unwrap_records


class AgentsRepository:
    def __init__(self, client: BookingApiClient) -> None:
        self.client = client

    def list_agents(self) -> List[AgentRecord]:
        rows = unwrap_records(self.client.get("/api/agent"), "data", "agents")
        return [AgentRecord.from_raw(row) for row in rows]
