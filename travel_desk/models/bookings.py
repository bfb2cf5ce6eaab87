from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel

from travel_desk.shared.coerce import first_text


class AgentRecord(BaseModel):
    id: str
    name: str = ""
    email: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "AgentRecord":
        return cls(
            id=first_text(raw, "_id", "id"),
            name=first_text(raw, "name", "fullName"),
            email=first_text(raw, "email") or None,
            role=first_text(raw, "role") or None,
        )


class CurrentUser(BaseModel):
    id: str = ""
    name: str = ""
    role: str = ""
    agent_id: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "CurrentUser":
        user = raw.get("user") if isinstance(raw.get("user"), Mapping) else raw
        return cls(
            id=first_text(user, "_id", "id"),
            name=first_text(user, "name", "fullName"),
            role=first_text(user, "role"),
            agent_id=first_text(user, "agentId") or None,
            email=first_text(user, "email") or None,
        )

    @property
    def is_admin(self) -> bool:
        return self.role.strip().lower() == "admin"

    @property
    def has_admin_role(self) -> bool:
        role = self.role.lower()
        return "admin" in role or "super" in role

    def owns_agent_id(self, agent_id: Optional[str]) -> bool:
        if not agent_id:
            return False
        return agent_id in {value for value in (self.id, self.agent_id) if value}


class InquiryRecord(BaseModel):
    id: str = ""
    status: str = ""
    approval_status: str = ""
    created_at: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "InquiryRecord":
        return cls(
            id=first_text(raw, "_id", "id"),
            status=first_text(raw, "status").lower(),
            approval_status=first_text(raw, "approvalStatus").lower(),
            created_at=first_text(raw, "createdAt") or None,
        )
