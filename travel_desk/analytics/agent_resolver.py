from __future__ import annotations

import logging
import re
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from travel_desk.models.bookings import AgentRecord, CurrentUser
from travel_desk.shared.coerce import clean_id, extract_record_id

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"
UNKNOWN_AGENT = "Unknown Agent"
ADMIN_LABEL = "Admin"
SUFFIX_LENGTH = 12
MIN_SUFFIX_LENGTH = 8
_WHITESPACE = re.compile(r"\s+")


def extract_agent_id(agent_ref: Any) -> Optional[str]:
    """Pull an agent id out of a bare id, a populated agent object or a nested reference."""
    return extract_record_id(agent_ref)


def extract_booking_agent_id(raw: Mapping[str, Any]) -> Optional[str]:
    return clean_id(raw.get("agentId")) or extract_agent_id(raw.get("agent"))


def display_name(name: str) -> str:
    lowered = name.lower()
    if "admin" in lowered or "super" in lowered:
        return ADMIN_LABEL
    return name


def _coerce_agents(known_agents: Iterable[Any]) -> List[AgentRecord]:
    agents: List[AgentRecord] = []
    for agent in known_agents or ():
        if isinstance(agent, AgentRecord):
            agents.append(agent)
        elif isinstance(agent, Mapping):
            agents.append(AgentRecord.from_raw(agent))
    return [agent for agent in agents if agent.id.strip() and agent.name.strip()]


def _match(agents: Sequence[AgentRecord], candidate: str, key: Callable[[str], str], min_length: int = 0) -> Optional[str]:
    target = key(candidate)
    if len(target) < min_length:
        return None
    for agent in agents:
        if key(agent.id) == target:
            return agent.name.strip()
    return None


def resolve_agent_name(
    agent_ref: Any,
    known_agents: Iterable[Any],
    fallback_name: Optional[str] = None,
    current_user: Optional[CurrentUser] = None,
) -> str:
    candidate = extract_agent_id(agent_ref)
    if not candidate:
        return UNASSIGNED

    agents = _coerce_agents(known_agents)
    tiers = (
        (lambda value: value.strip().lower(), 0),
        (lambda value: _WHITESPACE.sub("", value).lower(), 0),
        (lambda value: value.strip().lower()[-SUFFIX_LENGTH:], MIN_SUFFIX_LENGTH),
    )
    for key, min_length in tiers:
        matched = _match(agents, candidate, key, min_length)
        if matched:
            return display_name(matched)

    fallback = (fallback_name or "").strip()
    if fallback:
        return display_name(fallback)

    if current_user is not None and current_user.id:
        if current_user.id.strip().lower() == candidate.lower():
            if current_user.has_admin_role:
                return ADMIN_LABEL
            if current_user.name.strip():
                return current_user.name.strip()

    logger.debug("could not resolve agent name for id=%s roster_size=%d", candidate, len(agents))
    return UNKNOWN_AGENT
