from __future__ import annotations

from travel_desk.analytics.agent_resolver import (
    extract_agent_id,
    extract_booking_agent_id,
    resolve_agent_name,
)
from travel_desk.models.bookings import AgentRecord, CurrentUser

ROSTER = [
    AgentRecord(id="65F1C0FFEE00000000001111", name="Sara Khan"),
    AgentRecord(id="65f1c0ffee00000000002222", name="Super Admin"),
    {"_id": "abc 123", "name": "Bilal Ahmed"},
    {"_id": "no-name", "name": "  "},
]


def test_none_is_unassigned():
    assert resolve_agent_name(None, ROSTER) == "Unassigned"
    assert resolve_agent_name("null", ROSTER) == "Unassigned"


def test_exact_match_is_case_insensitive():
    assert resolve_agent_name("65f1c0ffee00000000001111", ROSTER) == "Sara Khan"


def test_admin_names_display_as_admin():
    assert resolve_agent_name({"_id": "65f1c0ffee00000000002222"}, ROSTER) == "Admin"


def test_whitespace_insensitive_match():
    assert resolve_agent_name("abc123", ROSTER) == "Bilal Ahmed"


def test_suffix_match():
    assert resolve_agent_name("ffffffff00000000001111", ROSTER) == "Sara Khan"


def test_short_ids_skip_suffix_match():
    assert resolve_agent_name("1111", ROSTER) == "Unknown Agent"


def test_fallback_name_then_current_user():
    assert resolve_agent_name("agent-x", ROSTER, fallback_name="Imran") == "Imran"
    user = CurrentUser(id="agent-x", name="Hina", role="agent")
    assert resolve_agent_name("agent-x", [], current_user=user) == "Hina"
    admin = CurrentUser(id="agent-x", name="Owner", role="superadmin")
    assert resolve_agent_name("agent-x", [], current_user=admin) == "Admin"


def test_resolution_is_deterministic():
    results = {resolve_agent_name("ffffffff00000000001111", ROSTER) for _ in range(5)}
    assert results == {"Sara Khan"}


def test_id_extraction():
    assert extract_agent_id({"$oid": "abc"}) == "abc"
    assert extract_agent_id({"_id": {"$oid": "def"}}) == "def"
    assert extract_agent_id("  ") is None
    assert extract_booking_agent_id({"agentId": "", "agent": {"_id": "a1", "name": "Sara"}}) == "a1"
