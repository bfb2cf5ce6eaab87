from __future__ import annotations

from typing import List

import httpx
import pytest

from travel_desk.core.api_client import BookingApiClient, extract_error_message
from travel_desk.core.credentials import InMemoryCredentialStore
from travel_desk.core.errors import ForbiddenError, NotFoundError, UnauthorizedError, UpstreamError

COMPANY_ID = "65f1c0ffee0000000000c0de"


def build_client(handler, token: str = "tok-1") -> BookingApiClient:
    credentials = InMemoryCredentialStore(token=token, company_id=f'ObjectId("{COMPANY_ID}")')
    return BookingApiClient(credentials=credentials, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_requests_carry_auth_and_company_headers():
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": []})

    client = build_client(handler)
    assert client.get("/api/bookings") == {"data": []}
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer tok-1"
    assert request.headers["x-company-id"] == COMPANY_ID
    assert request.headers["Cache-Control"] == "no-cache"
    assert "_" not in request.url.params


def test_me_endpoints_are_cache_busted():
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"user": {"_id": "u1"}})

    build_client(handler).get("/api/auth/me")
    assert seen[0].url.params["_"].isdigit()


def test_unauthorized_clears_token():
    client = build_client(lambda request: httpx.Response(401, json={"message": "jwt expired"}))
    with pytest.raises(UnauthorizedError) as excinfo:
        client.get("/api/bookings")
    assert excinfo.value.message == "jwt expired"
    assert client.credentials.get_token() is None
    assert client.credentials.get_company_id() == COMPANY_ID


@pytest.mark.parametrize(
    ("status_code", "error_type"),
    [(403, ForbiddenError), (404, NotFoundError), (500, UpstreamError)],
)
def test_error_statuses_map_to_app_errors(status_code, error_type):
    client = build_client(lambda request: httpx.Response(status_code, text="upstream says no"))
    with pytest.raises(error_type) as excinfo:
        client.delete("/api/bookings/b1")
    assert excinfo.value.message == "upstream says no"


def test_upstream_error_keeps_status():
    client = build_client(lambda request: httpx.Response(503, json={"error": "maintenance"}))
    with pytest.raises(UpstreamError) as excinfo:
        client.post("/api/bookings", {"customerName": "Ann Lee"})
    assert excinfo.value.upstream_status == 503
    assert excinfo.value.details == {"upstreamStatus": 503}


def test_transport_failures_become_upstream_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        build_client(handler).get("/api/agent")
    assert excinfo.value.message == "connection refused"


def test_empty_body_returns_none():
    client = build_client(lambda request: httpx.Response(204))
    assert client.delete("/api/bookings/b1") is None


def test_error_message_fallback():
    assert extract_error_message(httpx.Response(500, json={"message": "  "})) == "Something went wrong"
