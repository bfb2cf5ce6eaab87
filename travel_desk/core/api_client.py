from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Any, Dict, Optional

import httpx

from travel_desk.core.config import get_settings
from travel_desk.core.credentials import CredentialStore, InMemoryCredentialStore, normalize_company_id
from travel_desk.core.errors import ForbiddenError, NotFoundError, UnauthorizedError, UpstreamError

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Expires": "0",
}
CACHE_BUSTED_PATHS = ("/api/auth/me", "/api/agent/me")
DEFAULT_ERROR_MESSAGE = "Something went wrong"


def extract_error_message(response: Optional[httpx.Response], error: Optional[Exception] = None) -> str:
    """Best human-readable message for a failed call: body message, string body, error text, fallback."""
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            body = response.text
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            if isinstance(message, str) and message.strip():
                return message.strip()
        elif isinstance(body, str) and body.strip():
            return body.strip()
    if error is not None and str(error).strip():
        return str(error).strip()
    return DEFAULT_ERROR_MESSAGE


class BookingApiClient:
    _shared_client: httpx.Client | None = None
    _client_lock: Lock = Lock()

    def __init__(
        self,
        credentials: Optional[CredentialStore] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = settings.booking_api_base_url
        self.timeout = settings.booking_api_timeout_seconds
        self.default_company_id = normalize_company_id(settings.company_id)
        self.credentials = credentials or InMemoryCredentialStore()
        self._client = client or self._get_shared_client(self.timeout)

    @classmethod
    def _get_shared_client(cls, timeout: float) -> httpx.Client:
        if cls._shared_client is not None:
            return cls._shared_client
        with cls._client_lock:
            if cls._shared_client is None:
                cls._shared_client = httpx.Client(
                    timeout=timeout,
                    headers=NO_CACHE_HEADERS,
                    limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
                )
        return cls._shared_client

    def company_id(self) -> Optional[str]:
        return self.credentials.get_company_id() or self.default_company_id

    def build_headers(self) -> Dict[str, str]:
        headers = dict(NO_CACHE_HEADERS)
        token = self.credentials.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        company_id = self.company_id()
        if company_id:
            headers["x-company-id"] = company_id
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        query: Dict[str, Any] = dict(params or {})
        if any(marker in path for marker in CACHE_BUSTED_PATHS):
            query["_"] = int(time.time() * 1000)
        headers = self.build_headers()
        url = f"{self.base_url}{path}"
        logger.debug(
            "booking api %s %s has_token=%s company_id=%s",
            method.upper(),
            url,
            "Authorization" in headers,
            headers.get("x-company-id"),
        )
        try:
            response = self._client.request(
                method.upper(),
                url,
                params=query or None,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(extract_error_message(None, exc)) from exc

        if response.status_code == 401:
            self.credentials.clear_token()
            raise UnauthorizedError(extract_error_message(response))
        if response.status_code == 403:
            raise ForbiddenError(extract_error_message(response))
        if response.status_code == 404:
            raise NotFoundError(extract_error_message(response))
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(extract_error_message(response, exc), upstream_status=response.status_code) from exc
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Any) -> Any:
        return self.request("POST", path, json=payload)

    def put(self, path: str, payload: Any) -> Any:
        return self.request("PUT", path, json=payload)

    def patch(self, path: str, payload: Any) -> Any:
        return self.request("PATCH", path, json=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
