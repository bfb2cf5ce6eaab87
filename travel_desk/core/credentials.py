from __future__ import annotations

import json
import os
import re
from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, Optional

OBJECT_ID_PATTERN = re.compile(r'^ObjectId\(\s*["\']?([0-9a-fA-F]{24})["\']?\s*\)$')

TOKEN_KEY = "token"
COMPANY_ID_KEY = "companyId"


def normalize_company_id(value: Optional[object]) -> Optional[str]:
    """Trim a company id and unwrap shell-style ``ObjectId("...")`` or quoted values."""
    if value is None:
        return None
    text = str(value).strip()
    match = OBJECT_ID_PATTERN.match(text)
    if match:
        text = match.group(1)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        text = text[1:-1].strip()
    return text or None


def normalize_token(value: Optional[object]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class CredentialStore(ABC):
    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, key: str, value: Optional[str]) -> None:
        ...

    def get_token(self) -> Optional[str]:
        return normalize_token(self._read(TOKEN_KEY))

    def set_token(self, token: Optional[str]) -> None:
        self._write(TOKEN_KEY, normalize_token(token))

    def clear_token(self) -> None:
        self._write(TOKEN_KEY, None)

    def get_company_id(self) -> Optional[str]:
        return normalize_company_id(self._read(COMPANY_ID_KEY))

    def set_company_id(self, company_id: Optional[str]) -> None:
        self._write(COMPANY_ID_KEY, normalize_company_id(company_id))

    def clear_company_id(self) -> None:
        self._write(COMPANY_ID_KEY, None)


class InMemoryCredentialStore(CredentialStore):
    def __init__(self, token: Optional[str] = None, company_id: Optional[str] = None) -> None:
        self._values: Dict[str, Optional[str]] = {}
        self.set_token(token)
        self.set_company_id(company_id)

    def _read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def _write(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value


class FileCredentialStore(CredentialStore):
    """Credentials persisted as a small JSON document, for command-line use."""

    _lock: Lock = Lock()

    def __init__(self, path: str) -> None:
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError:
                return {}
        return data if isinstance(data, dict) else {}

    def _read(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return str(value) if value is not None else None

    def _write(self, key: str, value: Optional[str]) -> None:
        with self._lock:
            data = self._load()
            if value is None:
                if key not in data:
                    return
                data.pop(key)
            else:
                data[key] = value
            with open(self.path, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
