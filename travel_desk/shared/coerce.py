from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional

_MISSING = object()
_PLACEHOLDER_IDS = {"undefined", "null", "none"}


def to_number(value: Any) -> float:
    """Lenient numeric coercion: currency strings are accepted, anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.replace("$", "").replace(",", "").strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_int(value: Any) -> int:
    return int(to_number(value))


def text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def dig(source: Any, path: str, default: Any = None) -> Any:
    """Walk a dotted path through nested mappings."""
    current = source
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return default
        current = current.get(key, _MISSING)
        if current is _MISSING:
            return default
    return current


def first_present(source: Any, *paths: str, default: Any = None) -> Any:
    for path in paths:
        value = dig(source, path)
        if not is_blank(value):
            return value
    return default


def first_text(source: Any, *paths: str) -> str:
    for path in paths:
        value = text(dig(source, path))
        if value:
            return value
    return ""


def clean_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (bool, list)):
        return None
    if isinstance(value, Mapping):
        # Extended-JSON style references, e.g. {"$oid": "..."}
        for key in ("$oid", "_id", "id"):
            nested = clean_id(value.get(key))
            if nested:
                return nested
        return None
    candidate = str(value).strip()
    if not candidate or candidate.lower() in _PLACEHOLDER_IDS:
        return None
    return candidate


def extract_record_id(record: Any) -> Optional[str]:
    """Id of a stored document or reference, whether bare, `_id`/`id` keyed or extended-JSON."""
    if isinstance(record, Mapping):
        for key in ("_id", "id", "$oid"):
            candidate = clean_id(record.get(key))
            if candidate:
                return candidate
        return None
    return clean_id(record)


def ensure_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def mappings(values: Iterable[Any]) -> List[Mapping[str, Any]]:
    return [value for value in values if isinstance(value, Mapping)]


def first_list(source: Any, *paths: str) -> Optional[List[Any]]:
    """First non-empty list found along the given paths."""
    for path in paths:
        value = dig(source, path)
        if isinstance(value, list) and value:
            return value
    return None


def unwrap_records(payload: Any, *keys: str) -> List[Mapping[str, Any]]:
    """Records from a bare list response or one wrapped under the first matching key."""
    if isinstance(payload, list):
        return mappings(payload)
    if isinstance(payload, Mapping):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return mappings(value)
    return []


def unwrap_record(payload: Any, *keys: str) -> Mapping[str, Any]:
    if isinstance(payload, Mapping):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, Mapping):
                return value
        return payload
    return {}
