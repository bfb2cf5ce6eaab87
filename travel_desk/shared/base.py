from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict


def to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class BaseSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def resolve_field(cls, key: str) -> Optional[str]:
        """Attribute name for either a snake_case field name or its wire alias."""
        if key in cls.model_fields:
            return key
        for name, field in cls.model_fields.items():
            if field.alias == key:
                return name
        return None

    def with_changes(self, changes: Mapping[str, Any]) -> "BaseSchema":
        """Revalidated copy with `changes` applied; keys may be field names or aliases."""
        data = self.model_dump()
        for key, value in changes.items():
            name = self.resolve_field(key)
            if name is None:
                raise KeyError(key)
            data[name] = value
        return type(self).model_validate(data)
