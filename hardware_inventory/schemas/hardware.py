"""Pydantic shapes for hardware items, groups and the cost lock.

Python code uses snake_case attributes. Everything that leaves the process (the
persisted blob and the JSON API) uses the camelCase aliases, e.g.
``serialNumber`` and ``monthlyCost``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HardwareItem(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    brand: str
    model: str
    serial_number: str
    details: Optional[str] = None
    monthly_cost: float = 0


class HardwareDraft(_CamelModel):
    """What the form or an API client submits for a new or edited item.

    Blank strings are accepted here on purpose: the store decides which fields
    are required so the user gets one consistent message.
    """

    name: str = ""
    brand: str = ""
    model: str = ""
    serial_number: str = ""
    details: Optional[str] = None
    monthly_cost: float = Field(default=0, allow_inf_nan=False)

    @field_validator("name", "brand", "model", "serial_number", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("details", mode="before")
    @classmethod
    def blank_details_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class HardwareGroupOut(_CamelModel):
    key: str
    name: str
    brand: str
    model: str
    monthly_cost: float
    stock: int
    items: list[HardwareItem] = Field(default_factory=list)


class CostLock(_CamelModel):
    """Whether the cost field is pinned to an existing group's value."""

    locked: bool
    monthly_cost: Optional[float] = None
