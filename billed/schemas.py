from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

EXPENSE_TYPES = (
    "Transports",
    "Restaurants et bars",
    "Hôtel et logement",
    "Services en ligne",
    "IT et électronique",
    "Equipement et matériel",
    "Fournitures de bureau",
)
DEFAULT_PCT = 20

Number = Union[int, float]

# fixed width: stored dates are compared as strings
_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def _to_number(v: Any) -> Any:
    """Form inputs arrive as strings: "100" -> 100, "12.5" -> 12.5."""
    if isinstance(v, bool) or v is None:
        return v
    if isinstance(v, int):
        return v
    if isinstance(v, float):
        n = v
    else:
        s = str(v).strip()
        try:
            return int(s)
        except ValueError:
            n = float(s)
    if not math.isfinite(n):
        raise ValueError(f"Not a finite number: {v!r}")
    return n


def _non_negative(v: Number) -> Number:
    if not math.isfinite(v) or v < 0:
        raise ValueError("amount must be >= 0")
    return v


class SessionUser(BaseModel):
    """Read-only identity of the connected user."""
    email: str
    type: str = "Employee"

    @classmethod
    def from_json(cls, raw: str) -> "SessionUser":
        return cls.model_validate_json(raw)


class BillForm(BaseModel):
    """Values typed by the employee in the new-bill form."""
    type: str
    name: str = ""
    date: str
    amount: Number
    vat: str = ""
    pct: Number = DEFAULT_PCT
    commentary: str = ""

    @field_validator("type")
    @classmethod
    def _known_type(cls, v: str) -> str:
        if v not in EXPENSE_TYPES:
            raise ValueError(f"Unknown expense type: {v}")
        return v

    @field_validator("date")
    @classmethod
    def _iso_date(cls, v: str) -> str:
        if not _ISO_DATE.fullmatch(v):
            raise ValueError(f"Expected YYYY-MM-DD, got {v!r}")
        datetime.strptime(v, "%Y-%m-%d")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_number(cls, v: Any) -> Any:
        return _to_number(v)

    @field_validator("amount")
    @classmethod
    def _amount_non_negative(cls, v: Number) -> Number:
        return _non_negative(v)

    @field_validator("pct", mode="before")
    @classmethod
    def _pct_number(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and v.strip() == ""):
            return DEFAULT_PCT
        return _to_number(v)

    # vat stays a string, pct does not: existing consumers rely on that shape
    @field_validator("vat", "name", "commentary", mode="before")
    @classmethod
    def _as_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "BillForm":
        return cls.model_validate(dict(values))


class Bill(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    email: str
    type: str
    name: str = ""
    amount: Number
    date: str
    vat: str = ""
    pct: Number = DEFAULT_PCT
    commentary: str = ""
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    file_name: Optional[str] = Field(default=None, alias="fileName")
    status: Literal["pending", "accepted", "refused"] = "pending"

    @field_validator("amount")
    @classmethod
    def _amount_non_negative(cls, v: Number) -> Number:
        return _non_negative(v)

    def payload_json(self) -> str:
        """JSON body for the store update call (the id travels as the selector)."""
        return self.model_dump_json(by_alias=True, exclude={"id"})


class UploadOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_url: str = Field(alias="fileUrl")
    key: str
