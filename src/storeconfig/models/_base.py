"""Base model shared by every storeconfig model.

Every model inherits from :class:`StoreBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase wire keys (snapshot file,
  health payload) map automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and blank
  strings so the field default is used (or the field is reported
  missing when it has none).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def parse_timestamp(value: Any) -> datetime | None:
    """Coerce a source timestamp to an aware UTC-based datetime.

    Accepts datetimes (naive ones are taken as UTC, which is how the
    relational store hands back ``DATETIME2`` columns), ISO-8601 strings,
    and epoch numbers in seconds or milliseconds.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"timestamp out of range: {value!r}") from exc
    parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


StoreTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces source timestamps to aware datetimes."""


class StoreBaseModel(BaseModel):
    """Base for storeconfig models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        return cleaned
