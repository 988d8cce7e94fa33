"""ISS position model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def parse_epoch(value: Any) -> datetime | None:
    """Convert an epoch timestamp in seconds to a UTC datetime."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromtimestamp(int(value), tz=UTC)
    except (TypeError, OverflowError, OSError) as exc:
        # pydantic only turns ValueError into a ValidationError
        raise ValueError(f"invalid epoch timestamp: {value!r}") from exc


class IssPosition(BaseModel):
    """A point-in-time ISS ground position.

    Validates either the inner ``iss_position`` object or the whole
    ``/iss-now.json`` body, in which case the top-level ``timestamp``
    is carried over.

    Parameters
    ----------
    latitude : float
        Latitude in decimal degrees. The API sends it as a string.
    longitude : float
        Longitude in decimal degrees. The API sends it as a string.
    timestamp : datetime or None
        Time of the reading (UTC), when the response includes one.
    raw : dict
        Full API response dict.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    timestamp: datetime | None = None
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_iss_position(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        nested = values.get("iss_position")
        if nested is None:
            merged = dict(values)
        else:
            if not isinstance(nested, dict):
                raise ValueError("iss_position must be an object")
            merged = dict(nested)
            if "timestamp" in values:
                merged["timestamp"] = values["timestamp"]
        merged.setdefault("raw", values)
        return merged

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_epoch(value)
