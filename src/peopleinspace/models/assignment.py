"""Crew roster models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Assignment(BaseModel):
    """A person currently in space and the craft they are aboard.

    ``name`` is the identity key: the local store holds at most one
    assignment per name.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    name: str = Field(..., min_length=1)
    """Full name of the person."""
    craft: str
    """Vehicle or station name (e.g. ``"ISS"``)."""

    def as_row(self) -> tuple[str, str]:
        return (self.name, self.craft)


class Roster(BaseModel):
    """The ``/astros.json`` response body.

    Only ``people`` is required; ``message`` and ``number`` are kept
    when the API sends them.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    people: list[Assignment]
    message: str | None = None
    number: int | None = None
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if isinstance(values, dict) and "raw" not in values:
            return {**values, "raw": values}
        return values
