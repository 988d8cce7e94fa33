"""Tests for Pydantic model parsing of Open Notify payloads."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from peopleinspace.models import Assignment, IssPosition, Roster

# ------------------------------------------------------------------
# Assignment / Roster
# ------------------------------------------------------------------


class TestAssignment:
    def test_strips_whitespace(self) -> None:
        a = Assignment.model_validate({"name": "  Chris Cassidy ", "craft": "ISS "})
        assert a.name == "Chris Cassidy"
        assert a.craft == "ISS"

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Assignment.model_validate({"name": "   ", "craft": "ISS"})

    def test_missing_craft_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Assignment.model_validate({"name": "Ivan Vagner"})

    def test_equality_is_by_value(self) -> None:
        assert Assignment(name="Bob Behnken", craft="ISS") == Assignment(name="Bob Behnken", craft="ISS")

    def test_frozen(self) -> None:
        a = Assignment(name="Doug Hurley", craft="ISS")
        with pytest.raises(ValidationError):
            a.craft = "Tiangong"  # type: ignore[misc]


class TestRoster:
    def test_full_payload(self) -> None:
        payload = {
            "message": "success",
            "number": 2,
            "people": [
                {"name": "Chris Cassidy", "craft": "ISS"},
                {"name": "Anatoly Ivanishin", "craft": "ISS"},
            ],
        }
        roster = Roster.model_validate(payload)
        assert roster.message == "success"
        assert roster.number == 2
        assert [p.name for p in roster.people] == ["Chris Cassidy", "Anatoly Ivanishin"]
        assert roster.raw == payload

    def test_only_people_required(self) -> None:
        roster = Roster.model_validate({"people": []})
        assert roster.people == []
        assert roster.number is None

    def test_missing_people_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Roster.model_validate({"message": "success", "number": 0})

    def test_extra_fields_ignored(self) -> None:
        roster = Roster.model_validate({"people": [{"name": "A", "craft": "ISS", "agency": "NASA"}]})
        assert roster.people[0] == Assignment(name="A", craft="ISS")


# ------------------------------------------------------------------
# IssPosition
# ------------------------------------------------------------------


class TestIssPosition:
    def test_string_coordinates(self) -> None:
        pos = IssPosition.model_validate({"latitude": "-23.4567", "longitude": "120.5"})
        assert pos.latitude == pytest.approx(-23.4567)
        assert pos.longitude == pytest.approx(120.5)
        assert pos.timestamp is None

    def test_full_response_carries_timestamp(self) -> None:
        payload = {
            "message": "success",
            "timestamp": 1_590_000_000,
            "iss_position": {"latitude": "51.5", "longitude": "-0.12"},
        }
        pos = IssPosition.model_validate(payload)
        assert pos.latitude == pytest.approx(51.5)
        assert pos.longitude == pytest.approx(-0.12)
        assert pos.timestamp == datetime.fromtimestamp(1_590_000_000, tz=UTC)
        assert pos.raw == payload

    def test_float_coordinates(self) -> None:
        pos = IssPosition.model_validate({"iss_position": {"latitude": 10.0, "longitude": 20.0}})
        assert (pos.latitude, pos.longitude) == (10.0, 20.0)

    def test_out_of_range_latitude(self) -> None:
        with pytest.raises(ValidationError):
            IssPosition.model_validate({"latitude": "95", "longitude": "0"})

    def test_non_numeric_longitude(self) -> None:
        with pytest.raises(ValidationError):
            IssPosition.model_validate({"iss_position": {"latitude": "1", "longitude": "east"}})

    def test_out_of_range_timestamp_rejected(self) -> None:
        with pytest.raises(ValidationError):
            IssPosition.model_validate({"iss_position": {"latitude": "1", "longitude": "2"}, "timestamp": 10**20})

    def test_non_numeric_timestamp_rejected(self) -> None:
        with pytest.raises(ValidationError):
            IssPosition.model_validate({"iss_position": {"latitude": "1", "longitude": "2"}, "timestamp": [1]})

    def test_iss_position_not_an_object(self) -> None:
        with pytest.raises(ValidationError):
            IssPosition.model_validate({"iss_position": "51.5,-0.12"})
