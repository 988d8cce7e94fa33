"""Data models for Open Notify API responses."""

from peopleinspace.models.assignment import Assignment, Roster
from peopleinspace.models.position import IssPosition

__all__ = [
    "Assignment",
    "IssPosition",
    "Roster",
]
