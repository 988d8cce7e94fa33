"""Local store contract."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from peopleinspace.live import Subscription
from peopleinspace.models import Assignment


class LocalStore(Protocol):
    """Persistent mirror of the last successfully fetched roster.

    Every method except :meth:`observe_all` raises
    :class:`~peopleinspace.exceptions.StorageError` when the underlying
    medium fails or the store has not been initialized.
    """

    async def initialize(self) -> LocalStore:
        """Open the medium and apply the schema. Idempotent."""
        ...

    async def replace_all(self, roster: Iterable[Assignment]) -> None:
        """Atomically swap the table contents for *roster*."""
        ...

    async def select_all(self) -> list[Assignment]:
        ...

    def observe_all(self) -> Subscription[list[Assignment]]:
        """Current snapshot now, then one snapshot per committed replace."""
        ...

    async def close(self) -> None:
        ...


def dedupe_by_name(roster: Iterable[Assignment]) -> list[Assignment]:
    """Collapse assignments sharing a name.

    The first occurrence keeps its position; the last occurrence's craft wins.
    """
    by_name: dict[str, Assignment] = {}
    for assignment in roster:
        by_name[assignment.name] = assignment
    return list(by_name.values())
