"""Local store layer.

The store is the single shared mutable resource: the sync engine is its
only writer, and every reader goes through ``select_all`` or
``observe_all``. Platform variants implement :class:`LocalStore` and are
chosen by the application at startup.
"""

from peopleinspace.store.base import LocalStore, dedupe_by_name
from peopleinspace.store.memory import MemoryStore
from peopleinspace.store.sqlite import SqliteStore

__all__ = [
    "LocalStore",
    "MemoryStore",
    "SqliteStore",
    "dedupe_by_name",
]
