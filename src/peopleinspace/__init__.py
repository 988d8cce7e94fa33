"""peopleinspace - Async client and local cache for the people-in-space roster."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("peopleinspace")
except PackageNotFoundError:
    __version__ = "0+local"
from peopleinspace.client import PeopleInSpaceClient
from peopleinspace.config import PeopleInSpaceConfig, SyncSchedule
from peopleinspace.exceptions import (
    ConfigError,
    DecodeError,
    NetworkError,
    PeopleInSpaceError,
    StorageError,
    SyncError,
)
from peopleinspace.live import SnapshotBroadcast, Subscription
from peopleinspace.models import Assignment, IssPosition, Roster
from peopleinspace.remote import PeopleInSpaceApi, RemoteDataSource
from peopleinspace.store import LocalStore, MemoryStore, SqliteStore
from peopleinspace.sync import SyncCycle, SyncEngine, SyncState, SyncTrigger

__all__ = [
    "__version__",
    "Assignment",
    "ConfigError",
    "DecodeError",
    "IssPosition",
    "LocalStore",
    "MemoryStore",
    "NetworkError",
    "PeopleInSpaceApi",
    "PeopleInSpaceClient",
    "PeopleInSpaceConfig",
    "PeopleInSpaceError",
    "RemoteDataSource",
    "Roster",
    "SnapshotBroadcast",
    "SqliteStore",
    "StorageError",
    "Subscription",
    "SyncCycle",
    "SyncEngine",
    "SyncError",
    "SyncState",
    "SyncSchedule",
    "SyncTrigger",
]
