"""Client configuration for peopleinspace."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from peopleinspace._constants import (
    BASE_URL,
    DEFAULT_DATABASE_PATH,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_REQUEST_TIMEOUT,
)
from peopleinspace.exceptions import ConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class SyncSchedule:
    """Timing policy for background synchronization.

    Parameters
    ----------
    interval : float or None
        Seconds between periodic syncs after the startup sync.
        ``None`` disables polling: only the startup sync and explicit
        on-demand calls run.
    backoff_on_failure : bool
        Double the wait after each consecutive failed sync.
    max_backoff : float
        Upper bound in seconds for the backed-off wait.
    """

    interval: float | None = None
    backoff_on_failure: bool = False
    max_backoff: float = DEFAULT_MAX_BACKOFF

    def __post_init__(self) -> None:
        if self.interval is not None and self.interval <= 0:
            raise ConfigError(f"sync interval must be positive, got {self.interval}")
        if self.max_backoff <= 0:
            raise ConfigError(f"max_backoff must be positive, got {self.max_backoff}")

    def next_delay(self, consecutive_failures: int) -> float | None:
        """Seconds to wait before the next periodic sync, or ``None`` to stop."""
        if self.interval is None:
            return None
        if not self.backoff_on_failure or consecutive_failures <= 0:
            return self.interval
        return min(self.interval * (2**consecutive_failures), max(self.max_backoff, self.interval))


@dataclasses.dataclass(frozen=True)
class PeopleInSpaceConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        API base URL.
    database_path : str
        SQLite file holding the cached roster. ``":memory:"`` keeps
        the cache for the lifetime of the process only.
    request_timeout : float
        Total timeout in seconds for one HTTP request.
    sync_interval : float or None
        Seconds between background syncs; ``None`` syncs once at startup.
    backoff_on_failure : bool
        Back off exponentially after failed background syncs.
    max_backoff : float
        Cap in seconds for the backed-off interval.
    """

    base_url: str = BASE_URL
    database_path: str = DEFAULT_DATABASE_PATH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    sync_interval: float | None = None
    backoff_on_failure: bool = False
    max_backoff: float = DEFAULT_MAX_BACKOFF

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigError("base_url must be non-empty")
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    def schedule(self) -> SyncSchedule:
        """Build the background sync schedule described by this config."""
        return SyncSchedule(
            interval=self.sync_interval,
            backoff_on_failure=self.backoff_on_failure,
            max_backoff=self.max_backoff,
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> PeopleInSpaceConfig:
        """Create configuration from ``PEOPLEINSPACE_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        ConfigError
            A numeric variable could not be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("PEOPLEINSPACE_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url.rstrip("/")

        db_path = env.get("PEOPLEINSPACE_DATABASE_PATH")
        if db_path is not None:
            config_kwargs["database_path"] = db_path

        # numeric settings are parsed separately so bad values fail loudly
        for env_key, field_name in (
            ("PEOPLEINSPACE_REQUEST_TIMEOUT", "request_timeout"),
            ("PEOPLEINSPACE_SYNC_INTERVAL", "sync_interval"),
            ("PEOPLEINSPACE_MAX_BACKOFF", "max_backoff"),
        ):
            val = env.get(env_key)
            if val is not None and val.strip() and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "backoff_on_failure" not in overrides:
            config_kwargs["backoff_on_failure"] = _env_bool(env.get("PEOPLEINSPACE_BACKOFF_ON_FAILURE"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
