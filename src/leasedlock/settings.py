"""Lock settings and environment overrides."""

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass

from leasedlock.errors import InvalidLockRequestError
from leasedlock.store import DEFAULT_LOCKS_TABLE

DEFAULT_LEASE_DURATION = 600.0
DEFAULT_GIVE_UP_AFTER = 10.0
DEFAULT_POLL_INTERVAL = 1.0
# Keeps now + lease_duration well inside the datetime range
MAX_LEASE_DURATION = 100 * 365 * 24 * 3600.0

ENV_LOCKS_TABLE = "LEASEDLOCK_TABLE"
ENV_LEASE_DURATION = "LEASEDLOCK_LEASE_DURATION"
ENV_GIVE_UP_AFTER = "LEASEDLOCK_GIVE_UP_AFTER"
ENV_POLL_INTERVAL = "LEASEDLOCK_POLL_INTERVAL"


@dataclass(frozen=True)
class LockSettings:
    """Defaults applied by a LockManager."""

    locks_table: str = DEFAULT_LOCKS_TABLE
    lease_duration: float = DEFAULT_LEASE_DURATION
    give_up_after: float = DEFAULT_GIVE_UP_AFTER
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if not self.locks_table:
            raise InvalidLockRequestError("locks_table must be a non-empty string")
        validate_lease_duration(self.lease_duration)
        validate_give_up_after(self.give_up_after)
        if not _is_number(self.poll_interval) or not math.isfinite(self.poll_interval) or self.poll_interval <= 0:
            raise InvalidLockRequestError(f"poll_interval must be a positive number, got {self.poll_interval!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LockSettings":
        """
        Build settings from LEASEDLOCK_* environment variables.

        Unset variables keep their defaults.

        Raises:
            InvalidLockRequestError: If a variable is not a valid number or is out of range
        """
        env = os.environ if environ is None else environ
        return cls(
            locks_table=env.get(ENV_LOCKS_TABLE, "").strip() or DEFAULT_LOCKS_TABLE,
            lease_duration=_float_from_env(env, ENV_LEASE_DURATION, DEFAULT_LEASE_DURATION),
            give_up_after=_float_from_env(env, ENV_GIVE_UP_AFTER, DEFAULT_GIVE_UP_AFTER),
            poll_interval=_float_from_env(env, ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL),
        )


def validate_lease_duration(lease_duration: float) -> None:
    if not _is_number(lease_duration) or not math.isfinite(lease_duration) or lease_duration <= 0:
        raise InvalidLockRequestError(f"lease_duration must be a positive number, got {lease_duration!r}")
    if lease_duration > MAX_LEASE_DURATION:
        raise InvalidLockRequestError(
            f"lease_duration must not exceed {MAX_LEASE_DURATION:.0f} seconds, got {lease_duration!r}"
        )


def validate_give_up_after(give_up_after: float) -> None:
    # NaN would never compare past the deadline
    if not _is_number(give_up_after) or not math.isfinite(give_up_after) or give_up_after < 0:
        raise InvalidLockRequestError(f"give_up_after must be a non-negative number, got {give_up_after!r}")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _float_from_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise InvalidLockRequestError(f"{name} must be a number, got {raw!r}") from None
