"""Lease record definitions."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta


def new_owner_token() -> str:
    """Return a fresh, unique owner token."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class LeaseRecord:
    """Logical lease stored for a resource: who holds it and until when."""

    resource_id: str
    owner_token: str
    expires_at: datetime  # timezone-aware, UTC

    @classmethod
    def create(cls, resource_id: str, lease_duration: float, now: datetime) -> "LeaseRecord":
        """Create a record with a new owner token expiring lease_duration after now."""
        return cls(
            resource_id=resource_id,
            owner_token=new_owner_token(),
            expires_at=now + timedelta(seconds=lease_duration),
        )

    def is_expired(self, now: datetime) -> bool:
        """Check if the lease has lapsed (expiry strictly before now)."""
        return self.expires_at < now
