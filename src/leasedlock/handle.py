"""Lock handle returned by a successful acquire."""

import logging
from datetime import datetime

from leasedlock.lease import LeaseRecord
from leasedlock.store import LockStore

logger = logging.getLogger(__name__)


class LockHandle:
    """
    Proof of one successful acquisition.

    The handle keeps no local lock state: whether it still owns the lease
    is decided by the store when release() runs. A handle held past
    expires_at may refer to a lease that already belongs to someone else.
    """

    def __init__(self, store: LockStore, record: LeaseRecord, lease_duration: float) -> None:
        self._store = store
        self._record = record
        self.lease_duration = lease_duration

    @property
    def resource_id(self) -> str:
        return self._record.resource_id

    @property
    def owner_token(self) -> str:
        return self._record.owner_token

    @property
    def expires_at(self) -> datetime:
        return self._record.expires_at

    @property
    def locks_table(self) -> str:
        return self._store.locks_table

    async def release(self) -> bool:
        """
        Release the lease if this handle still owns it.

        Returns:
            True if the lease was deleted, False if another owner holds it,
            no lease exists, or the lock table is gone

        Raises:
            botocore.exceptions.ClientError: For any other store error
        """
        outcome = await self._store.delete_lease(self.resource_id, self.owner_token)
        if outcome == "ok":
            logger.debug("Released lock on %r", self.resource_id)
            return True
        logger.debug("Lock on %r no longer owned by this handle (%s)", self.resource_id, outcome)
        return False

    async def __aenter__(self) -> "LockHandle":
        """Context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Context manager exit."""
        await self.release()

    def __repr__(self) -> str:
        return (
            f"LockHandle(resource_id={self.resource_id!r}, "
            f"locks_table={self.locks_table!r}, expires_at={self.expires_at.isoformat()})"
        )
