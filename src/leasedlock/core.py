"""Lock acquisition over a shared lock table."""

import asyncio
import logging
from dataclasses import replace
from typing import Any

from leasedlock.clock import Clock, SystemClock
from leasedlock.errors import InvalidLockRequestError, LockTableNotFoundError
from leasedlock.handle import LockHandle
from leasedlock.lease import LeaseRecord
from leasedlock.settings import (
    DEFAULT_GIVE_UP_AFTER,
    DEFAULT_LEASE_DURATION,
    LockSettings,
    validate_give_up_after,
    validate_lease_duration,
)
from leasedlock.store import DEFAULT_LOCKS_TABLE, DynamoDBLockStore, LockStore, WriteResult


class LockManager:
    """
    Acquires leases on named resources.

    All mutual exclusion is delegated to the store's conditional writes.
    The manager holds no lock state of its own, so any number of managers
    in any number of processes can share one lock table.
    """

    def __init__(
        self,
        store: LockStore,
        *,
        settings: LockSettings | None = None,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize the manager.

        Args:
            store: Backing store holding lease records
            settings: Default lease duration, give-up time and poll interval;
                its locks_table is replaced by the store's table
            clock: Time source; defaults to the system clock
            logger: Logger for progress messages
        """
        self.store = store
        if settings is None:
            settings = LockSettings(locks_table=store.locks_table)
        elif settings.locks_table != store.locks_table:
            settings = replace(settings, locks_table=store.locks_table)
        self.settings = settings
        self.clock = clock or SystemClock()
        self.logger = logger or logging.getLogger(__name__)
        # Strong references to in-flight releases of abandoned leases
        self._cleanup_tasks: set[asyncio.Task[Any]] = set()

    @classmethod
    def from_client(
        cls,
        client: Any,
        settings: LockSettings | None = None,
        *,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> "LockManager":
        """Build a manager over a boto3 DynamoDB client using settings.locks_table."""
        settings = settings or LockSettings()
        store = DynamoDBLockStore(client, settings.locks_table)
        return cls(store, settings=settings, clock=clock, logger=logger)

    async def acquire(
        self,
        resource_id: str,
        *,
        lease_duration: float | None = None,
        give_up_after: float | None = None,
    ) -> LockHandle | None:
        """
        Acquire the lease on a resource, polling while it is held elsewhere.

        Cancelling acquire while a write is in flight does not lose the
        lease: if that write succeeds, it is released in the background.

        Args:
            resource_id: Name of the resource, e.g. "MY_TABLE#item-1"
            lease_duration: Seconds the lease stays valid once granted
            give_up_after: Seconds to keep retrying; 0 tries exactly once

        Returns:
            A LockHandle, or None if the resource stayed locked until the
            deadline passed

        Raises:
            LockTableNotFoundError: If the lock table does not exist
            InvalidLockRequestError: If an argument is invalid
        """
        if not isinstance(resource_id, str) or not resource_id:
            raise InvalidLockRequestError("resource_id must be a non-empty string")
        if lease_duration is None:
            lease_duration = self.settings.lease_duration
        if give_up_after is None:
            give_up_after = self.settings.give_up_after
        validate_lease_duration(lease_duration)
        validate_give_up_after(give_up_after)

        give_up_at = self.clock.monotonic() + give_up_after
        while True:
            result = await self._attempt(resource_id, lease_duration)
            if result.ok and result.record is not None:
                self.logger.debug(
                    "Acquired lock on %r until %s", resource_id, result.record.expires_at.isoformat()
                )
                return LockHandle(self.store, result.record, lease_duration)

            remaining = give_up_at - self.clock.monotonic()
            if remaining <= 0:
                self.logger.debug("Gave up waiting for lock on %r", resource_id)
                return None

            if result.holder is not None:
                self.logger.debug(
                    "Lock on %r held until %s; %.0f ms left waiting for lock to be released...",
                    resource_id,
                    result.holder.expires_at.isoformat(),
                    remaining * 1000,
                )
            else:
                self.logger.debug(
                    "%.0f ms left waiting for lock on %r to be released...", remaining * 1000, resource_id
                )
            await self.clock.sleep(self.settings.poll_interval)

    async def _attempt(self, resource_id: str, lease_duration: float) -> WriteResult:
        """One conditional write with a fresh token and expiry computed now."""
        now = self.clock.now()
        record = LeaseRecord.create(resource_id, lease_duration, now)
        write = asyncio.ensure_future(self.store.write_lease(record, now))
        try:
            result = await asyncio.shield(write)
        except asyncio.CancelledError:
            self._cleanup_tasks.add(write)
            write.add_done_callback(self._cleanup_tasks.discard)
            write.add_done_callback(self._release_abandoned)
            raise
        if result.outcome == "table_not_found":
            self.logger.error("Lock table '%s' not found", self.store.locks_table)
            raise LockTableNotFoundError(self.store.locks_table)
        return result

    def _release_abandoned(self, write: "asyncio.Future[WriteResult]") -> None:
        """Release a lease whose acquire was cancelled before it could return a handle."""
        if write.cancelled() or write.exception() is not None:
            return
        record = write.result().record
        if record is None:
            return
        self.logger.debug("Releasing lock on %r acquired after cancellation", record.resource_id)
        task = asyncio.ensure_future(self.store.delete_lease(record.resource_id, record.owner_token))
        self._cleanup_tasks.add(task)
        task.add_done_callback(self._cleanup_finished)

    def _cleanup_finished(self, task: "asyncio.Task[Any]") -> None:
        self._cleanup_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.warning("Could not release abandoned lock: %s", task.exception())


async def acquire_lock(
    client: Any,
    resource_id: str,
    locks_table: str = DEFAULT_LOCKS_TABLE,
    lease_duration: float = DEFAULT_LEASE_DURATION,
    give_up_after: float = DEFAULT_GIVE_UP_AFTER,
    *,
    clock: Clock | None = None,
) -> LockHandle | None:
    """
    Acquire a lock on a resource using a boto3 DynamoDB client.

    resource_id does not have to follow any format, as long as every caller
    names the same resource the same way.

    Returns:
        A LockHandle, or None if the resource is still locked after
        give_up_after seconds

    Raises:
        LockTableNotFoundError: If locks_table does not exist
    """
    manager = LockManager.from_client(client, LockSettings(locks_table=locks_table), clock=clock)
    return await manager.acquire(resource_id, lease_duration=lease_duration, give_up_after=give_up_after)
