"""leasedlock - Distributed locks with expiring leases on a DynamoDB table."""

import logging

from leasedlock.clock import Clock, SystemClock
from leasedlock.core import LockManager, acquire_lock
from leasedlock.errors import (
    InvalidLockRequestError,
    LeasedLockError,
    LockTableNotFoundError,
)
from leasedlock.handle import LockHandle
from leasedlock.lease import LeaseRecord
from leasedlock.settings import LockSettings
from leasedlock.store import DynamoDBLockStore, LockStore, WriteResult, ensure_lock_table
from leasedlock.types import Outcome

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "LockManager",
    "LockHandle",
    "acquire_lock",
    "ensure_lock_table",
    "DynamoDBLockStore",
    "LockStore",
    "WriteResult",
    "LeaseRecord",
    "LockSettings",
    "Clock",
    "SystemClock",
    "LeasedLockError",
    "LockTableNotFoundError",
    "InvalidLockRequestError",
    "Outcome",
]
