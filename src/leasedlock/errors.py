"""Exception classes for leasedlock."""


class LeasedLockError(Exception):
    """Base exception for all leasedlock errors."""


class LockTableNotFoundError(LeasedLockError):
    """Raised when the lock table does not exist in the backing store."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"Lock table '{table_name}' not found.")


class InvalidLockRequestError(LeasedLockError, ValueError):
    """Raised for invalid acquire arguments or lock settings."""
