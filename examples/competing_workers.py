"""Several workers competing for the same resource."""

import asyncio

import boto3

from leasedlock import LockManager, LockSettings, ensure_lock_table


async def worker(manager: LockManager, name: str) -> None:
    """Wait up to 15 seconds for the lock, hold it briefly, release it."""
    lock = await manager.acquire("reports#daily", give_up_after=15)
    if lock is None:
        print(f"[{name}] gave up")
        return
    print(f"[{name}] holding lock until {lock.expires_at:%H:%M:%S}")
    await asyncio.sleep(2)
    released = await lock.release()
    print(f"[{name}] released={released}")


async def main() -> None:
    """Run three workers; each waits for the previous one to release."""
    client = boto3.client("dynamodb")
    await ensure_lock_table(client, wait=True)

    # Settings come from LEASEDLOCK_* environment variables when set
    manager = LockManager.from_client(client, LockSettings.from_env())

    print("=== Competing Workers Example ===\n")
    await asyncio.gather(*(worker(manager, f"worker-{i}") for i in range(3)))


if __name__ == "__main__":
    asyncio.run(main())
