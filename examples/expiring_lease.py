"""A crashed holder's lease lapses on its own."""

import asyncio

import boto3

from leasedlock import LockManager, ensure_lock_table


async def main() -> None:
    """Take a short lease, never release it, and take it over after expiry."""
    client = boto3.client("dynamodb")
    await ensure_lock_table(client, wait=True)
    manager = LockManager.from_client(client)

    print("=== Expiring Lease Example ===\n")

    abandoned = await manager.acquire("jobs#nightly", lease_duration=3)
    print(f"First holder: {abandoned!r} (never released)")

    # Busy: give up immediately
    busy = await manager.acquire("jobs#nightly", give_up_after=0)
    print(f"Immediate retry: {busy}")

    # Waits until the first lease has lapsed
    taken_over = await manager.acquire("jobs#nightly", give_up_after=10)
    print(f"After waiting: {taken_over!r}")

    if abandoned is not None:
        print(f"Stale holder release: {await abandoned.release()}")
    if taken_over is not None:
        print(f"New holder release: {await taken_over.release()}")


if __name__ == "__main__":
    asyncio.run(main())
