"""Basic usage example for leasedlock."""

import asyncio
import logging

import boto3

from leasedlock import acquire_lock, ensure_lock_table


async def main() -> None:
    """Acquire, use and release a lock on one resource."""
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(message)s")
    logging.getLogger("botocore").setLevel(logging.WARNING)

    client = boto3.client("dynamodb")
    await ensure_lock_table(client, "LOCKS", wait=True)

    print("=== Basic Lock Example ===\n")

    lock = await acquire_lock(client, "orders#42", give_up_after=5)
    if lock is None:
        print("orders#42 is locked by someone else, try again later")
        return

    print(f"Acquired {lock!r}")
    async with lock:
        # Simulate work on the protected resource
        await asyncio.sleep(1)
        print("  ✓ Updated orders#42\n")

    print("Lock released")


if __name__ == "__main__":
    asyncio.run(main())
