"""DynamoDB backing store for lease records."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from botocore.exceptions import ClientError

from leasedlock import codec
from leasedlock.lease import LeaseRecord
from leasedlock.types import Outcome

logger = logging.getLogger(__name__)

DEFAULT_LOCKS_TABLE = "LOCKS"


@dataclass(frozen=True)
class WriteResult:
    """Result of one conditional lease write."""

    outcome: Outcome
    record: LeaseRecord | None = None  # stored record when outcome == "ok"
    holder: LeaseRecord | None = None  # current holder when the condition failed

    @property
    def ok(self) -> bool:
        return self.outcome == "ok"


class LockStore(Protocol):
    """Atomic conditional operations a lock table must provide."""

    locks_table: str

    async def write_lease(self, record: LeaseRecord, now: datetime) -> WriteResult:
        """Write record only if no unexpired lease exists for its resource."""

    async def delete_lease(self, resource_id: str, owner_token: str) -> Outcome:
        """Delete the lease only if owner_token still holds it."""


class DynamoDBLockStore:
    """
    Lock table stored in DynamoDB.

    Wraps a synchronous boto3 DynamoDB client. Each request runs in a worker
    thread so waiting callers never block the event loop.
    """

    def __init__(self, client: Any, locks_table: str = DEFAULT_LOCKS_TABLE) -> None:
        """
        Initialize the store.

        Args:
            client: A boto3 DynamoDB client (``boto3.client("dynamodb")``)
            locks_table: Name of the table holding lease records
        """
        self.client = client
        self.locks_table = locks_table

    async def write_lease(self, record: LeaseRecord, now: datetime) -> WriteResult:
        """
        Issue one conditional write for record.

        Returns:
            WriteResult classified as ok, condition_failed or table_not_found

        Raises:
            botocore.exceptions.ClientError: For any other store error
        """
        request = codec.acquire_request(self.locks_table, record, now)
        try:
            response = await asyncio.to_thread(self.client.update_item, **request)
        except ClientError as err:
            outcome = codec.classify_error(err)
            if outcome is None:
                raise
            return WriteResult(outcome=outcome, holder=codec.decode_record(err.response.get("Item")))

        stored = codec.decode_record(response.get("Attributes")) or record
        return WriteResult(outcome="ok", record=stored)

    async def delete_lease(self, resource_id: str, owner_token: str) -> Outcome:
        """
        Issue one conditional delete for the lease held by owner_token.

        Raises:
            botocore.exceptions.ClientError: For errors other than a failed
                condition or a missing table
        """
        request = codec.release_request(self.locks_table, resource_id, owner_token)
        try:
            await asyncio.to_thread(self.client.delete_item, **request)
        except ClientError as err:
            outcome = codec.classify_error(err)
            if outcome is None:
                raise
            return outcome
        return "ok"


async def ensure_lock_table(
    client: Any,
    locks_table: str = DEFAULT_LOCKS_TABLE,
    *,
    wait: bool = False,
) -> None:
    """
    Create the lock table if it does not already exist.

    Safe to call repeatedly; an existing table is left untouched.

    Args:
        client: A boto3 DynamoDB client
        locks_table: Name of the table to create
        wait: Block until the table is active
    """
    try:
        await asyncio.to_thread(
            client.create_table,
            TableName=locks_table,
            KeySchema=[{"AttributeName": codec.KEY_ATTRIBUTE, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": codec.KEY_ATTRIBUTE, "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        logger.info("Table '%s' created.", locks_table)
    except ClientError as err:
        if codec.error_code(err) != "ResourceInUseException":
            raise
        logger.debug("Table '%s' already exists", locks_table)

    if wait:
        waiter = client.get_waiter("table_exists")
        await asyncio.to_thread(waiter.wait, TableName=locks_table)
