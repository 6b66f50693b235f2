"""Shared fixtures: an in-memory DynamoDB client and a controllable clock."""

import asyncio
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from botocore.exceptions import ClientError

from leasedlock import codec

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def client_error(code: str, operation: str, item: dict[str, Any] | None = None) -> ClientError:
    response: dict[str, Any] = {"Error": {"Code": code, "Message": f"{code} (fake)"}}
    if item is not None:
        response["Item"] = item
    return ClientError(response, operation)  # type: ignore[arg-type]


class FakeDynamoDBClient:
    """
    Thread-safe stand-in for a boto3 DynamoDB client.

    Understands only the lock table requests leasedlock sends. Each request
    is applied atomically, like DynamoDB's conditional writes.
    """

    def __init__(self, tables: tuple[str, ...] = ("LOCKS",)) -> None:
        self._mutex = threading.Lock()
        self.tables: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in tables}
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: ClientError | None = None

    def _table(self, name: str, operation: str) -> dict[str, dict[str, Any]]:
        if name not in self.tables:
            raise client_error("ResourceNotFoundException", operation)
        return self.tables[name]

    def _check_injected_failure(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def create_table(self, *, TableName: str, **kwargs: Any) -> dict[str, Any]:
        with self._mutex:
            self.requests.append(("CreateTable", {"TableName": TableName, **kwargs}))
            if TableName in self.tables:
                raise client_error("ResourceInUseException", "CreateTable")
            self.tables[TableName] = {}
            return {"TableDescription": {"TableName": TableName, "TableStatus": "CREATING"}}

    def update_item(self, **request: Any) -> dict[str, Any]:
        with self._mutex:
            self.requests.append(("UpdateItem", request))
            self._check_injected_failure()
            table = self._table(request["TableName"], "UpdateItem")
            assert request["ConditionExpression"] == codec.ACQUIRE_CONDITION
            values = request["ExpressionAttributeValues"]
            key = request["Key"][codec.KEY_ATTRIBUTE]["S"]
            current = table.get(key)

            free = (
                current is None
                or codec.TOKEN_ATTRIBUTE not in current
                or current[codec.EXPIRES_ATTRIBUTE]["S"] < values[":now"]["S"]
            )
            if not free:
                old = dict(current) if request.get("ReturnValuesOnConditionCheckFailure") == "ALL_OLD" else None
                raise client_error("ConditionalCheckFailedException", "UpdateItem", item=old)

            item = {
                codec.KEY_ATTRIBUTE: {"S": key},
                codec.TOKEN_ATTRIBUTE: values[":transactionId"],
                codec.EXPIRES_ATTRIBUTE: values[":expiresAt"],
            }
            table[key] = item
            if request.get("ReturnValues") == "ALL_NEW":
                return {"Attributes": dict(item)}
            return {}

    def delete_item(self, **request: Any) -> dict[str, Any]:
        with self._mutex:
            self.requests.append(("DeleteItem", request))
            self._check_injected_failure()
            table = self._table(request["TableName"], "DeleteItem")
            assert request["ConditionExpression"] == codec.RELEASE_CONDITION
            key = request["Key"][codec.KEY_ATTRIBUTE]["S"]
            current = table.get(key)
            token = request["ExpressionAttributeValues"][":transactionId"]
            if current is None or current.get(codec.TOKEN_ATTRIBUTE) != token:
                raise client_error("ConditionalCheckFailedException", "DeleteItem")
            del table[key]
            return {}

    def put_lease(self, resource_id: str, owner_token: str, expires_at: datetime, table: str = "LOCKS") -> None:
        """Seed a lease directly, bypassing conditions."""
        with self._mutex:
            self.tables[table][resource_id] = {
                codec.KEY_ATTRIBUTE: {"S": resource_id},
                codec.TOKEN_ATTRIBUTE: {"S": owner_token},
                codec.EXPIRES_ATTRIBUTE: {"S": codec.format_timestamp(expires_at)},
            }

    def stored_token(self, resource_id: str, table: str = "LOCKS") -> str | None:
        item = self.tables[table].get(resource_id)
        return item[codec.TOKEN_ATTRIBUTE]["S"] if item else None

    def attempted_tokens(self) -> list[str]:
        return [
            request["ExpressionAttributeValues"][":transactionId"]["S"]
            for operation, request in self.requests
            if operation == "UpdateItem"
        ]


class FakeClock:
    """Clock that only moves when told to (or when something sleeps on it)."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start
        self._monotonic = 0.0
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self.current

    def monotonic(self) -> float:
        return self._monotonic

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)
        self._monotonic += seconds


@pytest.fixture
def fake_client() -> FakeDynamoDBClient:
    return FakeDynamoDBClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def resource_id() -> str:
    return f"TheNameOfSomeTable#{uuid.uuid4()}"
