"""Translation between lease records and DynamoDB items.

Items are stored with the low-level attribute-value representation::

    {"PK": {"S": <resource id>},
     "transactionId": {"S": <owner token>},
     "expiresAt": {"S": "2024-01-01T00:00:00.000Z"}}

Expiry instants are ISO-8601 UTC strings with millisecond precision, so
DynamoDB's string comparison orders them by time.
"""

from datetime import datetime, timezone
from typing import Any

from botocore.exceptions import ClientError

from leasedlock.lease import LeaseRecord
from leasedlock.types import Outcome

KEY_ATTRIBUTE = "PK"
TOKEN_ATTRIBUTE = "transactionId"
EXPIRES_ATTRIBUTE = "expiresAt"

ACQUIRE_UPDATE_EXPRESSION = "SET transactionId = :transactionId, expiresAt = :expiresAt"
# Absent or expired
ACQUIRE_CONDITION = "attribute_not_exists(transactionId) OR expiresAt < :now"
RELEASE_CONDITION = "transactionId = :transactionId"

_ERROR_OUTCOMES: dict[str, Outcome] = {
    "ConditionalCheckFailedException": "condition_failed",
    "ResourceNotFoundException": "table_not_found",
}


def format_timestamp(value: datetime) -> str:
    """Encode an aware datetime as a sortable UTC string."""
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Decode a timestamp written by format_timestamp."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def item_key(resource_id: str) -> dict[str, dict[str, str]]:
    return {KEY_ATTRIBUTE: {"S": resource_id}}


def encode_record(record: LeaseRecord) -> dict[str, dict[str, str]]:
    """Encode a lease record as a full item."""
    return {
        **item_key(record.resource_id),
        TOKEN_ATTRIBUTE: {"S": record.owner_token},
        EXPIRES_ATTRIBUTE: {"S": format_timestamp(record.expires_at)},
    }


def decode_record(item: dict[str, Any] | None) -> LeaseRecord | None:
    """Decode an item into a lease record, or None if it is not a lease."""
    if not item:
        return None
    try:
        return LeaseRecord(
            resource_id=item[KEY_ATTRIBUTE]["S"],
            owner_token=item[TOKEN_ATTRIBUTE]["S"],
            expires_at=parse_timestamp(item[EXPIRES_ATTRIBUTE]["S"]),
        )
    except (KeyError, TypeError, ValueError):
        return None


def acquire_request(table_name: str, record: LeaseRecord, now: datetime) -> dict[str, Any]:
    """Build UpdateItem arguments that write record only if the lease is absent or expired."""
    return {
        "TableName": table_name,
        "Key": item_key(record.resource_id),
        "UpdateExpression": ACQUIRE_UPDATE_EXPRESSION,
        "ConditionExpression": ACQUIRE_CONDITION,
        "ExpressionAttributeValues": {
            ":transactionId": {"S": record.owner_token},
            ":expiresAt": {"S": format_timestamp(record.expires_at)},
            ":now": {"S": format_timestamp(now)},
        },
        "ReturnValues": "ALL_NEW",
        "ReturnValuesOnConditionCheckFailure": "ALL_OLD",
    }


def release_request(table_name: str, resource_id: str, owner_token: str) -> dict[str, Any]:
    """Build DeleteItem arguments that delete only if owner_token still holds the lease."""
    return {
        "TableName": table_name,
        "Key": item_key(resource_id),
        "ConditionExpression": RELEASE_CONDITION,
        "ExpressionAttributeValues": {
            ":transactionId": {"S": owner_token},
        },
    }


def error_code(err: ClientError) -> str:
    return err.response.get("Error", {}).get("Code", "")


def classify_error(err: ClientError) -> Outcome | None:
    """
    Map a store error to an outcome.

    Returns None for errors that are neither contention nor a missing
    table; callers must re-raise those unchanged.
    """
    return _ERROR_OUTCOMES.get(error_code(err))
