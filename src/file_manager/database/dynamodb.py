"""
Single-table DynamoDB layout for project and file metadata.

Key layout (pk/sk pattern):
- Project: pk=USER#{owner_id},      sk=PROJECT#{project_id}
- File:    pk=PROJECT#{project_id}, sk=FILE#{file_id}

Listing a partition is a key-range query on the sk prefix. Attribute filters
(status, MIME type) are FilterExpressions, so they are applied after the range
read and do not reduce the number of rows DynamoDB scans.
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

USER_PREFIX = "USER#"
PROJECT_PREFIX = "PROJECT#"
FILE_PREFIX = "FILE#"

KEY_ATTRIBUTES = ("pk", "sk")

CREATE_IF_ABSENT = "attribute_not_exists(pk) AND attribute_not_exists(sk)"
UPDATE_IF_PRESENT = "attribute_exists(pk)"


def now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def project_key(owner_id: str, project_id: str) -> Dict[str, str]:
    return {"pk": f"{USER_PREFIX}{owner_id}", "sk": f"{PROJECT_PREFIX}{project_id}"}


def file_key(project_id: str, file_id: str) -> Dict[str, str]:
    return {"pk": f"{PROJECT_PREFIX}{project_id}", "sk": f"{FILE_PREFIX}{file_id}"}


@dataclass
class Page:
    """One page of a partition query."""
    items: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None


def encode_cursor(last_evaluated_key: Optional[Dict[str, Any]]) -> Optional[str]:
    """Serialize DynamoDB's LastEvaluatedKey into an opaque token.

    Tokens use the url-safe base64 alphabet so they can be passed as a query
    parameter unescaped; ``decode_cursor`` also accepts standard base64.
    """
    if not last_evaluated_key:
        return None
    raw = json.dumps(last_evaluated_key, sort_keys=True, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(
    cursor: Optional[str],
    partition_key: str,
    sort_prefix: str = "",
) -> Optional[Dict[str, str]]:
    """Turn a token from ``encode_cursor`` back into an ExclusiveStartKey.

    Anything that does not decode to a key inside ``partition_key`` whose sort
    key starts with ``sort_prefix`` is ignored and the query restarts from the
    beginning of the partition.
    """
    if not cursor:
        return None
    try:
        normalized = cursor.replace("+", "-").replace("/", "_")
        decoded = json.loads(base64.urlsafe_b64decode(normalized.encode("ascii")).decode("utf-8"))
    except ValueError:
        logger.debug(f"Ignoring undecodable cursor: {cursor!r}")
        return None

    if (
        not isinstance(decoded, dict)
        or set(decoded) != set(KEY_ATTRIBUTES)
        or not all(isinstance(decoded[name], str) for name in KEY_ATTRIBUTES)
        or decoded["pk"] != partition_key
        or not decoded["sk"].startswith(sort_prefix)
    ):
        logger.debug(f"Ignoring cursor outside {partition_key}/{sort_prefix}*: {decoded!r}")
        return None
    return decoded


def _plain_number(value: Decimal):
    return int(value) if value == value.to_integral_value() else float(value)


def _to_plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return _plain_number(value)
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    return value


def item_to_record(item: Dict[str, Any]) -> Dict[str, Any]:
    """Strip the storage keys and turn DynamoDB Decimals back into ints/floats."""
    return {k: _to_plain(v) for k, v in item.items() if k not in KEY_ATTRIBUTES}


def is_conditional_check_failure(err: ClientError) -> bool:
    return err.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def query_partition(
    table,
    partition_key: str,
    sort_prefix: str,
    filter_expression=None,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
) -> Page:
    """Run one page of ``pk = :pk AND begins_with(sk, :prefix)``."""
    query_kwargs: Dict[str, Any] = {
        "KeyConditionExpression": Key("pk").eq(partition_key) & Key("sk").begins_with(sort_prefix),
    }
    if filter_expression is not None:
        query_kwargs["FilterExpression"] = filter_expression
    if limit:
        query_kwargs["Limit"] = limit

    start_key = decode_cursor(cursor, partition_key, sort_prefix)
    if start_key:
        query_kwargs["ExclusiveStartKey"] = start_key

    response = table.query(**query_kwargs)
    return Page(
        items=[item_to_record(item) for item in response.get("Items", [])],
        next_cursor=encode_cursor(response.get("LastEvaluatedKey")),
    )


def create_metadata_table(dynamodb_resource, table_name: str):
    """Create the metadata table if it is missing and return it.

    Used by the CLI against local endpoints and by the test fixtures; real
    deployments provision the table out of band.
    """
    try:
        table = dynamodb_resource.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "pk", "KeyType": "HASH"},
                {"AttributeName": "sk", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "pk", "AttributeType": "S"},
                {"AttributeName": "sk", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        table.wait_until_exists()
        logger.info(f"Created DynamoDB table: {table_name}")
        return table
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            logger.info(f"DynamoDB table already exists: {table_name}")
            return dynamodb_resource.Table(table_name)
        raise
