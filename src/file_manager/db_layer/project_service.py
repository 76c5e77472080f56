"""
Project service for the metadata table.
Handles project rows, their soft-delete lifecycle and denormalized file counters.
"""

import logging
from typing import Any, Dict, Optional, Union

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from file_manager.database.dynamodb import (
    CREATE_IF_ABSENT,
    PROJECT_PREFIX,
    UPDATE_IF_PRESENT,
    USER_PREFIX,
    Page,
    is_conditional_check_failure,
    item_to_record,
    now_iso,
    project_key,
    query_partition,
)
from file_manager.errors import AlreadyExistsError, ErrorCode
from file_manager.schemas import ProjectStatus

logger = logging.getLogger(__name__)


def _status_value(status: Union[str, ProjectStatus]) -> str:
    return ProjectStatus(status).value


class ProjectService:
    """Service for managing project rows (pk=USER#owner, sk=PROJECT#id)"""

    def __init__(self, table):
        self.table = table

    def create_project(
        self,
        owner_id: str,
        project_id: str,
        name: str,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create an active project with zeroed counters; fails if the identity is taken"""
        now = now_iso()
        item = {
            **project_key(owner_id, project_id),
            "project_id": project_id,
            "owner_id": owner_id,
            "name": name,
            "status": ProjectStatus.ACTIVE.value,
            "created_at": now,
            "updated_at": now,
            "file_count": 0,
            "total_size": 0,
        }
        if description is not None:
            item["description"] = description

        try:
            self.table.put_item(Item=item, ConditionExpression=CREATE_IF_ABSENT)
        except ClientError as e:
            if is_conditional_check_failure(e):
                logger.warning(f"Project {project_id} already exists for owner {owner_id}")
                raise AlreadyExistsError(
                    "Project already exists", code=ErrorCode.PROJECT_ALREADY_EXISTS
                ) from e
            raise

        logger.info(f"Created project {project_id} for owner {owner_id}")
        return item_to_record(item)

    def get_project_row(self, owner_id: str, project_id: str) -> Optional[Dict[str, Any]]:
        """Get the stored row as-is, soft-deleted rows included.

        Administrative access only; request paths use ``get_project``.
        """
        response = self.table.get_item(Key=project_key(owner_id, project_id))
        item = response.get("Item")
        return item_to_record(item) if item else None

    def get_project(self, owner_id: str, project_id: str) -> Optional[Dict[str, Any]]:
        """Get a live project; soft-deleted projects are reported as absent"""
        row = self.get_project_row(owner_id, project_id)
        if row is None or row.get("status") == ProjectStatus.DELETED.value:
            return None
        return row

    def list_projects(
        self,
        owner_id: str,
        status: Optional[Union[str, ProjectStatus]] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page:
        """List one page of an owner's projects.

        Without an explicit status, deleted projects are filtered out.
        """
        if status:
            filter_expression = Attr("status").eq(_status_value(status))
        else:
            filter_expression = Attr("status").ne(ProjectStatus.DELETED.value)

        return query_partition(
            self.table,
            partition_key=f"{USER_PREFIX}{owner_id}",
            sort_prefix=PROJECT_PREFIX,
            filter_expression=filter_expression,
            limit=limit,
            cursor=cursor,
        )

    def update_project(
        self,
        owner_id: str,
        project_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[Union[str, ProjectStatus]] = None,
        clear_description: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """Partially update a project and bump updated_at.

        ``None`` arguments leave the attribute untouched; ``clear_description``
        removes the description instead. Returns the updated row, or None when
        no such row exists.
        """
        set_clauses = ["#updated_at = :updated_at"]
        names = {"#updated_at": "updated_at"}
        values: Dict[str, Any] = {":updated_at": now_iso()}

        changes = {
            "name": name,
            "description": description,
            "status": _status_value(status) if status is not None else None,
        }
        for attribute, value in changes.items():
            if value is None:
                continue
            set_clauses.append(f"#{attribute} = :{attribute}")
            names[f"#{attribute}"] = attribute
            values[f":{attribute}"] = value

        update_expression = "SET " + ", ".join(set_clauses)
        if clear_description and description is None:
            update_expression += " REMOVE #description"
            names["#description"] = "description"

        try:
            response = self.table.update_item(
                Key=project_key(owner_id, project_id),
                UpdateExpression=update_expression,
                ConditionExpression=UPDATE_IF_PRESENT,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                logger.warning(f"No project {project_id} to update for owner {owner_id}")
                return None
            raise

        logger.info(f"Updated project {project_id}: {sorted(k for k, v in changes.items() if v is not None)}")
        return item_to_record(response["Attributes"])

    def adjust_project_counters(
        self,
        owner_id: str,
        project_id: str,
        file_count_delta: int,
        size_delta: int,
    ) -> None:
        """Atomically add deltas to file_count and total_size.

        Increments happen server-side so concurrent adjustments never lose
        updates. There is no idempotency key: replaying an event adjusts twice.
        Raises ClientError (ConditionalCheckFailedException) if the project row
        does not exist.
        """
        self.table.update_item(
            Key=project_key(owner_id, project_id),
            UpdateExpression=(
                "SET file_count = file_count + :file_count_delta, "
                "total_size = total_size + :size_delta, "
                "#updated_at = :updated_at"
            ),
            ConditionExpression=UPDATE_IF_PRESENT,
            ExpressionAttributeNames={"#updated_at": "updated_at"},
            ExpressionAttributeValues={
                ":file_count_delta": file_count_delta,
                ":size_delta": size_delta,
                ":updated_at": now_iso(),
            },
        )
        logger.info(
            f"Adjusted counters of project {project_id}: files {file_count_delta:+d}, bytes {size_delta:+d}"
        )

    def soft_delete_project(self, owner_id: str, project_id: str) -> Optional[Dict[str, Any]]:
        """Mark a project as deleted"""
        return self.update_project(owner_id, project_id, status=ProjectStatus.DELETED)
