"""
File metadata service for the metadata table.
Handles file rows (pk=PROJECT#project, sk=FILE#file) and their upload status.
"""

import logging
from typing import Any, Dict, Optional, Union

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from file_manager.database.dynamodb import (
    CREATE_IF_ABSENT,
    FILE_PREFIX,
    PROJECT_PREFIX,
    UPDATE_IF_PRESENT,
    Page,
    file_key,
    is_conditional_check_failure,
    item_to_record,
    now_iso,
    query_partition,
)
from file_manager.errors import AlreadyExistsError, ErrorCode
from file_manager.schemas import FileStatus

logger = logging.getLogger(__name__)


class FileMetadataService:
    """Service for managing file metadata rows"""

    def __init__(self, table):
        self.table = table

    def create_file_metadata(
        self,
        project_id: str,
        file_id: str,
        file_name: str,
        file_type: str,
        file_extension: str,
        file_size: int,
        s3_key: str,
        uploaded_by: str,
    ) -> Dict[str, Any]:
        """Create a pending file row; fails if the identity is taken"""
        item = {
            **file_key(project_id, file_id),
            "file_id": file_id,
            "project_id": project_id,
            "file_name": file_name,
            "file_type": file_type,
            "file_extension": file_extension,
            "file_size": file_size,
            "s3_key": s3_key,
            "uploaded_by": uploaded_by,
            "uploaded_at": now_iso(),
            "status": FileStatus.PENDING.value,
        }

        try:
            self.table.put_item(Item=item, ConditionExpression=CREATE_IF_ABSENT)
        except ClientError as e:
            if is_conditional_check_failure(e):
                logger.warning(f"File {file_id} already exists in project {project_id}")
                raise AlreadyExistsError(
                    "File already exists", code=ErrorCode.FILE_ALREADY_EXISTS
                ) from e
            raise

        logger.info(f"Created pending file {file_id} in project {project_id}")
        return item_to_record(item)

    def get_file_row(self, project_id: str, file_id: str) -> Optional[Dict[str, Any]]:
        """Get the stored row as-is, soft-deleted rows included"""
        response = self.table.get_item(Key=file_key(project_id, file_id))
        item = response.get("Item")
        return item_to_record(item) if item else None

    def get_file(self, project_id: str, file_id: str) -> Optional[Dict[str, Any]]:
        """Get a live file; soft-deleted files are reported as absent"""
        row = self.get_file_row(project_id, file_id)
        if row is None or row.get("status") == FileStatus.DELETED.value:
            return None
        return row

    def list_files(
        self,
        project_id: str,
        file_type: Optional[str] = None,
        status: Optional[Union[str, FileStatus]] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page:
        """List one page of a project's files, optionally filtered by MIME type and status.

        Without an explicit status, deleted files are filtered out.
        """
        if status:
            filter_expression = Attr("status").eq(FileStatus(status).value)
        else:
            filter_expression = Attr("status").ne(FileStatus.DELETED.value)
        if file_type:
            filter_expression = filter_expression & Attr("file_type").eq(file_type)

        return query_partition(
            self.table,
            partition_key=f"{PROJECT_PREFIX}{project_id}",
            sort_prefix=FILE_PREFIX,
            filter_expression=filter_expression,
            limit=limit,
            cursor=cursor,
        )

    def update_file_status(
        self,
        project_id: str,
        file_id: str,
        status: Union[str, FileStatus],
    ) -> Optional[Dict[str, Any]]:
        """Overwrite the status of an existing row.

        No transition guard: any status may replace any other. Returns the
        updated row, or None when no such row exists.
        """
        status_value = FileStatus(status).value
        try:
            response = self.table.update_item(
                Key=file_key(project_id, file_id),
                UpdateExpression="SET #status = :status",
                ConditionExpression=UPDATE_IF_PRESENT,
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={":status": status_value},
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                logger.warning(f"No file {file_id} in project {project_id} to update")
                return None
            raise

        logger.info(f"File {file_id} in project {project_id} is now {status_value}")
        return item_to_record(response["Attributes"])

    def soft_delete_file(self, project_id: str, file_id: str) -> Optional[Dict[str, Any]]:
        """Mark a file as deleted; the stored object is left alone"""
        return self.update_file_status(project_id, file_id, FileStatus.DELETED)

    def hard_delete_file(self, project_id: str, file_id: str) -> None:
        """Remove the row physically"""
        self.table.delete_item(Key=file_key(project_id, file_id))
        logger.info(f"Removed file row {file_id} from project {project_id}")
