import logging
from typing import Optional
from uuid import uuid4

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, Path, Query, status

from file_manager.auth import UserContext, get_user_context
from file_manager.db_layer import FileMetadataService, ProjectService
from file_manager.dependencies import (
    get_file_service,
    get_project_service,
    get_settings_from_request,
    get_transfer_service,
)
from file_manager.errors import ErrorCode, NotFoundError, RequestValidationFailed
from file_manager.responses import success_response
from file_manager.schemas import (
    DEFAULT_PAGE_SIZE,
    ApiResponse,
    DownloadFileResponse,
    FileRecord,
    FileStatus,
    ListFilesResponse,
    MessageResponse,
    UploadFileRequest,
    UploadFileResponse,
    clamp_page_size,
)
from file_manager.services import FileTransferService
from file_manager.settings import Settings
from file_manager.utils.files import get_file_extension, sanitize_file_name, validate_upload_request

logger = logging.getLogger(__name__)

router = APIRouter()


def _file_not_found() -> NotFoundError:
    return NotFoundError("File not found", code=ErrorCode.FILE_NOT_FOUND)


def adjust_counters_best_effort(
    projects: ProjectService,
    owner_id: str,
    project_id: str,
    file_count_delta: int,
    size_delta: int,
) -> None:
    """Apply a counter delta to the owning project without ever failing the request.

    Counters are approximate statistics: a missing project or a failed write is
    logged and dropped.
    """
    try:
        projects.adjust_project_counters(owner_id, project_id, file_count_delta, size_delta)
    except (ClientError, BotoCoreError) as err:
        logger.warning(f"Skipped counter update for project {project_id} ({file_count_delta:+d} files): {err}")


@router.get("/projects/{project_id}/files", response_model=ApiResponse[ListFilesResponse])
def list_files(
    project_id: str = Path(..., description="The project ID"),
    file_type: Optional[str] = Query(None, alias="fileType", description="Only return files of this MIME type"),
    file_status: Optional[FileStatus] = Query(None, alias="status", description="Only return files in this status"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=0, description="Page size, capped at 100; 0 means the default"),
    last_key: Optional[str] = Query(None, alias="lastKey", description="Cursor returned as next_key by the previous page"),
    files: FileMetadataService = Depends(get_file_service),
):
    page = files.list_files(
        project_id,
        file_type=file_type,
        status=file_status,
        limit=clamp_page_size(limit),
        cursor=last_key,
    )
    return success_response(ListFilesResponse(files=page.items, next_key=page.next_cursor))


@router.post(
    "/projects/{project_id}/files",
    response_model=ApiResponse[UploadFileResponse],
    status_code=status.HTTP_201_CREATED,
)
def request_upload(
    body: UploadFileRequest,
    project_id: str = Path(..., description="The project ID"),
    user: UserContext = Depends(get_user_context),
    settings: Settings = Depends(get_settings_from_request),
    files: FileMetadataService = Depends(get_file_service),
    transfer: FileTransferService = Depends(get_transfer_service),
):
    """
    Request a presigned upload URL for a new file.

    A `pending` metadata row is created right away. The client then PUTs the
    bytes to `upload_url` (with the same Content-Type) and calls `confirm`.
    """
    validate_upload_request(body.file_name, body.file_type, body.file_size, settings.max_file_size)

    file_id = str(uuid4())
    file_name = sanitize_file_name(body.file_name)

    upload = transfer.issue_upload_url(project_id, file_id, file_name, body.file_type, body.file_size)
    files.create_file_metadata(
        project_id=project_id,
        file_id=file_id,
        file_name=file_name,
        file_type=body.file_type,
        file_extension=get_file_extension(file_name),
        file_size=body.file_size,
        s3_key=upload.s3_key,
        uploaded_by=user.user_id,
    )

    return success_response(
        UploadFileResponse(file_id=file_id, upload_url=upload.upload_url, expires_in=upload.expires_in),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/projects/{project_id}/files/{file_id}", response_model=ApiResponse[DownloadFileResponse])
def get_download_url(
    project_id: str = Path(..., description="The project ID"),
    file_id: str = Path(..., description="The file ID"),
    files: FileMetadataService = Depends(get_file_service),
    transfer: FileTransferService = Depends(get_transfer_service),
):
    """Presigned download URL; browsers save the file under its stored name."""
    file = files.get_file(project_id, file_id)
    if file is None:
        raise _file_not_found()

    download = transfer.issue_download_url(file["s3_key"], file["file_name"])
    return success_response(
        DownloadFileResponse(
            file_id=file["file_id"],
            file_name=file["file_name"],
            download_url=download.download_url,
            expires_in=download.expires_in,
        )
    )


@router.get("/projects/{project_id}/files/{file_id}/metadata", response_model=ApiResponse[FileRecord])
def get_file_metadata(
    project_id: str = Path(..., description="The project ID"),
    file_id: str = Path(..., description="The file ID"),
    files: FileMetadataService = Depends(get_file_service),
):
    file = files.get_file(project_id, file_id)
    if file is None:
        raise _file_not_found()
    return success_response(FileRecord(**file))


@router.post("/projects/{project_id}/files/{file_id}/confirm", response_model=ApiResponse[FileRecord])
def confirm_upload(
    project_id: str = Path(..., description="The project ID"),
    file_id: str = Path(..., description="The file ID"),
    user: UserContext = Depends(get_user_context),
    projects: ProjectService = Depends(get_project_service),
    files: FileMetadataService = Depends(get_file_service),
    transfer: FileTransferService = Depends(get_transfer_service),
):
    """
    Mark a file as uploaded once its bytes are in storage.

    Fails with 400 and leaves the row `pending` when the object is missing.
    """
    file = files.get_file(project_id, file_id)
    if file is None:
        raise _file_not_found()

    if not transfer.exists(file["s3_key"]):
        raise RequestValidationFailed("File has not been uploaded to storage")

    updated = files.update_file_status(project_id, file_id, FileStatus.UPLOADED)
    if updated is None:
        raise _file_not_found()

    adjust_counters_best_effort(projects, user.user_id, project_id, 1, file["file_size"])
    return success_response(FileRecord(**updated))


@router.delete("/projects/{project_id}/files/{file_id}", response_model=ApiResponse[MessageResponse])
def delete_file(
    project_id: str = Path(..., description="The project ID"),
    file_id: str = Path(..., description="The file ID"),
    hard: bool = Query(False, description="Also remove the stored object and the metadata row"),
    user: UserContext = Depends(get_user_context),
    projects: ProjectService = Depends(get_project_service),
    files: FileMetadataService = Depends(get_file_service),
    transfer: FileTransferService = Depends(get_transfer_service),
):
    """
    Delete a file.

    - soft (default): status becomes `deleted`, the object is kept
    - `?hard=true`: the object and the row are removed; also accepted for
      files that were already soft-deleted
    """
    if hard:
        file = files.get_file_row(project_id, file_id)
        if file is None:
            raise _file_not_found()

        transfer.delete(file["s3_key"])
        files.hard_delete_file(project_id, file_id)
        message = "File permanently deleted"
    else:
        file = files.get_file(project_id, file_id)
        if file is None:
            raise _file_not_found()

        files.soft_delete_file(project_id, file_id)
        message = "File deleted"

    adjust_counters_best_effort(projects, user.user_id, project_id, -1, -file["file_size"])
    return success_response(MessageResponse(message=message))
