####################################
# --- Request/response schemas --- #
####################################

from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

T = TypeVar("T")


class ProjectStatus(str, Enum):
    """Lifecycle of a project row. Deletion is a status flip, never a removal."""
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class FileStatus(str, Enum):
    """Lifecycle of a file row: pending -> uploaded -> deleted."""
    PENDING = "pending"
    UPLOADED = "uploaded"
    DELETED = "deleted"


def clamp_page_size(limit: Optional[int]) -> int:
    """Cap a requested page size to MAX_PAGE_SIZE; a missing or zero size means the default."""
    if not limit:
        return DEFAULT_PAGE_SIZE
    return min(limit, MAX_PAGE_SIZE)


#####################
# --- Envelope --- #
#####################

class ResponseMeta(BaseModel):
    timestamp: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[object] = None


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint."""
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorBody] = None
    meta: ResponseMeta


class MessageResponse(BaseModel):
    message: str


####################
# --- Projects --- #
####################

class CreateProjectRequest(BaseModel):
    """Request body for `POST /projects`."""
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {"name": "Site survey", "description": "Drawings and photos"}
        },
    )


class UpdateProjectRequest(BaseModel):
    """Request body for `PATCH /projects/{project_id}`. Omitted fields are left untouched."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[ProjectStatus] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class ProjectRecord(BaseModel):
    project_id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    created_at: str
    updated_at: str
    file_count: int
    total_size: int


class CreateProjectResponse(BaseModel):
    project_id: str
    name: str
    description: Optional[str] = None
    created_at: str


class ListProjectsResponse(BaseModel):
    projects: List[ProjectRecord]
    next_key: Optional[str] = None


#################
# --- Files --- #
#################

class UploadFileRequest(BaseModel):
    """Request body for `POST /projects/{project_id}/files`."""
    file_name: str = Field(min_length=1, max_length=255)
    file_type: str = Field(min_length=1, description="MIME type, e.g. image/png")
    file_size: int = Field(gt=0, description="Size in bytes")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"file_name": "floor plan.pdf", "file_type": "application/pdf", "file_size": 524288}
        }
    )


class FileRecord(BaseModel):
    file_id: str
    project_id: str
    file_name: str
    file_type: str
    file_extension: str
    file_size: int
    s3_key: str
    uploaded_by: str
    uploaded_at: str
    status: FileStatus


class UploadFileResponse(BaseModel):
    file_id: str
    upload_url: str
    expires_in: int


class DownloadFileResponse(BaseModel):
    file_id: str
    file_name: str
    download_url: str
    expires_in: int


class ListFilesResponse(BaseModel):
    files: List[FileRecord]
    next_key: Optional[str] = None
