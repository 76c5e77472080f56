import logging
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Path, Query, status

from file_manager.auth import UserContext, get_user_context
from file_manager.db_layer import ProjectService
from file_manager.dependencies import get_project_service
from file_manager.errors import ErrorCode, NotFoundError
from file_manager.responses import success_response
from file_manager.schemas import (
    DEFAULT_PAGE_SIZE,
    ApiResponse,
    CreateProjectRequest,
    CreateProjectResponse,
    ListProjectsResponse,
    MessageResponse,
    ProjectRecord,
    ProjectStatus,
    UpdateProjectRequest,
    clamp_page_size,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _project_not_found() -> NotFoundError:
    return NotFoundError("Project not found", code=ErrorCode.PROJECT_NOT_FOUND)


@router.get("/projects", response_model=ApiResponse[ListProjectsResponse])
def list_projects(
    project_status: Optional[ProjectStatus] = Query(None, alias="status", description="Only return projects in this status"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=0, description="Page size, capped at 100; 0 means the default"),
    last_key: Optional[str] = Query(None, alias="lastKey", description="Cursor returned as next_key by the previous page"),
    user: UserContext = Depends(get_user_context),
    projects: ProjectService = Depends(get_project_service),
):
    """List the caller's projects. Deleted projects only appear when asked for by status."""
    page = projects.list_projects(
        user.user_id,
        status=project_status,
        limit=clamp_page_size(limit),
        cursor=last_key,
    )
    return success_response(ListProjectsResponse(projects=page.items, next_key=page.next_cursor))


@router.post(
    "/projects",
    response_model=ApiResponse[CreateProjectResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_project(
    body: CreateProjectRequest,
    user: UserContext = Depends(get_user_context),
    projects: ProjectService = Depends(get_project_service),
):
    project = projects.create_project(
        owner_id=user.user_id,
        project_id=str(uuid4()),
        name=body.name,
        description=body.description,
    )
    return success_response(CreateProjectResponse(**project), status_code=status.HTTP_201_CREATED)


@router.get("/projects/{project_id}", response_model=ApiResponse[ProjectRecord])
def get_project(
    project_id: str = Path(..., description="The project ID"),
    user: UserContext = Depends(get_user_context),
    projects: ProjectService = Depends(get_project_service),
):
    project = projects.get_project(user.user_id, project_id)
    if project is None:
        raise _project_not_found()
    return success_response(ProjectRecord(**project))


@router.patch("/projects/{project_id}", response_model=ApiResponse[ProjectRecord])
def update_project(
    body: UpdateProjectRequest,
    project_id: str = Path(..., description="The project ID"),
    user: UserContext = Depends(get_user_context),
    projects: ProjectService = Depends(get_project_service),
):
    """Update name, description and/or status. Deleted projects cannot be updated.

    Omitted fields are left as they are; an explicit `"description": null` clears it.
    """
    if projects.get_project(user.user_id, project_id) is None:
        raise _project_not_found()

    changes = body.model_dump(exclude_unset=True)
    updated = projects.update_project(
        user.user_id,
        project_id,
        name=changes.get("name"),
        description=changes.get("description"),
        status=changes.get("status"),
        clear_description="description" in changes and changes["description"] is None,
    )
    if updated is None:
        raise _project_not_found()
    return success_response(ProjectRecord(**updated))


@router.delete("/projects/{project_id}", response_model=ApiResponse[MessageResponse])
def delete_project(
    project_id: str = Path(..., description="The project ID"),
    user: UserContext = Depends(get_user_context),
    projects: ProjectService = Depends(get_project_service),
):
    """Soft delete: the row stays with status `deleted` and disappears from every read."""
    if projects.get_project(user.user_id, project_id) is None:
        raise _project_not_found()

    projects.soft_delete_project(user.user_id, project_id)
    return success_response(MessageResponse(message="Project deleted"))
