"""FastAPI dependencies handing the per-app services to route handlers."""

from fastapi import Request

from file_manager.db_layer import FileMetadataService, ProjectService
from file_manager.services import FileTransferService
from file_manager.settings import Settings


def get_settings_from_request(request: Request) -> Settings:
    return request.app.state.settings


def get_project_service(request: Request) -> ProjectService:
    return request.app.state.project_service


def get_file_service(request: Request) -> FileMetadataService:
    return request.app.state.file_service


def get_transfer_service(request: Request) -> FileTransferService:
    return request.app.state.transfer_service
