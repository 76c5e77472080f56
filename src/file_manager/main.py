from textwrap import dedent
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from file_manager import __version__
from file_manager.auth import strict_header_identity, trusted_header_identity
from file_manager.aws_clients import AWSClientManager
from file_manager.db_layer import FileMetadataService, ProjectService
from file_manager.errors import handle_broad_exceptions, register_error_handlers
from file_manager.routers.files import router as files_router
from file_manager.routers.health import router as health_router
from file_manager.routers.projects import router as projects_router
from file_manager.services import FileTransferService
from file_manager.settings import Settings, get_settings

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, aws: Optional[AWSClientManager] = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="File Management API",
        summary="Projects and their files, stored on S3",
        version=__version__,
        description=dedent(
            """\
        Files never pass through this API. Ask for a presigned URL, move the
        bytes directly against S3, then confirm the upload.

        | Step | Endpoint |
        | --- | --- |
        | 1. request an upload URL | `POST /projects/{project_id}/files` |
        | 2. upload the bytes | `PUT <upload_url>` with the same `Content-Type` |
        | 3. confirm | `POST /projects/{project_id}/files/{file_id}/confirm` |

        Identify yourself with the `X-User-Id` header.
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-User-Id", "X-User-Email"],
    )

    # One set of AWS clients per app, shared by every request
    aws = aws or AWSClientManager(settings)
    table = aws.get_dynamodb_resource().Table(settings.dynamodb_table_name)

    app.state.settings = settings
    app.state.project_service = ProjectService(table)
    app.state.file_service = FileMetadataService(table)
    app.state.transfer_service = FileTransferService(
        s3_client=aws.get_s3_client(),
        bucket_name=settings.s3_bucket_name,
        expires_in=settings.presigned_url_expiry,
    )
    app.state.identity_resolver = strict_header_identity if settings.require_auth else trusted_header_identity
    logger.info(f"Serving bucket {settings.s3_bucket_name} and table {settings.dynamodb_table_name}")

    app.include_router(health_router, tags=["health"])
    app.include_router(projects_router, tags=["projects"])
    app.include_router(files_router, tags=["files"])
    # Same routes under /api for clients that expect an API prefix
    app.include_router(projects_router, prefix="/api", include_in_schema=False)
    app.include_router(files_router, prefix="/api", include_in_schema=False)

    register_error_handlers(app)
    if not settings.is_production:
        app.middleware("http")(log_requests)
    app.middleware("http")(handle_broad_exceptions)

    return app


async def log_requests(request: Request, call_next):
    """Log every request with its status and duration (development only)."""
    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.0f}ms)")
    return response


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}" if route.tags else route.name


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
