from fastapi import APIRouter, Request

from file_manager import __version__
from file_manager.responses import utc_timestamp

router = APIRouter()


@router.get("/health")
def health_check(request: Request):
    """
    Health check endpoint for monitoring API status and component readiness.

    Not wrapped in the response envelope so load balancers can read it as-is.
    """
    settings = request.app.state.settings
    state = request.app.state

    health_status = {
        "status": "ok",
        "message": "File Management Service is running",
        "deployment_mode": settings.deployment_mode,
        "version": __version__,
        "timestamp": utc_timestamp(),
        "components": {
            "api": "ready",
            "storage": "ready" if getattr(state, "transfer_service", None) else "unavailable",
            "database": "ready" if getattr(state, "project_service", None) else "unavailable",
        },
    }

    health_status["ready"] = all(value == "ready" for value in health_status["components"].values())
    if not health_status["ready"]:
        health_status["status"] = "degraded"

    return health_status
