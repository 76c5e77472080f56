"""Lambda handler for the File Management API using Mangum."""
import logging
from typing import Any, Dict

from mangum import Mangum

from file_manager.auth import USER_EMAIL_HEADER, USER_ID_HEADER
from file_manager.main import create_app

logger = logging.getLogger(__name__)

WARMUP_SOURCE = "serverless-plugin-warmup"

LAMBDA_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}

# Create FastAPI app
app = create_app()

# Wrap with Mangum for Lambda compatibility
asgi_handler = Mangum(app, lifespan="off")


def _authorizer_claims(event: Dict[str, Any]) -> Dict[str, Any]:
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    # REST API (Cognito) -> authorizer.claims, HTTP API (JWT) -> authorizer.jwt.claims,
    # Lambda authorizers put their context directly on the authorizer
    return authorizer.get("claims") or (authorizer.get("jwt") or {}).get("claims") or authorizer


def inject_identity_headers(event: Dict[str, Any]) -> Dict[str, Any]:
    """Forward the API Gateway authorizer's identity as X-User-Id / X-User-Email."""
    claims = _authorizer_claims(event)
    forwarded = {}
    if claims.get("sub"):
        forwarded[USER_ID_HEADER] = str(claims["sub"])
    if claims.get("email"):
        forwarded[USER_EMAIL_HEADER] = str(claims["email"])
    if not forwarded:
        return event

    event["headers"] = {**(event.get("headers") or {}), **forwarded}
    if event.get("multiValueHeaders") is not None:
        event["multiValueHeaders"] = {
            **event["multiValueHeaders"],
            **{name: [value] for name, value in forwarded.items()},
        }
    return event


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    if event.get("source") == WARMUP_SOURCE:
        logger.info("Lambda warmup")
        return {"statusCode": 200, "body": "Warmed up"}

    response = asgi_handler(inject_identity_headers(event), context)

    response["headers"] = {**(response.get("headers") or {}), **LAMBDA_CORS_HEADERS}
    return response


# Export handler for Lambda runtime
lambda_handler = handler
