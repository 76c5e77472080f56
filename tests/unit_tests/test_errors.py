"""Tests for the error envelope and the mapping of AWS errors to codes."""

from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError
from fastapi import status
from fastapi.testclient import TestClient

from file_manager.errors import ErrorCode, map_client_error
from file_manager.main import create_app


def client_error(code: str, operation: str = "GetItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} happened"}}, operation)


@pytest.mark.parametrize(
    "aws_code, operation, expected",
    [
        ("ThrottlingException", "Query", ErrorCode.SERVICE_UNAVAILABLE),
        ("ProvisionedThroughputExceededException", "PutItem", ErrorCode.SERVICE_UNAVAILABLE),
        ("RequestLimitExceeded", "UpdateItem", ErrorCode.SERVICE_UNAVAILABLE),
        ("SlowDown", "HeadObject", ErrorCode.SERVICE_UNAVAILABLE),
        ("ResourceNotFoundException", "Query", ErrorCode.NOT_FOUND),
        ("NoSuchKey", "GetObject", ErrorCode.NOT_FOUND),
        ("404", "HeadObject", ErrorCode.NOT_FOUND),
        ("AccessDeniedException", "GetItem", ErrorCode.ACCESS_DENIED),
        ("AccessDenied", "PutObject", ErrorCode.ACCESS_DENIED),
        ("ConditionalCheckFailedException", "PutItem", ErrorCode.CONFLICT),
        ("ValidationException", "Query", ErrorCode.DATABASE_ERROR),
        ("InternalError", "DeleteObject", ErrorCode.S3_ERROR),
    ],
)
def test_map_client_error(aws_code, operation, expected):
    code, _ = map_client_error(client_error(aws_code, operation))

    assert code == expected


def test_unknown_route_uses_the_envelope(client: TestClient):
    response = client.get("/nowhere")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    body = response.json()
    assert body["success"] is False
    assert body["error"] == {"code": "NOT_FOUND", "message": "Route GET /nowhere not found"}
    assert "timestamp" in body["meta"]


def test_aws_failures_surface_their_message_outside_production(client: TestClient):
    projects = client.app.state.project_service
    with patch.object(projects, "get_project", side_effect=client_error("InternalServerError")):
        response = client.get("/projects/p1")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["error"]["code"] == "DATABASE_ERROR"
    assert "InternalServerError" in response.json()["error"]["message"]


def test_unexpected_errors_are_internal_errors(client: TestClient):
    projects = client.app.state.project_service
    with patch.object(projects, "get_project", side_effect=RuntimeError("boom")):
        response = client.get("/projects/p1")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["error"] == {"code": "INTERNAL_ERROR", "message": "boom"}


def test_production_hides_unexpected_error_messages(mocked_aws, settings):
    app = create_app(settings=settings.model_copy(update={"deployment_mode": "aws-prod"}))
    projects = app.state.project_service

    with TestClient(app) as client, patch.object(projects, "get_project", side_effect=RuntimeError("secret detail")):
        response = client.get("/projects/p1")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["error"] == {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}


def test_strict_identity_requires_a_user_header(mocked_aws, settings):
    app = create_app(settings=settings.model_copy(update={"require_auth": True}))

    with TestClient(app) as client:
        anonymous = client.get("/projects")
        identified = client.get("/projects", headers={"X-User-Id": "someone"})

    assert anonymous.status_code == status.HTTP_401_UNAUTHORIZED
    assert anonymous.json()["error"]["code"] == "UNAUTHORIZED"
    assert identified.status_code == status.HTTP_200_OK


def test_anonymous_callers_act_as_demo_user(mocked_aws, settings):
    app = create_app(settings=settings)

    with TestClient(app) as client:
        created = client.post("/projects", json={"name": "Demo"}).json()["data"]

    assert app.state.project_service.get_project("demo-user", created["project_id"]) is not None


def test_health_is_not_enveloped(client: TestClient):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "ok"
    assert body["ready"] is True
    assert "success" not in body
