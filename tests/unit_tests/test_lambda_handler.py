"""Tests for the Lambda entry point: identity forwarding, warm-up pings, CORS headers."""

import json

import pytest
from mangum import Mangum

from tests.consts import TEST_USER_ID


def api_gateway_event(path: str, method: str = "GET", authorizer=None) -> dict:
    return {
        "resource": "/{proxy+}",
        "path": path,
        "httpMethod": method,
        "headers": {"accept": "application/json"},
        "multiValueHeaders": {"accept": ["application/json"]},
        "queryStringParameters": None,
        "multiValueQueryStringParameters": None,
        "pathParameters": {"proxy": path.lstrip("/")},
        "stageVariables": None,
        "requestContext": {
            "resourcePath": "/{proxy+}",
            "httpMethod": method,
            "path": path,
            "stage": "prod",
            "identity": {"sourceIp": "127.0.0.1"},
            "authorizer": authorizer,
        },
        "body": None,
        "isBase64Encoded": False,
    }


@pytest.fixture
def lambda_module(client, monkeypatch):
    from file_manager import lambda_handler

    monkeypatch.setattr(lambda_handler, "asgi_handler", Mangum(client.app, lifespan="off"))
    return lambda_handler


def test_warmup_short_circuits(lambda_module):
    response = lambda_module.handler({"source": "serverless-plugin-warmup"}, None)

    assert response == {"statusCode": 200, "body": "Warmed up"}


def test_authorizer_claims_become_identity_headers(lambda_module):
    event = api_gateway_event("/projects", authorizer={"claims": {"sub": "cognito-123", "email": "a@example.com"}})

    lambda_module.inject_identity_headers(event)

    assert event["headers"]["x-user-id"] == "cognito-123"
    assert event["headers"]["x-user-email"] == "a@example.com"
    assert event["multiValueHeaders"]["x-user-id"] == ["cognito-123"]


def test_http_api_jwt_claims(lambda_module):
    event = api_gateway_event("/projects", authorizer={"jwt": {"claims": {"sub": "jwt-user"}}})

    lambda_module.inject_identity_headers(event)

    assert event["headers"]["x-user-id"] == "jwt-user"


def test_event_without_authorizer_is_untouched(lambda_module):
    event = api_gateway_event("/projects")

    lambda_module.inject_identity_headers(event)

    assert "x-user-id" not in event["headers"]


def test_requests_run_as_the_authorized_user(lambda_module, client):
    projects = client.app.state.project_service
    projects.create_project("cognito-123", "p-cognito", "Theirs")
    projects.create_project(TEST_USER_ID, "p-test", "Not theirs")

    event = api_gateway_event("/projects", authorizer={"claims": {"sub": "cognito-123"}})
    response = lambda_module.handler(event, None)

    assert response["statusCode"] == 200
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"
    body = json.loads(response["body"])
    assert [p["project_id"] for p in body["data"]["projects"]] == ["p-cognito"]
