from __future__ import annotations

import pytest

from videotube.core.errors import service_error_to_problem
from videotube.services._shared.errors import (
    DuplicateUserError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenFailure,
    TokenReuseError,
    UnauthorizedError,
    ValidationFailedError,
)


@pytest.mark.parametrize(
    ("error", "status", "code"),
    [
        (ValidationFailedError("missing"), 400, "validation_failed"),
        (DuplicateUserError(), 409, "duplicate_user"),
        (NotFoundError("User", 1), 404, "not_found"),
        (InvalidCredentialsError(), 401, "invalid_credentials"),
        (UnauthorizedError(), 401, "unauthorized"),
        (InvalidTokenError(TokenFailure.EXPIRED), 401, "invalid_token"),
        (TokenReuseError(), 401, "token_reuse_or_expired"),
        (InternalError("boom"), 500, "internal_server_error"),
    ],
)
def test_error_kinds_map_to_status(app, error, status, code):
    with app.test_request_context("/api/v1/users/login"):
        problem, got = service_error_to_problem(error)
    assert got == status
    assert problem["code"] == code
    assert problem["status"] == status
    assert problem["instance"] == "/api/v1/users/login"
    assert problem["request_id"]


def test_invalid_token_problem_exposes_reason(app):
    with app.test_request_context():
        problem, _ = service_error_to_problem(InvalidTokenError(TokenFailure.INVALID_SIGNATURE))
    assert problem["details"] == {"reason": "INVALID_SIGNATURE"}


def test_internal_error_hides_message(app):
    with app.test_request_context():
        problem, _ = service_error_to_problem(InternalError("db password is hunter2"))
    assert "hunter2" not in problem["detail"]


def test_unknown_route_returns_problem_json(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "not_found"
    assert body["request_id"] == resp.headers["X-Request-ID"]
