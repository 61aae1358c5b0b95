"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from videotube.core.logger import ensure_request_id
from videotube.services._shared.errors import ErrorKind, InvalidTokenError, ServiceError

log = logging.getLogger(__name__)

#: Error kind -> (HTTP status, stable problem code)
KIND_STATUS: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.VALIDATION: (HTTPStatus.BAD_REQUEST, "validation_failed"),
    ErrorKind.DUPLICATE_USER: (HTTPStatus.CONFLICT, "duplicate_user"),
    ErrorKind.NOT_FOUND: (HTTPStatus.NOT_FOUND, "not_found"),
    ErrorKind.INVALID_CREDENTIALS: (HTTPStatus.UNAUTHORIZED, "invalid_credentials"),
    ErrorKind.UNAUTHORIZED: (HTTPStatus.UNAUTHORIZED, "unauthorized"),
    ErrorKind.INVALID_TOKEN: (HTTPStatus.UNAUTHORIZED, "invalid_token"),
    ErrorKind.TOKEN_REUSE_OR_EXPIRED: (HTTPStatus.UNAUTHORIZED, "token_reuse_or_expired"),
    ErrorKind.INTERNAL: (HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error"),
}


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


def service_error_to_problem(err: ServiceError) -> tuple[dict[str, Any], int]:
    """
    Translate a service-layer error into a problem body and status.

    Internal errors never expose their message.

    :param err: Error raised by a service.
    :type err: ServiceError
    :returns: ``(problem, status)``
    :rtype: tuple[dict, int]
    """
    status, code = KIND_STATUS[err.kind]
    if err.kind is ErrorKind.INTERNAL:
        return _as_problem(status=status, code=code, message="Unexpected error"), status

    details: dict[str, Any] | None = None
    if isinstance(err, InvalidTokenError):
        details = {"reason": err.reason.value}
    return _as_problem(status=status, code=code, message=str(err), details=details), status


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        problem, status = service_error_to_problem(err)
        if status >= 500:
            log.error(
                "ServiceError: kind=%s request_id=%s",
                err.kind.value,
                problem["request_id"],
                exc_info=True,
            )
        else:
            log.warning(
                "ServiceError: kind=%s status=%s msg=%s request_id=%s",
                err.kind.value,
                status,
                problem["detail"],
                problem["request_id"],
            )
        return _problem_response(problem), status

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            error_code,
            status,
            message,
            problem["request_id"],
        )
        return _problem_response(problem), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        log.warning("ValidationError: request_id=%s", problem["request_id"])
        return _problem_response(problem), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Raw DB errors stay in the logs.
        problem = _as_problem(
            status=HTTPStatus.CONFLICT,
            code="conflict",
            message="Resource conflict",
        )
        log.error("IntegrityError: request_id=%s", problem["request_id"], exc_info=True)
        return _problem_response(problem), HTTPStatus.CONFLICT

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        problem = _as_problem(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        log.error("OperationalError: request_id=%s", problem["request_id"], exc_info=True)
        return _problem_response(problem), HTTPStatus.SERVICE_UNAVAILABLE

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error("Unhandled exception: request_id=%s", problem["request_id"], exc_info=True)
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
