"""Problem Details (RFC 7807) responses for every error leaving the API.

Views raise :class:`APIError` subclasses; Werkzeug HTTP exceptions, request
body validation failures and anything unexpected are converted here as well,
so clients only ever see ``application/problem+json`` bodies carrying the
request id.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from werkzeug.exceptions import HTTPException

from lockbox.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Stable machine-readable codes for statuses produced outside APIError.
STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
    415: "unsupported_media_type",
    500: "internal_server_error",
}


def problem_response(
    status: int, code: str, detail: str, details: dict[str, Any] | None = None
) -> tuple[Response, int]:
    """Build a ``(response, status)`` pair holding one problem document.

    :param status: HTTP status code.
    :param code: Stable error code clients can branch on.
    :param detail: Human-readable summary, safe to show.
    :param details: Optional structured payload such as field errors.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    response = jsonify(body)
    response.mimetype = PROBLEM_MIMETYPE
    return response, status


class APIError(Exception):
    """Error raised by views and turned into a problem response.

    Subclasses pin ``status_code`` and ``code``; instances carry the message
    and optional structured ``details``.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str = "bad_request"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BadRequest(APIError):
    """Domain validation failed; ``errors`` maps field names to problems."""

    code = "validation_error"

    def __init__(
        self, message: str = "Validation failed", errors: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, {"errors": errors} if errors else None)


class Unauthorized(APIError):
    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class InternalError(APIError):
    """A service reported a system failure.

    The cause was logged where it was caught; the client gets no detail.
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "internal_server_error"

    def __init__(self, message: str = "Unexpected error") -> None:
        super().__init__(message)


def _log(status: int, message: str, *args: Any) -> None:
    if status >= 500:
        log.error(message, *args)
    else:
        log.warning(message, *args)


def init_app(app: Flask) -> None:
    """Register the problem handlers on ``app``."""

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        status = int(err.status_code)
        _log(status, "api error %s (%s): %s", status, err.code, err.message)
        return problem_response(status, err.code, err.message, err.details)

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = err.description or HTTPStatus(status).phrase
        _log(status, "http error %s: %s", status, detail)
        return problem_response(status, STATUS_CODES.get(status, "error"), detail)

    @app.errorhandler(MarshmallowValidationError)
    def _body_error(err: MarshmallowValidationError):
        log.warning("request body rejected: %s", sorted(err.normalized_messages()))
        return problem_response(
            HTTPStatus.BAD_REQUEST,
            "validation_error",
            "Validation failed",
            {"errors": err.normalized_messages()},
        )

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        log.error("unhandled %s", type(err).__name__, exc_info=err)
        return problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )


__all__ = ["APIError", "BadRequest", "InternalError", "NotFound", "Unauthorized", "init_app"]
