"""Shared API helpers: service access, authentication and outcome mapping."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from lockbox.core.container import EXTENSION_KEY, Services
from lockbox.core.errors import BadRequest, InternalError, NotFound, Unauthorized
from lockbox.services._shared import results
from lockbox.services.accounts.dto import Account
from lockbox.services.auth.dto import BEARER_PREFIX

F = TypeVar("F", bound=Callable[..., Any])


def services() -> Services:
    """Return the service graph built for the current application."""
    return cast(Services, current_app.extensions[EXTENSION_KEY])


def unwrap(outcome: Any, *, not_found: str = "Resource not found") -> Any:
    """Return the value of an ``Ok`` outcome or raise the matching API error.

    ``Invalid`` -> 400 with field errors, ``NotFound`` -> 404,
    ``NotAuthenticated`` -> 401 and ``Err`` -> 500 (already logged by the
    service that produced it).
    """
    if isinstance(outcome, results.Ok):
        return outcome.value
    if isinstance(outcome, results.Invalid):
        raise BadRequest(errors=outcome.errors.to_dict())
    if isinstance(outcome, results.NotFound):
        raise NotFound(not_found)
    if isinstance(outcome, results.NotAuthenticated):
        raise Unauthorized()
    raise InternalError()


def require_auth(func: F) -> F:
    """Authenticate the request before running the view.

    The account is stored on ``g.account``; its id also lands on
    ``g.account_id`` so access logs can name the caller.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        account = unwrap(services().auth.authenticate_request(request))
        g.account = account
        g.account_id = account.id
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_account() -> Account:
    """Return the account authenticated by :func:`require_auth`."""
    return cast(Account, g.account)


def set_auth_cookie(response: Response, token: str) -> None:
    """Attach ``Bearer <token>`` as an HttpOnly, same-site-strict cookie."""
    response.set_cookie(
        current_app.config.get("AUTH_COOKIE_NAME", "authorization"),
        f"{BEARER_PREFIX}{token}",
        httponly=True,
        secure=bool(current_app.config.get("AUTH_COOKIE_SECURE", True)),
        samesite="Strict",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        current_app.config.get("AUTH_COOKIE_NAME", "authorization"),
        httponly=True,
        secure=bool(current_app.config.get("AUTH_COOKIE_SECURE", True)),
        samesite="Strict",
    )


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"path": request.path, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
