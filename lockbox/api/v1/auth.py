"""Authentication endpoints: login, logout and session introspection."""

from __future__ import annotations

from flask import Blueprint, request

from lockbox.api.deps import (
    clear_auth_cookie,
    current_account,
    json_response,
    require_auth,
    services,
    set_auth_cookie,
    timing,
    unwrap,
)
from lockbox.core.errors import InternalError
from lockbox.schemas import AccountPrivateSchema, LoginSchema
from lockbox.services._shared.results import Err, Ok

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
private_schema = AccountPrivateSchema()


@bp.post("/login")
@timing
def login():
    """Check credentials, then return the account and a bearer token.

    The token is also set as the auth cookie so browser clients never handle
    it directly.
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    auth = services().auth
    account = unwrap(auth.authenticate_credentials(data["username"], data["password"]))
    token = unwrap(auth.issue_token(account))

    body = private_schema.dump(account)
    body["token"] = token
    response = json_response({"data": body})
    set_auth_cookie(response, token)
    return response


@bp.post("/logout")
@timing
def logout():
    """Drop the auth cookie. Issued tokens stay valid until the password changes."""
    response = json_response({"data": None})
    clear_auth_cookie(response)
    return response


@bp.get("/status")
@timing
def status():
    """Report whether the request carries valid credentials."""
    outcome = services().auth.authenticate_request(request)
    if isinstance(outcome, Err):
        raise InternalError()
    return json_response({"data": isinstance(outcome, Ok)})


@bp.get("/user")
@require_auth
@timing
def user():
    """Return the authenticated account (private view)."""
    return json_response({"data": private_schema.dump(current_account())})
