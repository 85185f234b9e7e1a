"""Account endpoints backed by the account service."""

from __future__ import annotations

from flask import Blueprint, current_app, request

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
from lockbox.schemas import (
    AccountCreateSchema,
    AccountPrivateSchema,
    AccountPublicSchema,
    AccountUpdateSchema,
)
from lockbox.services._shared.base import run_atomic
from lockbox.services._shared.results import Ok
from lockbox.services.accounts.dto import Account, AccountPatch

bp = Blueprint("users", __name__)

create_schema = AccountCreateSchema()
update_schema = AccountUpdateSchema()
public_schema = AccountPublicSchema()
private_schema = AccountPrivateSchema()


@bp.post("")
@timing
def create_account():
    """Create an account with the configured default profile picture."""
    payload = create_schema.load(request.get_json(silent=True) or {})
    account = Account(
        username=payload["username"],
        password=payload["password"],
        email=payload["email"],
        profile_picture_url=current_app.config.get("DEFAULT_PROFILE_PICTURE_URL", ""),
    )
    created = unwrap(services().accounts.insert(account))
    return json_response({"data": private_schema.dump(created)}, status=201)


@bp.get("/id/<int:account_id>")
@require_auth
@timing
def get_account_by_id(account_id: int):
    account = unwrap(services().accounts.get_by_id(account_id), not_found="Account not found")
    return json_response({"data": public_schema.dump(account)})


@bp.get("/username/<string:username>")
@require_auth
@timing
def get_account_by_username(username: str):
    account = unwrap(
        services().accounts.get_by_username(username), not_found="Account not found"
    )
    return json_response({"data": public_schema.dump(account)})


@bp.patch("/me")
@require_auth
@timing
def update_me():
    """Apply a partial update to the caller's account.

    The read and the write share one transaction so the patch is applied to
    the row as it is at commit time. A password change moves the reset epoch,
    which revokes the caller's current token; a fresh one is set as cookie.
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    patch = AccountPatch(**data)
    accounts = services().accounts
    me = current_account()

    def _apply(ctx):
        found = accounts.get_by_id_with_context(me.id, ctx)
        if not isinstance(found, Ok):
            return found
        return accounts.update_with_context(patch.apply(found.value), ctx)

    updated = unwrap(run_atomic(services().contexts, _apply), not_found="Account not found")
    response = json_response({"data": private_schema.dump(updated)})
    if updated.password_reset_at != me.password_reset_at:
        token = services().auth.issue_token(updated)
        if isinstance(token, Ok):
            set_auth_cookie(response, token.value)
        else:
            clear_auth_cookie(response)
    return response


@bp.delete("/me")
@require_auth
@timing
def delete_me():
    """Delete the caller's account and drop the auth cookie."""
    unwrap(services().accounts.delete(current_account().id), not_found="Account not found")
    response = current_app.response_class(status=204)
    clear_auth_cookie(response)
    return response
