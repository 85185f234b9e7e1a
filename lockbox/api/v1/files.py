"""File endpoints. Only the owner may see or touch a file."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from lockbox.api.deps import current_account, json_response, require_auth, services, timing, unwrap
from lockbox.schemas import FileCreateSchema, FilePatchSchema, FileSchema
from lockbox.services._shared.base import run_atomic, run_autonomous
from lockbox.services._shared.policies.common import is_owner
from lockbox.services._shared.results import NotFound as Missing
from lockbox.services._shared.results import Ok
from lockbox.services.files.dto import File, FilePatch

bp = Blueprint("files", __name__)

create_schema = FileCreateSchema()
patch_schema = FilePatchSchema()
file_schema = FileSchema()

NOT_FOUND = "File not found"


def _owned(file_id: int, ctx) -> Ok[File] | Missing:
    """Fetch ``file_id`` inside ``ctx``; other owners' files read as missing."""
    found = services().files.get_by_id_with_context(file_id, ctx)
    if isinstance(found, Ok) and not is_owner(
        actor_id=current_account().id, owner_id=found.value.owner_id
    ):
        return Missing()
    return found


@bp.post("")
@require_auth
@timing
def create_file():
    data = create_schema.load(request.get_json(silent=True) or {})
    file = File(owner_id=current_account().id, **data)
    created = unwrap(services().files.insert(file))
    return json_response({"data": file_schema.dump(created)}, status=201)


@bp.get("/<int:file_id>")
@require_auth
@timing
def get_file(file_id: int):
    found = unwrap(
        run_autonomous(services().contexts, lambda ctx: _owned(file_id, ctx)),
        not_found=NOT_FOUND,
    )
    return json_response({"data": file_schema.dump(found)})


@bp.patch("/<int:file_id>")
@require_auth
@timing
def update_file(file_id: int):
    """Update name, MIME type or payload; the owner cannot be changed."""
    patch = FilePatch(**patch_schema.load(request.get_json(silent=True) or {}))
    files = services().files

    def _apply(ctx):
        found = _owned(file_id, ctx)
        if not isinstance(found, Ok):
            return found
        return files.update_with_context(file_id, patch, ctx)

    updated = unwrap(run_atomic(services().contexts, _apply), not_found=NOT_FOUND)
    return json_response({"data": file_schema.dump(updated)})


@bp.delete("/<int:file_id>")
@require_auth
@timing
def delete_file(file_id: int):
    files = services().files

    def _delete(ctx):
        found = _owned(file_id, ctx)
        if not isinstance(found, Ok):
            return found
        return files.delete_with_context(file_id, ctx)

    unwrap(run_atomic(services().contexts, _delete), not_found=NOT_FOUND)
    return current_app.response_class(status=204)
