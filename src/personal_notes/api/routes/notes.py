"""Note CRUD endpoints."""

from __future__ import annotations

import asyncio

from aiohttp import web

from personal_notes.api.models import NoteIn
from personal_notes.api.routes.common import client_ip, int_query, read_model
from personal_notes.audit import AuditAction, EntityType
from personal_notes.errors import ValidationError
from personal_notes.logging import get_logger

log = get_logger("personal_notes.api.routes.notes")


async def _read_note(request: web.Request) -> NoteIn:
    body = await read_model(request, NoteIn)
    if not body.subject.strip():
        raise ValidationError("note subject cannot be empty")
    return body


def _resolve_limit(request: web.Request) -> int:
    """Listing limit: ``all=true`` disables it, ``limit`` overrides the default."""
    if request.query.get("all") == "true":
        return 0
    default = request.app["gate"].notes_limit
    limit = int_query(request, "limit", default)
    return limit if limit > 0 else default


async def handle_list_notes(request: web.Request) -> web.Response:
    """GET /notes: list notes, optionally by ``category_id`` / ``priority``.

    Notes that fail to decrypt are left out of the listing.
    """
    repo = request.app["notes_repo"]
    codec = request.app["codec"]

    stored = await asyncio.to_thread(
        repo.get_all,
        priority=request.query.get("priority") or None,
        category_id=request.query.get("category_id") or None,
    )

    limit = _resolve_limit(request)
    if limit > 0:
        stored = stored[:limit]

    notes = codec.decrypt_fields_lenient(stored)

    request.app["audit_log"].record(
        AuditAction.READ,
        EntityType.NOTE,
        description="Retrieved notes",
        source_address=client_ip(request),
    )
    return web.json_response([n.to_dict() for n in notes])


async def handle_get_note(request: web.Request) -> web.Response:
    """GET /notes/{note_id}: one note, strictly decrypted."""
    repo = request.app["notes_repo"]
    codec = request.app["codec"]
    note_id = request.match_info["note_id"]

    stored = await asyncio.to_thread(repo.get_by_id, note_id)
    return web.json_response(codec.decrypt_fields(stored).to_dict())


async def handle_create_note(request: web.Request) -> web.Response:
    """POST /notes: create a note."""
    repo = request.app["notes_repo"]
    codec = request.app["codec"]

    body = await _read_note(request)
    sealed = codec.encrypt_fields(body.to_entity())
    stored = await asyncio.to_thread(repo.create, sealed)

    request.app["audit_log"].record(
        AuditAction.CREATE,
        EntityType.NOTE,
        entity_id=stored.id,
        description=f"Created note: {codec.safe_decrypt(stored.subject)}",
        source_address=client_ip(request),
    )
    log.info("note_created", note_id=stored.id)
    return web.json_response(codec.decrypt_fields(stored).to_dict(), status=201)


async def handle_update_note(request: web.Request) -> web.Response:
    """PUT /notes/{note_id}: replace a note."""
    repo = request.app["notes_repo"]
    codec = request.app["codec"]
    note_id = request.match_info["note_id"]

    body = await _read_note(request)
    # 404 before spending any work on encryption
    await asyncio.to_thread(repo.get_by_id, note_id)

    sealed = codec.encrypt_fields(body.to_entity(note_id))
    stored = await asyncio.to_thread(repo.update, sealed)

    request.app["audit_log"].record(
        AuditAction.UPDATE,
        EntityType.NOTE,
        entity_id=note_id,
        description=f"Updated note: {codec.safe_decrypt(stored.subject)}",
        source_address=client_ip(request),
    )
    log.info("note_updated", note_id=note_id)
    return web.json_response(codec.decrypt_fields(stored).to_dict())


async def handle_delete_note(request: web.Request) -> web.Response:
    """DELETE /notes/{note_id}."""
    repo = request.app["notes_repo"]
    note_id = request.match_info["note_id"]

    await asyncio.to_thread(repo.delete, note_id)

    request.app["audit_log"].record(
        AuditAction.DELETE,
        EntityType.NOTE,
        entity_id=note_id,
        description=f"Deleted note with ID: {note_id}",
        source_address=client_ip(request),
    )
    log.info("note_deleted", note_id=note_id)
    return web.json_response({"message": "Note deleted successfully"})
