"""Category CRUD endpoints.

Mutating routes sit behind the encryption gate middleware; the codec checks
the gate again before encrypting.
"""

from __future__ import annotations

import asyncio

from aiohttp import web

from personal_notes.api.models import CategoryIn
from personal_notes.api.routes.common import client_ip, read_model
from personal_notes.audit import AuditAction, EntityType
from personal_notes.errors import ValidationError
from personal_notes.logging import get_logger

log = get_logger("personal_notes.api.routes.categories")


async def _read_category(request: web.Request) -> CategoryIn:
    body = await read_model(request, CategoryIn)
    if not body.name.strip():
        raise ValidationError("category name cannot be empty")
    return body


async def handle_list_categories(request: web.Request) -> web.Response:
    """GET /categories: all categories that decrypt cleanly."""
    repo = request.app["categories_repo"]
    codec = request.app["codec"]

    stored = await asyncio.to_thread(repo.get_all)
    categories = codec.decrypt_fields_lenient(stored)

    request.app["audit_log"].record(
        AuditAction.READ,
        EntityType.CATEGORY,
        description="Retrieved categories",
        source_address=client_ip(request),
    )
    return web.json_response([c.to_dict() for c in categories])


async def handle_create_category(request: web.Request) -> web.Response:
    """POST /categories: create a category."""
    repo = request.app["categories_repo"]
    codec = request.app["codec"]

    body = await _read_category(request)
    sealed = codec.encrypt_fields(body.to_entity())
    stored = await asyncio.to_thread(repo.create, sealed)

    request.app["audit_log"].record(
        AuditAction.CREATE,
        EntityType.CATEGORY,
        entity_id=stored.id,
        description=f"Created category: {codec.safe_decrypt(stored.name)}",
        source_address=client_ip(request),
    )
    log.info("category_created", category_id=stored.id)
    return web.json_response(codec.decrypt_fields(stored).to_dict(), status=201)


async def handle_update_category(request: web.Request) -> web.Response:
    """PUT /categories/{category_id}: rename a category."""
    repo = request.app["categories_repo"]
    codec = request.app["codec"]
    category_id = request.match_info["category_id"]

    body = await _read_category(request)
    sealed = codec.encrypt_fields(body.to_entity(category_id))
    stored = await asyncio.to_thread(repo.update, sealed)

    request.app["audit_log"].record(
        AuditAction.UPDATE,
        EntityType.CATEGORY,
        entity_id=category_id,
        description=f"Updated category: {codec.safe_decrypt(stored.name)}",
        source_address=client_ip(request),
    )
    log.info("category_updated", category_id=category_id)
    return web.json_response(codec.decrypt_fields(stored).to_dict())


async def handle_delete_category(request: web.Request) -> web.Response:
    """DELETE /categories/{category_id}."""
    repo = request.app["categories_repo"]
    category_id = request.match_info["category_id"]

    await asyncio.to_thread(repo.delete, category_id)

    request.app["audit_log"].record(
        AuditAction.DELETE,
        EntityType.CATEGORY,
        entity_id=category_id,
        description=f"Deleted category with ID: {category_id}",
        source_address=client_ip(request),
    )
    log.info("category_deleted", category_id=category_id)
    return web.json_response({"message": "Category deleted"})
