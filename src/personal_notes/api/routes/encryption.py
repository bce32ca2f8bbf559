"""Encryption status and key generator endpoints."""

from __future__ import annotations

import base64
import hashlib

from aiohttp import web

from personal_notes.api.models import EncryptionStatus, KeyGenerateRequest
from personal_notes.api.routes.common import client_ip, read_model
from personal_notes.audit import AuditAction, EntityType
from personal_notes.errors import ENCRYPTION_UNAVAILABLE_MESSAGE, ValidationError

ENCRYPTION_VALID_MESSAGE = "Encryption system is properly initialized and working correctly."


def status_message(is_valid: bool) -> str:
    if is_valid:
        return ENCRYPTION_VALID_MESSAGE
    return ENCRYPTION_UNAVAILABLE_MESSAGE


async def handle_encryption_status(request: web.Request) -> web.Response:
    """GET /encryption/status: report whether writes are enabled."""
    is_valid = request.app["gate"].is_valid

    request.app["audit_log"].record(
        AuditAction.CHECK,
        EntityType.ENCRYPTION,
        description=f"Checked encryption status: {'valid' if is_valid else 'invalid'}",
        source_address=client_ip(request),
    )

    status = EncryptionStatus(encryption_valid=is_valid, message=status_message(is_valid))
    return web.json_response(status.model_dump())


async def handle_generate_key(request: web.Request) -> web.Response:
    """POST /generate-key: derive a stable display key from text.

    The key is ``base64(sha256(text))``. It is a convenience for users and
    plays no part in at-rest encryption.
    """
    body = await read_model(request, KeyGenerateRequest)
    if not body.text:
        raise ValidationError("input text cannot be empty")

    digest = hashlib.sha256(body.text.encode("utf-8")).digest()
    key = base64.b64encode(digest).decode("ascii")

    request.app["audit_log"].record(
        AuditAction.GENERATE,
        EntityType.KEY,
        description="Generated key from text",
        source_address=client_ip(request),
    )
    return web.json_response({"key": key})
