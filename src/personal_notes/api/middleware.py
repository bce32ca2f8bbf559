"""Middleware for the notes API server.

Provides CORS, the encryption gate that blocks modifications while the key
is unverified, and translation of domain errors into JSON responses.
"""

from __future__ import annotations

import json
from typing import Any

import pydantic
from aiohttp import web

from personal_notes.errors import (
    ENCRYPTION_UNAVAILABLE_MESSAGE,
    DecryptionError,
    EncryptionUnavailableError,
    NotFoundError,
    ValidationError,
)
from personal_notes.logging import get_logger

log = get_logger("personal_notes.api.middleware")

# Collections whose mutating routes require a valid encryption gate
GATED_PREFIXES = ("/notes", "/categories")

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def create_cors_middleware(allowed_origins: list[str] | None = None) -> Any:
    """Create CORS middleware.

    Args:
        allowed_origins: List of allowed origins, or None for no CORS headers.
    """

    @web.middleware
    async def cors_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
        # Handle preflight
        if request.method == "OPTIONS":
            response: web.StreamResponse = web.Response(status=204)
        else:
            response = await handler(request)

        if allowed_origins:
            origin = request.headers.get("Origin", "")
            if origin and (origin in allowed_origins or "*" in allowed_origins):
                response.headers["Access-Control-Allow-Origin"] = origin
                response.headers["Access-Control-Allow-Methods"] = (
                    "GET, POST, PUT, DELETE, OPTIONS"
                )
                response.headers["Access-Control-Allow-Headers"] = (
                    "Origin, Content-Type, Authorization"
                )
                response.headers["Access-Control-Max-Age"] = "86400"

        return response

    return cors_middleware


def _is_gated(request: web.Request) -> bool:
    if request.method not in MUTATING_METHODS:
        return False
    path = request.path
    return any(path == p or path.startswith(p + "/") for p in GATED_PREFIXES)


def create_encryption_gate_middleware() -> Any:
    """Create middleware that rejects modifications while encryption is invalid.

    Reads ``request.app["gate"]``. Rejected requests never reach the handler,
    so nothing is written to the store.
    """

    @web.middleware
    async def encryption_gate_middleware(
        request: web.Request, handler: Any
    ) -> web.StreamResponse:
        if _is_gated(request):
            gate = request.app["gate"]
            if not gate.is_valid:
                log.warning("write_rejected_encryption_invalid", path=request.path)
                return web.json_response({"error": ENCRYPTION_UNAVAILABLE_MESSAGE}, status=403)

        return await handler(request)  # type: ignore[no-any-return]

    return encryption_gate_middleware


def create_error_middleware() -> Any:
    """Create middleware mapping domain errors to JSON error responses.

    * malformed JSON / pydantic errors / ``ValidationError`` -> 400
    * ``EncryptionUnavailableError`` -> 403
    * ``NotFoundError`` -> 404
    * ``DecryptionError`` -> 500 with a stable message
    * anything else -> 500 (logged)
    """

    @web.middleware
    async def error_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
        try:
            return await handler(request)  # type: ignore[no-any-return]
        except web.HTTPException:
            raise
        except (json.JSONDecodeError, pydantic.ValidationError):
            return web.json_response({"error": "Invalid request body"}, status=400)
        except ValidationError as e:
            return web.json_response({"error": str(e)}, status=400)
        except EncryptionUnavailableError as e:
            return web.json_response({"error": str(e)}, status=403)
        except NotFoundError as e:
            return web.json_response({"error": str(e)}, status=404)
        except DecryptionError:
            log.error("decryption_failed", path=request.path)
            return web.json_response({"error": "Failed to decrypt stored data"}, status=500)
        except Exception:
            log.exception("unhandled_request_error", path=request.path, method=request.method)
            return web.json_response({"error": "Internal server error"}, status=500)

    return error_middleware
