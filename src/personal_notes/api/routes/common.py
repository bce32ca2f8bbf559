"""Helpers shared by the route handlers."""

from __future__ import annotations

from typing import TypeVar

from aiohttp import web
from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


def client_ip(request: web.Request) -> str:
    """Best-effort source address for the activity log."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote or ""


async def read_model(request: web.Request, model: type[ModelT]) -> ModelT:
    """Parse and validate the JSON body.

    Raises ``json.JSONDecodeError`` or ``pydantic.ValidationError``, which the
    error middleware turns into 400 responses.
    """
    data = await request.json()
    return model.model_validate(data)


def int_query(request: web.Request, name: str, default: int) -> int:
    """Read an integer query parameter, falling back on bad input."""
    raw = request.query.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default
