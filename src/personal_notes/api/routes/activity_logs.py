"""Activity-log query endpoints."""

from __future__ import annotations

import asyncio

from aiohttp import web

from personal_notes.api.routes.common import int_query
from personal_notes.audit import ActivityLogFilter
from personal_notes.errors import ValidationError

DEFAULT_PAGE_SIZE = 20


def _filter_from_query(request: web.Request, *, paged: bool) -> ActivityLogFilter:
    flt = ActivityLogFilter(
        entity_type=request.query.get("entity_type") or None,
        action=request.query.get("action") or None,
    )
    if paged:
        limit = int_query(request, "limit", DEFAULT_PAGE_SIZE)
        flt.limit = limit if limit > 0 else DEFAULT_PAGE_SIZE
        flt.offset = max(int_query(request, "offset", 0), 0)
    return flt


async def handle_list_logs(request: web.Request) -> web.Response:
    """GET /activity-logs: newest first, ``limit``/``offset`` paging."""
    repo = request.app["activity_repo"]
    logs = await asyncio.to_thread(repo.get_all, _filter_from_query(request, paged=True))
    return web.json_response([entry.to_dict() for entry in logs])


async def handle_count_logs(request: web.Request) -> web.Response:
    """GET /activity-logs/count."""
    repo = request.app["activity_repo"]
    count = await asyncio.to_thread(repo.count, _filter_from_query(request, paged=False))
    return web.json_response({"count": count})


async def handle_get_log(request: web.Request) -> web.Response:
    """GET /activity-logs/{log_id}."""
    repo = request.app["activity_repo"]
    try:
        log_id = int(request.match_info["log_id"])
    except ValueError as e:
        raise ValidationError("Invalid activity log ID") from e

    entry = await asyncio.to_thread(repo.get_by_id, log_id)
    return web.json_response(entry.to_dict())


async def handle_delete_old_logs(request: web.Request) -> web.Response:
    """DELETE /activity-logs/older-than/{days}."""
    repo = request.app["activity_repo"]
    try:
        days = int(request.match_info["days"])
    except ValueError:
        raise ValidationError("Invalid number of days") from None

    deleted = await asyncio.to_thread(repo.delete_older_than, days)
    return web.json_response({"message": "Old logs deleted successfully", "rowsAffected": deleted})
