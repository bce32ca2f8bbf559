"""Root endpoint: hands browsers to the web client, or describes the API."""

from aiohttp import web

FRONTEND_PREFIX = "/frontend"
FRONTEND_INDEX = f"{FRONTEND_PREFIX}/index.html"


async def handle_index(request: web.Request) -> web.Response:
    """GET /: redirect to the web client when one is served, else list the API."""
    if request.app["frontend_enabled"]:
        raise web.HTTPMovedPermanently(FRONTEND_INDEX)

    return web.json_response(
        {
            "name": "personal-notes",
            "version": "0.1.0",
            "encryption_valid": request.app["gate"].is_valid,
            "endpoints": sorted({r.canonical for r in request.app.router.resources()} - {"/"}),
        }
    )
