"""Health check endpoint for the notes API."""

from aiohttp import web


async def handle_health(request: web.Request) -> web.Response:
    """GET /health: liveness probe, also reports the encryption gate."""
    return web.json_response(
        {
            "status": "healthy",
            "version": "0.1.0",
            "encryption_valid": request.app["gate"].is_valid,
        }
    )
