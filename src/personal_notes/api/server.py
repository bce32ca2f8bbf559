"""HTTP API server for the personal notes service.

Runs an aiohttp application exposing category and note CRUD, the
encryption status endpoint, the key generator, activity-log queries and,
when present, the static web client.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from aiohttp import web

from personal_notes.api.middleware import (
    create_cors_middleware,
    create_encryption_gate_middleware,
    create_error_middleware,
)
from personal_notes.api.routes.activity_logs import (
    handle_count_logs,
    handle_delete_old_logs,
    handle_get_log,
    handle_list_logs,
)
from personal_notes.api.routes.categories import (
    handle_create_category,
    handle_delete_category,
    handle_list_categories,
    handle_update_category,
)
from personal_notes.api.routes.encryption import handle_encryption_status, handle_generate_key
from personal_notes.api.routes.health import handle_health
from personal_notes.api.routes.index import FRONTEND_PREFIX, handle_index
from personal_notes.api.routes.notes import (
    handle_create_note,
    handle_delete_note,
    handle_get_note,
    handle_list_notes,
    handle_update_note,
)
from personal_notes.audit import ActivityLogRepository, AuditLog
from personal_notes.logging import get_logger
from personal_notes.security import EncryptionGate, FieldCodec
from personal_notes.storage import CategoryRepository, Database, NoteRepository

log = get_logger("personal_notes.api.server")


class NotesAPIServer:
    """REST API server for notes and categories."""

    def __init__(
        self,
        gate: EncryptionGate,
        database: Database,
        *,
        host: str = "127.0.0.1",
        port: int = 8080,
        allowed_origins: list[str] | None = None,
        audit_queue_size: int = 1000,
        frontend_dir: str | Path | None = None,
    ) -> None:
        self._gate = gate
        self._database = database
        self._host = host
        self._port = port
        self._allowed_origins = allowed_origins
        self._frontend_dir = Path(frontend_dir) if frontend_dir else None
        self._audit_log = AuditLog(
            ActivityLogRepository(database), max_queue_size=audit_queue_size
        )
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

        log.info("notes_api_initialized", host=host, port=port)

    @property
    def audit_log(self) -> AuditLog:
        return self._audit_log

    def create_app(self) -> web.Application:
        """Create and configure the aiohttp application."""
        middlewares: list[Any] = []

        # CORS (outermost)
        if self._allowed_origins:
            middlewares.append(create_cors_middleware(self._allowed_origins))

        middlewares.append(create_error_middleware())

        # Encryption gate (innermost, runs right before handlers)
        middlewares.append(create_encryption_gate_middleware())

        app = web.Application(middlewares=middlewares)

        # Store shared state on app for handlers to access
        app["gate"] = self._gate
        app["codec"] = FieldCodec(self._gate)
        app["notes_repo"] = NoteRepository(self._database)
        app["categories_repo"] = CategoryRepository(self._database)
        app["activity_repo"] = ActivityLogRepository(self._database)
        app["audit_log"] = self._audit_log
        app["frontend_enabled"] = self._add_frontend(app)

        app.on_startup.append(self._on_startup)
        app.on_cleanup.append(self._on_cleanup)

        app.router.add_get("/", handle_index)

        # Health + encryption
        app.router.add_get("/health", handle_health)
        app.router.add_get("/encryption/status", handle_encryption_status)
        app.router.add_post("/generate-key", handle_generate_key)

        # Categories
        app.router.add_get("/categories", handle_list_categories)
        app.router.add_post("/categories", handle_create_category)
        app.router.add_put("/categories/{category_id}", handle_update_category)
        app.router.add_delete("/categories/{category_id}", handle_delete_category)

        # Notes
        app.router.add_get("/notes", handle_list_notes)
        app.router.add_post("/notes", handle_create_note)
        app.router.add_get("/notes/{note_id}", handle_get_note)
        app.router.add_put("/notes/{note_id}", handle_update_note)
        app.router.add_delete("/notes/{note_id}", handle_delete_note)

        # Activity logs (count before the id route)
        app.router.add_get("/activity-logs", handle_list_logs)
        app.router.add_get("/activity-logs/count", handle_count_logs)
        app.router.add_get("/activity-logs/{log_id}", handle_get_log)
        app.router.add_delete("/activity-logs/older-than/{days}", handle_delete_old_logs)

        self._app = app
        return app

    def _add_frontend(self, app: web.Application) -> bool:
        """Serve the static web client if its directory exists."""
        if self._frontend_dir is None or not self._frontend_dir.is_dir():
            return False
        app.router.add_static(FRONTEND_PREFIX, self._frontend_dir)
        log.info("frontend_enabled", directory=str(self._frontend_dir))
        return True

    async def _on_startup(self, app: web.Application) -> None:
        await self._audit_log.start()

    async def _on_cleanup(self, app: web.Application) -> None:
        await self._audit_log.stop()

    async def start(self) -> None:
        """Start the server."""
        if self._app is None:
            self.create_app()

        if self._app is None:  # pragma: no cover
            raise RuntimeError("create_app() must be called first")

        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self._host, self._port)
        await site.start()

        log.info("notes_api_started", host=self._host, port=self._port)

    async def stop(self) -> None:
        """Stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            log.info("notes_api_stopped")

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}"


async def run_server(server: NotesAPIServer) -> None:
    """Run the server until cancelled."""
    await server.start()

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await server.stop()
