"""Main entry point for the personal notes service."""

from __future__ import annotations

import asyncio
import webbrowser

from personal_notes.api.server import NotesAPIServer, run_server
from personal_notes.config import Settings, get_settings
from personal_notes.errors import EncryptionInitError
from personal_notes.logging import get_logger, setup_logging
from personal_notes.security import EncryptionGate, KeyStore
from personal_notes.storage import Database, NoteRepository

log = get_logger("personal_notes.main")

# Seconds to wait after bind before opening the browser
_BROWSER_DELAY_SECONDS = 0.5


def initialize_gate(gate: EncryptionGate) -> bool:
    """Run the encryption self-test, degrading to read-only on failure.

    Returns:
        True if the gate is valid and writes are enabled.
    """
    try:
        gate.initialize()
    except EncryptionInitError as e:
        log.warning("encryption_init_failed", error=str(e))
        log.warning("data_modification_disabled")
        return False
    return True


def repair_legacy_notes(gate: EncryptionGate, database: Database) -> int:
    """Delete notes stored before field encryption, if the key is usable."""
    if not gate.is_valid:
        log.warning("legacy_repair_skipped", reason="encryption invalid")
        return 0
    deleted = NoteRepository(database).purge_unencoded()
    log.info("legacy_repair_completed", deleted=deleted)
    return deleted


def _open_browser(url: str) -> None:
    log.info("opening_browser", url=url)
    try:
        if not webbrowser.open(url):
            log.info("browser_unavailable", url=url)
    except webbrowser.Error as e:
        log.warning("browser_open_failed", url=url, error=str(e))


def build_server(settings: Settings) -> NotesAPIServer:
    """Wire gate, storage and server. The gate is settled before any request."""
    gate = EncryptionGate(KeyStore(settings.settings_path))
    initialize_gate(gate)

    database = Database(settings.db_path)
    if settings.repair_legacy_notes:
        repair_legacy_notes(gate, database)

    return NotesAPIServer(
        gate,
        database,
        host=settings.api_host,
        port=settings.api_port,
        allowed_origins=settings.allowed_origins,
        audit_queue_size=settings.audit_queue_size,
        frontend_dir=settings.frontend_dir,
    )


async def serve(settings: Settings) -> None:
    server = build_server(settings)

    if not settings.no_browser:
        asyncio.get_running_loop().call_later(_BROWSER_DELAY_SECONDS, _open_browser, server.url)

    await run_server(server)


def main() -> None:
    """Main entry point for the notes service."""
    setup_logging()
    settings = get_settings()
    log.info(
        "starting_personal_notes",
        environment=settings.environment,
        db_path=settings.db_path,
    )

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        log.info("personal_notes_shutdown")


if __name__ == "__main__":
    main()
