"""Server commands."""

import click

from outbox_service.cli.utils import info
from outbox_service.core.settings import get_app_settings, get_logging_settings


@click.group(name="server")
def server() -> None:
    """API server commands."""


@server.command(name="run")
@click.option("--host", default=None, help="Host to bind (default: from settings)")
@click.option("--port", default=None, type=int, help="Port to bind (default: from settings)")
@click.option("--reload/--no-reload", default=False, help="Enable auto-reload on code changes")
def run(host: str | None, port: int | None, reload: bool) -> None:
    """Run the API with uvicorn; the outbox worker starts with it."""
    import uvicorn

    settings = get_app_settings()
    log_settings = get_logging_settings()
    host = host or settings.host
    port = port or settings.port

    info(f"Server will run at: http://{host}:{port}")
    uvicorn.run(
        "outbox_service.app.main:app",
        host=host,
        port=port,
        reload=reload,
        access_log=settings.debug,
        log_level=log_settings.level.lower(),
    )
