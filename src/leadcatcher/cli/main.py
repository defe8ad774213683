"""
Top-level CLI commands: start, status.
"""

import os
from typing import Optional

import typer


def configure_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    from leadcatcher.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "INFO")


def register_commands(app: typer.Typer):
    """Register top-level commands onto the app."""

    @app.command()
    def start(
        host: str = typer.Option("0.0.0.0", "--host", help="Interface to bind"),
        port: Optional[int] = typer.Option(None, "--port", help="Port to listen on (default: PORT)"),
        debug: bool = typer.Option(False, "--debug", help="Enable debug logging and reload"),
    ):
        """Start the webhook server."""
        import uvicorn

        from leadcatcher.config import CONFIG

        if debug:
            # The server module configures logging from LOG_LEVEL on import.
            os.environ["LOG_LEVEL"] = "DEBUG"

        effective_port = port or CONFIG.port
        typer.echo(f"Starting lead capture server on {host}:{effective_port}...")
        uvicorn.run(
            "leadcatcher.server:app",
            host=host,
            port=effective_port,
            reload=debug,
            log_level="debug" if debug else "info",
        )

    @app.command()
    def status():
        """Show session engine status from the running server."""
        from leadcatcher.cli._http import _http_get

        data = _http_get("/status")
        dispatcher = data.get("dispatcher", {})
        reaper = data.get("reaper", {})

        typer.echo(f"  Running:        {'yes' if data.get('running') else 'no'}")
        typer.echo(f"  Sessions:       {data.get('sessions', 0)}")
        typer.echo(
            f"  Dispatcher:     every {dispatcher.get('tick_interval')}s, "
            f"{dispatcher.get('drains_in_flight', 0)} drain(s) in flight"
        )
        typer.echo(
            f"  Reaper:         every {reaper.get('interval_seconds')}s, "
            f"{reaper.get('removed_total', 0)} removed so far"
        )
