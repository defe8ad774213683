"""
Leadcatcher CLI.

This package splits CLI commands into focused modules:
- main:     start, status
- sessions: list, reset, takeover
"""

import typer

from leadcatcher.cli.main import configure_logging, register_commands
from leadcatcher.cli.sessions import sessions_app

app = typer.Typer(help="Leadcatcher - conversational lead capture server")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
):
    """
    Leadcatcher - conversational lead capture server.
    """
    configure_logging(verbose)


register_commands(app)

app.add_typer(sessions_app, name="sessions")
