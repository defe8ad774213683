"""
CLI subcommands for live session management.

Usage:
    leadcatcher sessions list
    leadcatcher sessions reset <id>
    leadcatcher sessions takeover <id> [--release]
"""

import typer

from leadcatcher.cli._http import _http_delete, _http_get, _http_post

sessions_app = typer.Typer(help="Inspect and steer live conversation sessions.")


@sessions_app.command("list")
def list_sessions():
    """List live sessions."""
    sessions = _http_get("/sessions").get("sessions", [])
    if not sessions:
        typer.echo("No active sessions.")
        return

    for s in sessions:
        flags = []
        if s.get("dispatch_in_flight"):
            flags.append("busy")
        if s.get("human_takeover"):
            flags.append("takeover")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        typer.echo(
            f"  {s['id']}  lang={s['language']}  turns={s['turns']}  "
            f"queued={s['queued']}  media={s['pending_media']}{suffix}"
        )


@sessions_app.command("reset")
def reset_session(session_id: str = typer.Argument(..., help="Conversant id")):
    """Discard a session so the next message starts fresh."""
    _http_delete(f"/sessions/{session_id}")
    typer.echo(f"Session {session_id} reset.")


@sessions_app.command("takeover")
def takeover(
    session_id: str = typer.Argument(..., help="Conversant id"),
    release: bool = typer.Option(False, "--release", help="Hand the session back to the bot"),
):
    """Pause automated replies while an operator handles the conversation."""
    _http_post(f"/sessions/{session_id}/takeover", {"enabled": not release})
    state = "released" if release else "taken over"
    typer.echo(f"Session {session_id} {state}.")
