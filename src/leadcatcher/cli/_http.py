"""
Shared HTTP helpers for CLI commands that talk to the running server.
"""

import os

import httpx
import typer


def get_server_url() -> str:
    """Get the server URL from environment or default."""
    explicit = os.getenv("LEADCATCHER_SERVER_URL")
    if explicit:
        return explicit.rstrip("/")
    host = os.getenv("LEADCATCHER_HOST", "localhost")
    port = os.getenv("PORT", "3000")
    return f"http://{host}:{port}"


def _request(method: str, path: str, data: dict = None) -> dict:
    url = f"{get_server_url()}{path}"
    try:
        resp = httpx.request(method, url, json=data, timeout=10.0)
        resp.raise_for_status()
        return resp.json()
    except httpx.ConnectError:
        typer.echo("Cannot connect to the lead capture server. Is it running?")
        raise typer.Exit(code=1)
    except httpx.HTTPStatusError as e:
        try:
            detail = e.response.json().get("error", str(e))
        except ValueError:
            detail = f"status {e.response.status_code}"
        typer.echo(f"Server error: {detail}")
        raise typer.Exit(code=1)


def _http_get(path: str) -> dict:
    """Make a GET request to the running server."""
    return _request("GET", path)


def _http_post(path: str, data: dict = None) -> dict:
    """Make a POST request to the running server."""
    return _request("POST", path, data or {})


def _http_delete(path: str) -> dict:
    """Make a DELETE request to the running server."""
    return _request("DELETE", path)
