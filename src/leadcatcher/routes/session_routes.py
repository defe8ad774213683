"""
Operator endpoints for inspecting and steering live sessions.
"""

from starlette.requests import Request
from starlette.responses import JSONResponse

from leadcatcher.logger import get_logger

logger = get_logger(__name__)


def _summarize(session) -> dict:
    with session.lock:
        return {
            "id": session.id,
            "language": session.language,
            "last_activity_at": session.last_activity_at,
            "turns": len(session.history),
            "queued": len(session.inbound),
            "pending_media": len(session.pending_media),
            "dispatch_in_flight": session.dispatch_in_flight,
            "tool_call_state": session.tool_call_state.value,
            "human_takeover": session.human_takeover,
        }


async def list_sessions(request: Request) -> JSONResponse:
    store = request.app.state.brain.store
    return JSONResponse({"sessions": [_summarize(s) for s in store.snapshot()]})


async def delete_session(request: Request) -> JSONResponse:
    session_id = request.path_params["session_id"]
    store = request.app.state.brain.store
    if not store.delete(session_id):
        return JSONResponse({"error": "Session not found"}, status_code=404)
    logger.info(f"Session {session_id} deleted by operator")
    return JSONResponse({"success": True})


async def set_takeover(request: Request) -> JSONResponse:
    """Pause or resume automated replies for one conversant."""
    session_id = request.path_params["session_id"]
    try:
        data = await request.json()
    except ValueError:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    enabled = data.get("enabled")
    if not isinstance(enabled, bool):
        return JSONResponse({"error": "'enabled' must be a boolean"}, status_code=400)

    request.app.state.brain.store.set_human_takeover(session_id, enabled)
    return JSONResponse({"success": True, "human_takeover": enabled})
