"""
Health check and monitoring endpoints.
"""

import time
from datetime import datetime

from starlette.requests import Request
from starlette.responses import JSONResponse

from leadcatcher import __version__

start_time = time.time()


async def health_check(request: Request) -> JSONResponse:
    """
    Basic health check endpoint.

    Returns 200 if service is running.
    """
    return JSONResponse(
        {
            "status": "healthy",
            "version": __version__,
            "timestamp": datetime.now().isoformat(),
            "uptime_seconds": int(time.time() - start_time),
        }
    )


async def get_status(request: Request) -> JSONResponse:
    """Session engine status: session count and background loop state."""
    brain = request.app.state.brain
    return JSONResponse(brain.get_status())
