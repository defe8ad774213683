"""
Starlette-based web server for the lead capture front end.

This server provides the following endpoints:
- /webhook/whatsapp: WhatsApp subscription handshake (GET) and deliveries (POST)
- /health: Liveness check
- /status: Session engine status
- /sessions: Inspect, delete, or hand over live sessions
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

from starlette.applications import Starlette
from starlette.routing import Route

from leadcatcher.config import CONFIG
from leadcatcher.core.brain import LeadBrain, build_brain
from leadcatcher.logger import get_logger, setup_logging
from leadcatcher.routes.health_routes import get_status, health_check
from leadcatcher.routes.session_routes import delete_session, list_sessions, set_takeover
from leadcatcher.routes.webhook_routes import receive_webhook, verify_webhook

setup_logging(level=os.getenv("LOG_LEVEL", "INFO"), log_file=os.getenv("LOG_FILE"))

logger = get_logger(__name__)


def create_app(brain: Optional[LeadBrain] = None) -> Starlette:
    """
    Build the Starlette application.

    When ``brain`` is omitted one is constructed from CONFIG at startup.
    """

    @asynccontextmanager
    async def lifespan(app: Starlette):
        if app.state.brain is None:
            app.state.brain = build_brain(CONFIG)
        logger.info(f"Starting lead capture server ({CONFIG.environment})")
        await app.state.brain.start()
        try:
            yield
        finally:
            logger.info("Application shutdown - cleaning up services")
            await app.state.brain.stop()

    app = Starlette(
        debug=CONFIG.environment == "development",
        routes=[
            Route("/webhook/whatsapp", verify_webhook, methods=["GET"]),
            Route("/webhook/whatsapp", receive_webhook, methods=["POST"]),
            Route("/health", health_check, methods=["GET"]),
            Route("/status", get_status, methods=["GET"]),
            Route("/sessions", list_sessions, methods=["GET"]),
            Route("/sessions/{session_id}", delete_session, methods=["DELETE"]),
            Route("/sessions/{session_id}/takeover", set_takeover, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.brain = brain
    return app


app = create_app()
