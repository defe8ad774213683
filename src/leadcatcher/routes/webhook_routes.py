"""
WhatsApp webhook endpoints.

- GET verifies the subscription handshake.
- POST acknowledges deliveries and hands messages to the LeadBrain.
"""

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from leadcatcher.logger import get_logger

logger = get_logger(__name__)


async def verify_webhook(request: Request) -> Response:
    """Answer the platform's hub.challenge handshake."""
    brain = request.app.state.brain
    params = request.query_params
    challenge = brain.channel.verify_webhook(
        params.get("hub.mode"),
        params.get("hub.verify_token"),
        params.get("hub.challenge"),
    )
    if challenge is None:
        logger.warning("Webhook verification failed")
        return Response(status_code=403)

    logger.info("Webhook verified")
    return PlainTextResponse(challenge)


async def receive_webhook(request: Request) -> Response:
    """
    Accept a webhook delivery.

    Always answers 200 once the body is read so the platform does not retry;
    replies are sent later by the dispatcher.
    """
    try:
        body = await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON")
        return Response(status_code=400)

    brain = request.app.state.brain
    try:
        await brain.channel.handle_webhook(body)
    except Exception as e:
        logger.error(f"Error handling webhook: {e}")

    return Response(status_code=200)
