"""Messaging channel drivers."""

from .base import InboundMessage, MessagingChannel
from .whatsapp import WhatsAppChannel

__all__ = ["InboundMessage", "MessagingChannel", "WhatsAppChannel"]
