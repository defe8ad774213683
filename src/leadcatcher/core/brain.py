"""
Lead Brain: the bridge between the messaging channel and the session engine.

Inbound messages are only enqueued here; replies are produced later by the
BatchDispatcher once the conversant goes quiet.
"""

from typing import Optional

from leadcatcher.channels.base import InboundMessage, MessagingChannel
from leadcatcher.channels.whatsapp import WhatsAppChannel
from leadcatcher.config import CONFIG, Config
from leadcatcher.core.conversation import ConversationProcessor
from leadcatcher.core.dispatcher import BatchDispatcher
from leadcatcher.core.reaper import IdleReaper
from leadcatcher.core.tokenizer import make_token_counter
from leadcatcher.crm.airtable import AirtableLeadStore
from leadcatcher.llm import CompletionClient
from leadcatcher.logger import get_logger
from leadcatcher.media.cloudinary import CloudinaryStorage
from leadcatcher.media.ingest import MediaIngestor
from leadcatcher.notifications import OperatorNotifier
from leadcatcher.session.history import HistoryLedger
from leadcatcher.session.models import MediaReference
from leadcatcher.session.store import SessionStore
from leadcatcher.tools.language_tool import SetUserLanguageTool
from leadcatcher.tools.lead_tool import SaveLeadTool
from leadcatcher.tools.registry import ToolRegistry

logger = get_logger(__name__)

IGNORED_MESSAGE_TYPES = {"service"}

# Module-level reference for route access
_active_instance: Optional["LeadBrain"] = None


def get_active_brain() -> Optional["LeadBrain"]:
    """Return the active LeadBrain instance, or None if not running."""
    return _active_instance


class LeadBrain:
    """Owns the session store and the background loops that act on it."""

    def __init__(
        self,
        store: SessionStore,
        channel: MessagingChannel,
        dispatcher: BatchDispatcher,
        reaper: IdleReaper,
        closeables: Optional[list] = None,
    ):
        self.store = store
        self.channel = channel
        self.dispatcher = dispatcher
        self.reaper = reaper
        self._closeables = closeables or []
        self._running = False
        self.channel.set_callback(self.handle_inbound)

    async def start(self):
        global _active_instance
        await self.channel.connect()
        await self.dispatcher.start()
        await self.reaper.start()
        self._running = True
        _active_instance = self
        logger.info("LeadBrain started.")

    async def stop(self):
        global _active_instance
        self._running = False
        await self.dispatcher.stop()
        await self.reaper.stop()
        await self.channel.disconnect()
        for resource in self._closeables:
            try:
                await resource.close()
            except Exception as e:
                logger.error(f"Failed to close {type(resource).__name__}: {e}")
        if _active_instance is self:
            _active_instance = None
        logger.info("LeadBrain stopped.")

    async def handle_inbound(self, message: InboundMessage):
        """Record an inbound message on its session's queue."""
        if message.type in IGNORED_MESSAGE_TYPES:
            logger.info(f"Ignoring {message.type} message from {message.sender_id}")
            return

        text = message.text
        if message.type != "text":
            if message.is_media:
                self.store.add_media(
                    message.sender_id,
                    MediaReference(message.media_id, message.mime_type or "application/octet-stream"),
                )
            text = f"[Received a {message.type} message]"

        if not text:
            logger.debug(f"Empty message from {message.sender_id}, nothing to queue")
            return

        self.store.enqueue(message.sender_id, text)

    def get_status(self) -> dict:
        return {
            "running": self._running,
            "sessions": len(self.store),
            "dispatcher": self.dispatcher.get_status(),
            "reaper": self.reaper.get_status(),
        }


def build_brain(config: Config = CONFIG) -> LeadBrain:
    """Construct a LeadBrain and its collaborators from configuration."""
    store = SessionStore(
        system_instructions=config.system_instructions,
        default_language=config.default_language,
    )
    ledger = HistoryLedger(make_token_counter(config.tokenizer_model), config.max_context_tokens)

    channel = WhatsAppChannel(
        {
            "verify_token": config.whatsapp_verify_token,
            "access_token": config.whatsapp_access_token,
            "phone_number_id": config.whatsapp_phone_number_id,
            "api_version": config.whatsapp_api_version,
            "base_url": config.whatsapp_base_url,
        }
    )
    notifier = OperatorNotifier(
        config.twilio_account_sid,
        config.twilio_auth_token,
        config.twilio_from_number,
        config.twilio_notification_numbers,
    )
    storage = CloudinaryStorage(
        config.cloudinary_cloud_name,
        config.cloudinary_api_key,
        config.cloudinary_api_secret,
        folder=config.cloudinary_folder,
    )
    lead_store = AirtableLeadStore(
        config.airtable_api_key,
        config.airtable_base_id,
        config.airtable_table_id,
        media=MediaIngestor(channel.download_media, storage),
        notifier=notifier,
        base_url=config.airtable_base_url,
    )

    tools = ToolRegistry(
        [SetUserLanguageTool(config.supported_languages), SaveLeadTool(lead_store)]
    )
    processor = ConversationProcessor(
        ledger,
        CompletionClient(config.llm_model, temperature=config.llm_temperature),
        tools,
        notifier=notifier,
    )
    dispatcher = BatchDispatcher(
        store,
        processor,
        channel,
        tick_interval=config.dispatch_interval_seconds,
        quiet_window=config.quiet_window_seconds,
        sweep_quiet_window=config.sweep_quiet_seconds,
        reset_keyword=config.reset_keyword,
    )
    reaper = IdleReaper(
        store,
        interval_seconds=config.cleanup_interval_seconds,
        session_timeout=config.session_timeout_seconds,
    )
    return LeadBrain(store, channel, dispatcher, reaper, closeables=[lead_store])
