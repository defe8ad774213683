"""
Application configuration.

Values come from the process environment (a ``.env`` file in the project
directory is loaded first). The module-level ``CONFIG`` instance is what the
rest of the code reads; call ``CONFIG.reload()`` after changing the
environment.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from leadcatcher.logger import get_logger

logger = get_logger(__name__)

PROJECT_DIR = Path(__file__).resolve().parent.parent.parent

REQUIRED_ENV_VARS = [
    "WHATSAPP_VERIFY_TOKEN",
    "WHATSAPP_ACCESS_TOKEN",
    "WHATSAPP_PHONE_NUMBER_ID",
    "AIRTABLE_API_KEY",
    "AIRTABLE_BASE_ID",
    "AIRTABLE_TABLE_ID",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
    "OPENAI_API_KEY",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_FROM_NUMBER",
    "TWILIO_NOTIFICATION_NUMBERS",
]

DEFAULT_SYSTEM_INSTRUCTIONS = """You are a helpful assistant for a business.
Your main goal is to help potential clients learn about our services,
answer their questions, and collect contact information when they show interest."""


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_list(name: str, default: str = "") -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _load_system_instructions(path: Optional[str]) -> str:
    candidate = Path(path) if path else PROJECT_DIR / "systemInstructions.txt"
    if not candidate.is_absolute():
        candidate = PROJECT_DIR / candidate
    try:
        return candidate.read_text(encoding="utf-8")
    except OSError:
        return DEFAULT_SYSTEM_INSTRUCTIONS


@dataclass
class Config:
    # Server
    port: int = 3000
    environment: str = "development"

    # Completion engine
    llm_model: str = "openai/gpt-4o-mini"
    llm_temperature: float = 0.3
    max_context_tokens: int = 100000
    tokenizer_model: str = "gpt-4o"
    system_instructions: str = DEFAULT_SYSTEM_INSTRUCTIONS

    # Session engine timing (seconds)
    quiet_window_seconds: float = 60.0
    dispatch_interval_seconds: float = 30.0
    sweep_quiet_seconds: float = 20.0
    cleanup_interval_seconds: float = 3600.0
    session_timeout_seconds: float = 86400.0

    # Conversation
    default_language: str = "en"
    supported_languages: List[str] = field(default_factory=lambda: ["en", "de"])
    reset_keyword: str = "reset"

    # WhatsApp Cloud API
    whatsapp_verify_token: Optional[str] = None
    whatsapp_access_token: Optional[str] = None
    whatsapp_phone_number_id: Optional[str] = None
    whatsapp_api_version: str = "v17.0"
    whatsapp_base_url: str = "https://graph.facebook.com"

    # Airtable
    airtable_api_key: Optional[str] = None
    airtable_base_id: Optional[str] = None
    airtable_table_id: Optional[str] = None
    airtable_base_url: str = "https://api.airtable.com/v0"

    # Cloudinary
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_folder: str = "whatsapp-uploads"

    # Twilio operator notifications
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_from_number: Optional[str] = None
    twilio_notification_numbers: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a Config from the current environment."""
        load_dotenv(PROJECT_DIR / ".env")

        for name in REQUIRED_ENV_VARS:
            if not os.getenv(name):
                logger.warning(f"Environment variable {name} is not set")

        return cls(
            port=_env_int("PORT", 3000),
            environment=os.getenv("ENVIRONMENT", "development"),
            llm_model=os.getenv("LLM_MODEL", "openai/gpt-4o-mini"),
            llm_temperature=_env_float("LLM_TEMPERATURE", 0.3),
            max_context_tokens=_env_int("LLM_MAX_CONTEXT_TOKENS", 100000),
            tokenizer_model=os.getenv("TOKENIZER_MODEL", "gpt-4o"),
            system_instructions=_load_system_instructions(
                os.getenv("SYSTEM_INSTRUCTIONS_FILE")
            ),
            quiet_window_seconds=_env_float("QUIET_WINDOW_SECONDS", 60.0),
            dispatch_interval_seconds=_env_float("DISPATCH_INTERVAL_SECONDS", 30.0),
            sweep_quiet_seconds=_env_float("SWEEP_QUIET_SECONDS", 20.0),
            cleanup_interval_seconds=_env_float("CLEANUP_INTERVAL_SECONDS", 3600.0),
            session_timeout_seconds=_env_float("SESSION_TIMEOUT_SECONDS", 86400.0),
            default_language=os.getenv("DEFAULT_LANGUAGE", "en"),
            supported_languages=_env_list("SUPPORTED_LANGUAGES", "en,de"),
            reset_keyword=os.getenv("RESET_KEYWORD", "reset").strip().lower(),
            whatsapp_verify_token=os.getenv("WHATSAPP_VERIFY_TOKEN"),
            whatsapp_access_token=os.getenv("WHATSAPP_ACCESS_TOKEN"),
            whatsapp_phone_number_id=os.getenv("WHATSAPP_PHONE_NUMBER_ID"),
            whatsapp_api_version=os.getenv("WHATSAPP_API_VERSION", "v17.0"),
            whatsapp_base_url=os.getenv(
                "WHATSAPP_BASE_URL", "https://graph.facebook.com"
            ),
            airtable_api_key=os.getenv("AIRTABLE_API_KEY"),
            airtable_base_id=os.getenv("AIRTABLE_BASE_ID"),
            airtable_table_id=os.getenv("AIRTABLE_TABLE_ID"),
            cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
            cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY"),
            cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET"),
            cloudinary_folder=os.getenv("CLOUDINARY_FOLDER", "whatsapp-uploads"),
            twilio_account_sid=os.getenv("TWILIO_ACCOUNT_SID"),
            twilio_auth_token=os.getenv("TWILIO_AUTH_TOKEN"),
            twilio_from_number=os.getenv("TWILIO_FROM_NUMBER"),
            twilio_notification_numbers=_env_list("TWILIO_NOTIFICATION_NUMBERS"),
        )

    def reload(self) -> None:
        """Re-read the environment in place."""
        fresh = Config.from_env()
        for f in fields(self):
            setattr(self, f.name, getattr(fresh, f.name))


CONFIG = Config.from_env()
