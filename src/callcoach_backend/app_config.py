"""
Application configuration for the Call Coaching backend.

Centralizes all application-level configuration including database connection,
upload storage, provider credentials and CORS origins read from environment variables.
"""

import logging
import os
import re
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024

FILE_SIZE_UNITS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024 * 1024,
    "GB": 1024 * 1024 * 1024,
}

ALLOWED_MIME_TYPES = ["audio/wav", "audio/mpeg", "audio/mp3"]
ALLOWED_EXTENSIONS = [".wav", ".mp3", ".mpeg", ".mp4", ".flac"]


def parse_file_size(size_string: str | None) -> int:
    """Parse a size such as ``50MB`` or ``512KB`` into bytes.

    Unparseable values fall back to the 50 MB default.
    """
    if not size_string:
        return DEFAULT_MAX_FILE_SIZE

    match = re.match(r"^(\d+)\s*([A-Za-z]{1,2})?$", size_string.strip())
    if not match:
        logger.warning(f"Could not parse MAX_FILE_SIZE={size_string!r}, using default 50MB")
        return DEFAULT_MAX_FILE_SIZE

    size = int(match.group(1))
    unit = (match.group(2) or "B").upper()
    if unit not in FILE_SIZE_UNITS:
        logger.warning(f"Unknown unit in MAX_FILE_SIZE={size_string!r}, using default 50MB")
        return DEFAULT_MAX_FILE_SIZE
    return size * FILE_SIZE_UNITS[unit]


class AppConfig:
    """Centralized application configuration."""

    def __init__(self):
        self.environment = os.getenv("ENVIRONMENT", "development").lower()

        # MongoDB Configuration
        self.mongodb_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
        self.mongodb_database = os.getenv("MONGODB_DATABASE", "callcoach")

        # Upload Configuration
        self.upload_path = Path(os.getenv("UPLOAD_PATH", "./uploads"))
        self.max_file_size_label = os.getenv("MAX_FILE_SIZE", "50MB")
        self.max_file_size = parse_file_size(self.max_file_size_label)
        self.allowed_mime_types = list(ALLOWED_MIME_TYPES)
        self.allowed_extensions = list(ALLOWED_EXTENSIONS)
        self.upload_chunk_size = 1024 * 1024

        # Transcription Configuration
        self.transcription_provider_name = os.getenv("TRANSCRIPTION_PROVIDER")
        self.deepgram_api_key = os.getenv("DEEPGRAM_API_KEY")

        # LLM Configuration
        self.openai_api_key = os.getenv("OPENAI_API_KEY")
        self.openai_base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
        self.openai_model = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.llm_temperature = float(os.getenv("LLM_TEMPERATURE", "0.7"))

        # Default agent used when a coaching request does not name one
        self.default_agent_id = os.getenv("DEFAULT_AGENT_ID", "agent_001")

        # CORS Configuration
        default_origins = "http://localhost:3000,http://localhost:3001"
        self.cors_origins = os.getenv("CORS_ORIGINS", default_origins)
        self.allowed_origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

        # Server
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8000"))

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key != "dummy")


# Global configuration instance
app_config = AppConfig()


def get_app_config() -> AppConfig:
    """Get the global application configuration instance."""
    return app_config
