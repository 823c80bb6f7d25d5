"""
Transcription provider implementations and factory.

This module contains concrete implementations of transcription providers
for the supported STT services (OpenAI Whisper, Deepgram) and a factory function
to instantiate the appropriate provider based on configuration.
"""

import logging
from typing import Optional

from fastapi import Request

from callcoach_backend.app_config import get_app_config
from callcoach_backend.models.transcription import BaseTranscriptionProvider
from callcoach_backend.services.transcription.deepgram import DeepgramProvider
from callcoach_backend.services.transcription.whisper import WhisperProvider

logger = logging.getLogger(__name__)


def get_transcription_provider(
    provider_name: Optional[str] = None,
) -> Optional[BaseTranscriptionProvider]:
    """
    Factory function to get the appropriate transcription provider.

    Args:
        provider_name: Name of the provider ('whisper', 'deepgram').
                      If None, will auto-select based on available configuration.

    Returns:
        An instance of BaseTranscriptionProvider, or None if no provider is configured.

    Raises:
        RuntimeError: If a specific provider is requested but not properly configured.
    """
    config = get_app_config()
    openai_key = config.openai_api_key if config.openai_configured else None
    deepgram_key = config.deepgram_api_key

    if provider_name:
        provider_name = provider_name.lower()

    if provider_name in ("whisper", "openai"):
        if not openai_key:
            raise RuntimeError(
                "Whisper transcription provider requested but OPENAI_API_KEY not configured"
            )
        logger.info("Using OpenAI Whisper transcription provider")
        return WhisperProvider(openai_key, base_url=config.openai_base_url)

    elif provider_name == "deepgram":
        if not deepgram_key:
            raise RuntimeError(
                "Deepgram transcription provider requested but DEEPGRAM_API_KEY not configured"
            )
        logger.info("Using Deepgram transcription provider")
        return DeepgramProvider(deepgram_key)

    elif provider_name:
        raise RuntimeError(f"Unsupported transcription provider: {provider_name}")

    # Auto-select provider based on available configuration
    if config.transcription_provider_name:
        return get_transcription_provider(config.transcription_provider_name)

    if openai_key:
        logger.info("Auto-selected OpenAI Whisper transcription provider")
        return WhisperProvider(openai_key, base_url=config.openai_base_url)
    elif deepgram_key:
        logger.info("Auto-selected Deepgram transcription provider")
        return DeepgramProvider(deepgram_key)

    logger.warning(
        "No transcription provider configured (OPENAI_API_KEY or DEEPGRAM_API_KEY required)"
    )
    return None


async def get_transcription_provider_dependency(request: Request) -> Optional[BaseTranscriptionProvider]:
    """
    FastAPI dependency returning the provider built at startup.

    Usage:
        @router.post("/{audio_file_id}")
        async def transcribe(provider=Depends(get_transcription_provider_dependency)):
            ...
    """
    return getattr(request.app.state, "transcription_provider", None)


__all__ = [
    "get_transcription_provider",
    "get_transcription_provider_dependency",
    "DeepgramProvider",
    "WhisperProvider",
]
