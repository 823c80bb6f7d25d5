"""
OpenAI Whisper transcription provider implementation.

Sends stored audio files to the OpenAI ``/audio/transcriptions`` endpoint with
``verbose_json`` output so that segment timestamps are available.
"""

import logging
import math
import time
from pathlib import Path
from typing import Dict, List, Optional

import httpx

from callcoach_backend.models.transcription import (
    DEFAULT_CONFIDENCE,
    BaseTranscriptionProvider,
    TranscriptionProviderError,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)

WHISPER_MAX_FILE_SIZE = 25 * 1024 * 1024

WHISPER_FORMATS = ["flac", "m4a", "mp3", "mp4", "mpeg", "mpga", "oga", "ogg", "wav", "webm"]

WHISPER_LANGUAGES = [
    "af", "ar", "hy", "az", "be", "bs", "bg", "ca", "zh", "hr", "cs", "da", "nl", "en",
    "et", "fi", "fr", "gl", "de", "el", "he", "hi", "hu", "is", "id", "it", "ja", "kn",
    "kk", "ko", "lv", "lt", "mk", "ms", "mr", "mi", "ne", "no", "fa", "pl", "pt", "ro",
    "ru", "sr", "sk", "sl", "es", "sw", "sv", "tl", "ta", "th", "tr", "uk", "ur", "vi",
    "cy",
]


def segment_confidence(segment: dict) -> float:
    avg_logprob = segment.get("avg_logprob")
    if avg_logprob is None:
        return DEFAULT_CONFIDENCE
    return min(math.exp(avg_logprob), 1.0)


def parse_whisper_response(result: dict, language: Optional[str] = None) -> dict:
    """Convert a verbose_json response into text, segments, language and duration."""
    segments = [
        {
            "text": (segment.get("text") or "").strip(),
            "start": segment.get("start") or 0,
            "end": segment.get("end") or 0,
            "confidence": segment_confidence(segment),
        }
        for segment in result.get("segments") or []
    ]
    return {
        "text": (result.get("text") or "").strip(),
        "segments": segments,
        "language": _language_code(result.get("language")) or language or "en",
        "duration": result.get("duration") or 0,
    }


def _language_code(language: Optional[str]) -> Optional[str]:
    # verbose_json reports the language name ("english"), not the code
    if not language:
        return None
    if len(language) == 2:
        return language.lower()
    return None


class WhisperProvider(BaseTranscriptionProvider):
    """OpenAI Whisper batch transcription provider."""

    def __init__(self, api_key: str, base_url: str = "https://api.openai.com/v1", model: str = "whisper-1"):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model

    @property
    def name(self) -> str:
        return "whisper"

    @property
    def supported_languages(self) -> List[str]:
        return WHISPER_LANGUAGES

    def _validate_file(self, file_path: Path) -> None:
        if not file_path.exists():
            raise TranscriptionProviderError("Audio file not found")

        size = file_path.stat().st_size
        if size > WHISPER_MAX_FILE_SIZE:
            raise TranscriptionProviderError(
                f"File size {round(size / (1024 * 1024))}MB exceeds OpenAI limit of 25MB"
            )

        extension = file_path.suffix.lower().lstrip(".")
        if extension not in WHISPER_FORMATS:
            raise TranscriptionProviderError(
                f"Unsupported file format: {extension}. Supported formats: {', '.join(WHISPER_FORMATS)}"
            )

    async def transcribe(self, file_path: Path, language: Optional[str] = None) -> TranscriptionResult:
        start_time = time.monotonic()
        file_path = Path(file_path)
        self._validate_file(file_path)

        logger.info(f"🎯 Sending {file_path.name} ({file_path.stat().st_size // 1024}KB) to OpenAI Whisper")

        data = {
            "model": self.model,
            "response_format": "verbose_json",
            "timestamp_granularities[]": "segment",
        }
        if language:
            data["language"] = language

        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(300.0, connect=30.0)) as client:
                with file_path.open("rb") as audio:
                    response = await client.post(
                        f"{self.base_url}/audio/transcriptions",
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        data=data,
                        files={"file": (file_path.name, audio)},
                    )
        except httpx.TimeoutException as e:
            raise TranscriptionProviderError(f"OpenAI Whisper request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TranscriptionProviderError(f"OpenAI Whisper request failed: {e}") from e

        if response.status_code != 200:
            try:
                detail = response.json().get("error", {}).get("message") or response.reason_phrase
            except ValueError:
                detail = response.reason_phrase
            raise TranscriptionProviderError(f"OpenAI API Error ({response.status_code}): {detail}")

        parsed = parse_whisper_response(response.json(), language)
        processing_time = int((time.monotonic() - start_time) * 1000)
        logger.info(f"✅ Whisper transcription completed in {processing_time}ms")
        return TranscriptionResult(processing_time=processing_time, **parsed)

    async def health_check(self) -> Dict:
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            return {"connected": response.status_code == 200, "configured": True}
        except httpx.HTTPError as e:
            logger.warning(f"OpenAI Whisper health check failed: {e}")
            return {"connected": False, "configured": True, "error": str(e)}
