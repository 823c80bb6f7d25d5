"""
Deepgram transcription provider implementation.

Provides batch transcription of stored audio files using Deepgram's Nova-3 model.
"""

import logging
import mimetypes
import time
from pathlib import Path
from typing import Dict, List, Optional

import httpx

from callcoach_backend.models.transcription import (
    BaseTranscriptionProvider,
    TranscriptionProviderError,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)

DEEPGRAM_LANGUAGES = [
    "bg", "ca", "cs", "da", "de", "el", "en", "es", "et", "fi", "fr", "hi", "hu",
    "id", "it", "ja", "ko", "lt", "lv", "ms", "nl", "no", "pl", "pt", "ro", "ru",
    "sk", "sv", "th", "tr", "uk", "vi", "zh",
]


def _average_word_confidence(words: List[dict]) -> Optional[float]:
    confidences = [w["confidence"] for w in words if w.get("confidence") is not None]
    if not confidences:
        return None
    return sum(confidences) / len(confidences)


def parse_deepgram_response(result: dict, language: Optional[str] = None) -> dict:
    """Flatten a Deepgram /v1/listen response into text, segments, language and duration."""
    channels = result.get("results", {}).get("channels", [])
    if not channels or not channels[0].get("alternatives"):
        raise TranscriptionProviderError("Deepgram response missing expected transcript structure")

    channel = channels[0]
    alternative = channel["alternatives"][0]
    words = alternative.get("words", [])
    segments = []

    paragraphs = (alternative.get("paragraphs") or {}).get("paragraphs") or []
    if paragraphs:
        text = alternative["paragraphs"].get("transcript", "").strip()
        for paragraph in paragraphs:
            for sentence in paragraph.get("sentences", []):
                start = sentence.get("start", 0)
                end = sentence.get("end", 0)
                sentence_words = [w for w in words if start <= w.get("start", 0) < end]
                segments.append({
                    "text": sentence.get("text", "").strip(),
                    "start": start,
                    "end": end,
                    "confidence": _average_word_confidence(sentence_words),
                })
    else:
        text = alternative.get("transcript", "").strip()
        if words:
            segments.append({
                "text": text,
                "start": words[0].get("start", 0),
                "end": words[-1].get("end", 0),
                "confidence": _average_word_confidence(words),
            })

    return {
        "text": text,
        "segments": segments,
        "language": channel.get("detected_language") or language or "en",
        "duration": result.get("metadata", {}).get("duration", 0) or 0,
    }


class DeepgramProvider(BaseTranscriptionProvider):
    """Deepgram batch transcription provider using Nova-3 model."""

    def __init__(self, api_key: str):
        self.api_key = api_key
        self.url = "https://api.deepgram.com/v1/listen"

    @property
    def name(self) -> str:
        return "deepgram"

    @property
    def supported_languages(self) -> List[str]:
        return DEEPGRAM_LANGUAGES

    async def transcribe(self, file_path: Path, language: Optional[str] = None) -> TranscriptionResult:
        """Transcribe a stored audio file using Deepgram's REST API."""
        start_time = time.monotonic()
        file_path = Path(file_path)
        if not file_path.exists():
            raise TranscriptionProviderError("Audio file not found")

        audio_data = file_path.read_bytes()
        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"

        params = {
            "model": "nova-3",
            "smart_format": "true",
            "punctuate": "true",
            "paragraphs": "true",
        }
        if language:
            params["language"] = language
        else:
            params["detect_language"] = "true"

        headers = {"Authorization": f"Token {self.api_key}", "Content-Type": content_type}

        logger.info(f"Sending {len(audio_data)} bytes to Deepgram API")

        timeout_config = httpx.Timeout(connect=30.0, read=300.0, write=180.0, pool=10.0)

        try:
            async with httpx.AsyncClient(timeout=timeout_config) as client:
                response = await client.post(
                    self.url, params=params, headers=headers, content=audio_data
                )
        except httpx.TimeoutException as e:
            logger.error(f"HTTP timeout during Deepgram API call for {len(audio_data)} bytes: {e}")
            raise TranscriptionProviderError(f"Deepgram request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Error calling Deepgram API: {e}")
            raise TranscriptionProviderError(f"Deepgram request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Deepgram API error: {response.status_code} - {response.text}")
            raise TranscriptionProviderError(
                f"Deepgram API Error ({response.status_code}): {response.text}"
            )

        parsed = parse_deepgram_response(response.json(), language)
        processing_time = int((time.monotonic() - start_time) * 1000)
        logger.info(
            f"Deepgram transcription successful: {len(parsed['text'])} characters, "
            f"{len(parsed['segments'])} segments in {processing_time}ms"
        )
        return TranscriptionResult(processing_time=processing_time, **parsed)

    async def health_check(self) -> Dict:
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    "https://api.deepgram.com/v1/projects",
                    headers={"Authorization": f"Token {self.api_key}"},
                )
            return {"connected": response.status_code == 200, "configured": True}
        except httpx.HTTPError as e:
            logger.warning(f"Deepgram health check failed: {e}")
            return {"connected": False, "configured": True, "error": str(e)}
