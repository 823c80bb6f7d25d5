"""
Transcription provider abstract base class and result type.

This module defines the interface for speech-to-text providers.
All concrete provider implementations should inherit from BaseTranscriptionProvider.

Provider Output Format:
-----------------------
Every provider returns a TranscriptionResult:
    text              Full transcript text
    segments          List of {"text", "start", "end", "confidence"} dicts
    language          Language code detected or requested
    duration          Audio duration in seconds (0 when unknown)
    processing_time   Provider latency in milliseconds
    confidence        Duration-weighted mean of the segment confidences

Provider-specific behaviors:
- Whisper: segment confidence derived from avg_logprob
- Deepgram: segment confidence averaged from word confidences
"""

import abc
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

# Used when a provider gives no usable confidence figure
DEFAULT_CONFIDENCE = 0.8


def overall_confidence(segments: List[dict]) -> float:
    """Duration-weighted average of segment confidences, capped at 1."""
    if not segments:
        return DEFAULT_CONFIDENCE

    total_duration = 0.0
    weighted_confidence = 0.0
    for segment in segments:
        duration = (segment.get("end") or 0) - (segment.get("start") or 0)
        confidence = segment.get("confidence")
        if confidence is None:
            confidence = DEFAULT_CONFIDENCE
        total_duration += duration
        weighted_confidence += confidence * duration

    if total_duration <= 0:
        return DEFAULT_CONFIDENCE
    return min(weighted_confidence / total_duration, 1.0)


@dataclass
class TranscriptionResult:
    """Normalised provider output."""

    text: str
    segments: List[dict] = field(default_factory=list)
    language: str = "en"
    duration: float = 0.0
    processing_time: int = 0
    confidence: Optional[float] = None

    def __post_init__(self):
        for segment in self.segments:
            if segment.get("confidence") is None:
                segment["confidence"] = DEFAULT_CONFIDENCE
        if self.confidence is None:
            self.confidence = overall_confidence(self.segments)


class TranscriptionProviderError(Exception):
    """Raised by providers when the upstream call fails or is unusable."""


class BaseTranscriptionProvider(abc.ABC):
    """Abstract base class for all transcription providers."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Return the provider name for logging."""
        pass

    @property
    @abc.abstractmethod
    def supported_languages(self) -> List[str]:
        """Language codes accepted as a transcription hint."""
        pass

    @abc.abstractmethod
    async def transcribe(self, file_path: Path, language: Optional[str] = None) -> TranscriptionResult:
        """
        Transcribe a stored audio file.

        Args:
            file_path: Path to the audio file on disk
            language: Optional language hint

        Raises:
            TranscriptionProviderError: On any upstream failure
        """
        pass

    @abc.abstractmethod
    async def health_check(self) -> Dict:
        """Report whether the provider is reachable and configured."""
        pass
