"""
Transcript models for the Call Coaching backend.

One Transcript exists per AudioFile. The unique index on ``audio_file_id``
backs the existence check done by the transcription controller.
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import DESCENDING, IndexModel

from callcoach_backend.models.common import utc_now


class TranscriptSegment(BaseModel):
    """Time-aligned piece of a transcript."""
    text: str = Field(default="", description="Segment text")
    start: float = Field(default=0, ge=0, description="Start time in seconds")
    end: float = Field(default=0, ge=0, description="End time in seconds")
    confidence: Optional[float] = Field(None, ge=0, le=1, description="Confidence score (0-1)")


class Transcript(Document):
    """Speech-to-text result for a single AudioFile."""

    audio_file_id: PydanticObjectId = Field(description="Owning AudioFile")
    text: str = Field(description="Full transcript text")
    confidence: float = Field(default=0, ge=0, le=1, description="Overall confidence (0-1)")
    segments: List[TranscriptSegment] = Field(default_factory=list)
    language: str = Field(default="en", description="Language code")
    processing_time: int = Field(default=0, description="Provider latency in milliseconds")
    provider: Optional[str] = Field(None, description="Transcription provider used")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "transcripts"
        indexes = [
            IndexModel([("audio_file_id", 1)], unique=True),
            IndexModel([("created_at", DESCENDING)]),
            IndexModel([("confidence", DESCENDING)]),
        ]
