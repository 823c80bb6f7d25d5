"""
AudioFile model for the Call Coaching backend.

This module contains the Beanie Document model for the audio_files collection,
which stores the metadata of every uploaded recording. The raw bytes live on
disk under the configured upload directory; this document points at them.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document
from pydantic import Field
from pymongo import DESCENDING, IndexModel

from callcoach_backend.models.common import utc_now


class AudioFile(Document):
    """
    Uploaded audio recording.

    Status lifecycle: ``uploaded -> processing -> completed`` or
    ``uploaded -> processing -> failed``. Only the transcription stage and the
    administrative status update change it.
    """

    class Status(str, Enum):
        """Processing status of an uploaded file."""
        UPLOADED = "uploaded"
        PROCESSING = "processing"
        COMPLETED = "completed"
        FAILED = "failed"

    class MimeType(str, Enum):
        """Accepted upload content types."""
        WAV = "audio/wav"
        MPEG = "audio/mpeg"
        MP3 = "audio/mp3"

    original_name: str = Field(description="Filename as supplied by the uploader")
    filename: str = Field(description="Generated storage filename")
    path: str = Field(description="Path to the stored audio file")
    mimetype: MimeType = Field(description="Declared content type")
    size: int = Field(ge=0, description="Size in bytes")
    duration: Optional[float] = Field(None, description="Duration in seconds, set after transcription")
    status: Status = Field(default=Status.UPLOADED, description="Processing status")

    uploaded_at: datetime = Field(default_factory=utc_now, description="When the file was uploaded")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def mark(self, status: "AudioFile.Status") -> None:
        """Set the status and bump ``updated_at``. Caller saves."""
        self.status = status
        self.updated_at = utc_now()

    def summary(self) -> dict:
        """Short projection embedded in downstream responses."""
        return {
            "id": str(self.id),
            "original_name": self.original_name,
            "filename": self.filename,
            "size": self.size,
            "mimetype": self.mimetype.value,
            "uploaded_at": self.uploaded_at,
        }

    class Settings:
        name = "audio_files"
        indexes = [
            "filename",
            "status",
            IndexModel([("uploaded_at", DESCENDING)]),
        ]
