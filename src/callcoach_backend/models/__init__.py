"""
Models package for the Call Coaching backend.

This package contains the Beanie documents and Pydantic models that define the
structure and validation for every pipeline entity.
"""

# Models can be imported directly from their files
# e.g. from .audio_file import AudioFile
# e.g. from .transcript import Transcript, TranscriptSegment
