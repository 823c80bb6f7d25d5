"""
Transcript controller.

Owns the transcription stage: one Transcript per AudioFile, with the AudioFile
status moved ``uploaded -> processing -> completed|failed`` around the STT call.
"""

import logging
from pathlib import Path
from typing import List, Optional

from beanie import PydanticObjectId
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from callcoach_backend.controllers.analysis_controller import describe_validation_error
from callcoach_backend.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    UpstreamProviderError,
)
from callcoach_backend.models.audio_file import AudioFile
from callcoach_backend.models.common import utc_now
from callcoach_backend.models.requests import SegmentInput
from callcoach_backend.models.transcript import Transcript, TranscriptSegment
from callcoach_backend.models.transcription import BaseTranscriptionProvider, overall_confidence
from callcoach_backend.services.transcription.whisper import WHISPER_LANGUAGES
from callcoach_backend.utils.object_ids import parse_object_id
from callcoach_backend.utils.pagination import ListParams, paginate
from callcoach_backend.utils.serialization import audio_file_summaries, serialize_document

logger = logging.getLogger(__name__)
audio_logger = logging.getLogger("audio_processing")


def _conflict(existing: Transcript) -> ConflictError:
    return ConflictError(
        message="Transcript already exists for this audio file",
        data={"transcriptId": str(existing.id), "createdAt": existing.created_at},
    )


def _validate_language(language: str, provider: Optional[BaseTranscriptionProvider]) -> None:
    supported = provider.supported_languages if provider else WHISPER_LANGUAGES
    if language not in supported:
        raise InvalidRequestError(
            message="Validation error",
            error=f'"language" must be one of [{", ".join(supported)}]',
        )


async def _mark(audio_file_id: PydanticObjectId, status: AudioFile.Status, **changes) -> None:
    """Targeted ``$set`` so a stale in-memory copy never overwrites other fields."""
    await AudioFile.find_one({"_id": audio_file_id}).update(
        {"$set": {"status": status.value, "updated_at": utc_now(), **changes}}
    )


async def transcribe_audio_file(
    audio_file_id: str,
    language: str,
    provider: Optional[BaseTranscriptionProvider],
) -> dict:
    """
    Transcribe an uploaded AudioFile exactly once.

    Raises:
        InvalidRequestError: Malformed id or unsupported language
        NotFoundError: No such AudioFile
        ConflictError: A Transcript already exists (``data.transcriptId``)
        UpstreamProviderError: No provider configured, or the provider failed
    """
    object_id = parse_object_id(audio_file_id, "audio file")
    _validate_language(language, provider)

    audio_file = await AudioFile.get(object_id)
    if not audio_file:
        raise NotFoundError(message="Audio file not found")

    existing = await Transcript.find_one({"audio_file_id": object_id})
    if existing:
        raise _conflict(existing)

    if provider is None:
        raise UpstreamProviderError(
            message="Transcription failed",
            error="Transcription failed: no transcription provider configured "
            "(set OPENAI_API_KEY or DEEPGRAM_API_KEY)",
        )

    await _mark(object_id, AudioFile.Status.PROCESSING)
    audio_logger.info(
        f"🎤 Transcribing {audio_file.original_name} ({audio_file.id}) with {provider.name}, language={language}"
    )

    try:
        result = await provider.transcribe(Path(audio_file.path), language)
    except Exception as e:
        audio_logger.error(f"❌ Transcription of {audio_file.id} failed: {e}")
        await _mark(object_id, AudioFile.Status.FAILED)
        raise UpstreamProviderError(message="Transcription failed", error=f"Transcription failed: {e}") from e

    try:
        transcript = Transcript(
            audio_file_id=object_id,
            text=result.text,
            confidence=result.confidence,
            segments=result.segments,
            language=result.language or language,
            processing_time=result.processing_time,
            provider=provider.name,
        )
    except ValidationError as e:
        audio_logger.error(f"❌ Transcription result for {audio_file.id} does not fit the schema: {e}")
        await _mark(object_id, AudioFile.Status.FAILED)
        raise UpstreamProviderError(
            message="Transcription failed",
            error=f"Transcription failed: Invalid transcription result: {describe_validation_error(e)}",
        ) from e

    try:
        await transcript.insert()
    except DuplicateKeyError:
        # A concurrent request stored its transcript first, so the file is transcribed
        existing = await Transcript.find_one({"audio_file_id": object_id})
        if existing:
            await _mark(object_id, AudioFile.Status.COMPLETED)
            raise _conflict(existing)
        raise
    except Exception:
        await _mark(object_id, AudioFile.Status.FAILED)
        raise

    await _mark(object_id, AudioFile.Status.COMPLETED, duration=result.duration)
    audio_logger.info(
        f"🎯 Transcribed audio file {audio_file.original_name} ({audio_file.id}) "
        f"in {result.processing_time}ms, confidence {transcript.confidence:.3f}"
    )

    data = serialize_document(transcript)
    data["transcriptId"] = data["id"]
    return {
        "success": True,
        "message": "Audio file transcribed successfully",
        "data": data,
    }


async def _with_audio_file(transcript: Transcript) -> dict:
    summaries = await audio_file_summaries([transcript.audio_file_id])
    return serialize_document(transcript, audio_file=summaries.get(str(transcript.audio_file_id)))


async def get_transcript(transcript_id: str) -> dict:
    object_id = parse_object_id(transcript_id, "transcript")
    transcript = await Transcript.get(object_id)
    if not transcript:
        raise NotFoundError(message="Transcript not found")
    return {"success": True, "data": await _with_audio_file(transcript)}


async def get_transcript_by_audio_file(audio_file_id: str) -> dict:
    object_id = parse_object_id(audio_file_id, "audio file")
    transcript = await Transcript.find_one({"audio_file_id": object_id})
    if not transcript:
        raise NotFoundError(message="Transcript not found for this audio file")
    return {"success": True, "data": await _with_audio_file(transcript)}


async def list_transcripts(
    params: ListParams,
    language: Optional[str] = None,
    min_confidence: Optional[float] = None,
) -> dict:
    query_filter = {}
    if language:
        query_filter["language"] = language
    if min_confidence is not None:
        query_filter["confidence"] = {"$gte": min_confidence}

    transcripts, pagination = await paginate(Transcript, query_filter, params, "created_at")
    summaries = await audio_file_summaries(t.audio_file_id for t in transcripts)

    return {
        "success": True,
        "data": [
            serialize_document(t, audio_file=summaries.get(str(t.audio_file_id)))
            for t in transcripts
        ],
        "pagination": pagination,
    }


async def update_transcript(
    transcript_id: str,
    text: str,
    segments: Optional[List[SegmentInput]] = None,
) -> dict:
    """Replace the text and, when given, the segments. Confidence follows new segments."""
    object_id = parse_object_id(transcript_id, "transcript")
    transcript = await Transcript.get(object_id)
    if not transcript:
        raise NotFoundError(message="Transcript not found")

    transcript.text = text
    if segments is not None:
        transcript.segments = [TranscriptSegment(**segment.model_dump()) for segment in segments]
        transcript.confidence = overall_confidence([s.model_dump() for s in transcript.segments])
    transcript.updated_at = utc_now()
    await transcript.save()

    logger.info(f"📝 Updated transcript {transcript_id}")

    return {
        "success": True,
        "message": "Transcript updated successfully",
        "data": await _with_audio_file(transcript),
    }


async def delete_transcript(transcript_id: str) -> dict:
    """Delete a transcript. The AudioFile and any Analysis are left in place."""
    object_id = parse_object_id(transcript_id, "transcript")
    transcript = await Transcript.get(object_id)
    if not transcript:
        raise NotFoundError(message="Transcript not found")

    await transcript.delete()
    logger.info(f"🗑️ Deleted transcript {transcript_id}")
    return {"success": True, "message": "Transcript deleted successfully"}


async def get_transcript_stats() -> dict:
    total = await Transcript.find_all().count()
    averages = await Transcript.aggregate([
        {
            "$group": {
                "_id": None,
                "avg_confidence": {"$avg": "$confidence"},
                "avg_processing_time": {"$avg": "$processing_time"},
            }
        }
    ]).to_list()
    by_language = await Transcript.aggregate([
        {"$group": {"_id": "$language", "count": {"$sum": 1}}}
    ]).to_list()

    avg = averages[0] if averages else {}
    return {
        "success": True,
        "data": {
            "totalTranscripts": total,
            "averageConfidence": round(avg.get("avg_confidence") or 0, 3),
            "averageProcessingTime": round(avg.get("avg_processing_time") or 0),
            "byLanguage": {item["_id"]: item["count"] for item in by_language},
        },
    }
