"""
Transcript routes.

Triggers transcription of an uploaded AudioFile and manages the stored transcripts.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from callcoach_backend.controllers import transcript_controller
from callcoach_backend.models.requests import TranscribeRequest, TranscriptUpdateRequest
from callcoach_backend.models.transcription import BaseTranscriptionProvider
from callcoach_backend.services.transcription import get_transcription_provider_dependency
from callcoach_backend.utils.pagination import ListParams, list_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transcript", tags=["transcript"])


@router.post("/{audio_file_id}", status_code=201)
async def transcribe_audio_file(
    audio_file_id: str,
    body: Optional[TranscribeRequest] = Body(None),
    provider: Optional[BaseTranscriptionProvider] = Depends(get_transcription_provider_dependency),
):
    """Transcribe an AudioFile. Returns 409 with ``transcriptId`` if it was already transcribed."""
    language = body.language if body else "en"
    return await transcript_controller.transcribe_audio_file(audio_file_id, language, provider)


@router.get("")
async def list_transcripts(
    params: ListParams = Depends(list_params),
    language: Optional[str] = Query(None),
    min_confidence: Optional[float] = Query(None, alias="minConfidence", ge=0, le=1),
):
    return await transcript_controller.list_transcripts(
        params, language=language, min_confidence=min_confidence
    )


@router.get("/stats/overview")
async def get_transcript_stats():
    return await transcript_controller.get_transcript_stats()


@router.get("/audio/{audio_file_id}")
async def get_transcript_by_audio_file(audio_file_id: str):
    return await transcript_controller.get_transcript_by_audio_file(audio_file_id)


@router.get("/{transcript_id}")
async def get_transcript(transcript_id: str):
    return await transcript_controller.get_transcript(transcript_id)


@router.put("/{transcript_id}")
async def update_transcript(transcript_id: str, body: TranscriptUpdateRequest):
    return await transcript_controller.update_transcript(transcript_id, body.text, body.segments)


@router.delete("/{transcript_id}")
async def delete_transcript(transcript_id: str):
    return await transcript_controller.delete_transcript(transcript_id)
