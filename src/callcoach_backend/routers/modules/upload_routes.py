"""
Audio upload routes.

Handles multipart uploads, AudioFile lookups, the status override and deletion.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from callcoach_backend.controllers import upload_controller
from callcoach_backend.models.requests import StatusUpdateRequest
from callcoach_backend.utils.pagination import ListParams, list_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("", status_code=201)
async def upload_audio_file(audio_file: Optional[UploadFile] = File(None, alias="audioFile")):
    """Upload one recording in multipart field ``audioFile`` (wav/mp3/mpeg)."""
    return await upload_controller.upload_audio_file(audio_file)


@router.get("")
async def list_audio_files(
    params: ListParams = Depends(list_params),
    status: Optional[str] = Query(None, description="uploaded|processing|completed|failed"),
    mimetype: Optional[str] = Query(None),
):
    return await upload_controller.list_audio_files(params, status=status, mimetype=mimetype)


@router.get("/stats/overview")
async def get_upload_stats():
    """Database and filesystem storage statistics."""
    return await upload_controller.get_upload_stats()


@router.get("/{file_id}")
async def get_audio_file(file_id: str):
    return await upload_controller.get_audio_file(file_id)


@router.patch("/{file_id}/status")
async def update_audio_file_status(file_id: str, body: StatusUpdateRequest):
    """Force an AudioFile status. No transition guard is applied."""
    return await upload_controller.update_status(file_id, body.status)


@router.delete("/{file_id}")
async def delete_audio_file(file_id: str):
    return await upload_controller.delete_audio_file(file_id)
