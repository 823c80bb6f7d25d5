"""
Audio file upload controller.

Handles multipart uploads, AudioFile lookups, the administrative status
override, deletion and storage statistics.
"""

import logging
from typing import Optional

from fastapi import UploadFile

from callcoach_backend.exceptions import InvalidRequestError, NotFoundError
from callcoach_backend.models.audio_file import AudioFile
from callcoach_backend.utils.audio_storage import (
    delete_file,
    get_file_info,
    get_storage_stats,
    save_upload,
    validate_upload,
)
from callcoach_backend.utils.casing import camel_case_keys
from callcoach_backend.utils.object_ids import parse_object_id
from callcoach_backend.utils.pagination import ListParams, paginate
from callcoach_backend.utils.serialization import serialize_document, serialize_documents

logger = logging.getLogger(__name__)
audio_logger = logging.getLogger("audio_processing")


async def _get_audio_file(file_id: str) -> AudioFile:
    object_id = parse_object_id(file_id, "file")
    audio_file = await AudioFile.get(object_id)
    if not audio_file:
        raise NotFoundError(message="Audio file not found")
    return audio_file


async def upload_audio_file(file: Optional[UploadFile]) -> dict:
    """
    Store an uploaded recording and create its AudioFile with status ``uploaded``.

    Validation order is presence, MIME type, extension, then size while
    streaming. If the record cannot be created the stored bytes are removed.
    """
    if file is None or not file.filename:
        raise InvalidRequestError(message="No file uploaded", error="NO_FILE: No audio file provided in field 'audioFile'")

    extension = validate_upload(file)
    filename, file_path, size = await save_upload(file, extension)

    try:
        audio_file = AudioFile(
            original_name=file.filename,
            filename=filename,
            path=str(file_path),
            mimetype=file.content_type,
            size=size,
            status=AudioFile.Status.UPLOADED,
        )
        await audio_file.insert()
    except Exception:
        logger.error(f"Failed to record upload {file.filename}, removing stored file {filename}")
        delete_file(file_path)
        raise

    audio_logger.info(f"📁 Uploaded audio file: {audio_file.original_name} ({audio_file.id})")

    return {
        "success": True,
        "message": "Audio file uploaded successfully",
        "data": camel_case_keys({
            "id": str(audio_file.id),
            "_id": str(audio_file.id),
            "original_name": audio_file.original_name,
            "filename": audio_file.filename,
            "size": audio_file.size,
            "mimetype": audio_file.mimetype.value,
            "uploaded_at": audio_file.uploaded_at,
            "status": audio_file.status.value,
        }),
    }


async def get_audio_file(file_id: str) -> dict:
    audio_file = await _get_audio_file(file_id)
    file_info = get_file_info(audio_file.path)
    return {
        "success": True,
        "data": serialize_document(
            audio_file,
            exists=file_info["exists"],
            modified_at=file_info.get("modified_at"),
        ),
    }


async def list_audio_files(
    params: ListParams,
    status: Optional[str] = None,
    mimetype: Optional[str] = None,
) -> dict:
    query_filter = {}
    if status:
        query_filter["status"] = status
    if mimetype:
        query_filter["mimetype"] = mimetype

    audio_files, pagination = await paginate(AudioFile, query_filter, params, "uploaded_at")
    return {
        "success": True,
        "data": serialize_documents(audio_files),
        "pagination": pagination,
    }


async def update_status(file_id: str, status: AudioFile.Status) -> dict:
    """Administrative override: any status may be set from any status."""
    audio_file = await _get_audio_file(file_id)
    previous = audio_file.status
    audio_file.mark(status)
    await audio_file.save()

    audio_logger.info(f"🔄 Audio file {audio_file.id} status {previous.value} -> {status.value}")

    return {
        "success": True,
        "message": "Status updated successfully",
        "data": {"id": str(audio_file.id), "status": audio_file.status.value, "updatedAt": audio_file.updated_at},
    }


async def delete_audio_file(file_id: str) -> dict:
    """Remove the stored file (best-effort) and then the record. No cascade."""
    audio_file = await _get_audio_file(file_id)

    if not delete_file(audio_file.path):
        logger.warning(f"Could not remove stored file for audio file {audio_file.id}, deleting record anyway")

    await audio_file.delete()
    audio_logger.info(f"🗑️ Deleted audio file {file_id}")

    return {"success": True, "message": "Audio file deleted successfully"}


async def get_upload_stats() -> dict:
    total_files = await AudioFile.find_all().count()

    totals = await AudioFile.aggregate([
        {"$group": {"_id": None, "total_size": {"$sum": "$size"}}}
    ]).to_list()
    by_status = await AudioFile.aggregate([
        {"$group": {"_id": "$status", "count": {"$sum": 1}}}
    ]).to_list()
    by_mimetype = await AudioFile.aggregate([
        {"$group": {"_id": "$mimetype", "count": {"$sum": 1}}}
    ]).to_list()

    total_size = totals[0]["total_size"] if totals else 0

    return {
        "success": True,
        "data": {
            "database": {
                "totalFiles": total_files,
                "totalSizeBytes": total_size,
                "totalSizeMB": round(total_size / (1024 * 1024), 2),
                "byStatus": {item["_id"]: item["count"] for item in by_status},
                "byMimetype": {item["_id"]: item["count"] for item in by_mimetype},
            },
            "filesystem": get_storage_stats(),
        },
    }
