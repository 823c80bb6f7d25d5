"""
Audio file storage on the local filesystem.

Uploads are streamed to ``<upload dir>/<uuid4><original extension>`` in chunks
so the size ceiling can be enforced without buffering the whole file.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from callcoach_backend.app_config import get_app_config
from callcoach_backend.exceptions import InvalidRequestError, PayloadTooLargeError

logger = logging.getLogger(__name__)
audio_logger = logging.getLogger("audio_processing")


def ensure_upload_dir() -> Path:
    upload_dir = get_app_config().upload_path
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def validate_upload(file: UploadFile) -> str:
    """Check content type then extension; return the lower-cased extension."""
    config = get_app_config()

    if file.content_type not in config.allowed_mime_types:
        raise InvalidRequestError(
            message="Invalid file type",
            error=f"INVALID_FILE_TYPE: Invalid file type: {file.content_type}. "
            f"Allowed types: {', '.join(config.allowed_mime_types)}",
        )

    extension = Path(file.filename or "").suffix.lower()
    if extension not in config.allowed_extensions:
        raise InvalidRequestError(
            message="Invalid file extension",
            error=f"INVALID_FILE_EXTENSION: Invalid file extension: {extension or '(none)'}. "
            f"Allowed extensions: {', '.join(config.allowed_extensions)}",
        )

    return extension


async def save_upload(file: UploadFile, extension: str) -> tuple[str, Path, int]:
    """
    Stream an upload to disk.

    Returns:
        Tuple of (generated filename, stored path, size in bytes)

    Raises:
        PayloadTooLargeError: The upload exceeds MAX_FILE_SIZE; the partial file is removed.
    """
    config = get_app_config()
    upload_dir = ensure_upload_dir()
    filename = f"{uuid.uuid4()}{extension}"
    file_path = upload_dir / filename

    size = 0
    try:
        with file_path.open("wb") as out:
            while True:
                chunk = await file.read(config.upload_chunk_size)
                if not chunk:
                    break
                size += len(chunk)
                if size > config.max_file_size:
                    raise PayloadTooLargeError(
                        message="File too large",
                        error=f"FILE_TOO_LARGE: File exceeds the maximum size of {config.max_file_size_label}",
                    )
                out.write(chunk)
    except Exception:
        delete_file(file_path)
        raise

    audio_logger.info(f"💾 Stored upload {file.filename} as {filename} ({size} bytes)")
    return filename, file_path, size


def delete_file(file_path: Optional[str | Path]) -> bool:
    """Best-effort delete. Failures are logged, never raised."""
    if not file_path:
        return False
    try:
        Path(file_path).unlink(missing_ok=True)
        return True
    except OSError as e:
        logger.warning(f"Failed to delete file {file_path}: {e}")
        return False


def get_file_info(file_path: str | Path) -> dict:
    path = Path(file_path)
    if not path.exists():
        return {"exists": False}
    stat = path.stat()
    return {
        "exists": True,
        "size": stat.st_size,
        "modified_at": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        "created_at": datetime.fromtimestamp(stat.st_ctime, tz=timezone.utc),
    }


def get_storage_stats() -> dict:
    upload_dir = get_app_config().upload_path
    files = [p for p in upload_dir.iterdir() if p.is_file()] if upload_dir.exists() else []
    total_size = sum(p.stat().st_size for p in files)
    return {
        "totalFiles": len(files),
        "totalSize": total_size,
        "totalSizeMB": round(total_size / (1024 * 1024), 2),
        "uploadPath": str(upload_dir),
    }
