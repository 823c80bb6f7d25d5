"""Document -> API payload conversion."""

from typing import Iterable, Optional

from beanie import Document, PydanticObjectId

from callcoach_backend.models.audio_file import AudioFile
from callcoach_backend.utils.casing import camel_case_keys


def serialize_document(document: Document, exclude: Optional[Iterable[str]] = None, **extra) -> dict:
    """
    JSON-ready camelCase dict for a document.

    Both ``id`` and ``_id`` carry the hex ObjectId. ``extra`` entries are added
    (snake_case keys are converted too) after the document fields.
    """
    excluded = {"revision_id", *(exclude or ())}
    data = document.model_dump(mode="json", exclude=excluded)
    data["_id"] = data["id"] = str(document.id)
    data.update(extra)
    return camel_case_keys(data)


def serialize_documents(documents: Iterable[Document], exclude: Optional[Iterable[str]] = None) -> list:
    return [serialize_document(document, exclude) for document in documents]


async def audio_file_summaries(audio_file_ids: Iterable[PydanticObjectId]) -> dict:
    """Map of hex id -> camelCase AudioFile summary, for embedding in downstream responses."""
    ids = list({audio_file_id for audio_file_id in audio_file_ids if audio_file_id})
    if not ids:
        return {}
    audio_files = await AudioFile.find({"_id": {"$in": ids}}).to_list()
    return {str(audio_file.id): camel_case_keys(audio_file.summary()) for audio_file in audio_files}
