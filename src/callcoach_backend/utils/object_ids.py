"""ObjectId parsing for path parameters."""

import re

from beanie import PydanticObjectId

from callcoach_backend.exceptions import InvalidRequestError

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def parse_object_id(value: str, label: str) -> PydanticObjectId:
    """Return the ObjectId for ``value`` or raise 400 before any lookup.

    ``label`` names the resource in the error, e.g. ``"audio file"`` gives
    ``Invalid audio file ID format``.
    """
    if not value or not OBJECT_ID_PATTERN.match(value):
        raise InvalidRequestError(message=f"Invalid {label} ID format")
    return PydanticObjectId(value)
