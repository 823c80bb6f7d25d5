"""Helpers shared by the document models."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current UTC time used for document timestamps."""
    return datetime.now(timezone.utc)
