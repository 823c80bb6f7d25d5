"""
Controllers for handling business logic separate from route definitions.
"""

from . import (
    analysis_controller,
    coaching_controller,
    system_controller,
    transcript_controller,
    upload_controller,
)

__all__ = [
    "analysis_controller",
    "coaching_controller",
    "system_controller",
    "transcript_controller",
    "upload_controller",
]
