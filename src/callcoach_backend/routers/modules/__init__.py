"""
Router modules for the Call Coaching API.

This package contains organized router modules for the pipeline stages:
- upload_routes: Audio file uploads and management
- transcript_routes: Transcription and transcript management
- analysis_routes: LLM analysis and statistics
- coaching_routes: Coaching plans, per-agent views and statistics
- health_routes: Health and status endpoints
"""

from .analysis_routes import router as analysis_router
from .coaching_routes import router as coaching_router
from .health_routes import router as health_router
from .transcript_routes import router as transcript_router
from .upload_routes import router as upload_router

__all__ = [
    "analysis_router",
    "coaching_router",
    "health_router",
    "transcript_router",
    "upload_router",
]
