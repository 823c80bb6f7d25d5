"""
Database configuration and utilities for the Call Coaching backend.

This module provides centralized database access and Beanie initialisation
for the four pipeline collections.
"""

import logging

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from callcoach_backend.app_config import get_app_config
from callcoach_backend.models.analysis import Analysis
from callcoach_backend.models.audio_file import AudioFile
from callcoach_backend.models.coaching_plan import CoachingPlan
from callcoach_backend.models.transcript import Transcript

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [AudioFile, Transcript, Analysis, CoachingPlan]

_mongo_client: AsyncIOMotorClient | None = None


def get_mongo_client() -> AsyncIOMotorClient:
    """Get the MongoDB client, creating it on first use."""
    global _mongo_client
    if _mongo_client is None:
        config = get_app_config()
        _mongo_client = AsyncIOMotorClient(
            config.mongodb_uri,
            maxPoolSize=50,
            minPoolSize=5,
            maxIdleTimeMS=45000,
            serverSelectionTimeoutMS=5000,  # Fail fast if server unavailable
            socketTimeoutMS=20000,
        )
    return _mongo_client


def get_database() -> AsyncIOMotorDatabase:
    """Get the MongoDB database instance."""
    config = get_app_config()
    return get_mongo_client().get_default_database(config.mongodb_database)


async def init_database(database: AsyncIOMotorDatabase | None = None) -> None:
    """Initialise Beanie for all document models (creates indexes)."""
    database = database if database is not None else get_database()
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    logger.info(f"Beanie initialized for {len(DOCUMENT_MODELS)} document models")


async def ping_database() -> bool:
    """Return True when the database answers a ping."""
    try:
        await get_mongo_client().admin.command("ping")
        return True
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False


def close_database() -> None:
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
