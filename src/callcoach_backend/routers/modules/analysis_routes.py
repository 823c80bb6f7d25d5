"""
Analysis routes.

Runs the LLM analysis of a Transcript and serves stored analyses and statistics.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from callcoach_backend.controllers import analysis_controller
from callcoach_backend.llm_client import LLMClient, get_llm_client_dependency
from callcoach_backend.utils.pagination import ListParams, list_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("/{transcript_id}", status_code=201)
async def analyze_transcript(
    transcript_id: str,
    llm_client: Optional[LLMClient] = Depends(get_llm_client_dependency),
):
    """Analyze a Transcript. Returns 409 with ``analysisId`` if it was already analyzed."""
    return await analysis_controller.create_analysis(transcript_id, llm_client)


@router.get("")
async def list_analyses(
    params: ListParams = Depends(list_params),
    sentiment: Optional[str] = Query(None, description="positive|neutral|negative"),
    min_satisfaction: Optional[float] = Query(None, alias="minSatisfaction"),
    resolved: Optional[bool] = Query(None),
):
    return await analysis_controller.list_analyses(
        params, sentiment=sentiment, min_satisfaction=min_satisfaction, resolved=resolved
    )


@router.get("/stats/overview")
async def get_analysis_stats():
    return await analysis_controller.get_analysis_stats()


@router.get("/stats/sentiment-summary")
async def get_sentiment_summary():
    return await analysis_controller.get_sentiment_summary()


@router.get("/transcript/{transcript_id}")
async def get_analysis_by_transcript(transcript_id: str):
    return await analysis_controller.get_analysis_by_transcript(transcript_id)


@router.get("/{analysis_id}")
async def get_analysis(analysis_id: str):
    return await analysis_controller.get_analysis(analysis_id)


@router.delete("/{analysis_id}")
async def delete_analysis(analysis_id: str):
    return await analysis_controller.delete_analysis(analysis_id)
