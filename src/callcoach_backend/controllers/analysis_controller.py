"""
Analysis controller.

Runs the LLM evaluation of a Transcript (once per Transcript) and serves the
stored analyses and their aggregate statistics.
"""

import logging
from typing import Optional

from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from callcoach_backend.exceptions import ConflictError, NotFoundError, UpstreamProviderError
from callcoach_backend.llm_client import LLMClient
from callcoach_backend.models.analysis import Analysis
from callcoach_backend.models.transcript import Transcript
from callcoach_backend.services.insights import analyze_transcript
from callcoach_backend.utils.object_ids import parse_object_id
from callcoach_backend.utils.pagination import ListParams, paginate
from callcoach_backend.utils.serialization import audio_file_summaries, serialize_document

logger = logging.getLogger(__name__)


def _conflict(existing: Analysis) -> ConflictError:
    return ConflictError(
        message="Analysis already exists for this transcript",
        data={"analysisId": str(existing.id), "createdAt": existing.created_at},
    )


def describe_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )


async def create_analysis(transcript_id: str, llm_client: Optional[LLMClient]) -> dict:
    """
    Analyze a Transcript and persist the result.

    Nothing is stored unless the model returned sentiment.overall,
    sentiment.score and a summary, and the rest maps onto the schema.
    """
    object_id = parse_object_id(transcript_id, "transcript")

    transcript = await Transcript.get(object_id)
    if not transcript:
        raise NotFoundError(message="Transcript not found")

    existing = await Analysis.find_one({"transcript_id": object_id})
    if existing:
        raise _conflict(existing)

    payload = await analyze_transcript(llm_client, transcript.text)

    try:
        analysis = Analysis(
            transcript_id=object_id,
            audio_file_id=transcript.audio_file_id,
            **payload,
        )
    except ValidationError as e:
        logger.error(f"❌ Analysis response for transcript {transcript_id} does not fit the schema: {e}")
        raise UpstreamProviderError(
            message="Analysis failed",
            error=f"LLM Analysis failed: Invalid analysis response: {describe_validation_error(e)}",
        ) from e

    try:
        await analysis.insert()
    except DuplicateKeyError:
        existing = await Analysis.find_one({"transcript_id": object_id})
        if existing:
            raise _conflict(existing)
        raise

    logger.info(f"🧠 Analyzed transcript {transcript_id} -> analysis {analysis.id}")

    data = serialize_document(analysis)
    data["analysisId"] = data["id"]
    return {
        "success": True,
        "message": "Transcript analyzed successfully",
        "data": data,
    }


async def _transcript_summaries(transcript_ids) -> dict:
    ids = list({transcript_id for transcript_id in transcript_ids if transcript_id})
    if not ids:
        return {}
    transcripts = await Transcript.find({"_id": {"$in": ids}}).to_list()
    return {
        str(t.id): {
            "id": str(t.id),
            "text": t.text,
            "confidence": t.confidence,
            "language": t.language,
            "createdAt": t.created_at,
        }
        for t in transcripts
    }


async def _expand(analyses: list) -> list:
    transcripts = await _transcript_summaries(a.transcript_id for a in analyses)
    audio_files = await audio_file_summaries(a.audio_file_id for a in analyses)
    return [
        serialize_document(
            analysis,
            transcript=transcripts.get(str(analysis.transcript_id)),
            audio_file=audio_files.get(str(analysis.audio_file_id)),
        )
        for analysis in analyses
    ]


async def get_analysis(analysis_id: str) -> dict:
    object_id = parse_object_id(analysis_id, "analysis")
    analysis = await Analysis.get(object_id)
    if not analysis:
        raise NotFoundError(message="Analysis not found")
    return {"success": True, "data": (await _expand([analysis]))[0]}


async def get_analysis_by_transcript(transcript_id: str) -> dict:
    object_id = parse_object_id(transcript_id, "transcript")
    analysis = await Analysis.find_one({"transcript_id": object_id})
    if not analysis:
        raise NotFoundError(message="Analysis not found for this transcript")
    return {"success": True, "data": (await _expand([analysis]))[0]}


async def list_analyses(
    params: ListParams,
    sentiment: Optional[str] = None,
    min_satisfaction: Optional[float] = None,
    resolved: Optional[bool] = None,
) -> dict:
    query_filter = {}
    if sentiment:
        query_filter["sentiment.overall"] = sentiment
    if min_satisfaction is not None:
        query_filter["customer_satisfaction.score"] = {"$gte": min_satisfaction}
    if resolved is not None:
        query_filter["issue_resolution.was_resolved"] = resolved

    analyses, pagination = await paginate(Analysis, query_filter, params, "created_at")
    return {
        "success": True,
        "data": await _expand(analyses),
        "pagination": pagination,
    }


async def delete_analysis(analysis_id: str) -> dict:
    """Delete an analysis. Its Transcript and any CoachingPlan are left in place."""
    object_id = parse_object_id(analysis_id, "analysis")
    analysis = await Analysis.get(object_id)
    if not analysis:
        raise NotFoundError(message="Analysis not found")

    await analysis.delete()
    logger.info(f"🗑️ Deleted analysis {analysis_id}")
    return {"success": True, "message": "Analysis deleted successfully"}


async def get_analysis_stats() -> dict:
    total = await Analysis.find_all().count()

    by_sentiment = await Analysis.aggregate([
        {"$group": {"_id": "$sentiment.overall", "count": {"$sum": 1}}}
    ]).to_list()
    averages = await Analysis.aggregate([
        {
            "$group": {
                "_id": None,
                "avg_satisfaction": {"$avg": "$customer_satisfaction.score"},
                "avg_compliance": {"$avg": "$compliance.score"},
            }
        }
    ]).to_list()
    resolution = await Analysis.aggregate([
        {
            "$group": {
                "_id": "$issue_resolution.was_resolved",
                "count": {"$sum": 1},
                "avg_resolution_time": {"$avg": "$issue_resolution.resolution_time"},
            }
        }
    ]).to_list()

    issue_resolution = {"resolved": 0, "unresolved": 0, "avgResolutionTime": 0}
    for item in resolution:
        if item["_id"] is True:
            issue_resolution["resolved"] = item["count"]
            issue_resolution["avgResolutionTime"] = round(item.get("avg_resolution_time") or 0)
        elif item["_id"] is False:
            issue_resolution["unresolved"] = item["count"]

    avg = averages[0] if averages else {}
    return {
        "success": True,
        "data": {
            "totalAnalyses": total,
            "averageCustomerSatisfaction": round(avg.get("avg_satisfaction") or 0, 2),
            "averageComplianceScore": round(avg.get("avg_compliance") or 0, 3),
            "bySentiment": {item["_id"]: item["count"] for item in by_sentiment},
            "issueResolution": issue_resolution,
        },
    }


async def get_sentiment_summary() -> dict:
    total = await Analysis.find_all().count()
    groups = await Analysis.aggregate([
        {
            "$group": {
                "_id": "$sentiment.overall",
                "count": {"$sum": 1},
                "avg_score": {"$avg": "$sentiment.score"},
                "avg_confidence": {"$avg": "$sentiment.confidence"},
                "avg_satisfaction": {"$avg": "$customer_satisfaction.score"},
            }
        },
        {"$sort": {"count": -1}},
    ]).to_list()

    breakdown = [
        {
            "sentiment": item["_id"],
            "count": item["count"],
            "percentage": round(item["count"] / total * 100) if total else 0,
            "averageScore": round(item.get("avg_score") or 0, 3),
            "averageConfidence": round(item.get("avg_confidence") or 0, 3),
            "averageCustomerSatisfaction": round(item.get("avg_satisfaction") or 0, 2),
        }
        for item in groups
    ]

    return {
        "success": True,
        "data": {"totalAnalyses": total, "sentimentBreakdown": breakdown},
    }
