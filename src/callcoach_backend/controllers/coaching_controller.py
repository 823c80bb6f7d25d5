"""
Coaching plan controller.

Generates one CoachingPlan per Analysis for a named agent, and serves plan
lookups, edits, per-agent views and statistics.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from callcoach_backend.app_config import get_app_config
from callcoach_backend.controllers.analysis_controller import describe_validation_error
from callcoach_backend.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    UpstreamProviderError,
)
from callcoach_backend.llm_client import LLMClient
from callcoach_backend.models.analysis import Analysis
from callcoach_backend.models.audio_file import AudioFile
from callcoach_backend.models.coaching_plan import ActionItem, CoachingPlan, FollowUpPlan
from callcoach_backend.models.common import utc_now
from callcoach_backend.models.requests import CoachingPlanUpdateRequest
from callcoach_backend.services.insights import generate_coaching_plan
from callcoach_backend.utils.object_ids import parse_object_id
from callcoach_backend.utils.pagination import ListParams, paginate
from callcoach_backend.utils.serialization import audio_file_summaries, serialize_document

logger = logging.getLogger(__name__)


def _conflict(existing: CoachingPlan) -> ConflictError:
    return ConflictError(
        message="Coaching plan already exists for this analysis",
        data={"coachingPlanId": str(existing.id), "createdAt": existing.created_at},
    )


def resolve_agent_id(agent_id: Optional[str]) -> str:
    """``None`` falls back to the default agent; an empty or blank id is rejected."""
    if agent_id is None:
        return get_app_config().default_agent_id
    if not agent_id.strip():
        raise InvalidRequestError(message="Validation error", error='"agentId" is not allowed to be empty')
    return agent_id


async def create_coaching_plan(
    analysis_id: str,
    agent_id: Optional[str],
    llm_client: Optional[LLMClient],
) -> dict:
    """
    Generate and persist the coaching plan for an Analysis.

    The stored ``agent_id`` is always the one the caller asked for, even if
    the model echoes a different one back.
    """
    agent_id = resolve_agent_id(agent_id)
    object_id = parse_object_id(analysis_id, "analysis")

    analysis = await Analysis.get(object_id)
    if not analysis:
        raise NotFoundError(message="Analysis not found")

    existing = await CoachingPlan.find_one({"analysis_id": object_id})
    if existing:
        raise _conflict(existing)

    analysis_payload = serialize_document(analysis, exclude={"created_at", "updated_at"})
    payload = await generate_coaching_plan(llm_client, analysis_payload, agent_id)
    processing_time = payload.pop("processing_time", 0)

    try:
        coaching_plan = CoachingPlan(
            analysis_id=object_id,
            audio_file_id=analysis.audio_file_id,
            agent_id=agent_id,
            **payload,
        )
    except ValidationError as e:
        logger.error(f"❌ Coaching response for analysis {analysis_id} does not fit the schema: {e}")
        raise UpstreamProviderError(
            message="Coaching plan generation failed",
            error=f"Coaching plan generation failed: Invalid coaching plan response: {describe_validation_error(e)}",
        ) from e

    try:
        await coaching_plan.insert()
    except DuplicateKeyError:
        existing = await CoachingPlan.find_one({"analysis_id": object_id})
        if existing:
            raise _conflict(existing)
        raise

    logger.info(
        f"📋 Generated coaching plan {coaching_plan.id} for agent {agent_id} "
        f"(analysis: {analysis_id}) in {processing_time}ms"
    )

    data = serialize_document(coaching_plan)
    data["coachingPlanId"] = data["id"]
    return {
        "success": True,
        "message": "Coaching plan generated successfully",
        "data": data,
    }


async def _analysis_summaries(analysis_ids) -> dict:
    ids = list({analysis_id for analysis_id in analysis_ids if analysis_id})
    if not ids:
        return {}
    analyses = await Analysis.find({"_id": {"$in": ids}}).to_list()
    return {
        str(a.id): serialize_document(
            a,
            exclude={
                "transcript_id", "audio_file_id", "emotions", "key_topics",
                "communication_metrics", "processing_time", "created_at", "updated_at",
            },
        )
        for a in analyses
    }


async def _expand(plans: List[CoachingPlan]) -> list:
    analyses = await _analysis_summaries(p.analysis_id for p in plans)
    audio_files = await audio_file_summaries(p.audio_file_id for p in plans)
    return [
        serialize_document(
            plan,
            analysis=analyses.get(str(plan.analysis_id)),
            audio_file=audio_files.get(str(plan.audio_file_id)),
        )
        for plan in plans
    ]


async def _get_plan(plan_id: str) -> CoachingPlan:
    object_id = parse_object_id(plan_id, "coaching plan")
    coaching_plan = await CoachingPlan.get(object_id)
    if not coaching_plan:
        raise NotFoundError(message="Coaching plan not found")
    return coaching_plan


async def get_coaching_plan(plan_id: str) -> dict:
    coaching_plan = await _get_plan(plan_id)
    return {"success": True, "data": (await _expand([coaching_plan]))[0]}


async def get_coaching_plan_by_analysis(analysis_id: str) -> dict:
    object_id = parse_object_id(analysis_id, "analysis")
    coaching_plan = await CoachingPlan.find_one({"analysis_id": object_id})
    if not coaching_plan:
        raise NotFoundError(message="Coaching plan not found for this analysis")
    return {"success": True, "data": (await _expand([coaching_plan]))[0]}


async def list_coaching_plans(
    params: ListParams,
    agent_id: Optional[str] = None,
    performance_level: Optional[str] = None,
    min_score: Optional[float] = None,
) -> dict:
    query_filter = {}
    if agent_id:
        query_filter["agent_id"] = agent_id
    if performance_level:
        query_filter["overall_performance.level"] = performance_level
    if min_score is not None:
        query_filter["overall_performance.score"] = {"$gte": min_score}

    plans, pagination = await paginate(CoachingPlan, query_filter, params, "generated_at")
    return {"success": True, "data": await _expand(plans), "pagination": pagination}


async def list_coaching_plans_by_agent(agent_id: str, params: ListParams) -> dict:
    return await list_coaching_plans(params, agent_id=agent_id)


async def update_coaching_plan(plan_id: str, update: CoachingPlanUpdateRequest) -> dict:
    """Only custom notes, the follow-up plan and the action items are editable."""
    coaching_plan = await _get_plan(plan_id)

    provided = update.model_fields_set
    if "custom_notes" in provided:
        coaching_plan.custom_notes = update.custom_notes
    if "follow_up_plan" in provided and update.follow_up_plan is not None:
        coaching_plan.follow_up_plan = FollowUpPlan(**update.follow_up_plan.model_dump())
    if "action_items" in provided and update.action_items is not None:
        coaching_plan.action_items = [ActionItem(**item.model_dump()) for item in update.action_items]

    coaching_plan.updated_at = utc_now()
    await coaching_plan.save()

    logger.info(f"📝 Updated coaching plan {plan_id}")

    return {
        "success": True,
        "message": "Coaching plan updated successfully",
        "data": (await _expand([coaching_plan]))[0],
    }


async def delete_coaching_plan(plan_id: str) -> dict:
    coaching_plan = await _get_plan(plan_id)
    await coaching_plan.delete()
    logger.info(f"🗑️ Deleted coaching plan {plan_id}")
    return {"success": True, "message": "Coaching plan deleted successfully"}


async def get_coaching_stats() -> dict:
    total = await CoachingPlan.find_all().count()

    by_level = await CoachingPlan.aggregate([
        {"$group": {"_id": "$overall_performance.level", "count": {"$sum": 1}}}
    ]).to_list()
    top_agents = await CoachingPlan.aggregate([
        {
            "$group": {
                "_id": "$agent_id",
                "count": {"$sum": 1},
                "avg_score": {"$avg": "$overall_performance.score"},
            }
        },
        {"$sort": {"count": -1}},
        {"$limit": 10},
    ]).to_list()
    average = await CoachingPlan.aggregate([
        {"$group": {"_id": None, "avg_score": {"$avg": "$overall_performance.score"}}}
    ]).to_list()
    improvement_areas = await CoachingPlan.aggregate([
        {"$unwind": "$improvement_areas"},
        {"$group": {"_id": "$improvement_areas.area", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
        {"$limit": 5},
    ]).to_list()

    return {
        "success": True,
        "data": {
            "totalPlans": total,
            "averagePerformanceScore": round((average[0]["avg_score"] or 0) if average else 0, 2),
            "byPerformanceLevel": {item["_id"]: item["count"] for item in by_level},
            "topAgents": [
                {
                    "agentId": agent["_id"],
                    "planCount": agent["count"],
                    "averageScore": round(agent.get("avg_score") or 0, 2),
                }
                for agent in top_agents
            ],
            "commonImprovementAreas": [
                {"area": area["_id"], "count": area["count"]} for area in improvement_areas
            ],
        },
    }


async def _top_areas(agent_id: str, field: str) -> list:
    rows = await CoachingPlan.aggregate([
        {"$match": {"agent_id": agent_id}},
        {"$unwind": f"${field}"},
        {"$group": {"_id": f"${field}.area", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
        {"$limit": 3},
    ]).to_list()
    return [{"area": row["_id"], "frequency": row["count"]} for row in rows]


async def get_agent_summary(agent_id: str) -> dict:
    """Performance overview for one agent: average, latest plan, last five scores, top areas."""
    total = await CoachingPlan.find({"agent_id": agent_id}).count()
    if total == 0:
        raise NotFoundError(message="No coaching plans found for this agent")

    average = await CoachingPlan.aggregate([
        {"$match": {"agent_id": agent_id}},
        {"$group": {"_id": None, "avg_score": {"$avg": "$overall_performance.score"}}},
    ]).to_list()
    recent = (
        await CoachingPlan.find({"agent_id": agent_id})
        .sort("-generated_at")
        .limit(5)
        .to_list()
    )

    latest = recent[0]
    latest_analysis = await Analysis.get(latest.analysis_id)
    latest_audio = await AudioFile.get(latest.audio_file_id)

    return {
        "success": True,
        "data": {
            "agentId": agent_id,
            "totalPlans": total,
            "averagePerformanceScore": round((average[0]["avg_score"] or 0) if average else 0, 2),
            "latestPlan": {
                "id": str(latest.id),
                "score": latest.overall_performance.score,
                "level": latest.overall_performance.level.value,
                "generatedAt": latest.generated_at,
                "audioFile": latest_audio.original_name if latest_audio else None,
                "sentiment": latest_analysis.sentiment.overall.value if latest_analysis else None,
            },
            "performanceTrend": [
                {"score": plan.overall_performance.score, "date": plan.generated_at}
                for plan in recent
            ],
            "commonStrengths": await _top_areas(agent_id, "strengths"),
            "commonImprovementAreas": await _top_areas(agent_id, "improvement_areas"),
        },
    }
