"""
Coaching plan routes.

Generates coaching plans from analyses and manages them per plan and per agent.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from callcoach_backend.controllers import coaching_controller
from callcoach_backend.llm_client import LLMClient, get_llm_client_dependency
from callcoach_backend.models.requests import CoachingPlanUpdateRequest, CoachingRequest
from callcoach_backend.utils.pagination import ListParams, list_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coaching", tags=["coaching"])


@router.post("/{analysis_id}", status_code=201)
async def generate_coaching_plan(
    analysis_id: str,
    body: Optional[CoachingRequest] = Body(None),
    llm_client: Optional[LLMClient] = Depends(get_llm_client_dependency),
):
    """Generate the coaching plan for an Analysis; ``agentId`` defaults to agent_001."""
    agent_id = body.agent_id if body else None
    return await coaching_controller.create_coaching_plan(analysis_id, agent_id, llm_client)


@router.get("")
async def list_coaching_plans(
    params: ListParams = Depends(list_params),
    agent_id: Optional[str] = Query(None, alias="agentId"),
    performance_level: Optional[str] = Query(None, alias="performanceLevel"),
    min_score: Optional[float] = Query(None, alias="minScore"),
):
    return await coaching_controller.list_coaching_plans(
        params, agent_id=agent_id, performance_level=performance_level, min_score=min_score
    )


@router.get("/stats/overview")
async def get_coaching_stats():
    return await coaching_controller.get_coaching_stats()


@router.get("/stats/agent-summary/{agent_id}")
async def get_agent_summary(agent_id: str):
    return await coaching_controller.get_agent_summary(agent_id)


@router.get("/analysis/{analysis_id}")
async def get_coaching_plan_by_analysis(analysis_id: str):
    return await coaching_controller.get_coaching_plan_by_analysis(analysis_id)


@router.get("/agent/{agent_id}")
async def list_coaching_plans_by_agent(agent_id: str, params: ListParams = Depends(list_params)):
    return await coaching_controller.list_coaching_plans_by_agent(agent_id, params)


@router.get("/{plan_id}")
async def get_coaching_plan(plan_id: str):
    return await coaching_controller.get_coaching_plan(plan_id)


@router.put("/{plan_id}")
async def update_coaching_plan(plan_id: str, body: CoachingPlanUpdateRequest):
    return await coaching_controller.update_coaching_plan(plan_id, body)


@router.delete("/{plan_id}")
async def delete_coaching_plan(plan_id: str):
    return await coaching_controller.delete_coaching_plan(plan_id)
