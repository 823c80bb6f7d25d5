"""
CoachingPlan models for the Call Coaching backend.

A CoachingPlan is generated once per Analysis. Custom notes, the follow-up
plan and the action items can be edited afterwards; everything else is fixed.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import DESCENDING, IndexModel

from callcoach_backend.models.common import utc_now


class PerformanceLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    NEEDS_IMPROVEMENT = "needs_improvement"
    POOR = "poor"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ActionCategory(str, Enum):
    COMMUNICATION = "communication"
    TECHNICAL = "technical"
    PRODUCT_KNOWLEDGE = "product_knowledge"
    SOFT_SKILLS = "soft_skills"
    COMPLIANCE = "compliance"


class TrainingType(str, Enum):
    COURSE = "course"
    WORKSHOP = "workshop"
    MENTORING = "mentoring"
    PRACTICE = "practice"
    READING = "reading"


class OverallPerformance(BaseModel):
    score: float = Field(ge=0, le=100)
    level: PerformanceLevel


class Strength(BaseModel):
    area: Optional[str] = None
    description: Optional[str] = None
    examples: List[str] = Field(default_factory=list)


class ImprovementArea(BaseModel):
    area: Optional[str] = None
    priority: Optional[Priority] = None
    description: Optional[str] = None
    current_performance: Optional[str] = None
    target_performance: Optional[str] = None


class ActionItem(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ActionCategory] = None
    priority: Optional[Priority] = None
    estimated_time: Optional[str] = Field(None, description='e.g. "2 weeks"')
    resources: List[str] = Field(default_factory=list)
    success_metrics: List[str] = Field(default_factory=list)


class TrainingRecommendation(BaseModel):
    title: Optional[str] = None
    type: Optional[TrainingType] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    priority: Optional[Priority] = None


class Milestone(BaseModel):
    description: Optional[str] = None
    target_date: Optional[datetime] = None
    metrics: List[str] = Field(default_factory=list)


class FollowUpPlan(BaseModel):
    next_review_date: Optional[datetime] = None
    milestones: List[Milestone] = Field(default_factory=list)


class CoachingPlan(Document):
    """Coaching plan generated from one Analysis."""

    analysis_id: PydanticObjectId = Field(description="Owning Analysis")
    audio_file_id: PydanticObjectId = Field(description="AudioFile of the analysis (lookup key, not ownership)")
    agent_id: str = Field(min_length=1, description="Agent the plan is for")

    overall_performance: OverallPerformance
    strengths: List[Strength] = Field(default_factory=list)
    improvement_areas: List[ImprovementArea] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)
    training_recommendations: List[TrainingRecommendation] = Field(default_factory=list)
    follow_up_plan: FollowUpPlan = Field(default_factory=FollowUpPlan)
    custom_notes: Optional[str] = None

    generated_at: datetime = Field(default_factory=utc_now)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "coaching_plans"
        indexes = [
            IndexModel([("analysis_id", 1)], unique=True),
            "audio_file_id",
            "agent_id",
            IndexModel([("overall_performance.score", DESCENDING)]),
            IndexModel([("generated_at", DESCENDING)]),
        ]
