"""
Request body models for the JSON API.

Clients send camelCase keys; the models accept both camelCase and snake_case
and dump to snake_case for storage.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from callcoach_backend.models.audio_file import AudioFile
from callcoach_backend.models.coaching_plan import ActionCategory, Priority


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatusUpdateRequest(ApiModel):
    status: AudioFile.Status


class TranscribeRequest(ApiModel):
    language: str = "en"


class SegmentInput(ApiModel):
    text: str
    start: float = Field(ge=0)
    end: float = Field(ge=0)
    confidence: Optional[float] = Field(None, ge=0, le=1)


class TranscriptUpdateRequest(ApiModel):
    text: str = Field(min_length=1)
    segments: Optional[List[SegmentInput]] = None


class CoachingRequest(ApiModel):
    agent_id: Optional[str] = None


class MilestoneInput(ApiModel):
    description: str
    target_date: datetime
    metrics: List[str] = Field(default_factory=list)


class FollowUpPlanInput(ApiModel):
    next_review_date: Optional[datetime] = None
    milestones: List[MilestoneInput] = Field(default_factory=list)


class ActionItemInput(ApiModel):
    title: str
    description: str
    category: ActionCategory
    priority: Priority
    estimated_time: Optional[str] = None
    resources: List[str] = Field(default_factory=list)
    success_metrics: List[str] = Field(default_factory=list)


class CoachingPlanUpdateRequest(ApiModel):
    custom_notes: Optional[str] = None
    follow_up_plan: Optional[FollowUpPlanInput] = None
    action_items: Optional[List[ActionItemInput]] = None
