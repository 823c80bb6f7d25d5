"""
Analysis models for the Call Coaching backend.

The Analysis document holds the structured sentiment/behaviour evaluation the
LLM produced for a transcript. Everything except ``sentiment.overall``,
``sentiment.score`` and ``summary`` is optional because the model is free to
leave blocks out.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import DESCENDING, IndexModel

from callcoach_backend.models.common import utc_now


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class EmotionLabel(str, Enum):
    JOY = "joy"
    SADNESS = "sadness"
    ANGER = "anger"
    FEAR = "fear"
    SURPRISE = "surprise"
    DISGUST = "disgust"
    NEUTRAL = "neutral"


class Sentiment(BaseModel):
    overall: SentimentLabel
    score: float = Field(ge=-1, le=1)
    confidence: float = Field(default=0, ge=0, le=1)


class Emotion(BaseModel):
    emotion: Optional[EmotionLabel] = None
    intensity: Optional[float] = Field(None, ge=0, le=1)


class KeyTopic(BaseModel):
    topic: Optional[str] = None
    relevance: Optional[float] = Field(None, ge=0, le=1)


class CommunicationMetrics(BaseModel):
    speaking_rate: Optional[float] = Field(None, description="Words per minute")
    pause_frequency: Optional[float] = Field(None, description="Pauses per minute")
    interruption_count: Optional[int] = None
    clarity_score: Optional[float] = Field(None, ge=0, le=1)


class CustomerSatisfaction(BaseModel):
    score: Optional[float] = Field(None, ge=1, le=10)
    indicators: List[str] = Field(default_factory=list)


class IssueResolution(BaseModel):
    was_resolved: Optional[bool] = None
    resolution_time: Optional[float] = Field(None, description="Minutes")
    escalation_needed: Optional[bool] = None


class Compliance(BaseModel):
    score: Optional[float] = Field(None, ge=0, le=1)
    violations: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class Analysis(Document):
    """LLM evaluation of one Transcript."""

    transcript_id: PydanticObjectId = Field(description="Owning Transcript")
    audio_file_id: PydanticObjectId = Field(description="AudioFile of the transcript (lookup key, not ownership)")

    sentiment: Sentiment
    emotions: List[Emotion] = Field(default_factory=list)
    key_topics: List[KeyTopic] = Field(default_factory=list)
    communication_metrics: CommunicationMetrics = Field(default_factory=CommunicationMetrics)
    customer_satisfaction: CustomerSatisfaction = Field(default_factory=CustomerSatisfaction)
    issue_resolution: IssueResolution = Field(default_factory=IssueResolution)
    compliance: Compliance = Field(default_factory=Compliance)
    summary: str = Field(min_length=1)
    processing_time: int = Field(default=0, description="LLM latency in milliseconds")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "analyses"
        indexes = [
            IndexModel([("transcript_id", 1)], unique=True),
            "audio_file_id",
            "sentiment.overall",
            IndexModel([("customer_satisfaction.score", DESCENDING)]),
            IndexModel([("created_at", DESCENDING)]),
        ]
