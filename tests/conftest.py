"""Shared fixtures: in-memory MongoDB, fake providers and an ASGI test client."""

import copy
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from callcoach_backend.app_config import get_app_config
from callcoach_backend.app_factory import create_app
from callcoach_backend.database import init_database
from callcoach_backend.llm_client import LLMClient, get_llm_client_dependency
from callcoach_backend.models.transcription import (
    BaseTranscriptionProvider,
    TranscriptionProviderError,
    TranscriptionResult,
)
from callcoach_backend.services.transcription import get_transcription_provider_dependency
from callcoach_backend.services.transcription.whisper import WHISPER_LANGUAGES

ANALYSIS_RESPONSE = {
    "sentiment": {"overall": "positive", "score": 0.6, "confidence": 0.9},
    "emotions": [{"emotion": "joy", "intensity": 0.7}],
    "keyTopics": [{"topic": "billing", "relevance": 0.9}],
    "communicationMetrics": {
        "speakingRate": 140,
        "pauseFrequency": 3,
        "interruptionCount": 1,
        "clarityScore": 0.85,
    },
    "customerSatisfaction": {"score": 8, "indicators": ["thanked the agent"]},
    "issueResolution": {"wasResolved": True, "resolutionTime": 4, "escalationNeeded": False},
    "compliance": {"score": 0.95, "violations": [], "recommendations": ["confirm identity earlier"]},
    "summary": "Customer called about a duplicate charge which the agent refunded.",
}

COACHING_RESPONSE = {
    "agentId": "agent_001",
    "overallPerformance": {"score": 82, "level": "good"},
    "strengths": [{"area": "Empathy", "description": "Acknowledged frustration", "examples": ["I understand"]}],
    "improvementAreas": [
        {
            "area": "Verification",
            "priority": "medium",
            "description": "Verify identity before account changes",
            "currentPerformance": "late",
            "targetPerformance": "first minute",
        }
    ],
    "actionItems": [
        {
            "title": "Review verification script",
            "description": "Read the updated script",
            "category": "compliance",
            "priority": "high",
            "estimatedTime": "1 week",
            "resources": ["KB-102"],
            "successMetrics": ["100% verification"],
        }
    ],
    "trainingRecommendations": [
        {"title": "Compliance refresher", "type": "course", "description": "Online", "duration": "2h", "priority": "medium"}
    ],
    "followUpPlan": {
        "nextReviewDate": "2026-11-02T00:00:00Z",
        "milestones": [{"description": "Shadow session", "targetDate": "2026-10-26T00:00:00Z", "metrics": ["score"]}],
    },
    "customNotes": "Strong call overall.",
}


class FakeTranscriptionProvider(BaseTranscriptionProvider):
    """In-process STT provider returning a canned result or raising."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.error: Optional[str] = None
        self.result = TranscriptionResult(
            text="Hello, thanks for calling. I see the duplicate charge and have refunded it.",
            segments=[
                {"text": "Hello, thanks for calling.", "start": 0.0, "end": 2.0, "confidence": 0.9},
                {"text": "I see the duplicate charge and have refunded it.", "start": 2.0, "end": 6.0, "confidence": 0.8},
            ],
            language="en",
            duration=6.0,
            processing_time=12,
        )

    @property
    def name(self) -> str:
        return "fake"

    @property
    def supported_languages(self) -> List[str]:
        return WHISPER_LANGUAGES

    async def transcribe(self, file_path: Path, language: Optional[str] = None) -> TranscriptionResult:
        self.calls.append((Path(file_path), language))
        if self.error:
            raise TranscriptionProviderError(self.error)
        return copy.deepcopy(self.result)

    async def health_check(self) -> Dict:
        return {"connected": True, "configured": True}


class FakeLLMClient(LLMClient):
    """LLM client that answers analysis and coaching prompts with canned JSON."""

    def __init__(self):
        super().__init__(model="fake-model")
        self.prompts: List[str] = []
        self.analysis_response: dict = copy.deepcopy(ANALYSIS_RESPONSE)
        self.coaching_response: dict = copy.deepcopy(COACHING_RESPONSE)
        self.error: Optional[Exception] = None

    def generate_json(self, prompt: str, system_prompt: str | None = None) -> dict:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        if "coaching plan" in prompt:
            return copy.deepcopy(self.coaching_response)
        return copy.deepcopy(self.analysis_response)

    def health_check(self) -> Dict:
        return {"connected": True, "configured": True}

    def get_default_model(self) -> str:
        return "fake-model"


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    directory = tmp_path / "uploads"
    monkeypatch.setattr(get_app_config(), "upload_path", directory)
    return directory


@pytest.fixture
async def database():
    client = AsyncMongoMockClient()
    db = client["callcoach_test"]
    await init_database(db)
    yield db


@pytest.fixture
def stt_provider():
    return FakeTranscriptionProvider()


@pytest.fixture
def llm_client():
    return FakeLLMClient()


@pytest.fixture
def app(database, upload_dir, stt_provider, llm_client):
    application = create_app()
    application.dependency_overrides[get_transcription_provider_dependency] = lambda: stt_provider
    application.dependency_overrides[get_llm_client_dependency] = lambda: llm_client
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as async_client:
        yield async_client


def wav_bytes(size: int = 10 * 1024) -> bytes:
    """A ``size``-byte payload with a RIFF/WAVE header."""
    header = b"RIFF" + (size - 8).to_bytes(4, "little") + b"WAVEfmt "
    return header + b"\x00" * (size - len(header))


async def upload_wav(client: AsyncClient, name: str = "call.wav", size: int = 10 * 1024) -> dict:
    response = await client.post(
        "/api/upload",
        files={"audioFile": (name, wav_bytes(size), "audio/wav")},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def transcribe(client: AsyncClient, audio_file_id: str) -> dict:
    response = await client.post(f"/api/transcript/{audio_file_id}", json={"language": "en"})
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _no_document():
    return None


def miss_existence_check_once(monkeypatch, document_model) -> None:
    """Make the next ``find_one`` on ``document_model`` see nothing, as a racing request would."""
    original = document_model.find_one
    missed = []

    def find_one(*args, **kwargs):
        if not missed:
            missed.append(True)
            return _no_document()
        return original(*args, **kwargs)

    monkeypatch.setattr(document_model, "find_one", find_one)


async def analyze(client: AsyncClient, transcript_id: str) -> dict:
    response = await client.post(f"/api/analysis/{transcript_id}")
    assert response.status_code == 201, response.text
    return response.json()["data"]
