"""
Unit tests for the prompt builders and the LLM analysis/coaching services.
"""

import pytest

from callcoach_backend.exceptions import UpstreamProviderError
from callcoach_backend.prompts import build_analysis_prompt, build_coaching_prompt
from callcoach_backend.services.insights import (
    InvalidModelResponse,
    analyze_transcript,
    generate_coaching_plan,
    validate_analysis_response,
    validate_coaching_response,
)
from conftest import ANALYSIS_RESPONSE, COACHING_RESPONSE, FakeLLMClient


class TestPrompts:
    def test_analysis_prompt_embeds_transcript(self):
        prompt = build_analysis_prompt('He said "refund" twice')

        assert '"He said \\"refund\\" twice"' in prompt
        assert '"keyTopics"' in prompt
        assert "sentiment.overall and sentiment.score fields are REQUIRED" in prompt

    def test_coaching_prompt_names_agent(self):
        prompt = build_coaching_prompt({"summary": "Refund call"}, "agent_007")

        assert "for agent agent_007" in prompt
        assert '"agentId": "agent_007"' in prompt
        assert '"summary": "Refund call"' in prompt
        assert "needs_improvement" in prompt


class TestValidation:
    def test_analysis_accepts_zero_score(self):
        validate_analysis_response({"sentiment": {"overall": "neutral", "score": 0}, "summary": "ok"})

    @pytest.mark.parametrize(
        "response",
        [
            {},
            {"sentiment": "positive", "summary": "ok"},
            {"sentiment": {"overall": "positive", "score": 0.5}},
            {"sentiment": {"overall": "positive", "score": 0.5}, "summary": "   "},
        ],
    )
    def test_analysis_rejects(self, response):
        with pytest.raises(InvalidModelResponse):
            validate_analysis_response(response)

    def test_coaching_accepts_zero_score(self):
        validate_coaching_response({"agentId": "a", "overallPerformance": {"score": 0, "level": "poor"}})

    @pytest.mark.parametrize(
        "response",
        [
            {"overallPerformance": {"score": 50, "level": "average"}},
            {"agentId": "a"},
            {"agentId": "a", "overallPerformance": {"score": 50}},
            {"agentId": "a", "overallPerformance": {"level": "average"}},
        ],
    )
    def test_coaching_rejects(self, response):
        with pytest.raises(InvalidModelResponse):
            validate_coaching_response(response)


class TestAnalyzeTranscript:
    async def test_returns_snake_case_payload(self):
        client = FakeLLMClient()

        payload = await analyze_transcript(client, "Hello")

        assert payload["sentiment"] == ANALYSIS_RESPONSE["sentiment"]
        assert payload["issue_resolution"]["was_resolved"] is True
        assert payload["communication_metrics"]["speaking_rate"] == 140
        assert isinstance(payload["processing_time"], int)

    async def test_unexpected_keys_are_dropped(self):
        client = FakeLLMClient()
        client.analysis_response["modelNotes"] = "ignore me"

        payload = await analyze_transcript(client, "Hello")

        assert "model_notes" not in payload

    async def test_unconfigured_client(self):
        with pytest.raises(UpstreamProviderError, match="OpenAI API key not configured"):
            await analyze_transcript(None, "Hello")

    async def test_non_object_response(self):
        client = FakeLLMClient()
        client.analysis_response = ["not", "an", "object"]

        with pytest.raises(UpstreamProviderError) as exc_info:
            await analyze_transcript(client, "Hello")

        assert exc_info.value.error == "LLM Analysis failed: Invalid analysis response: expected a JSON object"


class TestGenerateCoachingPlan:
    async def test_agent_id_is_not_part_of_payload(self):
        client = FakeLLMClient()

        payload = await generate_coaching_plan(client, {"summary": "x"}, "agent_007")

        assert "agent_id" not in payload
        assert payload["overall_performance"] == COACHING_RESPONSE["overallPerformance"]
        assert payload["follow_up_plan"]["next_review_date"] == "2026-11-02T00:00:00Z"
        assert "agent_007" in client.prompts[0]

    async def test_client_error_is_wrapped(self):
        client = FakeLLMClient()
        client.error = TimeoutError("read timed out")

        with pytest.raises(UpstreamProviderError) as exc_info:
            await generate_coaching_plan(client, {}, "agent_001")

        assert exc_info.value.error == "Coaching plan generation failed: read timed out"
