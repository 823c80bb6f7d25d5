"""
LLM-backed analysis and coaching generation.

Both functions call the language model in JSON mode, check the required fields,
and return snake_case payloads ready to be mapped onto the document models.
Any failure is raised as ``UpstreamProviderError``; nothing is persisted here.
"""

import logging
import time

from callcoach_backend.exceptions import UpstreamProviderError
from callcoach_backend.llm_client import LLMClient, async_generate_json
from callcoach_backend.prompts import build_analysis_prompt, build_coaching_prompt
from callcoach_backend.utils.casing import snake_case_keys

logger = logging.getLogger(__name__)

ANALYSIS_FIELDS = (
    "sentiment",
    "emotions",
    "key_topics",
    "communication_metrics",
    "customer_satisfaction",
    "issue_resolution",
    "compliance",
    "summary",
)

COACHING_FIELDS = (
    "overall_performance",
    "strengths",
    "improvement_areas",
    "action_items",
    "training_recommendations",
    "follow_up_plan",
    "custom_notes",
)


class InvalidModelResponse(ValueError):
    """The model answered, but without the fields the pipeline needs."""


def _pick(payload: dict, fields: tuple) -> dict:
    # Drop blocks the model left null so model defaults apply
    return {name: payload[name] for name in fields if payload.get(name) is not None}


def validate_analysis_response(result: dict) -> None:
    sentiment = result.get("sentiment")
    if (
        not isinstance(sentiment, dict)
        or not sentiment.get("overall")
        or sentiment.get("score") is None
    ):
        raise InvalidModelResponse(
            "Invalid analysis response: missing required sentiment fields (overall and score)"
        )
    summary = result.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise InvalidModelResponse("Invalid analysis response: missing required summary field")


def validate_coaching_response(result: dict) -> None:
    if not result.get("agentId"):
        raise InvalidModelResponse("Invalid coaching plan response: missing required agentId field")
    performance = result.get("overallPerformance")
    if (
        not isinstance(performance, dict)
        or performance.get("score") is None
        or not performance.get("level")
    ):
        raise InvalidModelResponse(
            "Invalid coaching plan response: missing required overallPerformance fields (score and level)"
        )


async def analyze_transcript(llm_client: LLMClient | None, transcript_text: str) -> dict:
    """
    Run the sentiment/behaviour analysis for a transcript.

    Returns:
        snake_case analysis fields plus ``processing_time`` in milliseconds.

    Raises:
        UpstreamProviderError: LLM not configured, call failed, or required fields missing.
    """
    if llm_client is None:
        raise UpstreamProviderError(
            message="Analysis failed",
            error="LLM Analysis failed: OpenAI API key not configured. Please set OPENAI_API_KEY",
        )

    start_time = time.monotonic()
    logger.info(f"🧠 Analyzing transcript with {llm_client.get_default_model()} ({len(transcript_text)} characters)")

    try:
        result = await async_generate_json(llm_client, build_analysis_prompt(transcript_text))
        if not isinstance(result, dict):
            raise InvalidModelResponse("Invalid analysis response: expected a JSON object")
        validate_analysis_response(result)
    except Exception as e:
        processing_time = int((time.monotonic() - start_time) * 1000)
        logger.error(f"❌ LLM analysis failed after {processing_time}ms: {e}")
        raise UpstreamProviderError(message="Analysis failed", error=f"LLM Analysis failed: {e}") from e

    processing_time = int((time.monotonic() - start_time) * 1000)
    logger.info(f"✅ Analysis completed in {processing_time}ms")

    payload = _pick(snake_case_keys(result), ANALYSIS_FIELDS)
    payload["processing_time"] = processing_time
    return payload


async def generate_coaching_plan(llm_client: LLMClient | None, analysis_payload: dict, agent_id: str) -> dict:
    """
    Generate a coaching plan from a camelCase analysis payload.

    The returned dict is snake_case and does not include ``agent_id``; the
    caller persists the agent it was asked for.
    """
    if llm_client is None:
        raise UpstreamProviderError(
            message="Coaching plan generation failed",
            error="Coaching plan generation failed: OpenAI API key not configured. Please set OPENAI_API_KEY",
        )

    start_time = time.monotonic()
    logger.info(f"🎯 Generating coaching plan for agent {agent_id}")

    try:
        result = await async_generate_json(llm_client, build_coaching_prompt(analysis_payload, agent_id))
        if not isinstance(result, dict):
            raise InvalidModelResponse("Invalid coaching plan response: expected a JSON object")
        validate_coaching_response(result)
    except Exception as e:
        processing_time = int((time.monotonic() - start_time) * 1000)
        logger.error(f"❌ Coaching plan generation failed after {processing_time}ms: {e}")
        raise UpstreamProviderError(
            message="Coaching plan generation failed",
            error=f"Coaching plan generation failed: {e}",
        ) from e

    processing_time = int((time.monotonic() - start_time) * 1000)
    logger.info(f"✅ Coaching plan generated in {processing_time}ms")

    payload = _pick(snake_case_keys(result), COACHING_FIELDS)
    payload["processing_time"] = processing_time
    return payload
