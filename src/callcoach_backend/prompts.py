"""
Prompt templates for the analysis and coaching stages.

Both prompts spell out the exact JSON shape expected back; the model is called
in JSON response mode and the required fields are re-checked on return.
"""

import json

ANALYSIS_RESPONSE_SHAPE = """{
  "sentiment": {
    "overall": "positive|neutral|negative",
    "score": <number between -1 and 1>,
    "confidence": <number between 0 and 1>
  },
  "emotions": [
    {
      "emotion": "joy|sadness|anger|fear|surprise|disgust|neutral",
      "intensity": <number between 0 and 1>
    }
  ],
  "keyTopics": [
    {
      "topic": "<topic name>",
      "relevance": <number between 0 and 1>
    }
  ],
  "communicationMetrics": {
    "speakingRate": <words per minute>,
    "pauseFrequency": <pauses per minute>,
    "interruptionCount": <number>,
    "clarityScore": <number between 0 and 1>
  },
  "customerSatisfaction": {
    "score": <number between 1 and 10>,
    "indicators": ["<indicator1>", "<indicator2>"]
  },
  "issueResolution": {
    "wasResolved": <boolean>,
    "resolutionTime": <minutes>,
    "escalationNeeded": <boolean>
  },
  "compliance": {
    "score": <number between 0 and 1>,
    "violations": ["<violation1>"],
    "recommendations": ["<recommendation1>"]
  },
  "summary": "<comprehensive summary of the conversation>"
}"""

COACHING_RESPONSE_SHAPE = """{
  "agentId": %(agent_id)s,
  "overallPerformance": {
    "score": <number between 0 and 100>,
    "level": "excellent|good|average|needs_improvement|poor"
  },
  "strengths": [
    {
      "area": "<strength area>",
      "description": "<description>",
      "examples": ["<example1>", "<example2>"]
    }
  ],
  "improvementAreas": [
    {
      "area": "<improvement area>",
      "priority": "high|medium|low",
      "description": "<description>",
      "currentPerformance": "<current state>",
      "targetPerformance": "<desired state>"
    }
  ],
  "actionItems": [
    {
      "title": "<action title>",
      "description": "<description>",
      "category": "communication|technical|product_knowledge|soft_skills|compliance",
      "priority": "high|medium|low",
      "estimatedTime": "<time estimate>",
      "resources": ["<resource1>", "<resource2>"],
      "successMetrics": ["<metric1>", "<metric2>"]
    }
  ],
  "trainingRecommendations": [
    {
      "title": "<training title>",
      "type": "course|workshop|mentoring|practice|reading",
      "description": "<description>",
      "duration": "<duration>",
      "priority": "high|medium|low"
    }
  ],
  "followUpPlan": {
    "nextReviewDate": "<ISO date string 2 weeks from now>",
    "milestones": [
      {
        "description": "<milestone description>",
        "targetDate": "<ISO date string>",
        "metrics": ["<metric1>", "<metric2>"]
      }
    ]
  },
  "customNotes": "<personalized notes and recommendations>"
}"""


def build_analysis_prompt(transcript_text: str) -> str:
    return (
        "Analyze the following contact center transcript and provide a structured "
        "JSON output with EXACTLY this format:\n\n"
        f"{ANALYSIS_RESPONSE_SHAPE}\n\n"
        f"Transcript: {json.dumps(transcript_text, ensure_ascii=False)}\n\n"
        "IMPORTANT: Ensure ALL required fields are present and the JSON is valid. "
        "The sentiment.overall and sentiment.score fields are REQUIRED."
    )


def build_coaching_prompt(analysis_payload: dict, agent_id: str) -> str:
    """Build the coaching prompt from a camelCase analysis payload."""
    shape = COACHING_RESPONSE_SHAPE % {"agent_id": json.dumps(agent_id)}
    return (
        f"Based on the following contact center call analysis for agent {agent_id}, "
        "generate a comprehensive coaching plan in JSON format with EXACTLY this structure:\n\n"
        f"{shape}\n\n"
        f"Analysis: {json.dumps(analysis_payload, indent=2, default=str)}\n\n"
        "IMPORTANT: Ensure ALL required fields are present and the JSON is valid. "
        "The agentId, overallPerformance.score, and overallPerformance.level fields are REQUIRED."
    )
