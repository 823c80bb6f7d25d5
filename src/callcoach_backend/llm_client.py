"""
Abstract LLM client interface for the analysis and coaching stages.

This module provides a standardized interface for JSON-mode LLM calls that works
with OpenAI and other OpenAI-compatible APIs.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Dict

from fastapi import Request
from openai import OpenAI

from callcoach_backend.app_config import get_app_config

logger = logging.getLogger(__name__)


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    def __init__(self, model: str | None = None, temperature: float = 0.7):
        self.model = model
        self.temperature = temperature
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def generate_json(self, prompt: str, system_prompt: str | None = None) -> dict:
        """Generate a completion in JSON mode and return the decoded object."""
        pass

    @abstractmethod
    def health_check(self) -> Dict:
        """Check if the LLM service is available and healthy."""
        pass

    @abstractmethod
    def get_default_model(self) -> str:
        """Get the default model for this client."""
        pass


class OpenAILLMClient(LLMClient):
    """OpenAI-compatible LLM client."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        temperature: float = 0.7,
    ):
        super().__init__(model, temperature)
        config = get_app_config()
        self.api_key = api_key or config.openai_api_key
        self.base_url = base_url or config.openai_base_url
        self.model = model or config.openai_model
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY must be set")

        self.client = OpenAI(api_key=self.api_key, base_url=self.base_url)
        self.logger.info(f"OpenAI client initialized with base_url: {self.base_url}")

    def generate_json(self, prompt: str, system_prompt: str | None = None) -> dict:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content
        if not content:
            raise ValueError("Empty response from language model")
        return json.loads(content)

    def health_check(self) -> Dict:
        """Check OpenAI-compatible service health by listing models."""
        try:
            self.client.models.list()
            return {
                "connected": True,
                "configured": True,
                "base_url": self.base_url,
                "default_model": self.model,
            }
        except Exception as e:
            self.logger.error(f"Health check failed: {e}")
            return {
                "connected": False,
                "configured": True,
                "error": str(e),
                "base_url": self.base_url,
                "default_model": self.model,
            }

    def get_default_model(self) -> str:
        return self.model or "gpt-4o-mini"


class LLMClientFactory:
    """Factory for creating LLM clients based on configuration."""

    @staticmethod
    def create_client() -> LLMClient | None:
        """Create the OpenAI client, or None when no API key is configured."""
        config = get_app_config()
        if not config.openai_configured:
            logger.warning("OPENAI_API_KEY not configured, analysis and coaching are disabled")
            return None
        return OpenAILLMClient(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            model=config.openai_model,
            temperature=config.llm_temperature,
        )


async def get_llm_client_dependency(request: Request) -> LLMClient | None:
    """FastAPI dependency returning the LLM client built at startup (None when unconfigured)."""
    return getattr(request.app.state, "llm_client", None)


# Async wrappers for blocking LLM operations
async def async_generate_json(client: LLMClient, prompt: str, system_prompt: str | None = None) -> dict:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, client.generate_json, prompt, system_prompt)


async def async_health_check(client: LLMClient) -> Dict:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, client.health_check)
