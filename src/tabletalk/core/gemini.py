"""
TableTalk Core - Gemini Developer API Integration.

Uses Gemini Developer API (API key) as the reasoning service.
"""

import logging
import os

from tabletalk.config import get_settings
from tabletalk.core.prompt_builder import ModelRequest
from tabletalk.core.reasoning_client import ReasoningClient
from tabletalk.exceptions import TransportError

logger = logging.getLogger(__name__)

_client = None


def _get_api_key() -> str:
    """
    Get Gemini API key.

    Resolution order:
    1. GEMINI_API_KEY environment variable
    2. Settings (.env)
    """
    api_key = os.environ.get("GEMINI_API_KEY")
    if api_key:
        logger.info("Using Gemini API key from environment variable")
        return api_key

    api_key = (get_settings().gemini.api_key or "").strip()
    if api_key:
        logger.info("Using Gemini API key from settings")
        return api_key

    raise TransportError(
        "No API key found. Set GEMINI_API_KEY environment variable.",
        service="gemini",
    )


def get_gemini_client():
    """
    Get configured Gemini client.

    Uses API key authentication (Gemini Developer API).
    """
    global _client

    if _client is not None:
        return _client

    from google import genai

    _client = genai.Client(api_key=_get_api_key())

    logger.info("Gemini client initialized with API key")
    return _client


class GeminiReasoningClient(ReasoningClient):
    """Reasoning service backed directly by Gemini."""

    def __init__(self, model: str | None = None, client=None):
        self.model = model or get_settings().gemini.model
        self._client = client

    async def complete(self, request: ModelRequest, *, session_token: str) -> str:
        # The session token authenticates the caller; Gemini itself uses the server API key.
        from google.genai import types

        client = self._client or get_gemini_client()
        config = types.GenerateContentConfig(
            system_instruction=request.system_instruction,
            temperature=request.temperature,
            max_output_tokens=request.max_output_tokens,
        )

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=request.user_prompt,
                config=config,
            )
        except Exception as e:
            logger.error(f"Gemini {request.intent.value} failed: {e}")
            raise TransportError(str(e) or None, service="gemini")

        return response.text or ""


__all__ = ["GeminiReasoningClient", "get_gemini_client"]
