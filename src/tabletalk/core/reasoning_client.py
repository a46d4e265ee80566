"""
TableTalk Core - Reasoning Service Client.

The reasoning service is an external collaborator: one operation,
complete(ModelRequest) -> raw text. Its output is untrusted and goes
through the response interpreter.

Wire contract (provider=http):
    POST {url}
    Authorization: Bearer <session token>
    {"action": <intent>, "data": {system_instruction, user_prompt, temperature, max_output_tokens}}

    2xx -> {"text": "<raw model output>"}
    non-2xx -> {"error": "<message>"}
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from tabletalk.core.prompt_builder import ModelRequest
from tabletalk.exceptions import TransportError

logger = logging.getLogger(__name__)


class ReasoningClient(ABC):
    """Interface for the external reasoning service."""

    @abstractmethod
    async def complete(self, request: ModelRequest, *, session_token: str) -> str:
        """
        Run one completion.

        Raises:
            TransportError: The call could not be completed
        """
        ...


class HttpReasoningClient(ReasoningClient):
    """Calls a remote assistant function over HTTP."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _payload(self, request: ModelRequest) -> dict[str, Any]:
        return {
            "action": request.intent.value,
            "data": {
                "system_instruction": request.system_instruction,
                "user_prompt": request.user_prompt,
                "temperature": request.temperature,
                "max_output_tokens": request.max_output_tokens,
            },
        }

    async def complete(self, request: ModelRequest, *, session_token: str) -> str:
        headers = {
            "Authorization": f"Bearer {session_token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self._transport,
            ) as client:
                r = await client.post(self.url, json=self._payload(request), headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"[reasoning] {request.intent.value} -> network error: {e}")
            raise TransportError(str(e) or None)

        try:
            body = r.json()
        except ValueError:
            body = None

        if not r.is_success:
            upstream = body.get("error") if isinstance(body, dict) else None
            logger.warning(f"[reasoning] {request.intent.value} -> {r.status_code} {upstream}")
            raise TransportError(upstream if isinstance(upstream, str) else None, status=r.status_code)

        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise TransportError("Reasoning service returned an unexpected body", status=r.status_code)
        return text


__all__ = ["HttpReasoningClient", "ReasoningClient"]
