"""
Perplexity Sonar API client.

Sends chat completion requests with aiohttp and converts the reply into a
``LearningResponse``. Transient failures (connection errors, timeouts,
408/429/5xx) are retried with exponential backoff.
"""

import structlog
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from learnsphere.src.config import Settings, get_settings
from learnsphere.src.models.learning import Citation, LearningResponse
from learnsphere.src.services.prompts import Prompt
from learnsphere.src.utils.retry import RetryConfig, RetryMetrics, retry_with_backoff

logger = structlog.get_logger(__name__)

COMPLETIONS_PATH = "/v1/chat/completions"


class SonarAPIError(Exception):
    """Non-success HTTP response from the Sonar API."""

    def __init__(self, status: int, message: str):
        super().__init__(f"Sonar API returned {status}: {message}")
        self.status = status
        self.message = message


def format_response(payload: Dict[str, Any]) -> LearningResponse:
    """
    Convert a raw Sonar reply into a LearningResponse.

    Args:
        payload: Decoded JSON body with ``text``, ``citations`` and ``follow_ups``

    Returns:
        Formatted response; a malformed payload keeps only its text
    """
    try:
        citations = [
            Citation(
                id=citation.get("id"),
                title=citation.get("title"),
                url=citation.get("url"),
                snippet=citation.get("snippet"),
                published_date=citation.get("published_date"),
            )
            for citation in payload.get("citations") or []
        ]
        follow_ups = [question["text"] for question in payload.get("follow_ups") or []]
        return LearningResponse(
            content=payload["text"],
            citations=citations,
            follow_up_questions=follow_ups,
            timestamp=datetime.now(timezone.utc),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error("sonar_response_format_failed", error=str(e))
        text = payload.get("text") if isinstance(payload, dict) else None
        return LearningResponse(content=text or "No content available")


class SonarClient:
    """Async client for the Sonar chat completions endpoint."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize Sonar client.

        Args:
            settings: Settings override (defaults to the cached settings)
            session: Existing aiohttp session; one is created on first use otherwise
        """
        self.settings = settings or get_settings()
        self._session = session
        self._owns_session = session is None
        self.metrics = RetryMetrics()
        self.retry_config = RetryConfig(max_attempts=self.settings.sonar_retry_attempts)

    @property
    def url(self) -> str:
        return f"{self.settings.perplexity_api_url}{COMPLETIONS_PATH}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.sonar_timeout_seconds)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.settings.sonar_api_key}",
            "Content-Type": "application/json",
        }
        async with self._get_session().post(self.url, json=body, headers=headers) as response:
            if response.status >= 400:
                message = await response.text()
                raise SonarAPIError(response.status, message[:500])
            return await response.json(content_type=None)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        temperature: float,
        follow_ups: bool = True,
        context: Optional[List[Any]] = None,
    ) -> LearningResponse:
        """
        Send one chat completion request.

        Args:
            messages: Chat messages (system first)
            max_tokens: Response token limit
            temperature: Sampling temperature
            follow_ups: Ask Sonar for suggested follow-up questions
            context: Earlier queries forwarded as conversation context

        Returns:
            Formatted response

        Raises:
            SonarAPIError: On a non-retryable HTTP error or after retries
            aiohttp.ClientError: On connection failure after retries
        """
        body: Dict[str, Any] = {
            "messages": messages,
            "model": self.settings.sonar_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "follow_ups": follow_ups,
            "include_citations": True,
        }
        if context is not None:
            body["context"] = context

        post = retry_with_backoff(config=self.retry_config, metrics=self.metrics)(self._post)
        payload = await post(body)

        logger.info(
            "sonar_completion_received",
            model=self.settings.sonar_model,
            messages=len(messages),
            citations=len(payload.get("citations") or []) if isinstance(payload, dict) else 0
        )
        return format_response(payload if isinstance(payload, dict) else {})

    async def ask(self, prompt: Prompt, context: Optional[List[Any]] = None) -> LearningResponse:
        """Answer a learning query."""
        return await self.complete(
            messages=_messages(prompt),
            max_tokens=self.settings.sonar_max_tokens,
            temperature=self.settings.sonar_temperature,
            context=context or [],
        )

    async def ask_follow_up(self, prompt: Prompt, previous_messages: List[Dict[str, str]]) -> LearningResponse:
        """Answer a follow-up question with the earlier conversation attached."""
        messages = _messages(prompt)
        messages[-1:-1] = previous_messages
        return await self.complete(
            messages=messages,
            max_tokens=self.settings.sonar_max_tokens,
            temperature=self.settings.sonar_temperature,
        )

    async def generate_learning_path(self, prompt: Prompt) -> LearningResponse:
        """Generate a learning path (longer, lower temperature, no follow-ups)."""
        return await self.complete(
            messages=_messages(prompt),
            max_tokens=self.settings.sonar_learning_path_max_tokens,
            temperature=self.settings.sonar_learning_path_temperature,
            follow_ups=False,
        )


def _messages(prompt: Prompt) -> List[Dict[str, str]]:
    messages = []
    if prompt.system_prompt:
        messages.append({"role": "system", "content": prompt.system_prompt})
    messages.append({"role": "user", "content": prompt.text})
    return messages
