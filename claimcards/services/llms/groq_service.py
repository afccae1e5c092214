"""
Groq chat client for structured replies.

Every call runs in JSON mode and the reply is validated against a pydantic
schema, so callers receive a typed model or an exception, never a raw dict.
"""

import asyncio
import json
import re
from typing import Any, Dict, Optional, Type, TypeVar

from groq import AsyncGroq, RateLimitError
from pydantic import BaseModel, ValidationError

from claimcards.constants.config import (
    GROQ_BASE_BACKOFF_SECONDS,
    GROQ_MAX_BACKOFF_SECONDS,
    GROQ_MAX_RETRIES,
    LLM_TEMPERATURE,
)
from claimcards.core.config import settings
from claimcards.core.logger import get_logger

logger = get_logger(__name__)

ReplyT = TypeVar("ReplyT", bound=BaseModel)

_RETRY_AFTER_RE = re.compile(r"Please try again in ([0-9.]+)s")


class LLMReplyError(ValueError):
    """The model's reply was not a JSON object."""


class GroqService:
    def __init__(self, model: Optional[str] = None, max_retries: int = GROQ_MAX_RETRIES) -> None:
        api_key = settings.GROQ_API_KEY
        if not api_key:
            raise RuntimeError("Missing GROQ_API_KEY")

        self.client = AsyncGroq(api_key=api_key)
        self.model = model or settings.LLM_MODEL_NAME
        self.max_retries = max_retries

    @staticmethod
    def _is_rate_limited(error: Exception) -> bool:
        return isinstance(error, RateLimitError) or "429" in str(error)

    @staticmethod
    def _retry_after(error: Exception) -> float | None:
        """Server-suggested wait: `retry-after` header first, then the message hint."""
        response = getattr(error, "response", None)
        header = response.headers.get("retry-after") if response is not None else None
        if header:
            try:
                return float(header)
            except ValueError:
                pass
        match = _RETRY_AFTER_RE.search(str(error))
        return float(match.group(1)) if match else None

    def _backoff(self, attempt: int, error: Exception) -> float:
        retry_after = self._retry_after(error)
        if retry_after is not None:
            return min(retry_after, GROQ_MAX_BACKOFF_SECONDS)
        return min(GROQ_BASE_BACKOFF_SECONDS * (2**attempt), GROQ_MAX_BACKOFF_SECONDS)

    async def _complete_json(self, prompt: str) -> str:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": LLM_TEMPERATURE,
            "response_format": {"type": "json_object"},
        }

        attempt = 0
        while True:
            try:
                response = await self.client.chat.completions.create(**kwargs)
                return response.choices[0].message.content or ""
            except Exception as e:
                if not self._is_rate_limited(e) or attempt >= self.max_retries:
                    logger.error(f"[GroqService] Groq call failed after {attempt + 1} attempt(s): {e}")
                    raise

                wait_time = self._backoff(attempt, e)
                attempt += 1
                logger.warning(
                    f"[GroqService] Rate limit hit. Retrying in {wait_time:.1f}s "
                    f"(attempt {attempt}/{self.max_retries})"
                )
                await asyncio.sleep(wait_time)

    async def ainvoke_json(self, prompt: str, schema: Type[ReplyT]) -> ReplyT:
        """
        Ask for a JSON object and validate it against `schema`.

        An empty reply validates as `{}`, so schemas with required fields reject it.

        Raises:
            LLMReplyError: reply is not a JSON object
            pydantic.ValidationError: reply doesn't match `schema`
            Exception: transport errors, and 429s once retries run out
        """
        content = await self._complete_json(prompt)

        try:
            data = json.loads(content) if content.strip() else {}
        except json.JSONDecodeError as e:
            logger.error(f"[GroqService] Non-JSON reply from {self.model}: {content[:200]!r}")
            raise LLMReplyError(f"Model reply is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise LLMReplyError(f"Expected a JSON object, got {type(data).__name__}")

        try:
            return schema.model_validate(data)
        except ValidationError as e:
            logger.warning(f"[GroqService] Reply does not match {schema.__name__}: {e.error_count()} error(s)")
            raise
