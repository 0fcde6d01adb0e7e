# cardreco/domain/services/llm_client.py

from __future__ import annotations
from typing import Protocol
import logging
from time import monotonic as _now

from openai import AsyncOpenAI, OpenAIError

from cardreco.core.config import Settings
from cardreco.domain.errors import GenerationFailed

logger = logging.getLogger(__name__)


class TextCompleter(Protocol):
    """Opaque text-in/text-out generation capability. No format guarantees."""

    async def complete(self, prompt: str) -> str: ...


class OpenAICompleter:
    """
    TextCompleter over OpenAI chat completions.
    Single call per prompt, no retry: callers decide how to degrade.
    """

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        self.model = settings.OPENAI_CHAT_MODEL
        self.timeout_s = settings.openai_timeout_s
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self._client = client or AsyncOpenAI(api_key=settings.OPENAI_API_KEY)

    async def complete(self, prompt: str) -> str:
        t0 = _now()
        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                timeout=self.timeout_s,
            )
        except OpenAIError as e:
            raise GenerationFailed(f"completion failed model={self.model}: {e}") from e
        dt = _now() - t0

        # Best-effort usage logging
        u = getattr(resp, "usage", None)
        logger.info(
            "LLM call model=%s duration=%.3fs tokens(prompt=%s, completion=%s)",
            getattr(resp, "model", self.model), dt,
            getattr(u, "prompt_tokens", None), getattr(u, "completion_tokens", None),
        )
        if not resp.choices:
            raise GenerationFailed(f"completion returned no choices model={self.model}")
        return resp.choices[0].message.content or ""
