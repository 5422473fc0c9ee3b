"""LLM-backed reflection generation for journal entries."""

from __future__ import annotations

import logging
import time
from typing import Optional

from anthropic import Anthropic

from app.core.config import settings
from app.core.logging_utils import preview
from app.shared.constants import ECHO_TEMPLATE, PROVIDER_ANTHROPIC, PROVIDER_ECHO, REFLECTION_PROVIDERS

logger = logging.getLogger("Journal.Intelligence.LLM")


class ClaudeReflector:
    """Turn a journal entry into a short reflection using Claude."""

    name = PROVIDER_ANTHROPIC

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        fallback_text: Optional[str] = None,
        client: Optional[Anthropic] = None,
    ) -> None:
        self.client = client or Anthropic(api_key=api_key or settings.ANTHROPIC_API_KEY)
        self.model = model or settings.CLAUDE_MODEL
        self.max_tokens = max_tokens or settings.CLAUDE_MAX_TOKENS
        self.fallback_text = fallback_text if fallback_text is not None else settings.REFLECTION_FALLBACK_TEXT

        logger.info("Claude reflector initialized with model %s", self.model)

    def reflect(self, prompt: str) -> str:
        """
        Ask Claude for a reflection on ``prompt``.

        API errors propagate to the caller. A well-formed response without
        any text yields the fallback text instead.
        """
        logger.info("Requesting reflection for entry: %s", preview(prompt))
        started = time.monotonic()

        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )

        duration_ms = int((time.monotonic() - started) * 1000)
        text = self._first_text(response)
        if not text:
            logger.warning("Model %s returned no text, using fallback", self.model)
            return self.fallback_text

        logger.info(
            "Reflection generated with model %s in %sms: %s",
            self.model,
            duration_ms,
            preview(text),
        )
        return text

    @staticmethod
    def _first_text(response) -> Optional[str]:
        """Text of the first content block, or None."""
        content = getattr(response, "content", None) or []
        if not content:
            return None
        return getattr(content[0], "text", None)


class EchoReflector:
    """Offline reflector that echoes the entry back without calling a model."""

    name = PROVIDER_ECHO

    def reflect(self, prompt: str) -> str:
        logger.debug("Echo reflection for entry: %s", preview(prompt))
        return ECHO_TEMPLATE.format(prompt=prompt)


def build_reflector(provider: Optional[str] = None):
    """Reflector for the configured provider."""
    provider = (provider or settings.REFLECTION_PROVIDER).lower()
    if provider not in REFLECTION_PROVIDERS:
        raise ValueError(
            f"Unknown reflection provider: {provider} (expected one of {', '.join(sorted(REFLECTION_PROVIDERS))})"
        )
    if provider == PROVIDER_ECHO:
        return EchoReflector()
    return ClaudeReflector()
