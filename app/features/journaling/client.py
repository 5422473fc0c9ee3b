"""
Reflection Service Client.

Posts ``{"prompt": ...}`` to the backend reflection endpoint and returns the
``result`` text. Any failure (transport error, timeout, non-2xx status,
payload without a string ``result``) is raised as ServiceError.

Retries are off by default (``max_attempts=1``). With more attempts, only
transport errors, timeouts and 5xx responses are retried, with a fixed
backoff between attempts.
"""

import asyncio
import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.logging_utils import preview
from app.features.journaling.exceptions import ServiceError
from app.services.http_client import HTTPClientManager
from app.shared.correlation import propagate_correlation_headers

logger = logging.getLogger("Journal.ReflectionClient")


class _RetryableError(ServiceError):
    pass


class ReflectionClient:
    """Async client for the ``POST /api/journal`` reflection endpoint."""

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        http: Optional[HTTPClientManager] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
    ):
        self.endpoint_url = endpoint_url or settings.JOURNAL_API_URL
        self.http = http or HTTPClientManager(default_timeout=settings.REFLECTION_TIMEOUT_SECONDS)
        self.max_attempts = max(1, settings.REFLECTION_MAX_ATTEMPTS if max_attempts is None else max_attempts)
        self.backoff_seconds = (
            settings.REFLECTION_RETRY_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        )

    async def reflect(self, prompt: str) -> str:
        """Return the generated reflection for ``prompt``."""
        last_error: Optional[ServiceError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._request(prompt)
            except _RetryableError as exc:
                last_error = exc
                if attempt < self.max_attempts:
                    logger.warning(
                        "Reflection attempt %s/%s failed: %s",
                        attempt,
                        self.max_attempts,
                        exc,
                    )
                    await asyncio.sleep(self.backoff_seconds)

        logger.error("Reflection request failed: %s", last_error)
        raise ServiceError(str(last_error), status_code=last_error.status_code) from last_error

    async def _request(self, prompt: str) -> str:
        client = await self.http.get_client()
        logger.debug("Posting entry to %s: %s", self.endpoint_url, preview(prompt))

        try:
            response = await client.post(
                self.endpoint_url,
                json={"prompt": prompt},
                headers=propagate_correlation_headers(),
            )
        except httpx.TimeoutException as exc:
            raise _RetryableError(f"Reflection request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise _RetryableError(f"Reflection request failed: {exc}") from exc

        if response.status_code >= 500:
            raise _RetryableError(
                f"Reflection endpoint returned {response.status_code}",
                status_code=response.status_code,
            )
        if not response.is_success:
            logger.error("Reflection endpoint returned %s", response.status_code)
            raise ServiceError(
                f"Reflection endpoint returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Reflection endpoint returned a non-JSON body")
            raise ServiceError("Reflection endpoint returned a non-JSON body") from exc

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, str):
            logger.error("Reflection payload has no result text")
            raise ServiceError("Reflection payload has no result text")

        return result

    async def aclose(self) -> None:
        await self.http.shutdown()
