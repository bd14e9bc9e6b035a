"""
Mirror store HTTP client.

Upserts row snapshots into a Supabase project through its PostgREST API
so real-time subscribers see job, file and knowledge-base changes.

Dependencies: httpx, tenacity, backend.configs
System role: Outbound mirror delivery
"""

import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from backend.configs import MirrorSettings

logger = logging.getLogger(__name__)


class MirrorClient:
    """
    Thin PostgREST upsert client.

    Transport failures are retried with jittered backoff; HTTP error statuses
    are raised to the caller as httpx.HTTPStatusError.
    """

    def __init__(
        self,
        settings: MirrorSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not settings.url:
            raise ValueError("Mirror URL is not configured")
        self.base_url = settings.url.rstrip("/")
        self.timeout = settings.timeout_seconds
        self._headers = {
            "Content-Type": "application/json",
            "Prefer": "resolution=merge-duplicates,return=minimal",
        }
        if settings.api_key:
            self._headers["apikey"] = settings.api_key
            self._headers["Authorization"] = f"Bearer {settings.api_key}"
        self._transport = transport

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=0.5, max=5, jitter=1),
        before_sleep=lambda retry_state: logger.warning(
            f"{__name__}:upsert - Retry {retry_state.attempt_number}/3 after transport error"
        ),
        reraise=True,
    )
    async def upsert(self, table: str, row: dict[str, Any]) -> None:
        """
        Insert or merge one row keyed on id.

        Args:
            table: Mirror table name
            row: Row snapshot

        Raises:
            httpx.HTTPStatusError: Mirror rejected the row
            httpx.TransportError: Mirror unreachable after retries
        """
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers,
            transport=self._transport,
        ) as client:
            response = await client.post(
                f"{self.base_url}/rest/v1/{table}",
                params={"on_conflict": "id"},
                json=row,
            )
            response.raise_for_status()
