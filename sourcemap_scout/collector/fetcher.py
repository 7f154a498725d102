# sourcemap_scout/collector/fetcher.py
"""
Fetcher module: HTTP GET with retry/backoff and per-request timeout.
"""
from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from aiohttp import ClientError, ClientSession

from sourcemap_scout.config import AuditConfig
from sourcemap_scout.logger import logger

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)


class FetchError(Exception):
    """Resource could not be fetched at the transport level."""


@dataclass(slots=True)
class FetchResult:
    """Status, headers and body of a response. ``text`` is only set for 200 OK."""

    url: str
    status: int
    text: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == 200 and self.text is not None


class Fetcher:
    """Handles HTTP fetching with retries/backoff and timeout."""

    def __init__(
        self,
        session: ClientSession,
        config: AuditConfig,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.session = session
        self.config = config
        self._retry_status = retry_status

    async def fetch(self, url: str) -> FetchResult:
        """
        GET *url* and return a FetchResult for any HTTP status.

        Raises FetchError on timeout, or when transport errors / retryable
        statuses persist after ``config.retry_times`` retries.
        """
        attempts = 0
        while True:
            try:
                async with self.session.get(url, raise_for_status=False) as resp:
                    if resp.status in self._retry_status:
                        raise ClientError(f"Retryable status {resp.status}")
                    headers = {k: v for k, v in resp.headers.items()}
                    if resp.status != 200:
                        return FetchResult(str(resp.url), resp.status, None, headers)
                    text = await resp.text(errors="replace")
                    return FetchResult(str(resp.url), resp.status, text, headers)
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise FetchError(f"timed out fetching {url}") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    raise FetchError(str(exc) or type(exc).__name__) from exc
                backoff = min(60, 2**attempts + random.random())
                logger.debug(
                    "Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff
                )
                await asyncio.sleep(backoff)


__all__ = ["Fetcher", "FetchError", "FetchResult", "RETRY_STATUS"]
