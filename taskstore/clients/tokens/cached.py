"""Caching wrapper around a token retriever."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .base import TokenFetchingError, TokenRetriever, UnableToFetchNewTokenError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class CachedToken:
    value: str
    expires_at: datetime


class CachedAccessTokenProvider:
    """
    Reuse a retrieved token until shortly before it expires.

    Concurrent callers that find the cache stale share one in-flight refresh
    instead of each hitting the token endpoint. The cache and the in-flight
    handle are only touched between awaits, so the event loop serializes
    every read and write. A refresh that fails or is cancelled leaves the
    cache as it was and the next call starts a new one.
    """

    EXPIRY_LEEWAY = timedelta(seconds=60)

    def __init__(
        self,
        token_retriever: TokenRetriever,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._retriever = token_retriever
        self._clock = clock or _utcnow
        self._cached: CachedToken | None = None
        self._refresh_task: asyncio.Task[CachedToken] | None = None

    def _is_valid(self, cached: CachedToken | None) -> bool:
        return cached is not None and self._clock() + self.EXPIRY_LEEWAY < cached.expires_at

    async def get_token(self) -> Optional[str]:
        if self._is_valid(self._cached):
            return self._cached.value  # type: ignore[union-attr]

        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.create_task(self._refresh())
            task.add_done_callback(_consume_exception)
            self._refresh_task = task

        # Shielded so that one caller being cancelled does not abort the
        # refresh the other callers are waiting on.
        refreshed = await asyncio.shield(task)
        return refreshed.value

    async def _refresh(self) -> CachedToken:
        try:
            token = await self._retriever.fetch_token()
        except TokenFetchingError as exc:
            logger.warning("Access token refresh failed: %s", exc)
            raise UnableToFetchNewTokenError(exc) from exc
        except Exception as exc:
            logger.exception("Token retriever raised an unexpected error")
            raise UnableToFetchNewTokenError(exc) from exc

        candidate = CachedToken(
            value=token.access_token,
            expires_at=self._clock() + timedelta(seconds=token.expires_in),
        )
        current = self._cached
        if (
            current is not None
            and candidate.expires_at < current.expires_at
            and self._is_valid(current)
        ):
            logger.debug("Keeping cached token that outlives the fetched one")
        else:
            self._cached = candidate
        logger.debug("Cached access token until %s", self._cached.expires_at.isoformat())
        return self._cached


def _consume_exception(task: asyncio.Task) -> None:
    # Mark the outcome as retrieved when every waiter was cancelled.
    if not task.cancelled():
        task.exception()


__all__ = ["CachedAccessTokenProvider", "CachedToken"]
