"""
Thin async client for the Firestore REST API.

Builds request URLs under a configured API root, attaches bearer credentials
from an access token provider and translates error responses into typed
exceptions. Response bodies are returned as decoded JSON.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import httpx
from fastapi import status

from taskstore.clients.tokens import AccessTokenProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FirestoreConfig:
    """Where and how to reach a Firestore database."""

    project_id: str
    api_root: str = "https://firestore.googleapis.com/v1"
    timeout_seconds: float = 30.0

    @property
    def documents_path(self) -> str:
        return f"/projects/{self.project_id}/databases/(default)/documents"


class FirestoreHTTPError(Exception):
    """Base class for every failure raised by ``FirestoreHTTPClient``."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message


class InvalidURLError(FirestoreHTTPError):
    pass


class UnauthorizedError(FirestoreHTTPError):
    pass


class NotFoundError(FirestoreHTTPError):
    pass


class ServerError(FirestoreHTTPError):
    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"Firestore returned HTTP {status_code}.")
        self.message = message
        self.status_code = status_code


class EncodingError(FirestoreHTTPError):
    """The request body could not be serialized."""


class DecodingError(FirestoreHTTPError):
    """The response body could not be parsed."""


class NetworkError(FirestoreHTTPError):
    """The request never produced an HTTP response."""


def extract_error_message(content: bytes) -> Optional[str]:
    """
    Pull human readable messages out of a Firestore error body.

    Firestore answers with ``{"error": {...}}`` for most calls but with a JSON
    array of such objects for streaming endpoints like ``:runQuery``.
    """
    try:
        payload = json.loads(content)
    except ValueError:
        return None

    entries = payload if isinstance(payload, list) else [payload]
    messages: List[str] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        error = entry.get("error")
        if isinstance(error, Mapping) and isinstance(error.get("message"), str):
            messages.append(error["message"])
    return ". ".join(messages) or None


class FirestoreHTTPClient:
    """Send JSON requests to the Firestore REST API."""

    def __init__(
        self,
        config: FirestoreConfig,
        token_provider: AccessTokenProvider,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._token_provider = token_provider
        self._http_client = http_client

    @property
    def config(self) -> FirestoreConfig:
        return self._config

    def build_url(self, path: str, params: Mapping[str, str] | None = None) -> httpx.URL:
        """Join the API root and ``path`` with exactly one slash between them."""
        root = self._config.api_root.rstrip("/")
        if not path.startswith("/"):
            path = f"/{path}"
        try:
            url = httpx.URL(root + path, params=dict(params) if params else None)
        except (httpx.InvalidURL, TypeError) as exc:
            raise InvalidURLError(f"Cannot build a URL from {root!r} and {path!r}.") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURLError(f"Invalid Firestore API root: {root!r}")
        return url

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> Any:
        """Execute a request and return the decoded JSON response body."""
        url = self.build_url(path, params)

        content: bytes | None = None
        if body is not None:
            try:
                content = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise EncodingError(f"Cannot encode request body: {exc}") from exc

        headers = {"Accept": "application/json"}
        if content is not None:
            headers["Content-Type"] = "application/json"

        token = await self._token_provider.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = await self._execute(method, url, headers=headers, content=content)
        self._raise_for_status(response)

        if not response.content.strip():
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise DecodingError(f"Cannot decode Firestore response: {exc}") from exc

    async def _execute(
        self,
        method: str,
        url: httpx.URL,
        *,
        headers: Mapping[str, str],
        content: bytes | None,
    ) -> httpx.Response:
        logger.debug("Firestore %s %s", method, url.path)
        try:
            if self._http_client is not None:
                return await self._http_client.request(
                    method,
                    url,
                    headers=headers,
                    content=content,
                    timeout=self._config.timeout_seconds,
                )
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds) as client:
                return await client.request(method, url, headers=headers, content=content)
        except httpx.DecodingError as exc:
            raise DecodingError(f"Cannot decode Firestore response: {exc}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Firestore request failed: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        message = extract_error_message(response.content)
        status_code = response.status_code
        if status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
            raise UnauthorizedError(message)
        if status_code == status.HTTP_404_NOT_FOUND:
            raise NotFoundError(message)
        logger.warning("Firestore returned HTTP %s: %s", status_code, message)
        raise ServerError(status_code, message)


__all__ = [
    "DecodingError",
    "EncodingError",
    "FirestoreConfig",
    "FirestoreHTTPClient",
    "FirestoreHTTPError",
    "InvalidURLError",
    "NetworkError",
    "NotFoundError",
    "ServerError",
    "UnauthorizedError",
    "extract_error_message",
]
