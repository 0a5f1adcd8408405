"""Access tokens from the GCE / Cloud Run instance metadata server."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from taskstore.utils.http import RetryConfig, request_with_retry

from .base import (
    AccessToken,
    InvalidConfigurationError,
    TokenDecodingError,
    TokenNetworkError,
    parse_token_response,
)

logger = logging.getLogger(__name__)


class MetadataServerTokenRetriever:
    """Fetch the default service account token from the metadata server."""

    DEFAULT_BASE_URL = "http://metadata/computeMetadata/v1"
    DEFAULT_SCOPE = "https://www.googleapis.com/auth/datastore"
    _TOKEN_PATH = "/instance/service-accounts/default/token"
    _TIMEOUT_SECONDS = 5.0

    def __init__(
        self,
        *,
        metadata_base_url: str = DEFAULT_BASE_URL,
        scope: Optional[str] = DEFAULT_SCOPE,
        http_client: httpx.AsyncClient | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self._base_url = metadata_base_url.rstrip("/")
        self._scope = scope
        self._http_client = http_client
        self._retry_config = retry_config or RetryConfig(attempts=2, backoff_seconds=0.5)

    def _token_url(self) -> httpx.URL:
        try:
            url = httpx.URL(self._base_url + self._TOKEN_PATH)
        except httpx.InvalidURL as exc:
            raise InvalidConfigurationError(
                f"Invalid metadata base URL: {self._base_url}"
            ) from exc
        if not url.host:
            raise InvalidConfigurationError(f"Invalid metadata base URL: {self._base_url}")
        return url

    async def fetch_token(self) -> AccessToken:
        url = self._token_url()
        params = {"scopes": self._scope} if self._scope else None
        # Required by the metadata server to allow access.
        headers = {"Metadata-Flavor": "Google"}

        try:
            if self._http_client is not None:
                response = await request_with_retry(
                    self._http_client.get,
                    url,
                    params=params,
                    headers=headers,
                    timeout=self._TIMEOUT_SECONDS,
                    retry_config=self._retry_config,
                )
            else:
                async with httpx.AsyncClient(timeout=self._TIMEOUT_SECONDS) as client:
                    response = await request_with_retry(
                        client.get,
                        url,
                        params=params,
                        headers=headers,
                        retry_config=self._retry_config,
                    )
        except httpx.DecodingError as exc:
            raise TokenDecodingError(f"Unreadable metadata server response: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TokenNetworkError(f"Metadata server unreachable: {exc}") from exc

        token = parse_token_response(response)
        logger.debug("Fetched metadata server token expiring in %ss", token.expires_in)
        return token


__all__ = ["MetadataServerTokenRetriever"]
