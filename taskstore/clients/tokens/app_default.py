"""
Access tokens from gcloud application default credentials.

Only ``authorized_user`` credentials (the file written by
``gcloud auth application-default login``) are supported: the stored refresh
token is exchanged at Google's OAuth endpoint for a short-lived access token.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import httpx
from fastapi import status
from pydantic import BaseModel, ValidationError

from .base import (
    AccessToken,
    InvalidConfigurationError,
    TokenDecodingError,
    TokenExchangeFailedError,
    TokenNetworkError,
    TokenUnauthorizedError,
    parse_token_response,
)

logger = logging.getLogger(__name__)

CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"


class ApplicationDefaultCredentials(BaseModel):
    client_id: str
    client_secret: str
    refresh_token: str
    type: Literal["authorized_user"]


def default_credentials_path() -> Path:
    return Path.home() / ".config" / "gcloud" / "application_default_credentials.json"


def resolve_credentials_path(explicit_path: Optional[str] = None) -> Path:
    """Pick the credentials file: explicit path, then env var, then gcloud default."""
    if explicit_path:
        return Path(explicit_path)
    env_path = os.environ.get(CREDENTIALS_ENV_VAR)
    if env_path:
        return Path(env_path)
    return default_credentials_path()


def load_credentials(path: Path) -> ApplicationDefaultCredentials:
    if not path.exists():
        raise InvalidConfigurationError(f"Credentials file not found at '{path}'.")
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise InvalidConfigurationError(
            f"Failed to read credentials file at '{path}': {exc}"
        ) from exc
    try:
        return ApplicationDefaultCredentials.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidConfigurationError(
            f"Unsupported credentials format at '{path}'."
        ) from exc


class AppDefaultCredentialsTokenRetriever:
    """Exchange an application default refresh token for access tokens."""

    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        *,
        credentials_path: Optional[str] = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        path = resolve_credentials_path(credentials_path)
        self._credentials = load_credentials(path)
        self._http_client = http_client
        self._timeout = timeout_seconds
        logger.info("Loaded application default credentials from %s", path)

    async def fetch_token(self) -> AccessToken:
        payload = {
            "client_id": self._credentials.client_id,
            "client_secret": self._credentials.client_secret,
            "refresh_token": self._credentials.refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self.TOKEN_URL, data=payload, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self.TOKEN_URL, data=payload)
        except httpx.DecodingError as exc:
            raise TokenDecodingError(f"Unreadable OAuth token response: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TokenNetworkError(f"OAuth token endpoint unreachable: {exc}") from exc

        if not response.is_success:
            message = response.text or None
            if response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
                raise TokenUnauthorizedError(message)
            raise TokenExchangeFailedError(response.status_code, message)

        return parse_token_response(response)


__all__ = [
    "AppDefaultCredentialsTokenRetriever",
    "ApplicationDefaultCredentials",
    "CREDENTIALS_ENV_VAR",
    "default_credentials_path",
    "load_credentials",
    "resolve_credentials_path",
]
