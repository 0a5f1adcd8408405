"""
Shared contracts for obtaining OAuth2 access tokens for Firestore.

Retrievers talk to a token source and report failures as
``TokenFetchingError``. Providers hand a bearer token (or ``None``) to the
HTTP client and report failures as ``AccessTokenProviderError``.
"""

from __future__ import annotations

from typing import Optional, Protocol

import httpx
from fastapi import status
from pydantic import BaseModel, Field, ValidationError


class AccessToken(BaseModel):
    """Token payload returned by both the metadata server and the OAuth endpoint."""

    access_token: str = Field(..., min_length=1)
    expires_in: int
    token_type: str = "Bearer"


class TokenFetchingError(Exception):
    """Base class for failures while retrieving a new access token."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message


class InvalidConfigurationError(TokenFetchingError):
    """The token source is misconfigured (missing file, bad URL, ...)."""


class TokenUnauthorizedError(TokenFetchingError):
    """The token source rejected the request (401/403)."""


class TokenServerError(TokenFetchingError):
    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"Token endpoint returned HTTP {status_code}.")
        self.message = message
        self.status_code = status_code


class TokenExchangeFailedError(TokenFetchingError):
    """The OAuth endpoint refused to exchange the refresh token."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"Token exchange failed with HTTP {status_code}.")
        self.message = message
        self.status_code = status_code


class TokenNetworkError(TokenFetchingError):
    """The token source could not be reached."""


class TokenDecodingError(TokenFetchingError):
    """The token source answered with an unreadable payload."""


class AccessTokenProviderError(Exception):
    """Base class for failures surfaced to the HTTP client."""


class ConfigurationError(AccessTokenProviderError):
    """The provider cannot produce a token with the current configuration."""


class UnableToFetchNewTokenError(AccessTokenProviderError):
    """A fresh token was required but the underlying retriever failed."""

    def __init__(self, underlying: Exception) -> None:
        super().__init__(f"Unable to fetch a new access token: {underlying}")
        self.underlying = underlying


class TokenRetriever(Protocol):
    async def fetch_token(self) -> AccessToken:
        ...


class AccessTokenProvider(Protocol):
    async def get_token(self) -> Optional[str]:
        ...


def parse_token_response(response: httpx.Response) -> AccessToken:
    """Classify a token endpoint response and decode the token on success."""
    if not response.is_success:
        message = response.text or None
        if response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
            raise TokenUnauthorizedError(message)
        raise TokenServerError(response.status_code, message)

    try:
        return AccessToken.model_validate_json(response.content)
    except ValidationError as exc:
        raise TokenDecodingError(f"Malformed token payload: {exc}") from exc


__all__ = [
    "AccessToken",
    "AccessTokenProvider",
    "AccessTokenProviderError",
    "ConfigurationError",
    "InvalidConfigurationError",
    "TokenDecodingError",
    "TokenExchangeFailedError",
    "TokenFetchingError",
    "TokenNetworkError",
    "TokenRetriever",
    "TokenServerError",
    "TokenUnauthorizedError",
    "UnableToFetchNewTokenError",
    "parse_token_response",
]
