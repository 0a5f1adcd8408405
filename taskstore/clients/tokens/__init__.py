"""Access token retrievers and providers for Firestore requests."""

from .app_default import AppDefaultCredentialsTokenRetriever
from .base import (
    AccessToken,
    AccessTokenProvider,
    AccessTokenProviderError,
    ConfigurationError,
    InvalidConfigurationError,
    TokenDecodingError,
    TokenExchangeFailedError,
    TokenFetchingError,
    TokenNetworkError,
    TokenRetriever,
    TokenServerError,
    TokenUnauthorizedError,
    UnableToFetchNewTokenError,
)
from .cached import CachedAccessTokenProvider
from .metadata import MetadataServerTokenRetriever
from .static import EnvironmentAccessTokenProvider, NoAuthAccessTokenProvider

__all__ = [
    "AccessToken",
    "AccessTokenProvider",
    "AccessTokenProviderError",
    "AppDefaultCredentialsTokenRetriever",
    "CachedAccessTokenProvider",
    "ConfigurationError",
    "EnvironmentAccessTokenProvider",
    "InvalidConfigurationError",
    "MetadataServerTokenRetriever",
    "NoAuthAccessTokenProvider",
    "TokenDecodingError",
    "TokenExchangeFailedError",
    "TokenFetchingError",
    "TokenNetworkError",
    "TokenRetriever",
    "TokenServerError",
    "TokenUnauthorizedError",
    "UnableToFetchNewTokenError",
]
