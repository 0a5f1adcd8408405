"""
Build task repositories from configuration.
"""

from __future__ import annotations

import logging

import httpx

from taskstore.clients.firestore import FirestoreConfig, FirestoreHTTPClient
from taskstore.clients.tokens import (
    AccessTokenProvider,
    AppDefaultCredentialsTokenRetriever,
    CachedAccessTokenProvider,
    EnvironmentAccessTokenProvider,
    MetadataServerTokenRetriever,
    NoAuthAccessTokenProvider,
    TokenFetchingError,
)
from taskstore.core.config import (
    AppSettings,
    FirestoreSettings,
    RepositoryType,
    TokenRetrieverType,
)

from .base import TaskRepository
from .firestore import TaskFirestoreRepository
from .memory import TaskMemoryRepository

logger = logging.getLogger(__name__)


class RepositoryConfigurationError(Exception):
    """Raised when the configured backend cannot be built."""


def build_token_provider(
    settings: FirestoreSettings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> AccessTokenProvider:
    """Create the access token provider selected by ``settings.token_retriever``."""
    retriever_type = settings.token_retriever
    if retriever_type is TokenRetrieverType.NONE:
        raise RepositoryConfigurationError(
            "Firestore token retriever is set to 'none'. Use 'app_default_credentials', "
            "'metadata_server' or 'environment'."
        )
    if retriever_type is TokenRetrieverType.ENVIRONMENT:
        logger.info("Using the %s environment variable for Firestore authentication.", settings.access_token_env_var)
        return EnvironmentAccessTokenProvider(settings.access_token_env_var)
    if retriever_type is TokenRetrieverType.METADATA_SERVER:
        logger.info("Using the metadata server for Firestore authentication.")
        return CachedAccessTokenProvider(
            MetadataServerTokenRetriever(
                metadata_base_url=settings.metadata_base_url,
                scope=settings.scope,
                http_client=http_client,
            )
        )

    try:
        retriever = AppDefaultCredentialsTokenRetriever(
            credentials_path=settings.credentials_path,
            http_client=http_client,
        )
    except TokenFetchingError as exc:
        raise RepositoryConfigurationError(str(exc)) from exc
    logger.info("Using Application Default Credentials for Firestore authentication.")
    return CachedAccessTokenProvider(retriever)


def _require_project_id(settings: FirestoreSettings) -> str:
    if not settings.project_id:
        raise RepositoryConfigurationError(
            "FIRESTORE_PROJECT_ID must be set for Firestore-backed repositories."
        )
    return settings.project_id


def new_volatile() -> TaskMemoryRepository:
    return TaskMemoryRepository()


def new_persistent(
    settings: FirestoreSettings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> TaskFirestoreRepository:
    """Repository backed by a real Firestore database."""
    config = FirestoreConfig(
        project_id=_require_project_id(settings),
        api_root=settings.api_root,
        timeout_seconds=settings.timeout_seconds,
    )
    client = FirestoreHTTPClient(
        config,
        build_token_provider(settings, http_client=http_client),
        http_client=http_client,
    )
    return TaskFirestoreRepository(client, delete_concurrency=settings.delete_concurrency)


def new_emulated(
    settings: FirestoreSettings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> TaskFirestoreRepository:
    """Repository backed by the local Firestore emulator, which needs no credentials."""
    config = FirestoreConfig(
        project_id=_require_project_id(settings),
        api_root=settings.emulator_api_root,
        timeout_seconds=settings.timeout_seconds,
    )
    client = FirestoreHTTPClient(config, NoAuthAccessTokenProvider(), http_client=http_client)
    return TaskFirestoreRepository(client, delete_concurrency=settings.delete_concurrency)


def build_repository(
    settings: AppSettings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> TaskRepository:
    """Build the repository selected by ``settings.repository.type``."""
    repository_type = settings.repository.type
    logger.info("Using the %s task repository.", repository_type.value)
    if repository_type is RepositoryType.PERSISTENT:
        return new_persistent(settings.firestore, http_client=http_client)
    if repository_type is RepositoryType.EMULATED:
        return new_emulated(settings.firestore, http_client=http_client)
    return new_volatile()


__all__ = [
    "RepositoryConfigurationError",
    "build_repository",
    "build_token_provider",
    "new_emulated",
    "new_persistent",
    "new_volatile",
]
