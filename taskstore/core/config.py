"""
Storage configuration models and helpers.

Centralizes settings so the repository factory and any hosting process share
a single configuration surface read from the environment (and `.env`).
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RepositoryType(str, Enum):
    """Backends a task repository can be built from."""

    VOLATILE = "volatile"
    PERSISTENT = "persistent"
    EMULATED = "emulated"


class TokenRetrieverType(str, Enum):
    """Strategies used to authorize requests against Firestore."""

    NONE = "none"
    METADATA_SERVER = "metadata_server"
    APP_DEFAULT_CREDENTIALS = "app_default_credentials"
    ENVIRONMENT = "environment"


class FirestoreSettings(BaseSettings):
    """Configuration required for talking to the Firestore REST API."""

    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    project_id: Optional[str] = Field(
        None, description="Google Cloud project hosting the Firestore database."
    )
    api_root: str = Field("https://firestore.googleapis.com/v1")
    emulator_api_root: str = Field(
        "http://localhost:8080/v1",
        description="API root used when the repository type is 'emulated'.",
    )
    timeout_seconds: float = Field(30.0, gt=0)
    token_retriever: TokenRetrieverType = Field(TokenRetrieverType.NONE)
    credentials_path: Optional[str] = Field(
        None,
        description=(
            "Explicit application default credentials file. Falls back to "
            "GOOGLE_APPLICATION_CREDENTIALS and then the gcloud default location."
        ),
    )
    scope: Optional[str] = Field("https://www.googleapis.com/auth/datastore")
    metadata_base_url: str = Field("http://metadata/computeMetadata/v1")
    access_token_env_var: str = Field(
        "FIRESTORE_ACCESS_TOKEN",
        description="Environment variable read by the static token strategy.",
    )
    delete_concurrency: int = Field(
        10, ge=1, description="Upper bound on concurrent deletions in delete_all."
    )

    @field_validator("token_retriever", mode="before")
    @classmethod
    def _normalize_retriever(cls, value: str | TokenRetrieverType) -> str | TokenRetrieverType:
        """Accept the CamelCase spellings used by older deployment configs."""
        if isinstance(value, str):
            aliases = {
                "metadataserver": TokenRetrieverType.METADATA_SERVER.value,
                "appdefaultcredentials": TokenRetrieverType.APP_DEFAULT_CREDENTIALS.value,
            }
            lowered = value.strip().lower()
            return aliases.get(lowered, lowered)
        return value


class RepositorySettings(BaseSettings):
    """Selects which task repository backend to build."""

    model_config = SettingsConfigDict(
        env_prefix="TASKSTORE_REPOSITORY_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    type: RepositoryType = Field(RepositoryType.VOLATILE)

    @field_validator("type", mode="before")
    @classmethod
    def _lowercase(cls, value: str | RepositoryType) -> str | RepositoryType:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class AppSettings(BaseSettings):
    """Root settings object for the storage layer."""

    model_config = SettingsConfigDict(
        env_prefix="TASKSTORE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    log_level: str = Field("INFO")
    repository: RepositorySettings = Field(default_factory=RepositorySettings)
    firestore: FirestoreSettings = Field(default_factory=FirestoreSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "FirestoreSettings",
    "RepositorySettings",
    "RepositoryType",
    "TokenRetrieverType",
    "get_settings",
]
