"""Token providers that never talk to a token endpoint."""

from __future__ import annotations

import os
from typing import Optional

from .base import ConfigurationError


class EnvironmentAccessTokenProvider:
    """Read a bearer token from an environment variable on every call."""

    DEFAULT_ENV_VAR = "FIRESTORE_ACCESS_TOKEN"

    def __init__(self, env_var: str = DEFAULT_ENV_VAR) -> None:
        self._env_var = env_var

    async def get_token(self) -> Optional[str]:
        token = os.environ.get(self._env_var)
        if not token:
            raise ConfigurationError(
                f"Environment variable '{self._env_var}' is not set or is empty."
            )
        return token


class NoAuthAccessTokenProvider:
    """Provider for endpoints that need no credentials, such as the emulator."""

    async def get_token(self) -> Optional[str]:
        return None


__all__ = ["EnvironmentAccessTokenProvider", "NoAuthAccessTokenProvider"]
