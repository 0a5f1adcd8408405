"""
Factory functions providing the configured task repository as a FastAPI dependency.
"""

from functools import lru_cache

from fastapi import Depends

from taskstore.core.config import AppSettings, get_settings
from taskstore.core.logging import configure_logging
from taskstore.repositories import TaskRepository, build_repository


@lru_cache()
def _settings() -> AppSettings:
    """Ensure configuration is created once per process."""
    return get_settings()


def get_app_settings() -> AppSettings:
    """Dependency returning storage settings."""
    return _settings()


@lru_cache()
def get_task_repository() -> TaskRepository:
    """Provide the process-wide task repository selected by configuration."""
    settings = _settings()
    configure_logging(settings.log_level)
    return build_repository(settings)


SettingsDependency = Depends(get_app_settings)
TaskRepositoryDependency = Depends(get_task_repository)

__all__ = [
    "SettingsDependency",
    "TaskRepositoryDependency",
    "get_app_settings",
    "get_task_repository",
]
