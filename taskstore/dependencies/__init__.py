"""Expose dependency helpers for the HTTP layer."""

from .repositories import (
    SettingsDependency,
    TaskRepositoryDependency,
    get_app_settings,
    get_task_repository,
)

__all__ = [
    "SettingsDependency",
    "TaskRepositoryDependency",
    "get_app_settings",
    "get_task_repository",
]
