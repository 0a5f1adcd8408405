"""Pluggable per-user task storage with volatile and Firestore backends."""

from .models import PagedResult, Task
from .repositories import TaskRepository, build_repository

__all__ = ["PagedResult", "Task", "TaskRepository", "build_repository"]
