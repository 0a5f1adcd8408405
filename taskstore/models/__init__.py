"""Public model exports."""

from .task import PagedResult, Task

__all__ = ["PagedResult", "Task"]
