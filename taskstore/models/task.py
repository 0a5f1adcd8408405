"""Domain models shared by every task repository backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar
from uuid import UUID

T = TypeVar("T")


@dataclass(slots=True)
class Task:
    """A single entry in a user's task list.

    Ownership is deliberately absent: repositories enforce it at their
    boundary and never expose it on the entity.
    """

    id: UUID
    title: str
    url: str
    order: Optional[int] = None
    completed: Optional[bool] = None


@dataclass(slots=True)
class PagedResult(Generic[T]):
    """One page of items plus the opaque token resuming after it."""

    items: List[T] = field(default_factory=list)
    next_page_token: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.next_page_token is not None


__all__ = ["PagedResult", "Task"]
