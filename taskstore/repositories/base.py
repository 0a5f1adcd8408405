"""
Storage contract every task repository implements.

All operations are scoped by an opaque owner identifier supplied by the
caller. Implementations never observe or mutate tasks belonging to another
owner; a task owned by someone else is reported exactly like a missing one.
"""

from __future__ import annotations

from typing import List, Optional, Protocol
from uuid import UUID

from taskstore.models import PagedResult, Task

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def clamp_page_size(page_size: int) -> int:
    return max(1, min(page_size, MAX_PAGE_SIZE))


class TaskRepository(Protocol):
    async def create(
        self, user_id: str, title: str, order: Optional[int], url_prefix: str
    ) -> Task: ...

    async def get(self, user_id: str, id: UUID) -> Optional[Task]: ...

    async def list(self, user_id: str) -> List[Task]: ...

    async def list_paginated(
        self,
        user_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> PagedResult[Task]: ...

    async def update(
        self,
        user_id: str,
        id: UUID,
        title: Optional[str] = None,
        order: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> Optional[Task]: ...

    async def delete(self, user_id: str, id: UUID) -> bool: ...

    async def delete_all(self, user_id: str) -> bool: ...


__all__ = ["DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "TaskRepository", "clamp_page_size"]
