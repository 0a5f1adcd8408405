"""Volatile, process-local task repository."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from taskstore.models import PagedResult, Task

from .base import DEFAULT_PAGE_SIZE, clamp_page_size
from .page_tokens import OffsetPageTokenCodec


class TaskMemoryRepository:
    """
    Keep tasks in a per-owner dictionary guarded by an asyncio lock.

    Tasks are returned as copies so callers cannot mutate stored state.
    Nothing inside a critical section awaits.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, Dict[UUID, Task]] = {}
        self._lock = asyncio.Lock()
        self._tokens = OffsetPageTokenCodec()

    async def create(
        self, user_id: str, title: str, order: Optional[int], url_prefix: str
    ) -> Task:
        task_id = uuid4()
        task = Task(
            id=task_id,
            title=title,
            order=order,
            url=f"{url_prefix}{task_id}",
            completed=False,
        )
        async with self._lock:
            self._tasks.setdefault(user_id, {})[task_id] = task
        return replace(task)

    async def get(self, user_id: str, id: UUID) -> Optional[Task]:
        async with self._lock:
            task = self._tasks.get(user_id, {}).get(id)
        return replace(task) if task is not None else None

    async def list(self, user_id: str) -> List[Task]:
        async with self._lock:
            return [replace(task) for task in self._tasks.get(user_id, {}).values()]

    async def list_paginated(
        self,
        user_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> PagedResult[Task]:
        page_size = clamp_page_size(page_size)
        offset = self._tokens.decode(page_token)

        async with self._lock:
            tasks = [replace(task) for task in self._tasks.get(user_id, {}).values()]

        if offset >= len(tasks):
            return PagedResult(items=[], next_page_token=None)

        end_index = min(offset + page_size, len(tasks))
        return PagedResult(
            items=tasks[offset:end_index],
            next_page_token=self._tokens.next_token(end_index, len(tasks)),
        )

    async def update(
        self,
        user_id: str,
        id: UUID,
        title: Optional[str] = None,
        order: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> Optional[Task]:
        async with self._lock:
            owned = self._tasks.get(user_id, {})
            task = owned.get(id)
            if task is None:
                return None
            if title is not None:
                task.title = title
            if order is not None:
                task.order = order
            if completed is not None:
                task.completed = completed
            return replace(task)

    async def delete(self, user_id: str, id: UUID) -> bool:
        async with self._lock:
            self._tasks.get(user_id, {}).pop(id, None)
        return True

    async def delete_all(self, user_id: str) -> bool:
        async with self._lock:
            self._tasks.pop(user_id, None)
        return True


__all__ = ["TaskMemoryRepository"]
