"""
Task repository persisted in Cloud Firestore through its REST API.

Every document carries an ``ownerId`` field next to the task fields. Queries
filter on it server side and every read checks it again before a task is
handed back, so a task owned by someone else is indistinguishable from a
missing one.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID, uuid4

from taskstore.clients.firestore import (
    DecodingError,
    FirestoreHTTPClient,
    FirestoreHTTPError,
    NotFoundError,
)
from taskstore.clients.firestore_query import (
    QueryCursor,
    RunQueryRequest,
    build_owner_query,
)
from taskstore.clients.firestore_values import (
    IntegerValue,
    WireValueDecodingError,
    decode_value,
)
from taskstore.clients.tokens import AccessTokenProviderError
from taskstore.models import PagedResult, Task

from .base import DEFAULT_PAGE_SIZE, clamp_page_size
from .firestore_documents import TaskDocument, TaskDocumentDecodingError
from .page_tokens import CursorPageTokenCodec

logger = logging.getLogger(__name__)


class TaskFirestoreRepository:
    """Firestore implementation of the task storage contract."""

    COLLECTION_ID = "tasks"

    def __init__(
        self,
        http_client: FirestoreHTTPClient,
        *,
        delete_concurrency: int = 10,
        log_level: int = logging.INFO,
    ) -> None:
        documents_path = http_client.config.documents_path
        self._client = http_client
        self._collection_path = f"{documents_path}/{self.COLLECTION_ID}"
        self._run_query_path = f"{documents_path}:runQuery"
        self._delete_concurrency = max(1, delete_concurrency)
        self._log_level = log_level
        self._tokens = CursorPageTokenCodec()

    # Listing

    async def list(self, user_id: str) -> List[Task]:
        rows = await self._run_query(build_owner_query(self.COLLECTION_ID, user_id))
        return self._owned_tasks(rows, user_id)

    async def list_paginated(
        self,
        user_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: Optional[str] = None,
    ) -> PagedResult[Task]:
        page_size = clamp_page_size(page_size)
        start_after = self._tokens.decode(page_token) if page_token is not None else None

        rows = await self._run_query(
            build_owner_query(
                self.COLLECTION_ID,
                user_id,
                limit=page_size,
                start_after=start_after,
            )
        )
        tasks = self._owned_tasks(rows, user_id)

        # runQuery has no page tokens of its own. A full page means there may
        # be more rows, so resume after the last row using the order-by values.
        if len(rows) < page_size:
            return PagedResult(items=tasks, next_page_token=None)

        cursor = _cursor_for(rows[-1])
        if cursor is None:
            logger.warning("Last row of a full page has no order or name; ending pagination")
            return PagedResult(items=tasks, next_page_token=None)
        return PagedResult(items=tasks, next_page_token=self._tokens.encode(cursor))

    # Single documents

    async def get(self, user_id: str, id: UUID) -> Optional[Task]:
        document = await self._fetch_document(id)
        if document is None or not document.is_owned_by(user_id):
            return None
        return document.to_task()

    async def create(
        self, user_id: str, title: str, order: Optional[int], url_prefix: str
    ) -> Task:
        task_id = uuid4()
        task = Task(
            id=task_id,
            title=title,
            # Documents without an order field drop out of the ordered query.
            order=order if order is not None else 0,
            url=f"{url_prefix}{task_id}",
            completed=False,
        )
        payload = await self._client.send(
            "POST",
            self._collection_path,
            params={"documentId": str(task_id)},
            body=TaskDocument.from_task(task, user_id).to_payload(),
        )
        created = TaskDocument.from_payload(payload).to_task()
        logger.debug("Created task %s", task_id)
        return created

    async def update(
        self,
        user_id: str,
        id: UUID,
        title: Optional[str] = None,
        order: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> Optional[Task]:
        current = await self.get(user_id, id)
        if current is None:
            return None

        changes: Dict[str, Any] = {}
        if title is not None:
            changes["title"] = title
        if order is not None:
            changes["order"] = order
        if completed is not None:
            changes["completed"] = completed
        updated_task = replace(current, **changes)

        try:
            payload = await self._client.send(
                "PATCH",
                self._document_path(id),
                body=TaskDocument.from_task(updated_task, user_id).to_payload(),
            )
        except NotFoundError:
            return None

        updated = TaskDocument.from_payload(payload)
        if not updated.is_owned_by(user_id):
            return None
        return updated.to_task()

    async def delete(self, user_id: str, id: UUID) -> bool:
        # Missing and foreign tasks both count as already deleted. Only the
        # owner is checked, so a corrupt task can still be removed.
        document = await self._fetch_document(id)
        if document is None or not document.is_owned_by(user_id):
            return True
        await self._delete_path(self._document_path(id))
        return True

    async def delete_all(self, user_id: str) -> bool:
        rows = await self._run_query(build_owner_query(self.COLLECTION_ID, user_id))

        paths: List[str] = []
        failed = 0
        for row in rows:
            name = row.get("name")
            try:
                owned = TaskDocument.from_payload(row).is_owned_by(user_id)
            except TaskDocumentDecodingError as exc:
                logger.warning("Cannot check owner of task document %s: %s", name, exc)
                failed += 1
                continue
            if not owned:
                continue
            if not isinstance(name, str) or not name:
                logger.warning("Owned task document without a name cannot be deleted")
                failed += 1
                continue
            paths.append(f"/{name.lstrip('/')}")

        total = len(paths) + failed
        if total == 0:
            return True

        semaphore = asyncio.Semaphore(self._delete_concurrency)

        async def _delete_one(path: str) -> bool:
            async with semaphore:
                try:
                    await self._delete_path(path)
                except (FirestoreHTTPError, AccessTokenProviderError) as exc:
                    logger.warning("Failed to delete task document %s: %s", path, exc)
                    return False
                return True

        results = await asyncio.gather(*(_delete_one(path) for path in paths))
        deleted = sum(1 for result in results if result)
        logger.log(self._log_level, "Deleted %d of %d tasks.", deleted, total)
        return deleted == total

    # Helpers

    def _document_path(self, id: UUID) -> str:
        return f"{self._collection_path}/{id}"

    async def _fetch_document(self, id: UUID) -> Optional[TaskDocument]:
        try:
            payload = await self._client.send("GET", self._document_path(id))
        except NotFoundError:
            return None
        return TaskDocument.from_payload(payload)

    async def _delete_path(self, path: str) -> None:
        try:
            await self._client.send("DELETE", path)
        except NotFoundError:
            pass

    async def _run_query(self, request: RunQueryRequest) -> List[Mapping[str, Any]]:
        """Run a structured query and return the raw documents it matched."""
        response = await self._client.send(
            "POST", self._run_query_path, body=request.to_payload()
        )
        if not isinstance(response, list):
            raise DecodingError("runQuery response must be a JSON array.")
        # Entries without a document only carry readTime / skippedResults.
        return [
            entry["document"]
            for entry in response
            if isinstance(entry, Mapping) and isinstance(entry.get("document"), Mapping)
        ]

    @staticmethod
    def _owned_tasks(rows: List[Mapping[str, Any]], user_id: str) -> List[Task]:
        tasks: List[Task] = []
        for row in rows:
            try:
                document = TaskDocument.from_payload(row)
                if not document.is_owned_by(user_id):
                    continue
                tasks.append(document.to_task())
            except TaskDocumentDecodingError as exc:
                logger.warning("Skipping undecodable task document %s: %s", row.get("name"), exc)
        return tasks


def _cursor_for(row: Mapping[str, Any]) -> Optional[QueryCursor]:
    name = row.get("name")
    fields = row.get("fields")
    if not isinstance(name, str) or not name or not isinstance(fields, Mapping):
        return None
    raw_order = fields.get("order")
    if raw_order is None:
        return None
    try:
        order = decode_value(raw_order)
    except WireValueDecodingError:
        return None
    if not isinstance(order, IntegerValue):
        return None
    return QueryCursor(order=order.value, document_name=name)


__all__ = ["TaskFirestoreRepository"]
