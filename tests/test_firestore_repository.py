try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
from uuid import uuid4

import pytest

from fakes import FakeFirestore
from taskstore.clients.firestore import ServerError

URL_PREFIX = "https://tasks.example.com/tasks/"


def _task_fields(owner: str, *, order=None, task_id=None, title="raw"):
    fields = {
        "id": {"stringValue": str(task_id or uuid4())},
        "ownerId": {"stringValue": owner},
        "title": {"stringValue": title},
        "url": {"stringValue": URL_PREFIX + "raw"},
    }
    if order is not None:
        fields["order"] = order
    return fields


@pytest.mark.asyncio
async def test_create_posts_document_with_caller_assigned_id(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    created = await firestore_repository.create("alice", "Buy milk", None, URL_PREFIX)

    request = fake_firestore.requests[-1]
    assert request.method == "POST"
    assert request.url.path.endswith("/documents/tasks")
    assert request.url.params["documentId"] == str(created.id)
    fields = json.loads(request.content)["fields"]
    assert fields["ownerId"] == {"stringValue": "alice"}
    assert fields["order"] == {"integerValue": "0"}
    assert fields["completed"] == {"booleanValue": False}
    assert created.order == 0


@pytest.mark.asyncio
async def test_list_skips_undecodable_and_foreign_documents(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    good = await firestore_repository.create("alice", "good", 1, URL_PREFIX)
    fake_firestore.put_raw(
        "tasks", "broken", {**_task_fields("alice", order={"integerValue": "2"}), "id": {"stringValue": "not-a-uuid"}}
    )
    # A foreign row slipping past the server-side filter must still be dropped.
    foreign_name = fake_firestore.document_name("tasks", "foreign")
    fake_firestore.extra_query_entries.append(
        {
            "document": {
                "name": foreign_name,
                "fields": _task_fields("mallory", order={"integerValue": "3"}),
            }
        }
    )
    fake_firestore.extra_query_entries.append({"readTime": "2025-01-01T00:00:00Z", "skippedResults": 1})

    tasks = await firestore_repository.list("alice")

    assert [task.id for task in tasks] == [good.id]


@pytest.mark.asyncio
async def test_list_sends_ordered_owner_query(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    await firestore_repository.list("alice")

    request = fake_firestore.requests[-1]
    assert request.url.path.endswith("/databases/(default)/documents:runQuery")
    query = json.loads(request.content)["structuredQuery"]
    assert query["where"]["fieldFilter"]["value"] == {"stringValue": "alice"}
    assert [order["field"]["fieldPath"] for order in query["orderBy"]] == ["order", "__name__"]
    assert "limit" not in query
    assert "startAt" not in query


@pytest.mark.asyncio
async def test_full_page_whose_last_row_has_no_order_ends_pagination(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    name = fake_firestore.document_name("tasks", "unordered")
    fake_firestore.extra_query_entries.append(
        {"document": {"name": name, "fields": _task_fields("alice")}}
    )

    page = await firestore_repository.list_paginated("alice", page_size=1)

    assert len(page.items) == 1
    assert page.items[0].order is None
    assert page.next_page_token is None


@pytest.mark.asyncio
async def test_full_page_whose_last_row_has_no_name_ends_pagination(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    fake_firestore.extra_query_entries.append(
        {"document": {"fields": _task_fields("alice", order={"integerValue": "1"})}}
    )

    page = await firestore_repository.list_paginated("alice", page_size=1)

    assert len(page.items) == 1
    assert page.next_page_token is None


@pytest.mark.asyncio
async def test_get_foreign_document_returns_none(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    task_id = uuid4()
    fake_firestore.put_raw(
        "tasks", str(task_id), _task_fields("mallory", order={"integerValue": "0"}, task_id=task_id)
    )

    assert await firestore_repository.get("alice", task_id) is None
    assert await firestore_repository.update("alice", task_id, title="mine now") is None
    assert await firestore_repository.delete("alice", task_id) is True
    assert fake_firestore.document_name("tasks", str(task_id)) in fake_firestore.documents


@pytest.mark.asyncio
async def test_delete_all_reports_partial_failure(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    tasks = [
        await firestore_repository.create("alice", f"t{index}", index, URL_PREFIX)
        for index in range(4)
    ]
    stuck = fake_firestore.document_name("tasks", str(tasks[2].id))
    fake_firestore.failing_deletes.add(stuck)

    assert await firestore_repository.delete_all("alice") is False

    remaining = await firestore_repository.list("alice")
    assert [task.id for task in remaining] == [tasks[2].id]


@pytest.mark.asyncio
async def test_single_delete_propagates_server_errors(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    created = await firestore_repository.create("alice", "t", 0, URL_PREFIX)
    fake_firestore.failing_deletes.add(fake_firestore.document_name("tasks", str(created.id)))

    with pytest.raises(ServerError) as excinfo:
        await firestore_repository.delete("alice", created.id)
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Backend unavailable."


@pytest.mark.asyncio
async def test_corrupt_owned_documents_can_still_be_deleted(
    firestore_repository, fake_firestore: FakeFirestore
) -> None:
    single_id = uuid4()
    single = fake_firestore.put_raw(
        "tasks",
        str(single_id),
        {**_task_fields("alice", order={"integerValue": "1"}), "id": {"stringValue": "not-a-uuid"}},
    )
    batch = fake_firestore.put_raw(
        "tasks",
        "broken",
        {**_task_fields("alice", order={"integerValue": "2"}), "id": {"stringValue": "also-bad"}},
    )
    kept = await firestore_repository.create("alice", "fine", 3, URL_PREFIX)

    assert await firestore_repository.delete("alice", single_id) is True
    assert single not in fake_firestore.documents

    assert await firestore_repository.delete_all("alice") is True
    assert batch not in fake_firestore.documents
    assert fake_firestore.document_name("tasks", str(kept.id)) not in fake_firestore.documents
