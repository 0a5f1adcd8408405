try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from taskstore.clients.firestore_query import QueryCursor, build_owner_query


def test_owner_query_payload_without_paging() -> None:
    payload = build_owner_query("tasks", "user-1").to_payload()

    assert payload == {
        "structuredQuery": {
            "from": [{"collectionId": "tasks"}],
            "where": {
                "fieldFilter": {
                    "field": {"fieldPath": "ownerId"},
                    "op": "EQUAL",
                    "value": {"stringValue": "user-1"},
                }
            },
            "orderBy": [
                {"field": {"fieldPath": "order"}, "direction": "ASCENDING"},
                {"field": {"fieldPath": "__name__"}, "direction": "ASCENDING"},
            ],
        }
    }


def test_owner_query_with_limit_and_cursor() -> None:
    cursor = QueryCursor(order=7, document_name="projects/p/databases/(default)/documents/tasks/x")
    query = build_owner_query("tasks", "user-1", limit=5, start_after=cursor).to_payload()[
        "structuredQuery"
    ]

    assert query["limit"] == 5
    assert query["startAt"] == {
        "values": [
            {"integerValue": "7"},
            {"referenceValue": "projects/p/databases/(default)/documents/tasks/x"},
        ],
        "before": False,
    }
