"""
Structured query payloads for the Firestore ``:runQuery`` endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

ORDER_FIELD = "order"
NAME_FIELD = "__name__"
OWNER_FIELD = "ownerId"


class _QueryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FieldReference(_QueryModel):
    field_path: str = Field(..., alias="fieldPath")


class QueryValue(_QueryModel):
    """A Firestore value as used inside queries, including references."""

    string_value: Optional[str] = Field(None, alias="stringValue")
    integer_value: Optional[str] = Field(None, alias="integerValue")
    boolean_value: Optional[bool] = Field(None, alias="booleanValue")
    reference_value: Optional[str] = Field(None, alias="referenceValue")

    @classmethod
    def string(cls, value: str) -> "QueryValue":
        return cls(string_value=value)

    @classmethod
    def integer(cls, value: int) -> "QueryValue":
        return cls(integer_value=str(value))

    @classmethod
    def boolean(cls, value: bool) -> "QueryValue":
        return cls(boolean_value=value)

    @classmethod
    def reference(cls, document_name: str) -> "QueryValue":
        return cls(reference_value=document_name)


class CollectionSelector(_QueryModel):
    collection_id: str = Field(..., alias="collectionId")


class FieldFilter(_QueryModel):
    field: FieldReference
    op: str
    value: QueryValue


class Filter(_QueryModel):
    field_filter: FieldFilter = Field(..., alias="fieldFilter")


class Order(_QueryModel):
    field: FieldReference
    direction: str


class Cursor(_QueryModel):
    values: List[QueryValue]
    before: bool


class StructuredQuery(_QueryModel):
    from_: List[CollectionSelector] = Field(..., alias="from")
    where: Optional[Filter] = None
    order_by: List[Order] = Field(default_factory=list, alias="orderBy")
    limit: Optional[int] = None
    start_at: Optional[Cursor] = Field(None, alias="startAt")


class RunQueryRequest(_QueryModel):
    structured_query: StructuredQuery = Field(..., alias="structuredQuery")

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the JSON body expected by ``:runQuery``."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True, slots=True)
class QueryCursor:
    """Position of the last row of a page, in order-by clause order."""

    order: int
    document_name: str


def build_owner_query(
    collection_id: str,
    owner_id: str,
    *,
    limit: Optional[int] = None,
    start_after: Optional[QueryCursor] = None,
) -> RunQueryRequest:
    """
    Build the ownership-scoped, ordered query over a collection.

    Rows are ordered by ``order`` and then by document name, both ascending.
    This is the only composite index the database carries for the
    collection, so the clause must not change without a matching index.
    When ``start_after`` is given the query resumes strictly after that row.
    """
    start_at = None
    if start_after is not None:
        start_at = Cursor(
            values=[
                QueryValue.integer(start_after.order),
                QueryValue.reference(start_after.document_name),
            ],
            before=False,
        )

    query = StructuredQuery(
        from_=[CollectionSelector(collection_id=collection_id)],
        where=Filter(
            field_filter=FieldFilter(
                field=FieldReference(field_path=OWNER_FIELD),
                op="EQUAL",
                value=QueryValue.string(owner_id),
            )
        ),
        order_by=[
            Order(field=FieldReference(field_path=ORDER_FIELD), direction="ASCENDING"),
            Order(field=FieldReference(field_path=NAME_FIELD), direction="ASCENDING"),
        ],
        limit=limit,
        start_at=start_at,
    )
    return RunQueryRequest(structured_query=query)


__all__ = [
    "Cursor",
    "FieldFilter",
    "Filter",
    "Order",
    "QueryCursor",
    "QueryValue",
    "RunQueryRequest",
    "StructuredQuery",
    "build_owner_query",
]
