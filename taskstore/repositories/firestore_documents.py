"""Mapping between ``Task`` entities and Firestore documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from taskstore.clients.firestore_values import (
    BooleanValue,
    FirestoreValue,
    IntegerValue,
    StringValue,
    WireValueDecodingError,
    decode_value,
    encode_value,
)
from taskstore.models import Task


class TaskDocumentDecodingError(ValueError):
    """Raised when a Firestore document does not describe a valid task."""


class MissingRequiredFieldError(TaskDocumentDecodingError):
    def __init__(self, field_name: str) -> None:
        super().__init__(f"Missing required field '{field_name}'.")
        self.field_name = field_name


class InvalidUUIDError(TaskDocumentDecodingError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"Field 'id' is not a valid UUID: {raw!r}.")
        self.raw = raw


class UnexpectedTypeError(TaskDocumentDecodingError):
    pass


@dataclass(slots=True)
class TaskDocument:
    """A task as stored in Firestore, including its owner."""

    fields: Dict[str, FirestoreValue]
    name: Optional[str] = None
    create_time: Optional[str] = None
    update_time: Optional[str] = None

    @classmethod
    def from_task(cls, task: Task, owner_id: str) -> "TaskDocument":
        fields: Dict[str, FirestoreValue] = {
            "id": StringValue(str(task.id)),
            "ownerId": StringValue(owner_id),
            "title": StringValue(task.title),
            "url": StringValue(task.url),
        }
        if task.order is not None:
            fields["order"] = IntegerValue(task.order)
        if task.completed is not None:
            fields["completed"] = BooleanValue(task.completed)
        return cls(fields=fields)

    @classmethod
    def from_payload(cls, payload: Any) -> "TaskDocument":
        """Parse the JSON representation returned by Firestore."""
        if not isinstance(payload, Mapping):
            raise TaskDocumentDecodingError("Firestore document must be a JSON object.")
        raw_fields = payload.get("fields") or {}
        if not isinstance(raw_fields, Mapping):
            raise TaskDocumentDecodingError("Firestore document 'fields' must be an object.")

        fields: Dict[str, FirestoreValue] = {}
        for key, raw in raw_fields.items():
            try:
                fields[key] = decode_value(raw)
            except WireValueDecodingError as exc:
                raise UnexpectedTypeError(f"Field '{key}': {exc}") from exc

        return cls(
            fields=fields,
            name=payload.get("name"),
            create_time=payload.get("createTime"),
            update_time=payload.get("updateTime"),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "fields": {key: encode_value(value) for key, value in self.fields.items()}
        }
        if self.name is not None:
            payload["name"] = self.name
        return payload

    @property
    def owner_id(self) -> Optional[str]:
        value = self.fields.get("ownerId")
        return value.value if isinstance(value, StringValue) else None

    @property
    def order(self) -> Optional[int]:
        value = self.fields.get("order")
        return value.value if isinstance(value, IntegerValue) else None

    def is_owned_by(self, owner_id: str) -> bool:
        return self.owner_id == owner_id

    def to_task(self) -> Task:
        raw_id = self._required_string("id")
        try:
            task_id = UUID(raw_id)
        except ValueError as exc:
            raise InvalidUUIDError(raw_id) from exc

        order = self.fields.get("order")
        if order is not None and not isinstance(order, IntegerValue):
            raise UnexpectedTypeError("order must be integerValue if present")

        completed = self.fields.get("completed")
        if completed is not None and not isinstance(completed, BooleanValue):
            raise UnexpectedTypeError("completed must be booleanValue if present")

        return Task(
            id=task_id,
            title=self._required_string("title"),
            url=self._required_string("url"),
            order=order.value if order is not None else None,
            completed=completed.value if completed is not None else None,
        )

    def _required_string(self, field_name: str) -> str:
        value = self.fields.get(field_name)
        if value is None:
            raise MissingRequiredFieldError(field_name)
        if not isinstance(value, StringValue):
            raise UnexpectedTypeError(f"{field_name} must be stringValue")
        return value.value


__all__ = [
    "InvalidUUIDError",
    "MissingRequiredFieldError",
    "TaskDocument",
    "TaskDocumentDecodingError",
    "UnexpectedTypeError",
]
