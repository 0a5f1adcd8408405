"""
Opaque page tokens handed out by the repositories.

Both encodings are base64 wrapped so callers treat them as opaque strings:
the volatile store encodes a result offset, the Firestore store encodes the
order-by values of the last row it returned.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Optional

from taskstore.clients.firestore_query import QueryCursor

_OFFSET_PATTERN = re.compile(r"^[0-9]+$")


class InvalidPageTokenError(ValueError):
    """Raised when a page token cannot be decoded."""


def _b64decode(token: str) -> bytes:
    try:
        return base64.b64decode(token.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, AttributeError) as exc:
        raise InvalidPageTokenError("Page token is not valid base64.") from exc


class OffsetPageTokenCodec:
    """Encode and decode result offsets."""

    def encode(self, offset: int) -> str:
        if offset < 0:
            raise ValueError("Offsets must be non-negative.")
        return base64.b64encode(str(offset).encode("utf-8")).decode("ascii")

    def decode(self, token: Optional[str]) -> int:
        """Return the offset for ``token``; a missing token starts at zero."""
        if token is None:
            return 0
        try:
            text = _b64decode(token).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidPageTokenError("Page token is not valid UTF-8.") from exc
        if not _OFFSET_PATTERN.match(text):
            raise InvalidPageTokenError("Page token does not encode an offset.")
        return int(text)

    def next_token(self, end_index: int, total: int) -> Optional[str]:
        return self.encode(end_index) if end_index < total else None


class CursorPageTokenCodec:
    """Encode and decode Firestore query cursors."""

    def encode(self, cursor: QueryCursor) -> str:
        serialized = json.dumps(
            {"order": cursor.order, "documentName": cursor.document_name},
            separators=(",", ":"),
        )
        return base64.b64encode(serialized.encode("utf-8")).decode("ascii")

    def decode(self, token: str) -> QueryCursor:
        try:
            payload = json.loads(_b64decode(token))
        except ValueError as exc:
            raise InvalidPageTokenError("Page token does not contain a cursor.") from exc
        if not isinstance(payload, dict):
            raise InvalidPageTokenError("Page token does not contain a cursor.")

        order = payload.get("order")
        document_name = payload.get("documentName")
        if isinstance(order, bool) or not isinstance(order, int):
            raise InvalidPageTokenError("Page token cursor is missing 'order'.")
        if not isinstance(document_name, str) or not document_name:
            raise InvalidPageTokenError("Page token cursor is missing 'documentName'.")
        return QueryCursor(order=order, document_name=document_name)


__all__ = ["CursorPageTokenCodec", "InvalidPageTokenError", "OffsetPageTokenCodec"]
