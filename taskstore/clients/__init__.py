"""Expose Firestore client wrappers."""

from .firestore import (
    DecodingError,
    EncodingError,
    FirestoreConfig,
    FirestoreHTTPClient,
    FirestoreHTTPError,
    InvalidURLError,
    NetworkError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
)
from .firestore_query import QueryCursor, RunQueryRequest, build_owner_query

__all__ = [
    "DecodingError",
    "EncodingError",
    "FirestoreConfig",
    "FirestoreHTTPClient",
    "FirestoreHTTPError",
    "InvalidURLError",
    "NetworkError",
    "NotFoundError",
    "QueryCursor",
    "RunQueryRequest",
    "ServerError",
    "UnauthorizedError",
    "build_owner_query",
]
