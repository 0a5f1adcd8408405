"""Task repository exports."""

from .base import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, TaskRepository, clamp_page_size
from .factory import (
    RepositoryConfigurationError,
    build_repository,
    build_token_provider,
    new_emulated,
    new_persistent,
    new_volatile,
)
from .firestore import TaskFirestoreRepository
from .firestore_documents import (
    InvalidUUIDError,
    MissingRequiredFieldError,
    TaskDocument,
    TaskDocumentDecodingError,
    UnexpectedTypeError,
)
from .memory import TaskMemoryRepository
from .page_tokens import CursorPageTokenCodec, InvalidPageTokenError, OffsetPageTokenCodec

__all__ = [
    "CursorPageTokenCodec",
    "DEFAULT_PAGE_SIZE",
    "InvalidPageTokenError",
    "InvalidUUIDError",
    "MAX_PAGE_SIZE",
    "MissingRequiredFieldError",
    "OffsetPageTokenCodec",
    "RepositoryConfigurationError",
    "TaskDocument",
    "TaskDocumentDecodingError",
    "TaskFirestoreRepository",
    "TaskMemoryRepository",
    "TaskRepository",
    "UnexpectedTypeError",
    "build_repository",
    "build_token_provider",
    "clamp_page_size",
    "new_emulated",
    "new_persistent",
    "new_volatile",
]
