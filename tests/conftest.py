"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from fakes import FakeFirestore, make_firestore_repository
from taskstore.repositories import TaskMemoryRepository


@pytest.fixture
def fake_firestore() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def firestore_repository(fake_firestore: FakeFirestore):
    return make_firestore_repository(fake_firestore)


@pytest.fixture(params=["volatile", "firestore"])
def repository(request, fake_firestore: FakeFirestore):
    """Every storage contract test runs against both backends."""
    if request.param == "volatile":
        return TaskMemoryRepository()
    return make_firestore_repository(fake_firestore)
