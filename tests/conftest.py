from __future__ import annotations

import pytest

from app.records.store import InMemoryRecordStore


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()
