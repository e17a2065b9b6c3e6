from __future__ import annotations

FIXED_NOW = "2026-10-18T09:30:00.000Z"


def fixed_clock() -> str:
    return FIXED_NOW


class DummyAcquire:
    def __init__(self, connection):
        self._connection = connection

    async def __aenter__(self):
        return self._connection

    async def __aexit__(self, exc_type, exc, tb):
        return False


class DummyPool:
    def __init__(self, connection):
        self._connection = connection

    def acquire(self):
        return DummyAcquire(self._connection)
