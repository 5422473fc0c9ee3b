"""Shared fixtures: a scripted reflection client, a fake clock and storage."""

from datetime import datetime, timedelta, timezone

import pytest

from app.features.journaling import EntryStore, MemoryStorage, ServiceError


class FakeReflectionClient:
    """Returns queued reflections (or raises queued errors) in order."""

    def __init__(self, default: str = "A thoughtful reflection."):
        self.default = default
        self.queue = []
        self.prompts = []
        self.closed = False

    def respond(self, *results):
        self.queue.extend(results)
        return self

    async def reflect(self, prompt: str) -> str:
        self.prompts.append(prompt)
        result = self.queue.pop(0) if self.queue else self.default
        if isinstance(result, Exception):
            raise result
        return result

    async def aclose(self):
        self.closed = True


class FakeClock:
    """Each call returns a time one minute after the previous one."""

    def __init__(self, start=datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current = self.current + timedelta(minutes=1)
        return self.current


@pytest.fixture
def reflection_client():
    return FakeReflectionClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, reflection_client, clock):
    return EntryStore(storage, reflection_client, clock=clock)


@pytest.fixture
def service_error():
    return ServiceError("Reflection endpoint returned 500", status_code=500)
