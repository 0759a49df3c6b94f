"""Shared fixtures built on the doubles in tests/fakes.py."""

from __future__ import annotations

import pytest

from fakes import (
    FakeClock,
    FakeIdentityResolver,
    FakeNotifier,
    FakeTokenSink,
    YieldingStore,
)
from infrastructure.store.memory import MemoryStore


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> MemoryStore:
    return MemoryStore(clock=clock.monotonic)


@pytest.fixture
def yielding_store(clock) -> YieldingStore:
    return YieldingStore(clock=clock.monotonic)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def identity() -> FakeIdentityResolver:
    return FakeIdentityResolver()


@pytest.fixture
def token_sink() -> FakeTokenSink:
    return FakeTokenSink()
