"""Shared fixtures for event logging tests."""
import pytest
from eventlog.main import create_app
from eventlog.store.memory import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def app(store):
    return create_app(store=store)
