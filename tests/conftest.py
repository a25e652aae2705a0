"""Shared test fixtures."""

from __future__ import annotations

import pytest

from graph_bind.core.config import ClientConfig
from graph_bind.transport.memory import MemoryAsyncTransport, MemorySyncTransport


@pytest.fixture
def memory_config() -> ClientConfig:
    """In-memory transport config."""
    return ClientConfig(transport="memory", mapping_workers=2)


@pytest.fixture
def sync_transport(memory_config: ClientConfig) -> MemorySyncTransport:
    """Sync memory transport answering the Person and People operations."""
    transport = MemorySyncTransport(memory_config)
    transport.register("Person", {"id": 7})
    transport.register("People", [{"id": 1}, {"id": 2}])
    return transport


@pytest.fixture
def async_transport(memory_config: ClientConfig) -> MemoryAsyncTransport:
    """Async memory transport answering the Person and People operations."""
    transport = MemoryAsyncTransport(memory_config)
    transport.register("Person", {"id": 7})
    transport.register("People", [{"id": 1}, {"id": 2}])
    return transport
