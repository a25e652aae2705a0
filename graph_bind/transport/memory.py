"""In-memory transport - sync and async, serving registered payloads."""

from __future__ import annotations

import asyncio
import copy
import threading
from typing import Any

from graph_bind.core.config import ClientConfig
from graph_bind.core.exceptions import TransportFailure
from graph_bind.core.query import Query
from graph_bind.transport.protocol import TransportMetadata, TransportResponse


def _query_key(query: Query) -> str:
    return query.operation_name or query.document


class _MemoryStore:
    """Payloads and failures keyed by operation name (or document text)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._responses: dict[str, TransportResponse | Exception] = {}
        self.sent: list[Query] = []

    def register(
        self,
        operation: str,
        payload: Any,
        metadata: TransportMetadata | None = None,
    ) -> None:
        """Serve *payload* for queries matching *operation*."""
        response = TransportResponse(
            metadata=metadata or TransportMetadata(status_code=200),
            payload=payload,
        )
        with self._lock:
            self._responses[operation] = response

    def register_failure(self, operation: str, error: Exception) -> None:
        """Raise *error* for queries matching *operation*.

        Each send raises a fresh copy of *error*.
        """
        with self._lock:
            self._responses[operation] = error

    def respond(self, query: Query) -> TransportResponse:
        key = _query_key(query)
        with self._lock:
            self.sent.append(query)
            entry = self._responses.get(key)
        if entry is None:
            raise TransportFailure(f"no response registered for '{key}'")
        if isinstance(entry, TransportFailure):
            raise copy.copy(entry)
        if isinstance(entry, Exception):
            raise TransportFailure(str(entry)) from entry
        return entry


class MemorySyncTransport(_MemoryStore):
    """Synchronous in-memory transport."""

    def __init__(self, config: ClientConfig | None = None) -> None:
        super().__init__()
        self.closed = False

    def send(self, query: Query) -> TransportResponse:
        """Return the registered response for *query*."""
        return self.respond(query)

    def close(self) -> None:
        self.closed = True


class MemoryAsyncTransport(_MemoryStore):
    """Asynchronous in-memory transport.

    ``config.extra["delay"]`` (seconds) is awaited before answering.
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        super().__init__()
        self._delay = float(config.extra.get("delay", 0.0)) if config is not None else 0.0
        self.closed = False

    async def send_async(self, query: Query) -> TransportResponse:
        """Return the registered response for *query*."""
        if self._delay:
            await asyncio.sleep(self._delay)
        return self.respond(query)

    async def close_async(self) -> None:
        self.closed = True
