"""Transport protocols.

Every transport module MUST implement these protocols so engines can load
any of them by name from the client configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from graph_bind.core.query import Query


@dataclass(frozen=True)
class TransportMetadata:
    """Response metadata handed to ``did_finish_request``."""

    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    url: str | None = None


@dataclass(frozen=True)
class TransportResponse:
    """What a transport returns for one query: metadata plus the ``data`` payload."""

    metadata: TransportMetadata
    payload: Any


@runtime_checkable
class SyncTransport(Protocol):
    """Synchronous transport protocol."""

    def send(self, query: Query) -> TransportResponse:
        """Send the query and return the decoded response.

        Raises:
            TransportFailure: On any transport or service-level error.
        """
        ...

    def close(self) -> None:
        """Release the transport's resources."""
        ...


@runtime_checkable
class AsyncTransport(Protocol):
    """Asynchronous transport protocol."""

    async def send_async(self, query: Query) -> TransportResponse:
        """Send the query asynchronously and return the decoded response.

        Raises:
            TransportFailure: On any transport or service-level error.
        """
        ...

    async def close_async(self) -> None:
        """Release the transport's resources."""
        ...
