"""Query protocol.

Building query documents is left to the caller; a Query only has to hand
its wire representation to the transport.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Query(Protocol):
    """A GraphQL operation ready to be sent."""

    @property
    def document(self) -> str:
        """The GraphQL document text."""
        ...

    @property
    def variables(self) -> dict[str, Any] | None:
        """Variables bound to the document."""
        ...

    @property
    def operation_name(self) -> str | None:
        """Name of the operation to run when the document holds several."""
        ...

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body sent over the wire."""
        ...


@dataclass(frozen=True)
class GraphQuery:
    """Immutable query holder."""

    document: str
    variables: dict[str, Any] | None = None
    operation_name: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": self.document}
        if self.variables is not None:
            payload["variables"] = dict(self.variables)
        if self.operation_name is not None:
            payload["operationName"] = self.operation_name
        return payload
