"""Mapping protocol.

All mappings implement this interface. Engines resolve ``key_path`` against
the payload, then call ``map`` for single-object requests and ``map_many``
for collection requests.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class Mapping(Protocol[T]):
    """Base mapping protocol."""

    @property
    def key_path(self) -> str | None:
        """Dotted path from the payload root to the mapped node."""
        ...

    def map(self, node: Any) -> T:
        """Map a single JSON node to a target object."""
        ...

    def map_many(self, nodes: list[Any]) -> list[T]:
        """Map a list of JSON nodes to target objects, preserving order."""
        ...
