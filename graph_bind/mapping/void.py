"""Placeholder mapping for the unused collection slot of single-object bindings."""

from __future__ import annotations

from typing import Any

VOID_SENTINEL = 0


class VoidMapping:
    """Mapping that produces the integer sentinel ``0`` for any node."""

    mapped_type = int

    @property
    def key_path(self) -> str | None:
        return None

    def map(self, node: Any) -> int:
        return VOID_SENTINEL

    def map_many(self, nodes: list[Any]) -> list[int]:
        return [VOID_SENTINEL for _ in nodes]
