"""Simple node-to-model mapping.

Supports dataclasses, Pydantic models, and plain classes.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from graph_bind.core.exceptions import MappingFailure

T = TypeVar("T")

_MISSING = object()


def _is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def resolve_key_path(payload: Any, key_path: str | None) -> Any:
    """Walk a dotted key path into a JSON payload.

    Args:
        payload: Decoded JSON payload (the GraphQL ``data`` member).
        key_path: Dot-separated keys, e.g. ``"viewer.friends"``. ``None`` or
            an empty string returns the payload unchanged.

    Returns:
        The node found at the end of the path.

    Raises:
        MappingFailure: If a key is missing or an intermediate node is not
            an object.
    """
    if not key_path:
        return payload
    node = payload
    walked: list[str] = []
    for key in key_path.split("."):
        if not isinstance(node, dict):
            raise MappingFailure(
                f"key path '{key_path}': expected an object at '{'.'.join(walked) or '<root>'}', "
                f"got {type(node).__name__}"
            )
        node = node.get(key, _MISSING)
        if node is _MISSING:
            raise MappingFailure(f"key path '{key_path}': missing key '{key}'")
        walked.append(key)
    return node


class ModelMapping(Generic[T]):
    """Simple node-to-model mapping.

    Detection order:
    1. Pydantic BaseModel -> model_validate(node)
    2. dataclass -> target_class(**node)
    3. Plain class -> target_class(**node)

    Args:
        target_class: The class to construct from node data.
        key_path: Optional dotted path to the node inside the payload.
        aliases: Optional field-name mapping applied to node keys.
    """

    def __init__(
        self,
        target_class: type[T],
        key_path: str | None = None,
        aliases: dict[str, str] | None = None,
    ) -> None:
        self._target_class = target_class
        self._key_path = key_path
        self._aliases = aliases
        self._is_pydantic = _is_pydantic_model(target_class)

    @property
    def key_path(self) -> str | None:
        return self._key_path

    @property
    def mapped_type(self) -> type[T]:
        return self._target_class

    def _apply_aliases(self, node: dict[str, Any]) -> dict[str, Any]:
        """Apply key aliases to the node."""
        if not self._aliases:
            return node
        return {self._aliases.get(key, key): value for key, value in node.items()}

    def map(self, node: Any) -> T:
        """Map a single node to a target_class instance."""
        name = self._target_class.__name__
        if not isinstance(node, dict):
            raise MappingFailure(f"cannot map {type(node).__name__} to {name}: expected an object")
        node = self._apply_aliases(node)

        if self._is_pydantic:
            try:
                return self._target_class.model_validate(node)  # type: ignore[attr-defined, no-any-return]
            except Exception as e:
                raise MappingFailure(f"cannot map to {name}: {e}") from e

        # For dataclasses and plain classes, try **kwargs construction
        try:
            return self._target_class(**node)
        except TypeError as e:
            raise MappingFailure(f"cannot map to {name}: {e}") from e

    def map_many(self, nodes: list[Any]) -> list[T]:
        """Map all nodes via map."""
        return [self.map(node) for node in nodes]

    def __repr__(self) -> str:
        return f"ModelMapping({self._target_class.__name__}, key_path={self._key_path!r})"
