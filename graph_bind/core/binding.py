"""Object bindings.

An ObjectBinding captures how a request's result is produced: as one mapped
object or as a list of mapped objects. It is a closed union of two frozen
dataclasses rather than a class hierarchy, because the two arms complete with
differently typed results.

Each arm carries:
    mapping_provider: zero-argument callable returning a fresh Mapping. It is
        evaluated on the mapping thread for every fetch and never cached.
    thread_adapter: optional ThreadAdapter for the mapped value.
    completion: callback receiving the final MappingResult.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar, Union

from graph_bind.core.enums import BindingShape
from graph_bind.core.exceptions import CompletionAlreadyFiredError, MappingFailure
from graph_bind.core.result import MappingResult
from graph_bind.core.thread_adapter import ThreadAdapter
from graph_bind.mapping.model import resolve_key_path
from graph_bind.mapping.protocol import Mapping
from graph_bind.mapping.void import VoidMapping

T = TypeVar("T")

Completion = Callable[[MappingResult[T]], None]


class OnceCompletion(Generic[T]):
    """Completion wrapper that refuses to fire twice.

    Args:
        callback: The caller's completion, or None to only record the result.
        request_name: Used in the error raised on a second delivery.
    """

    def __init__(self, callback: Completion[T] | None, request_name: str) -> None:
        self._callback = callback
        self._request_name = request_name
        self._lock = threading.Lock()
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self, result: MappingResult[T]) -> None:
        with self._lock:
            if self._fired:
                raise CompletionAlreadyFiredError(self._request_name)
            self._fired = True
        if self._callback is not None:
            self._callback(result)


@dataclass(frozen=True)
class SingleObjectBinding(Generic[T]):
    """Binding whose result is one mapped object."""

    shape: ClassVar[BindingShape] = BindingShape.OBJECT
    # Fills the collection-mapping slot this arm never uses.
    collection_mapping: ClassVar[type] = VoidMapping

    mapping_provider: Callable[[], Mapping[T]]
    thread_adapter: ThreadAdapter | None
    completion: Completion[T]


@dataclass(frozen=True)
class CollectionBinding(Generic[T]):
    """Binding whose result is a list of mapped objects."""

    shape: ClassVar[BindingShape] = BindingShape.COLLECTION

    mapping_provider: Callable[[], Mapping[T]]
    thread_adapter: ThreadAdapter | None
    completion: Completion[list[T]]


ObjectBinding = Union[SingleObjectBinding[T], CollectionBinding[T]]


def map_payload(binding: ObjectBinding[Any], payload: Any) -> Any:
    """Run the binding's mapping over *payload*.

    Must be called on the mapping thread: it evaluates the lazy
    mapping provider.

    Raises:
        MappingFailure: If the payload does not fit the binding's shape or the
            mapping rejects it.
    """
    mapping = binding.mapping_provider()
    node = resolve_key_path(payload, mapping.key_path)

    if isinstance(binding, CollectionBinding):
        if node is None:
            return []
        if not isinstance(node, list):
            raise MappingFailure(
                f"collection request expected a list, got {type(node).__name__}"
            )
        return mapping.map_many(node)

    if node is None:
        raise MappingFailure("single-object request received a null node")
    return mapping.map(node)
