"""Request contract.

A request declares what to send (``query``), how to map the payload
(``mapping``), how to move the mapped result off the mapping thread
(``thread_adapter``) and what to do at each point of its lifecycle.

The result shape is fixed by the class a request derives from:

    class PersonRequest(ObjectRequest[Person]): ...       # result: Person
    class PeopleRequest(CollectionRequest[Person]): ...   # result: list[Person]

Deriving from neither or from both is rejected when the class statement
runs, as is a collection of a type without value equality.
"""

from __future__ import annotations

import typing
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, Union

from graph_bind.core.binding import CollectionBinding, Completion, SingleObjectBinding
from graph_bind.core.enums import BindingShape
from graph_bind.core.exceptions import ConfigurationError, RequestDefinitionError
from graph_bind.core.query import Query
from graph_bind.core.result import MappingResult
from graph_bind.core.thread_adapter import ThreadAdapter, requires_thread_adapter
from graph_bind.mapping.protocol import Mapping

if TYPE_CHECKING:
    from graph_bind.transport.protocol import TransportMetadata

S = TypeVar("S")
T = TypeVar("T")

_SHAPE_CLASSES = ("ObjectRequest", "CollectionRequest")


def _has_value_equality(tp: Any) -> bool:
    """Return True unless *tp* is a class relying on identity equality."""
    if tp is Any or not isinstance(tp, type):
        return True
    return tp.__eq__ is not object.__eq__


def _resolve_mapped_type(cls: type) -> Any:
    """Read the mapped type from the subscripted request bases of *cls*.

    Follows generic intermediates: for ``class Lookup(BaseLookup[Person])``
    where ``BaseLookup(ObjectRequest[T])``, the argument bound to ``T`` is
    returned. A TypeVar is returned while the class itself stays generic.
    """
    for base in cls.__dict__.get("__orig_bases__", ()):
        origin = typing.get_origin(base)
        if not (isinstance(origin, type) and issubclass(origin, Request)):
            continue
        args = typing.get_args(base)
        if origin in (ObjectRequest, CollectionRequest):
            arg = args[0]
        else:
            param = origin._mapped_param
            if param is None or param not in origin.__parameters__:
                continue
            arg = args[origin.__parameters__.index(param)]
        return None if arg is Any else arg
    return None


class Request(ABC, Generic[S, T]):
    """Base request contract.

    ``S`` is the serialized result type handed to ``did_finish`` and the
    completion callback, ``T`` the type produced by ``mapping``. Concrete
    requests derive from :class:`ObjectRequest` or :class:`CollectionRequest`.

    Attributes:
        shape: Result shape, set by the shape class.
        mapped_type: Type produced by ``mapping``; resolved from the generic
            argument or declared on the class.
    """

    shape: ClassVar[BindingShape]
    mapped_type: ClassVar[Any] = None
    # TypeVar standing for the mapped type on a generic intermediate.
    _mapped_param: ClassVar[Any] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__module__ == __name__ and cls.__qualname__ in _SHAPE_CLASSES:
            return

        is_object = issubclass(cls, ObjectRequest)
        is_collection = issubclass(cls, CollectionRequest)
        if is_object and is_collection:
            raise RequestDefinitionError(
                cls.__name__, "derives from both ObjectRequest and CollectionRequest"
            )
        if not is_object and not is_collection:
            raise RequestDefinitionError(
                cls.__name__, "must derive from ObjectRequest or CollectionRequest"
            )

        if "mapped_type" not in cls.__dict__:
            resolved = _resolve_mapped_type(cls)
            if isinstance(resolved, TypeVar):
                cls._mapped_param = resolved
            elif resolved is not None:
                cls.mapped_type = resolved
                cls._mapped_param = None

        if is_collection and not _has_value_equality(cls.mapped_type):
            raise RequestDefinitionError(
                cls.__name__,
                f"collection element type {cls.mapped_type.__name__} has no value equality",
            )

    @property
    @abstractmethod
    def query(self) -> Query:
        """The query sent to the service. Must not change between reads."""

    @property
    @abstractmethod
    def mapping(self) -> Mapping[T]:
        """The mapping applied to the payload.

        Evaluated on the engine's mapping thread, never on the calling
        thread, and possibly concurrently for different in-flight requests.
        Any resource the mapping needs (a store session, a connection) must
        be acquired here rather than shared.
        """

    @property
    def thread_adapter(self) -> ThreadAdapter | None:
        """Adapter for mapped values that are not safe to share across threads."""
        return None

    def will_send(self) -> None:
        """Called right before the query is dispatched. Raise to abort."""

    def did_finish_request(self, metadata: TransportMetadata, payload: Any) -> None:
        """Called when the transport returns, before mapping. Raise to abort."""

    def did_finish(self, result: MappingResult[S]) -> None:
        """Called with the final result, right before the completion callback."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def _claim_binding(self) -> ThreadAdapter | None:
        """Mark the request as bound and validate its thread adapter."""
        if getattr(self, "_binding_generated", False):
            raise ConfigurationError(
                f"{self.name} already generated its binding; requests are single-use"
            )

        adapter = self.thread_adapter
        mapped = self.mapped_type
        if adapter is None:
            if requires_thread_adapter(mapped):
                raise ConfigurationError(
                    f"{self.name} maps thread-unsafe type {mapped.__name__} "
                    "but supplies no thread_adapter"
                )
        elif isinstance(mapped, type) and not issubclass(mapped, adapter.base_type):
            raise ConfigurationError(
                f"{self.name}: thread adapter base type {adapter.base_type.__name__} "
                f"does not cover mapped type {mapped.__name__}"
            )

        self._binding_generated = True
        return adapter


class ObjectRequest(Request[T, T]):
    """Request whose result is one mapped object."""

    shape = BindingShape.OBJECT

    def generate_binding(self, completion: Completion[T]) -> SingleObjectBinding[T]:
        """Bind this request to a single-object completion.

        Raises:
            ConfigurationError: If the thread adapter is missing or does not
                cover the mapped type, or the request was already bound.
        """
        adapter = self._claim_binding()
        return SingleObjectBinding(
            mapping_provider=lambda: self.mapping,
            thread_adapter=adapter,
            completion=completion,
        )


class CollectionRequest(Request[list[T], T]):
    """Request whose result is a list of mapped objects, in payload order."""

    shape = BindingShape.COLLECTION

    def generate_binding(self, completion: Completion[list[T]]) -> CollectionBinding[T]:
        """Bind this request to a collection completion.

        Raises:
            ConfigurationError: If the thread adapter is missing or does not
                cover the mapped type, or the request was already bound.
        """
        adapter = self._claim_binding()
        return CollectionBinding(
            mapping_provider=lambda: self.mapping,
            thread_adapter=adapter,
            completion=completion,
        )


# --- Ad-hoc requests ---

MappingSource = Union[Mapping[T], Callable[[], Mapping[T]]]


def _mapping_factory(source: Any) -> Callable[[], Any]:
    if hasattr(source, "map"):
        return lambda: source
    return source


class _HookedRequest:
    """Shared state for requests built by the factory functions."""

    def __init__(
        self,
        query: Query,
        mapping: Any,
        mapped_type: Any,
        thread_adapter: ThreadAdapter | None,
        will_send: Callable[[], None] | None,
        did_finish_request: Callable[[Any, Any], None] | None,
        did_finish: Callable[[Any], None] | None,
    ) -> None:
        self._query = query
        self._mapping_factory = _mapping_factory(mapping)
        if mapped_type is None:
            if not hasattr(mapping, "map"):
                raise ConfigurationError(
                    "a mapping factory cannot be inspected; pass mapped_type explicitly"
                )
            mapped_type = getattr(mapping, "mapped_type", None)
        self.mapped_type = mapped_type
        self._thread_adapter = thread_adapter
        self._will_send = will_send
        self._did_finish_request = did_finish_request
        self._did_finish = did_finish

    @property
    def query(self) -> Query:
        return self._query

    @property
    def mapping(self) -> Any:
        return self._mapping_factory()

    @property
    def thread_adapter(self) -> ThreadAdapter | None:
        return self._thread_adapter

    def will_send(self) -> None:
        if self._will_send is not None:
            self._will_send()

    def did_finish_request(self, metadata: Any, payload: Any) -> None:
        if self._did_finish_request is not None:
            self._did_finish_request(metadata, payload)

    def did_finish(self, result: Any) -> None:
        if self._did_finish is not None:
            self._did_finish(result)


class _AdHocObjectRequest(_HookedRequest, ObjectRequest[T]):  # type: ignore[misc]
    pass


class _AdHocCollectionRequest(_HookedRequest, CollectionRequest[T]):  # type: ignore[misc]
    pass


def single_object_request(
    query: Query,
    mapping: MappingSource[T],
    *,
    mapped_type: type[T] | None = None,
    thread_adapter: ThreadAdapter | None = None,
    will_send: Callable[[], None] | None = None,
    did_finish_request: Callable[[Any, Any], None] | None = None,
    did_finish: Callable[[MappingResult[T]], None] | None = None,
) -> ObjectRequest[T]:
    """Build a single-object request without declaring a class.

    Args:
        query: Query to send.
        mapping: A Mapping, or a zero-argument factory returning a fresh one
            per fetch.
        mapped_type: Produced type; defaults to ``mapping.mapped_type``.
            Required when *mapping* is a factory.
        thread_adapter: Optional adapter for thread-unsafe results.
        will_send: Optional pre-dispatch hook.
        did_finish_request: Optional post-transport hook.
        did_finish: Optional final hook.

    Raises:
        ConfigurationError: If *mapping* is a factory and no mapped_type is given.
    """
    return _AdHocObjectRequest(
        query, mapping, mapped_type, thread_adapter, will_send, did_finish_request, did_finish
    )


def collection_request(
    query: Query,
    mapping: MappingSource[T],
    *,
    mapped_type: type[T] | None = None,
    thread_adapter: ThreadAdapter | None = None,
    will_send: Callable[[], None] | None = None,
    did_finish_request: Callable[[Any, Any], None] | None = None,
    did_finish: Callable[[MappingResult[list[T]]], None] | None = None,
) -> CollectionRequest[T]:
    """Build a collection request without declaring a class.

    Same arguments as :func:`single_object_request`.

    Raises:
        ConfigurationError: If *mapping* is a factory and no mapped_type is given.
        RequestDefinitionError: If the mapped type has no value equality.
    """
    request = _AdHocCollectionRequest(
        query, mapping, mapped_type, thread_adapter, will_send, did_finish_request, did_finish
    )
    if not _has_value_equality(request.mapped_type):
        raise RequestDefinitionError(
            "collection_request",
            f"collection element type {request.mapped_type.__name__} has no value equality",
        )
    return request
