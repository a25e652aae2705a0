"""Unit tests for Request shape resolution and ObjectBinding generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

import pytest

from graph_bind.core.binding import (
    CollectionBinding,
    OnceCompletion,
    SingleObjectBinding,
    map_payload,
)
from graph_bind.core.enums import BindingShape
from graph_bind.core.exceptions import (
    CompletionAlreadyFiredError,
    ConfigurationError,
    MappingFailure,
    RequestDefinitionError,
)
from graph_bind.core.query import GraphQuery
from graph_bind.core.request import (
    CollectionRequest,
    ObjectRequest,
    Request,
    collection_request,
    single_object_request,
)
from graph_bind.core.result import Success
from graph_bind.core.thread_adapter import CopyingThreadAdapter, ThreadUnsafe
from graph_bind.mapping.model import ModelMapping
from graph_bind.mapping.void import VoidMapping

T = TypeVar("T")

QUERY = GraphQuery("query Person { person { id } }", operation_name="Person")


@dataclass
class Person:
    id: int


@dataclass
class UnsafePerson(ThreadUnsafe):
    id: int


class PlainPerson:
    def __init__(self, id: int) -> None:
        self.id = id


class PersonRequest(ObjectRequest[Person]):
    def __init__(self) -> None:
        self.mapping_evaluations = 0

    @property
    def query(self) -> GraphQuery:
        return QUERY

    @property
    def mapping(self) -> ModelMapping[Person]:
        self.mapping_evaluations += 1
        return ModelMapping(Person)


class PeopleRequest(CollectionRequest[Person]):
    @property
    def query(self) -> GraphQuery:
        return QUERY

    @property
    def mapping(self) -> ModelMapping[Person]:
        return ModelMapping(Person)


class UnsafePersonRequest(ObjectRequest[UnsafePerson]):
    def __init__(self, adapter: CopyingThreadAdapter | None = None) -> None:
        self._adapter = adapter

    @property
    def query(self) -> GraphQuery:
        return QUERY

    @property
    def mapping(self) -> ModelMapping[UnsafePerson]:
        return ModelMapping(UnsafePerson)

    @property
    def thread_adapter(self) -> CopyingThreadAdapter | None:
        return self._adapter


class _Lookup(ObjectRequest[T]):
    """Generic request mapping whatever type a subclass binds to T."""

    @property
    def query(self) -> GraphQuery:
        return QUERY

    @property
    def mapping(self) -> ModelMapping[T]:
        return ModelMapping(type(self).mapped_type)


def _noop(result: object) -> None:
    pass


class TestShapeResolution:
    def test_object_request_yields_single_object_binding(self) -> None:
        binding = PersonRequest().generate_binding(_noop)
        assert isinstance(binding, SingleObjectBinding)
        assert not isinstance(binding, CollectionBinding)
        assert binding.shape is BindingShape.OBJECT

    def test_collection_request_yields_collection_binding(self) -> None:
        binding = PeopleRequest().generate_binding(_noop)
        assert isinstance(binding, CollectionBinding)
        assert not isinstance(binding, SingleObjectBinding)
        assert binding.shape is BindingShape.COLLECTION

    def test_shape_and_mapped_type_fixed_on_class(self) -> None:
        assert PersonRequest.shape is BindingShape.OBJECT
        assert PersonRequest.mapped_type is Person
        assert PeopleRequest.shape is BindingShape.COLLECTION
        assert PeopleRequest.mapped_type is Person

    def test_single_object_binding_fills_collection_slot_with_void_mapping(self) -> None:
        assert SingleObjectBinding.collection_mapping is VoidMapping

    def test_request_without_shape_is_rejected_at_definition(self) -> None:
        with pytest.raises(RequestDefinitionError, match="must derive from"):

            class Shapeless(Request[Person, Person]):
                pass

    def test_request_with_both_shapes_is_rejected_at_definition(self) -> None:
        with pytest.raises(RequestDefinitionError, match="both"):

            class Ambiguous(ObjectRequest[Person], CollectionRequest[Person]):
                pass

    def test_collection_of_identity_equality_type_is_rejected(self) -> None:
        with pytest.raises(RequestDefinitionError, match="no value equality"):

            class PlainPeople(CollectionRequest[PlainPerson]):
                pass

    def test_object_request_of_identity_equality_type_is_allowed(self) -> None:
        class PlainPersonRequest(ObjectRequest[PlainPerson]):
            pass

        assert PlainPersonRequest.mapped_type is PlainPerson

    def test_generic_intermediate_resolves_mapped_type(self) -> None:
        class BaseLookup(ObjectRequest[T]):
            pass

        class PersonLookup(BaseLookup[Person]):
            pass

        assert BaseLookup.mapped_type is None
        assert PersonLookup.mapped_type is Person

    def test_nested_generic_intermediates_resolve_mapped_type(self) -> None:
        U = TypeVar("U")

        class BaseLookup(CollectionRequest[T]):
            pass

        class KeyedLookup(BaseLookup[U]):
            pass

        class PeopleLookup(KeyedLookup[Person]):
            pass

        assert PeopleLookup.mapped_type is Person

    def test_shape_keyword_is_rejected(self) -> None:
        with pytest.raises(TypeError):

            class Forced(Request[Person, Person], shape=BindingShape.OBJECT):
                pass

    def test_generic_intermediate_declares_mapped_type_explicitly(self) -> None:
        class BaseLookup(ObjectRequest[T]):
            pass

        class PersonLookup(BaseLookup[Person]):
            mapped_type = Person

        assert BaseLookup.mapped_type is None
        assert PersonLookup.mapped_type is Person
        assert PersonLookup.shape is BindingShape.OBJECT


class TestBindingGeneration:
    def test_mapping_provider_is_lazy_and_fresh(self) -> None:
        request = PersonRequest()
        binding = request.generate_binding(_noop)
        assert request.mapping_evaluations == 0

        first = binding.mapping_provider()
        second = binding.mapping_provider()
        assert request.mapping_evaluations == 2
        assert first is not second

    def test_binding_carries_completion(self) -> None:
        received = []
        binding = PersonRequest().generate_binding(received.append)
        binding.completion(Success(Person(1)))
        assert received == [Success(Person(1))]

    def test_request_binds_only_once(self) -> None:
        request = PersonRequest()
        request.generate_binding(_noop)
        with pytest.raises(ConfigurationError, match="single-use"):
            request.generate_binding(_noop)

    def test_thread_unsafe_type_without_adapter_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="thread-unsafe"):
            UnsafePersonRequest().generate_binding(_noop)

    def test_thread_unsafe_type_with_adapter_binds(self) -> None:
        adapter = CopyingThreadAdapter(UnsafePerson)
        binding = UnsafePersonRequest(adapter).generate_binding(_noop)
        assert binding.thread_adapter is adapter

    def test_unsafe_type_through_generic_intermediate_is_rejected(self) -> None:
        class UnsafeLookup(_Lookup[UnsafePerson]):
            pass

        with pytest.raises(ConfigurationError, match="thread-unsafe"):
            UnsafeLookup().generate_binding(_noop)

    def test_adapter_base_type_must_cover_mapped_type(self) -> None:
        with pytest.raises(ConfigurationError, match="does not cover"):
            UnsafePersonRequest(CopyingThreadAdapter(str)).generate_binding(_noop)


class TestAdHocRequests:
    def test_single_object_request(self) -> None:
        request = single_object_request(QUERY, ModelMapping(Person))
        assert isinstance(request, ObjectRequest)
        assert request.mapped_type is Person
        assert request.query is QUERY
        assert isinstance(request.generate_binding(_noop), SingleObjectBinding)

    def test_collection_request(self) -> None:
        request = collection_request(QUERY, ModelMapping(Person))
        assert isinstance(request, CollectionRequest)
        assert isinstance(request.generate_binding(_noop), CollectionBinding)

    def test_mapping_factory_is_called_per_evaluation(self) -> None:
        created = []

        def factory() -> ModelMapping[Person]:
            mapping = ModelMapping(Person)
            created.append(mapping)
            return mapping

        request = single_object_request(QUERY, factory, mapped_type=Person)
        binding = request.generate_binding(_noop)
        assert created == []
        binding.mapping_provider()
        binding.mapping_provider()
        assert len(created) == 2

    def test_mapping_factory_requires_mapped_type(self) -> None:
        with pytest.raises(ConfigurationError, match="mapped_type"):
            single_object_request(QUERY, lambda: ModelMapping(UnsafePerson))
        with pytest.raises(ConfigurationError, match="mapped_type"):
            collection_request(QUERY, lambda: ModelMapping(Person))

    def test_mapping_factory_with_unsafe_mapped_type_checked_at_binding(self) -> None:
        request = single_object_request(
            QUERY, lambda: ModelMapping(UnsafePerson), mapped_type=UnsafePerson
        )
        with pytest.raises(ConfigurationError, match="thread-unsafe"):
            request.generate_binding(_noop)

    def test_collection_request_rejects_identity_equality_type(self) -> None:
        with pytest.raises(RequestDefinitionError, match="no value equality"):
            collection_request(QUERY, ModelMapping(PlainPerson))

    def test_unsafe_mapped_type_checked_at_binding(self) -> None:
        request = single_object_request(QUERY, ModelMapping(UnsafePerson))
        with pytest.raises(ConfigurationError):
            request.generate_binding(_noop)

    def test_hooks_are_forwarded(self) -> None:
        calls = []
        request = single_object_request(
            QUERY,
            ModelMapping(Person),
            will_send=lambda: calls.append("will_send"),
            did_finish_request=lambda metadata, payload: calls.append("did_finish_request"),
            did_finish=lambda result: calls.append("did_finish"),
        )
        request.will_send()
        request.did_finish_request(None, {})
        request.did_finish(Success(Person(1)))
        assert calls == ["will_send", "did_finish_request", "did_finish"]


class TestMapPayload:
    def test_single_object(self) -> None:
        binding = PersonRequest().generate_binding(_noop)
        assert map_payload(binding, {"id": 7}) == Person(7)

    def test_collection_in_payload_order(self) -> None:
        binding = PeopleRequest().generate_binding(_noop)
        assert map_payload(binding, [{"id": 2}, {"id": 1}]) == [Person(2), Person(1)]

    def test_empty_collection(self) -> None:
        binding = PeopleRequest().generate_binding(_noop)
        assert map_payload(binding, []) == []

    def test_null_collection_maps_to_empty(self) -> None:
        binding = PeopleRequest().generate_binding(_noop)
        assert map_payload(binding, None) == []

    def test_collection_requires_list(self) -> None:
        binding = PeopleRequest().generate_binding(_noop)
        with pytest.raises(MappingFailure, match="expected a list"):
            map_payload(binding, {"id": 1})

    def test_null_single_object_fails(self) -> None:
        binding = PersonRequest().generate_binding(_noop)
        with pytest.raises(MappingFailure, match="null"):
            map_payload(binding, None)

    def test_key_path_applied(self) -> None:
        request = collection_request(QUERY, ModelMapping(Person, key_path="viewer.friends"))
        binding = request.generate_binding(_noop)
        payload = {"viewer": {"friends": [{"id": 3}]}}
        assert map_payload(binding, payload) == [Person(3)]


class TestOnceCompletion:
    def test_fires_once(self) -> None:
        received = []
        completion = OnceCompletion(received.append, "PersonRequest")
        completion(Success(1))
        assert completion.fired is True
        assert received == [Success(1)]

    def test_second_delivery_raises(self) -> None:
        completion = OnceCompletion(None, "PersonRequest")
        completion(Success(1))
        with pytest.raises(CompletionAlreadyFiredError, match="PersonRequest"):
            completion(Success(2))
