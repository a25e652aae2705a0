"""GraphBind - typed request/response binding for GraphQL clients."""

from __future__ import annotations

from graph_bind.core.binding import (
    CollectionBinding,
    ObjectBinding,
    OnceCompletion,
    SingleObjectBinding,
)
from graph_bind.core.config import ClientConfig
from graph_bind.core.engine import AsyncEngine, Engine
from graph_bind.core.enums import BindingShape, Stage
from graph_bind.core.exceptions import (
    CompletionAlreadyFiredError,
    ConfigurationError,
    GraphBindError,
    GraphQLResponseError,
    MappingFailure,
    PipelineError,
    PostMappingHookFailure,
    PostTransportFailure,
    PreSendFailure,
    RequestDefinitionError,
    TransportFailure,
)
from graph_bind.core.query import GraphQuery, Query
from graph_bind.core.request import (
    CollectionRequest,
    ObjectRequest,
    Request,
    collection_request,
    single_object_request,
)
from graph_bind.core.result import Failure, MappingResult, Success
from graph_bind.core.thread_adapter import (
    CallableThreadAdapter,
    CopyingThreadAdapter,
    ThreadAdapter,
    ThreadUnsafe,
    requires_thread_adapter,
)
from graph_bind.mapping import Mapping, ModelMapping, VoidMapping
from graph_bind.transport.protocol import TransportMetadata, TransportResponse

__all__ = [
    # Config
    "ClientConfig",
    # Engine
    "Engine",
    "AsyncEngine",
    # Requests
    "Request",
    "ObjectRequest",
    "CollectionRequest",
    "single_object_request",
    "collection_request",
    # Query
    "Query",
    "GraphQuery",
    # Bindings
    "ObjectBinding",
    "SingleObjectBinding",
    "CollectionBinding",
    "OnceCompletion",
    # Results
    "MappingResult",
    "Success",
    "Failure",
    # Mapping
    "Mapping",
    "ModelMapping",
    "VoidMapping",
    # Thread adaptation
    "ThreadAdapter",
    "ThreadUnsafe",
    "CopyingThreadAdapter",
    "CallableThreadAdapter",
    "requires_thread_adapter",
    # Transport
    "TransportMetadata",
    "TransportResponse",
    # Enums
    "BindingShape",
    "Stage",
    # Exceptions
    "GraphBindError",
    "RequestDefinitionError",
    "ConfigurationError",
    "CompletionAlreadyFiredError",
    "PipelineError",
    "PreSendFailure",
    "TransportFailure",
    "GraphQLResponseError",
    "PostTransportFailure",
    "MappingFailure",
    "PostMappingHookFailure",
]
