"""GraphBind exception hierarchy.

Every failure raised by the request pipeline is a GraphBind-specific
exception. Errors coming out of hooks, mappings or transports are wrapped in
the failure class of the stage they happened in, with the original exception
chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Any

from graph_bind.core.enums import Stage


class GraphBindError(Exception):
    """Base exception for all GraphBind errors."""


# --- Definition / configuration ---


class RequestDefinitionError(GraphBindError, TypeError):
    """Raised when a Request class declares an invalid result shape."""

    def __init__(self, class_name: str, detail: str) -> None:
        self.class_name = class_name
        super().__init__(f"Invalid request definition '{class_name}': {detail}")


class ConfigurationError(GraphBindError):
    """Raised for programmer errors detected before any network activity."""


class CompletionAlreadyFiredError(GraphBindError):
    """Raised when a completion callback is delivered a second time."""

    def __init__(self, request_name: str) -> None:
        self.request_name = request_name
        super().__init__(f"Completion for '{request_name}' already fired")


# --- Pipeline ---


class PipelineError(GraphBindError):
    """Base for failures of a single request's pipeline.

    Attributes:
        stage: The pipeline stage that failed.
        detail: Human readable description of the failure.
    """

    stage: Stage

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"{self.stage.value} failed: {detail}")

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self.detail,), self.__dict__)


class PreSendFailure(PipelineError):
    """Raised when ``will_send`` fails; nothing was dispatched."""

    stage = Stage.PRE_SEND


class TransportFailure(PipelineError):
    """Raised when the transport cannot produce a payload."""

    stage = Stage.TRANSPORT


class GraphQLResponseError(TransportFailure):
    """Raised when the service answers with a non-empty ``errors`` list."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        messages = [str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors]
        super().__init__(f"GraphQL errors {messages}")

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self.errors,), self.__dict__)


class PostTransportFailure(PipelineError):
    """Raised when ``did_finish_request`` fails; mapping is skipped."""

    stage = Stage.POST_TRANSPORT


class MappingFailure(PipelineError):
    """Raised when mapping or thread adaptation fails."""

    stage = Stage.MAPPING


class PostMappingHookFailure(PipelineError):
    """Raised when ``did_finish`` fails. Reported, never delivered."""

    stage = Stage.POST_MAPPING
