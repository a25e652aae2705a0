"""Request execution engine.

The Engine binds a request to its result shape, sends its query through the
transport, maps the payload on a worker thread, adapts the mapped value for
the calling context and delivers the result.

For every request the order is:

    will_send -> transport -> did_finish_request -> mapping (worker thread)
    -> thread adaptation -> did_finish -> completion

A failing ``will_send`` (or a misconfigured request) raises out of ``send``
before anything is dispatched. A thread-unsafe mapped value reaching a
request without a thread adapter raises ``ConfigurationError`` as well.
Later failures are delivered as ``Failure`` to ``did_finish`` and the
completion callback, which fires exactly once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar, overload

from graph_bind.core.binding import Completion, ObjectBinding, OnceCompletion, map_payload
from graph_bind.core.config import ClientConfig, load_transport
from graph_bind.core.exceptions import (
    ConfigurationError,
    MappingFailure,
    PipelineError,
    PostMappingHookFailure,
    PostTransportFailure,
    PreSendFailure,
    TransportFailure,
)
from graph_bind.core.request import CollectionRequest, ObjectRequest, Request
from graph_bind.core.result import Failure, MappingResult, Success
from graph_bind.core.thread_adapter import ThreadUnsafe
from graph_bind.transport.protocol import AsyncTransport, SyncTransport

LOG = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=PipelineError)

HookErrorHandler = Callable[[PostMappingHookFailure], None]

# Failures delivered through the completion rather than raised from send().
_DELIVERED_FAILURES = (TransportFailure, PostTransportFailure, MappingFailure)


def _call_stage(failure_cls: type[E], func: Callable[..., Any], *args: Any) -> Any:
    """Call *func*, re-raising anything it raises as *failure_cls*."""
    try:
        return func(*args)
    except failure_cls:
        raise
    except Exception as e:
        raise failure_cls(f"{type(e).__name__}: {e}") from e


def _map_on_worker(binding: ObjectBinding[Any], payload: Any) -> Any:
    """Mapping-thread entry point."""
    return _call_stage(MappingFailure, map_payload, binding, payload)


def _adapt(binding: ObjectBinding[Any], value: Any) -> Any:
    """Apply the binding's thread adapter, if any.

    Raises:
        ConfigurationError: If there is no adapter and the mapped value holds
            a ThreadUnsafe object.
    """
    adapter = binding.thread_adapter
    if adapter is None:
        for item in value if isinstance(value, list) else (value,):
            if isinstance(item, ThreadUnsafe):
                raise ConfigurationError(
                    f"mapped {type(item).__name__} is thread-unsafe "
                    "but the request supplies no thread_adapter"
                )
        return value
    try:
        return adapter.adapt(value)
    except Exception as e:
        raise MappingFailure(f"thread adaptation failed: {type(e).__name__}: {e}") from e


def _finish(
    request: Request[Any, Any],
    binding: ObjectBinding[Any],
    result: MappingResult[Any],
    hook_error_handler: HookErrorHandler | None,
) -> None:
    """Run ``did_finish`` then the completion. A failing hook never changes *result*."""
    failure: PostMappingHookFailure | None = None
    try:
        request.did_finish(result)
    except Exception as e:
        failure = PostMappingHookFailure(f"{type(e).__name__}: {e}")
        failure.__cause__ = e
        LOG.warning("did_finish of %s failed: %s", request.name, e)

    try:
        binding.completion(result)
    finally:
        if failure is not None and hook_error_handler is not None:
            hook_error_handler(failure)


def _bind(request: Request[Any, Any], completion: Completion[Any] | None) -> ObjectBinding[Any]:
    """Generate the request's binding and run ``will_send``.

    Raises:
        ConfigurationError: If the request is misconfigured.
        PreSendFailure: If ``will_send`` fails.
    """
    binding = request.generate_binding(OnceCompletion(completion, request.name))  # type: ignore[attr-defined]
    LOG.debug("%s bound as %s", request.name, binding.shape.value)
    _call_stage(PreSendFailure, request.will_send)
    return binding


class Engine:
    """Synchronous request engine.

    ``send`` blocks the calling thread for the round trip. Mapping still runs
    on the engine's worker pool, and thread adaptation, ``did_finish`` and the
    completion run back on the calling thread.

    Args:
        transport: A SyncTransport.
        mapping_workers: Size of the mapping thread pool.
        hook_error_handler: Receives ``did_finish`` failures.
    """

    def __init__(
        self,
        transport: SyncTransport,
        *,
        mapping_workers: int = 4,
        hook_error_handler: HookErrorHandler | None = None,
    ) -> None:
        self._transport = transport
        self._hook_error_handler = hook_error_handler
        self._executor = ThreadPoolExecutor(
            max_workers=mapping_workers, thread_name_prefix="graph-bind-mapping"
        )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        hook_error_handler: HookErrorHandler | None = None,
    ) -> Engine:
        """Create an Engine from a ClientConfig.

        Args:
            config: ClientConfig instance
            hook_error_handler: Optional receiver of ``did_finish`` failures

        Returns:
            Engine instance
        """
        return cls(
            load_transport(config, "sync"),
            mapping_workers=config.mapping_workers,
            hook_error_handler=hook_error_handler,
        )

    @property
    def transport(self) -> SyncTransport:
        return self._transport

    @overload
    def send(
        self, request: ObjectRequest[T], completion: Completion[T] | None = None
    ) -> MappingResult[T]: ...

    @overload
    def send(
        self, request: CollectionRequest[T], completion: Completion[list[T]] | None = None
    ) -> MappingResult[list[T]]: ...

    def send(self, request: Any, completion: Any = None) -> Any:
        """Run *request* through the pipeline.

        Returns:
            The same MappingResult passed to the completion.

        Raises:
            ConfigurationError: If the request is misconfigured.
            PreSendFailure: If ``will_send`` fails.
        """
        binding = _bind(request, completion)

        result: MappingResult[Any]
        try:
            response = _call_stage(TransportFailure, self._transport.send, request.query)
            LOG.debug("%s received response %s", request.name, response.metadata.status_code)
            _call_stage(
                PostTransportFailure,
                request.did_finish_request,
                response.metadata,
                response.payload,
            )
            mapped = self._executor.submit(_map_on_worker, binding, response.payload).result()
            result = Success(_adapt(binding, mapped))
        except _DELIVERED_FAILURES as e:
            LOG.debug("%s failed at %s: %s", request.name, e.stage.value, e)
            result = Failure(e)

        _finish(request, binding, result, self._hook_error_handler)
        return result

    @overload
    def fetch(self, request: ObjectRequest[T]) -> T: ...

    @overload
    def fetch(self, request: CollectionRequest[T]) -> list[T]: ...

    def fetch(self, request: Any) -> Any:
        """Send *request* and return its value, raising its failure."""
        return self.send(request).unwrap()

    def close(self) -> None:
        """Close the transport and stop the mapping pool."""
        self._transport.close()
        self._executor.shutdown(wait=True)

    def __enter__(self) -> Engine:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncEngine:
    """Asynchronous request engine.

    The event loop is never blocked: transport I/O is awaited and mapping
    runs on the engine's worker pool. Thread adaptation, ``did_finish`` and
    the completion run back on the event loop.
    """

    def __init__(
        self,
        transport: AsyncTransport,
        *,
        mapping_workers: int = 4,
        hook_error_handler: HookErrorHandler | None = None,
    ) -> None:
        self._transport = transport
        self._hook_error_handler = hook_error_handler
        self._executor = ThreadPoolExecutor(
            max_workers=mapping_workers, thread_name_prefix="graph-bind-mapping"
        )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        hook_error_handler: HookErrorHandler | None = None,
    ) -> AsyncEngine:
        """Create an AsyncEngine from a ClientConfig."""
        return cls(
            load_transport(config, "async"),
            mapping_workers=config.mapping_workers,
            hook_error_handler=hook_error_handler,
        )

    @property
    def transport(self) -> AsyncTransport:
        return self._transport

    @overload
    async def send(
        self, request: ObjectRequest[T], completion: Completion[T] | None = None
    ) -> MappingResult[T]: ...

    @overload
    async def send(
        self, request: CollectionRequest[T], completion: Completion[list[T]] | None = None
    ) -> MappingResult[list[T]]: ...

    async def send(self, request: Any, completion: Any = None) -> Any:
        """Run *request* through the pipeline asynchronously.

        Cancelling the awaiting task before mapping starts skips mapping,
        adaptation, ``did_finish`` and the completion. Cancelling it while
        mapping runs delivers ``Failure(MappingFailure)`` before the
        cancellation propagates.
        """
        binding = _bind(request, completion)

        result: MappingResult[Any]
        try:
            try:
                response = await self._transport.send_async(request.query)
            except TransportFailure:
                raise
            except Exception as e:
                raise TransportFailure(f"{type(e).__name__}: {e}") from e
            LOG.debug("%s received response %s", request.name, response.metadata.status_code)
            _call_stage(
                PostTransportFailure,
                request.did_finish_request,
                response.metadata,
                response.payload,
            )
            loop = asyncio.get_running_loop()
            try:
                mapped = await loop.run_in_executor(
                    self._executor, _map_on_worker, binding, response.payload
                )
            except asyncio.CancelledError:
                LOG.debug("%s cancelled while mapping", request.name)
                cancelled = Failure(MappingFailure("cancelled while mapping"))
                _finish(request, binding, cancelled, self._hook_error_handler)
                raise
            result = Success(_adapt(binding, mapped))
        except _DELIVERED_FAILURES as e:
            LOG.debug("%s failed at %s: %s", request.name, e.stage.value, e)
            result = Failure(e)

        _finish(request, binding, result, self._hook_error_handler)
        return result

    @overload
    async def fetch(self, request: ObjectRequest[T]) -> T: ...

    @overload
    async def fetch(self, request: CollectionRequest[T]) -> list[T]: ...

    async def fetch(self, request: Any) -> Any:
        """Send *request* and return its value, raising its failure."""
        result = await self.send(request)
        return result.unwrap()

    async def aclose(self) -> None:
        """Close the transport and stop the mapping pool."""
        await self._transport.close_async()
        self._executor.shutdown(wait=False)

    async def __aenter__(self) -> AsyncEngine:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
