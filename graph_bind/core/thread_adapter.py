"""Thread adaptation.

Mapped objects are produced on a worker thread of the engine's mapping pool.
Types that must not be shared across threads inherit :class:`ThreadUnsafe`;
requests mapping such types have to supply a :class:`ThreadAdapter`, which
turns the worker-produced value into one safe to use in the destination
context (the event loop or the thread that called ``send``).
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


class ThreadUnsafe:
    """Marker base for mapped types that must not cross threads unadapted."""

    __slots__ = ()


def requires_thread_adapter(cls: Any) -> bool:
    """Return True if instances of *cls* need a ThreadAdapter."""
    return isinstance(cls, type) and issubclass(cls, ThreadUnsafe)


@runtime_checkable
class ThreadAdapter(Protocol):
    """Converts a mapped value for use in another execution context.

    ``adapt`` receives either one mapped object or the list of mapped objects
    of a collection request. It is called at most once per completed fetch.
    """

    @property
    def base_type(self) -> type:
        """Type (or super type) of the objects this adapter handles."""
        ...

    def adapt(self, value: Any) -> Any:
        """Return a destination-safe equivalent of *value*."""
        ...


class CopyingThreadAdapter:
    """Adapter that hands over a deep copy of the mapped value.

    Args:
        base_type: Type (or super type) of the adapted objects.
    """

    def __init__(self, base_type: type = object) -> None:
        self._base_type = base_type

    @property
    def base_type(self) -> type:
        return self._base_type

    def adapt(self, value: Any) -> Any:
        return copy.deepcopy(value)


class CallableThreadAdapter:
    """Adapter delegating to a plain function.

    Args:
        base_type: Type (or super type) of the adapted objects.
        func: Called with the mapped value; its return value is delivered.
    """

    def __init__(self, base_type: type, func: Callable[[Any], Any]) -> None:
        self._base_type = base_type
        self._func = func

    @property
    def base_type(self) -> type:
        return self._base_type

    def adapt(self, value: Any) -> Any:
        return self._func(value)
