"""Mapping result types.

A request's outcome is either ``Success(value)`` or ``Failure(error)``.
Failures always carry a :class:`PipelineError`, whose ``stage`` tells which
part of the pipeline failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from graph_bind.core.enums import Stage
from graph_bind.core.exceptions import PipelineError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome holding the mapped value."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Failed outcome holding the structured pipeline error."""

    error: PipelineError

    @property
    def ok(self) -> bool:
        return False

    @property
    def stage(self) -> Stage:
        return self.error.stage

    def unwrap(self) -> None:
        """Raise the carried error."""
        raise self.error


MappingResult = Union[Success[T], Failure]
