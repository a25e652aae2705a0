"""Pipeline enumerations."""

from __future__ import annotations

from enum import Enum


class Stage(Enum):
    """Pipeline stages, in execution order."""

    PRE_SEND = "will_send"
    TRANSPORT = "transport"
    POST_TRANSPORT = "did_finish_request"
    MAPPING = "mapping"
    POST_MAPPING = "did_finish"


class BindingShape(Enum):
    """Result shape a request is bound to."""

    OBJECT = "object"
    COLLECTION = "collection"
