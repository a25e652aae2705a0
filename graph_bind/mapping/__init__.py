"""Mapping layer - transform JSON nodes into typed objects."""

from __future__ import annotations

from graph_bind.mapping.model import ModelMapping, resolve_key_path
from graph_bind.mapping.protocol import Mapping
from graph_bind.mapping.void import VOID_SENTINEL, VoidMapping

__all__ = [
    "Mapping",
    "ModelMapping",
    "resolve_key_path",
    "VoidMapping",
    "VOID_SENTINEL",
]
