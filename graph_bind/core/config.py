"""Client configuration and transport loading.

ClientConfig is a Pydantic model for type-safe client config. Transports are
loaded by name so optional ones are only imported when used.
"""

from __future__ import annotations

import importlib
from typing import Any

from pydantic import BaseModel, Field

from graph_bind.core.exceptions import ConfigurationError


class ClientConfig(BaseModel):
    """Configuration for a GraphQL client."""

    transport: str = "http"
    url: str | None = None
    headers: dict[str, str] = {}
    timeout: float = Field(default=30.0, gt=0)
    mapping_workers: int = Field(default=4, ge=1)
    extra: dict[str, Any] = {}


# Transport module mapping: name → (module_path, sync_class, async_class)
_TRANSPORT_MAP: dict[str, tuple[str, str, str]] = {
    "http": ("graph_bind.transport.http", "HttpSyncTransport", "HttpAsyncTransport"),
    "memory": ("graph_bind.transport.memory", "MemorySyncTransport", "MemoryAsyncTransport"),
}


def load_transport(config: ClientConfig, kind: str) -> Any:
    """Load a sync or async transport by the configured name."""
    name = config.transport.lower()
    if name not in _TRANSPORT_MAP:
        raise ConfigurationError(f"Unsupported transport: {config.transport}")

    module_path, sync_cls_name, async_cls_name = _TRANSPORT_MAP[name]
    cls_name = sync_cls_name if kind == "sync" else async_cls_name

    try:
        module = importlib.import_module(module_path)
        transport_cls = getattr(module, cls_name)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Failed to load {kind} transport '{name}': {e}") from e
    return transport_cls(config)
