"""GraphQL-over-HTTP transport - sync and async, using httpx."""

from __future__ import annotations

import httpx

from graph_bind.core.config import ClientConfig
from graph_bind.core.exceptions import ConfigurationError, GraphQLResponseError, TransportFailure
from graph_bind.core.query import Query
from graph_bind.transport.protocol import TransportMetadata, TransportResponse


def _require_url(config: ClientConfig) -> str:
    if not config.url:
        raise ConfigurationError("HTTP transport requires ClientConfig.url")
    return config.url


def _decode_response(response: httpx.Response) -> TransportResponse:
    """Turn an HTTP response into a TransportResponse.

    The GraphQL envelope's ``data`` member becomes the payload. A non-empty
    ``errors`` member fails the whole response.
    """
    url = str(response.request.url)
    if not response.is_success:
        raise TransportFailure(
            f"HTTP {response.status_code} from {url}: {response.text[:200]}"
        )

    try:
        body = response.json()
    except ValueError as e:
        raise TransportFailure(f"response from {url} is not JSON: {e}") from e

    if not isinstance(body, dict):
        raise TransportFailure(f"response from {url} is not a GraphQL envelope")

    errors = body.get("errors")
    if errors:
        raise GraphQLResponseError(list(errors))
    if "data" not in body:
        raise TransportFailure(f"response from {url} has no 'data' member")

    metadata = TransportMetadata(
        status_code=response.status_code,
        headers=dict(response.headers),
        url=url,
    )
    return TransportResponse(metadata=metadata, payload=body["data"])


class HttpSyncTransport:
    """Synchronous GraphQL transport using ``httpx.Client``.

    Args:
        config: Client configuration; ``url``, ``headers`` and ``timeout``
            are used.
        client: Optional pre-built client, e.g. one with a mock transport.
    """

    def __init__(self, config: ClientConfig, client: httpx.Client | None = None) -> None:
        self._url = _require_url(config)
        self._timeout = config.timeout
        self._client = client or httpx.Client(headers=config.headers, timeout=config.timeout)

    def send(self, query: Query) -> TransportResponse:
        """POST the query and decode the GraphQL response."""
        try:
            response = self._client.post(self._url, json=query.to_payload())
        except httpx.TimeoutException as e:
            raise TransportFailure(f"timeout after {self._timeout}s: POST {self._url}") from e
        except httpx.HTTPError as e:
            raise TransportFailure(f"POST {self._url} failed: {e}") from e
        return _decode_response(response)

    def close(self) -> None:
        self._client.close()


class HttpAsyncTransport:
    """Asynchronous GraphQL transport using ``httpx.AsyncClient``."""

    def __init__(self, config: ClientConfig, client: httpx.AsyncClient | None = None) -> None:
        self._url = _require_url(config)
        self._timeout = config.timeout
        self._client = client or httpx.AsyncClient(headers=config.headers, timeout=config.timeout)

    async def send_async(self, query: Query) -> TransportResponse:
        """POST the query asynchronously and decode the GraphQL response."""
        try:
            response = await self._client.post(self._url, json=query.to_payload())
        except httpx.TimeoutException as e:
            raise TransportFailure(f"timeout after {self._timeout}s: POST {self._url}") from e
        except httpx.HTTPError as e:
            raise TransportFailure(f"POST {self._url} failed: {e}") from e
        return _decode_response(response)

    async def close_async(self) -> None:
        await self._client.aclose()

