"""Delivery transports.

A transport sends one serialized payload to the fixed remote target and
returns whatever response it received. Any exception it raises is treated
as a failed delivery of that single item.
"""

from __future__ import annotations

from typing import Any, Protocol, Self

import httpx

from document_dispatcher.config import TransportConfig, get_settings
from document_dispatcher.logging import get_logger

logger = get_logger(__name__)


class Transport(Protocol):
    """Send bytes, receive a response or raise.

    ``deliver`` may be a coroutine function or a plain blocking function;
    blocking transports are run in a worker thread by the executor.
    """

    def deliver(self, payload: bytes) -> Any: ...


class HttpTransport:
    """POSTs each payload to the configured URL with httpx.

    Non-2xx responses are returned, not raised: interpreting the response
    is left to the completion handler.

    Usage:
        async with HttpTransport() as transport:
            response = await transport.deliver(b'{"doc_id": "1"}')
            print(response.status_code)
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Optional transport configuration (uses settings if not provided)
            client: Optional pre-built httpx client (the transport closes it)
        """
        self._config = config or get_settings().transport
        self._client = client

    @property
    def config(self) -> TransportConfig:
        """Get the transport configuration."""
        return self._config

    @property
    def _http(self) -> httpx.AsyncClient:
        """Get or create the httpx client instance."""
        if self._client is None:
            timeout = httpx.Timeout(self._config.timeout_seconds)
            self._client = httpx.AsyncClient(timeout=timeout)
        return self._client

    async def deliver(self, payload: bytes) -> httpx.Response:
        """POST the payload and return the response.

        Raises:
            httpx.TransportError: On connection, timeout or protocol failure
        """
        headers = {"Content-Type": self._config.content_type, **self._config.headers}
        response = await self._http.post(self._config.url, content=payload, headers=headers)
        logger.debug(
            "POST {} -> {} ({} bytes sent)",
            self._config.url,
            response.status_code,
            len(payload),
        )
        return response

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
