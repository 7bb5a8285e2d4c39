"""
HTTP transport for the whazzup feed.

IVAO requires every consumer to identify itself; the caller-supplied
application name is sent as the User-Agent on every request. Redirects
are followed. Any transport problem surfaces as TransportError.
"""

from typing import Optional, Protocol, runtime_checkable

import httpx

from .enums import ConfigurationErrorCode, TransportErrorCode
from .exceptions import ConfigurationError, TransportError
from .feed_logger import FeedLogger


@runtime_checkable
class ByteFetcher(Protocol):
    """Interface for anything able to download a URL as bytes."""

    def fetch_bytes(self, url: str) -> bytes:
        """
        Download a resource.

        Raises:
            TransportError: If the download fails
        """
        ...


class HttpTransport:
    """
    Blocking ByteFetcher built on httpx.

    The underlying client is created lazily and reused until close().
    """

    def __init__(
        self,
        client_identifier: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[FeedLogger] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            client_identifier: Application name sent as User-Agent
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used for testing)
            logger: Optional logger

        Raises:
            ConfigurationError: If client_identifier is missing or blank
        """
        if client_identifier is None or not client_identifier.strip():
            raise ConfigurationError(
                code=ConfigurationErrorCode.MISSING_APP_NAME.value,
                message="An application name must be given to identify against IVAO",
            )
        self._client_identifier = client_identifier.strip()
        self._timeout = timeout
        self._transport = transport
        self._logger = logger
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def client_identifier(self) -> str:
        return self._client_identifier

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                headers={"User-Agent": self._client_identifier},
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def fetch_bytes(self, url: str) -> bytes:
        """
        Download url and return the response body.

        Raises:
            TransportError: On timeout, connection failure or HTTP status >= 400
        """
        if self._logger:
            self._logger.debug("HttpTransport", "GET", {"url": url})

        try:
            response = self._get_client().get(url)
        except httpx.TimeoutException as e:
            raise TransportError(
                code=TransportErrorCode.TIMEOUT.value,
                message=f"Request timed out after {self._timeout}s: {url}",
                details={"url": url, "error": str(e)},
            )
        except httpx.HTTPError as e:
            raise TransportError(
                code=TransportErrorCode.NETWORK_ERROR.value,
                message=f"Connection error: {e}",
                details={"url": url},
            )

        if response.status_code >= 400:
            raise TransportError(
                code=TransportErrorCode.HTTP_ERROR.value,
                message=f"Unexpected HTTP status {response.status_code}: {url}",
                details={"url": url, "http_status_code": response.status_code},
            )

        return response.content

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None
