"""
Resource fetcher for the whazzup feed.

Downloads the snapshot through one of the mirrors announced in the status
document. Compressed mirrors are preferred; one is picked at random so that
load is spread across them. When the status document lists no compressed
mirror, the plain url0 is used instead.
"""

import gzip
import random
import zlib
from pathlib import Path
from typing import Optional

from .enums import ConfigurationErrorCode, LogLevel, TransportErrorCode
from .exceptions import ConfigurationError, TransportError
from .feed_logger import FeedLogger
from .status_document import StatusDocument
from .storage import FileStorage
from .transport import ByteFetcher


def gunzip(data: bytes) -> bytes:
    """
    Decompress a gzip payload.

    Raises:
        TransportError: If the payload is not valid gzip data
    """
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise TransportError(
            code=TransportErrorCode.DECOMPRESSION_FAILED.value,
            message=f"Failed to decompress payload: {e}",
            details={"size": len(data)},
        )


class ResourceFetcher:
    """Downloads feed resources and persists what it downloaded."""

    def __init__(
        self,
        transport: ByteFetcher,
        storage: FileStorage,
        rng: Optional[random.Random] = None,
        logger: Optional[FeedLogger] = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            transport: Capability used for the actual byte transfer
            storage: Where downloaded artifacts are written
            rng: Random source for mirror selection
            logger: Optional logger
        """
        self._transport = transport
        self._storage = storage
        self._rng = rng or random.Random()
        self._logger = logger

    def select_url(self, candidates: StatusDocument) -> tuple[str, bool]:
        """
        Pick the URL to download the snapshot from.

        Returns:
            Tuple of (url, compressed)

        Raises:
            ConfigurationError: If the document lists no usable URL
        """
        if not candidates.has_candidates:
            raise ConfigurationError(
                code=ConfigurationErrorCode.NO_CANDIDATE_URL.value,
                message="Status document lists neither a gzurl nor url0",
                details={"keys": sorted(candidates)},
            )

        gz_urls = candidates.gz_urls
        if gz_urls:
            return self._rng.choice(gz_urls), True
        return candidates.plain_url, False

    def fetch(
        self,
        candidates: StatusDocument,
        target: Path,
        compressed_target: Path,
    ) -> bytes:
        """
        Download the snapshot and persist it.

        Both the compressed artifact and the decompressed result are written
        only once decompression succeeded.

        Args:
            candidates: Parsed status document
            target: Where the decompressed snapshot is written
            compressed_target: Where the compressed payload is written

        Returns:
            The decompressed snapshot bytes

        Raises:
            ConfigurationError: If no candidate URL is available
            TransportError: If the download or decompression fails
        """
        url, compressed = self.select_url(candidates)
        self._log(LogLevel.INFO, "Downloading snapshot", {"url": url, "compressed": compressed})

        payload = self._transport.fetch_bytes(url)

        if compressed:
            content = gunzip(payload)
            self._storage.write_bytes(compressed_target, payload)
        else:
            content = payload

        self._storage.write_bytes(target, content)
        self._log(LogLevel.DEBUG, "Snapshot persisted", {"path": str(target), "bytes": len(content)})
        return content

    def fetch_url(self, url: str, target: Optional[Path] = None) -> bytes:
        """
        Download a single resource, optionally persisting it.

        Raises:
            TransportError: If the download fails
        """
        self._log(LogLevel.INFO, "Downloading resource", {"url": url})
        content = self._transport.fetch_bytes(url)
        if target is not None:
            self._storage.write_bytes(target, content)
        return content

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "ResourceFetcher", message, data)
