"""
Snapshot pipeline for the whazzup feed.

This module coordinates all components to keep the local copy of the IVAO
feed current without violating the network's polling rules:
- Freshness gate on the status document (refreshed once a day)
- Status document parsing to discover the snapshot mirrors
- Freshness gate on the snapshot (fetched at most every five minutes)
- Download through the resource fetcher
- Line filtering and record decoding
- Persistence of the clean snapshot and the JSON aggregate

The status check runs as soon as the pipeline is created, so the mirror
list is current before any snapshot operation is attempted.
"""

import json
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .config import PipelineConfig
from .decoder import DecodeResult, RecordDecoder, split_lines
from .enums import ConfigurationErrorCode, PipelineState
from .exceptions import ConfigurationError, WhazzupError
from .feed_logger import FeedLogger
from .fetcher import ResourceFetcher
from .freshness import Clock, FreshnessGate, utc_now
from .status_document import StatusDocument
from .storage import FileStorage
from .transport import ByteFetcher, HttpTransport


@dataclass
class FetchResult:
    """Result of a fetch_snapshot call."""

    state: PipelineState
    refreshed: bool
    snapshot_path: Path
    counts: dict[str, int] = field(default_factory=dict)
    skipped: int = 0
    clean_lines: int = 0


class SnapshotPipeline:
    """
    Orchestrates freshness checks, downloads and decoding.

    The configuration is immutable; the pipeline only owns the cached
    status document, the current state and the snapshot location.
    """

    def __init__(
        self,
        config: PipelineConfig,
        transport: Optional[ByteFetcher] = None,
        storage: Optional[FileStorage] = None,
        logger: Optional[FeedLogger] = None,
        clock: Clock = utc_now,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize the pipeline and enforce status freshness.

        Args:
            config: Pipeline configuration
            transport: Optional byte fetcher; defaults to an HttpTransport
                identifying itself with config.app_name
            storage: Optional persistence backend
            logger: Optional logger; built from config.logging if omitted
            clock: Source of the current time
            rng: Random source for mirror selection

        Raises:
            ConfigurationError: If no application name is configured
            TransportError: If the status document cannot be downloaded
            ParseError: If a freshly downloaded status document is invalid
        """
        if not config.app_name or not config.app_name.strip():
            raise ConfigurationError(
                code=ConfigurationErrorCode.MISSING_APP_NAME.value,
                message="An application name must be given to identify against IVAO",
            )

        self._config = config
        self._logger = logger or FeedLogger.from_config(config.logging)
        self._owns_transport = transport is None
        self._transport = transport or HttpTransport(
            config.app_name,
            timeout=config.http_timeout,
            logger=self._logger,
        )
        self._storage = storage or FileStorage()
        self._fetcher = ResourceFetcher(self._transport, self._storage, rng=rng, logger=self._logger)
        self._decoder = RecordDecoder(clock=clock, logger=self._logger)
        self._status_gate = FreshnessGate(config.status_policy, clock)
        self._snapshot_gate = FreshnessGate(config.snapshot_policy, clock)

        self._snapshot_path = config.storage.snapshot_path
        self._status: Optional[StatusDocument] = None
        self._state = PipelineState.IDLE
        self._status_refreshed = False

        self.check_status()

    def __enter__(self) -> "SnapshotPipeline":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def status_refreshed(self) -> bool:
        """Whether the last status check downloaded a new document."""
        return self._status_refreshed

    @property
    def snapshot_path(self) -> Path:
        return self._snapshot_path

    @property
    def status_document(self) -> StatusDocument:
        """
        The current status document, loaded from disk if not cached.

        Raises:
            ConfigurationError: If no status document has been persisted
        """
        return self._load_status()

    def check_status(self) -> bool:
        """
        Refresh the status document if it is missing or stale.

        Returns:
            True if a new status document was downloaded
        """
        self._transition(PipelineState.STATUS_CHECK)
        status_path = self._config.storage.status_path

        try:
            if not self._status_gate.check(self._storage, status_path):
                self._transition(PipelineState.STATUS_FRESH)
                self._status_refreshed = False
                return False

            self._transition(PipelineState.STATUS_REFRESH)
            content = self._fetcher.fetch_url(self._config.status_url)
            document = StatusDocument.parse(content, self._config.feed_encoding)
            self._storage.write_bytes(status_path, content)
        except WhazzupError as e:
            self._fail("Status refresh failed", e)
            raise

        self._status = document
        self._status_refreshed = True
        self._logger.info("SnapshotPipeline", "Status document refreshed", {
            "gz_urls": len(document.gz_urls),
            "plain_url": document.plain_url,
        })
        return True

    def fetch_snapshot(self, target_path: Optional[Union[str, Path]] = None) -> FetchResult:
        """
        Download and decode the snapshot if the polling rules allow it.

        Args:
            target_path: Optional new location for the raw snapshot; it is
                kept for subsequent calls

        Returns:
            FetchResult describing what happened

        Raises:
            ConfigurationError: If the status document is missing or lists no URL
            TransportError: If the download fails
        """
        if target_path is not None:
            self._snapshot_path = Path(str(target_path).strip())

        self._transition(PipelineState.SNAPSHOT_CHECK)
        storage_config = self._config.storage

        try:
            if not self._snapshot_gate.check(self._storage, self._snapshot_path):
                self._transition(PipelineState.SNAPSHOT_FRESH)
                self._transition(PipelineState.DONE)
                return FetchResult(
                    state=self._state,
                    refreshed=False,
                    snapshot_path=self._snapshot_path,
                )

            status = self._load_status()

            self._transition(PipelineState.SNAPSHOT_REFRESH)
            content = self._fetcher.fetch(
                status,
                target=self._snapshot_path,
                compressed_target=storage_config.compressed_path,
            )

            self._transition(PipelineState.DECODE)
            text = content.decode(self._config.feed_encoding, errors="replace")
            result = self._decoder.decode_lines(
                split_lines(text),
                create_rich_record=self._config.create_json,
            )

            self._storage.delete(storage_config.clean_path)
            self._storage.write_bytes(
                storage_config.clean_path,
                "".join(result.clean_lines).encode("utf-8"),
            )
            if self._config.create_json:
                self._storage.write_bytes(
                    storage_config.json_path,
                    json.dumps(result.to_json_dict(), ensure_ascii=False).encode("utf-8"),
                )
        except WhazzupError as e:
            self._fail("Snapshot refresh failed", e)
            raise

        self._transition(PipelineState.DONE)
        counts = {client_type: len(records) for client_type, records in result.records.items()}
        self._logger.info("SnapshotPipeline", "Snapshot refreshed", {
            "clean_lines": len(result.clean_lines),
            "counts": counts,
            "skipped": result.skipped,
        })
        return FetchResult(
            state=self._state,
            refreshed=True,
            snapshot_path=self._snapshot_path,
            counts=counts,
            skipped=result.skipped,
            clean_lines=len(result.clean_lines),
        )

    def load_clean_records(self) -> Optional[DecodeResult]:
        """
        Decode the persisted clean snapshot without touching the network.

        Returns:
            DecodeResult, or None if no clean snapshot exists
        """
        content = self._storage.read_bytes(self._config.storage.clean_path)
        if content is None:
            return None
        text = content.decode("utf-8", errors="replace")
        return self._decoder.decode_lines(split_lines(text), create_rich_record=True)

    def get_decoded_json(self) -> Optional[str]:
        """
        Get all participants of the clean snapshot as JSON grouped by client type.

        Returns:
            JSON string, or None if no clean snapshot exists
        """
        result = self.load_clean_records()
        if result is None:
            return None
        return json.dumps(result.to_json_dict(), ensure_ascii=False)

    def close(self) -> None:
        """Close the transport if the pipeline created it."""
        if self._owns_transport and isinstance(self._transport, HttpTransport):
            self._transport.close()

    def _load_status(self) -> StatusDocument:
        if self._status is not None:
            return self._status

        content = self._storage.read_bytes(self._config.storage.status_path)
        if content is None:
            raise ConfigurationError(
                code=ConfigurationErrorCode.STATUS_MISSING.value,
                message="Local status document is not available",
                details={"file_path": str(self._config.storage.status_path)},
            )
        self._status = StatusDocument.parse(content, self._config.feed_encoding)
        return self._status

    def _transition(self, state: PipelineState) -> None:
        self._logger.debug("SnapshotPipeline", "State transition", {
            "from": self._state.value,
            "to": state.value,
        })
        self._state = state

    def _fail(self, message: str, error: WhazzupError) -> None:
        self._logger.log_error("SnapshotPipeline", message, error=error, additional_data={
            "state": self._state.value,
        })
        self._state = PipelineState.FAILED
