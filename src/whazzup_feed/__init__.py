"""
Whazzup Feed - polite downloader and decoder for the IVAO whazzup feed.

This package keeps a local copy of the IVAO status document and snapshot,
re-fetching only as often as the network allows, and decodes the snapshot
into structured pilot and ATC records.
"""

__version__ = "0.1.0"
__author__ = "Whazzup Feed Team"

from whazzup_feed.exceptions import (
    WhazzupError,
    ConfigurationError,
    TransportError,
    ParseError,
    MalformedRecordError,
    PersistenceError,
)
from whazzup_feed.enums import (
    ClientType,
    TimeUnit,
    PipelineState,
    LogLevel,
    ConfigurationErrorCode,
    TransportErrorCode,
    ParseErrorCode,
)
from whazzup_feed.config import (
    DEFAULT_STATUS_URL,
    FreshnessPolicy,
    StorageConfig,
    LoggingConfig,
    PipelineConfig,
)
from whazzup_feed.models import (
    FIELD_POSITIONS,
    MIN_FIELD_COUNT,
    Position,
    FlightData,
    FlightPlan,
    Software,
    ParticipantRecord,
)
from whazzup_feed.feed_logger import (
    FeedLogger,
    LogEntry,
)
from whazzup_feed.storage import (
    FileStorage,
)
from whazzup_feed.freshness import (
    FreshnessGate,
    file_age,
    needs_refresh,
)
from whazzup_feed.transport import (
    ByteFetcher,
    HttpTransport,
)
from whazzup_feed.status_document import (
    StatusDocument,
)
from whazzup_feed.fetcher import (
    ResourceFetcher,
    gunzip,
)
from whazzup_feed.decoder import (
    ATC_RATINGS,
    PILOT_RATINGS,
    DecodeResult,
    RecordDecoder,
    decode_rating,
    is_participant_line,
    online_duration,
    split_lines,
)
from whazzup_feed.pipeline import (
    FetchResult,
    SnapshotPipeline,
)
from whazzup_feed.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    # Exceptions
    "WhazzupError",
    "ConfigurationError",
    "TransportError",
    "ParseError",
    "MalformedRecordError",
    "PersistenceError",
    # Enums
    "ClientType",
    "TimeUnit",
    "PipelineState",
    "LogLevel",
    "ConfigurationErrorCode",
    "TransportErrorCode",
    "ParseErrorCode",
    # Configuration
    "DEFAULT_STATUS_URL",
    "FreshnessPolicy",
    "StorageConfig",
    "LoggingConfig",
    "PipelineConfig",
    # Models
    "FIELD_POSITIONS",
    "MIN_FIELD_COUNT",
    "Position",
    "FlightData",
    "FlightPlan",
    "Software",
    "ParticipantRecord",
    # Logging
    "FeedLogger",
    "LogEntry",
    # Storage
    "FileStorage",
    # Freshness
    "FreshnessGate",
    "file_age",
    "needs_refresh",
    # Transport
    "ByteFetcher",
    "HttpTransport",
    # Status document
    "StatusDocument",
    # Fetcher
    "ResourceFetcher",
    "gunzip",
    # Decoder
    "ATC_RATINGS",
    "PILOT_RATINGS",
    "DecodeResult",
    "RecordDecoder",
    "decode_rating",
    "is_participant_line",
    "online_duration",
    "split_lines",
    # Pipeline
    "FetchResult",
    "SnapshotPipeline",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
]
