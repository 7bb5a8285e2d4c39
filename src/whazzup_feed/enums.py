"""
Enumeration types for the whazzup feed pipeline.

These enums provide type-safe constants for client types, time units,
pipeline states, and error codes throughout the system.
"""

from enum import Enum


class ClientType(Enum):
    """Participant kind as announced in the snapshot."""

    ATC = "ATC"
    PILOT = "PILOT"


class TimeUnit(Enum):
    """Units a freshness policy can be expressed in."""

    HOURS = "hours"
    MINUTES = "minutes"

    @property
    def seconds(self) -> int:
        """Length of one unit in seconds."""
        if self is TimeUnit.HOURS:
            return 3600
        return 60


class PipelineState(Enum):
    """States of the snapshot pipeline."""

    IDLE = "idle"
    STATUS_CHECK = "status_check"
    STATUS_FRESH = "status_fresh"
    STATUS_REFRESH = "status_refresh"
    SNAPSHOT_CHECK = "snapshot_check"
    SNAPSHOT_FRESH = "snapshot_fresh"
    SNAPSHOT_REFRESH = "snapshot_refresh"
    DECODE = "decode"
    DONE = "done"
    FAILED = "failed"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return list(LogLevel).index(self)


class ConfigurationErrorCode(Enum):
    """Error codes for configuration failures."""

    MISSING_APP_NAME = "missing_app_name"
    NO_CANDIDATE_URL = "no_candidate_url"
    STATUS_MISSING = "status_missing"


class TransportErrorCode(Enum):
    """Error codes for transport failures."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    DECOMPRESSION_FAILED = "decompression_failed"


class ParseErrorCode(Enum):
    """Error codes for status document parse failures."""

    INVALID_SYNTAX = "invalid_syntax"
    INVALID_ENCODING = "invalid_encoding"
