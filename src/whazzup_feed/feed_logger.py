"""
Structured logger for the whazzup feed pipeline.

Every component reports through one FeedLogger: state transitions, mirror
choices, downloads and skipped records. Entries are written as JSON lines,
as text, or both, and anything below the configured level is dropped.
"""

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, TextIO

from whazzup_feed.enums import LogLevel


@dataclass
class LogEntry:
    """One emitted log line."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)


class FeedLogger:
    """
    Level-filtered logger writing to a text stream.

    Emitted entries are also kept in memory so callers can inspect what a
    pipeline run reported.
    """

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        level: LogLevel = LogLevel.INFO,
    ):
        """
        Args:
            output_format: 'json', 'text' or 'both'
            output_stream: Destination, stderr when omitted
            level: Entries below this level are discarded
        """
        if output_format not in ("json", "text", "both"):
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._output_stream = output_stream or sys.stderr
        self._level = level
        self._entries: list[LogEntry] = []

    @classmethod
    def from_config(cls, config, output_stream: Optional[TextIO] = None) -> "FeedLogger":
        """Build a logger from a LoggingConfig."""
        return cls(
            output_format=config.output_format,
            output_stream=output_stream,
            level=LogLevel(config.level),
        )

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def entries(self) -> list[LogEntry]:
        return self._entries.copy()

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Emit an entry unless it is below the threshold.

        Returns:
            The emitted LogEntry, or None when it was filtered out
        """
        if level.rank < self._level.rank:
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=dict(data or {}),
        )
        self._entries.append(entry)
        self._write(entry)
        return entry

    def debug(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, component, message, data)

    def info(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, component, message, data)

    def warn(self, component: str, message: str, data: Optional[dict] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, component, message, data)

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[Exception] = None,
        request_url: Optional[str] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Emit an ERROR entry describing a failure.

        The exception's message, class name and, for WhazzupError, its
        code are added to the entry data, as is the URL being fetched.
        """
        data = dict(additional_data or {})

        if error is not None:
            data["error_message"] = str(error)
            data["error_type"] = type(error).__name__
            code = getattr(error, "code", None)
            if code is not None:
                data["error_code"] = code

        if request_url is not None:
            data["request_url"] = request_url

        return self.log(LogLevel.ERROR, component, message, data)

    def format_json(self, entry: LogEntry) -> str:
        return json.dumps({
            "timestamp": entry.timestamp,
            "level": entry.level.value,
            "component": entry.component,
            "message": entry.message,
            "data": entry.data,
        }, ensure_ascii=False)

    def format_text(self, entry: LogEntry) -> str:
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False)
        return line

    def clear_entries(self) -> None:
        self._entries.clear()

    def _write(self, entry: LogEntry) -> None:
        if self._output_format in ("json", "both"):
            self._output_stream.write(self.format_json(entry) + "\n")
        if self._output_format in ("text", "both"):
            self._output_stream.write(self.format_text(entry) + "\n")
        self._output_stream.flush()
