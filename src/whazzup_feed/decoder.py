"""
Record decoder for snapshot lines.

Each participant line of the snapshot is a colon-separated list of fields
whose meaning depends on its position (see models.FIELD_POSITIONS). The
decoder maps them onto a ParticipantRecord, turns the numeric rating into a
readable label, and derives how long the participant has been connected.

The feed is not strongly typed: numeric-looking fields are kept as the raw
strings they were sent as, and unusable ratings or connection times simply
leave the derived values empty.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from .enums import ClientType
from .exceptions import MalformedRecordError
from .feed_logger import FeedLogger
from .freshness import Clock, utc_now
from .models import (
    FIELD_POSITIONS,
    MIN_FIELD_COUNT,
    RATING_POSITION,
    ParticipantRecord,
    set_path,
)


ATC_RATINGS = (
    "Observer",
    "ATC Applicant - AS1",
    "ATC Trainee - AS2",
    "Advanced ATC Trainee - AS3",
    "Aerodrome Controller - ADC",
    "Approach Controller - APC",
    "Center Controller - ACC",
    "Senior Controller - SEC",
    "Senior ATC Instructor - SAI",
    "Chief ATC Instructor - CAI",
)

PILOT_RATINGS = (
    "Observer",
    "Basic Flight Student (FS1)",
    "Flight Student (FS2)",
    "Advanced Flight Student (FS3)",
    "Private Pilot (PP)",
    "Senior Private Pilot (SPP)",
    "Commercial Pilot (CP)",
    "Airline Transport Pilot (ATP)",
    "Senior Flight Instructor (SFI)",
    "Chief Flight Instructor (CFI)",
)

CONNECTION_TIME_FORMAT = "%Y%m%d%H%M%S"

_DIGITS = re.compile(r"[0-9]+")


def split_lines(text: str) -> list[str]:
    """
    Split snapshot text into lines, keeping the terminators.

    Only '\\n' ends a line. Names in the feed may contain characters such
    as U+0085 that str.splitlines also treats as line breaks.
    """
    lines = text.split("\n")
    last = lines.pop()
    result = [line + "\n" for line in lines]
    if last:
        result.append(last)
    return result


def is_participant_line(line: str) -> bool:
    """True if the line mentions ATC or PILOT anywhere."""
    return "ATC" in line or "PILOT" in line


def decode_rating(rating: int, client_type: str = ClientType.PILOT.value) -> Optional[str]:
    """
    Get the readable rating label for a client type.

    Ratings are 1-based in the feed. A rating of 0 (sent now and then by the
    network) and anything past the table have no label.

    Args:
        rating: Raw rating value
        client_type: 'ATC' selects the controller table, anything else the pilot table

    Returns:
        The label, or None if the rating cannot be mapped
    """
    table = ATC_RATINGS if client_type == ClientType.ATC.value else PILOT_RATINGS
    index = rating - 1 if rating > 0 else -1
    if 0 <= index < len(table):
        return table[index]
    return None


def online_duration(connection_time: str, now: Optional[datetime] = None) -> Optional[str]:
    """
    Format the time elapsed since connection_time as 'h:m:s'.

    Args:
        connection_time: Connection timestamp as sent in the feed (YYYYMMDDHHMMSS, UTC)
        now: Reference time; defaults to the current UTC time

    Returns:
        Duration without zero padding (e.g. '1:5:0'), or None if
        connection_time is not a purely numeric timestamp
    """
    if not _DIGITS.fullmatch(connection_time or ""):
        return None
    if len(connection_time) != 14:
        return None
    try:
        connected = datetime.strptime(connection_time, CONNECTION_TIME_FORMAT)
    except ValueError:
        return None
    connected = connected.replace(tzinfo=timezone.utc)

    if now is None:
        now = utc_now()
    total = int(abs((now - connected).total_seconds()))
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}:{minutes}:{seconds}"


def parse_rating(raw: str) -> Union[int, str]:
    """Coerce the rating field to int; garbage is passed through unchanged."""
    if _DIGITS.fullmatch(raw):
        return int(raw)
    return raw


@dataclass
class DecodeResult:
    """Outcome of decoding a whole snapshot."""

    clean_lines: list[str] = field(default_factory=list)
    records: dict[str, list[ParticipantRecord]] = field(default_factory=dict)
    skipped: int = 0

    @property
    def record_count(self) -> int:
        return sum(len(records) for records in self.records.values())

    def to_json_dict(self) -> dict:
        return {
            client_type: [record.to_dict() for record in records]
            for client_type, records in self.records.items()
        }


class RecordDecoder:
    """Turns snapshot lines into ParticipantRecords."""

    def __init__(
        self,
        clock: Clock = utc_now,
        logger: Optional[FeedLogger] = None,
    ) -> None:
        self._clock = clock
        self._logger = logger

    def decode(
        self,
        line: str,
        create_rich_record: bool = True,
    ) -> Union[ParticipantRecord, str, None]:
        """
        Decode a single snapshot line.

        Args:
            line: Raw line, with or without its line terminator
            create_rich_record: If False, matching lines are returned unchanged

        Returns:
            None for non-participant lines, the raw line when
            create_rich_record is False, otherwise a ParticipantRecord

        Raises:
            MalformedRecordError: If a participant line has too few fields
        """
        if not is_participant_line(line):
            return None
        if not create_rich_record:
            return line

        items = line.rstrip("\r\n").split(":")
        if len(items) < MIN_FIELD_COUNT:
            raise MalformedRecordError(
                code="too_few_fields",
                message=f"Expected at least {MIN_FIELD_COUNT} fields, got {len(items)}",
                details={"callsign": items[0], "field_count": len(items)},
            )

        record = ParticipantRecord(
            callsign=items[0],
            vid=items[1],
            name=items[2],
            client_type=items[3],
        )
        for index, path in FIELD_POSITIONS.items():
            if index == RATING_POSITION:
                continue
            set_path(record, path, items[index])

        record.rating = parse_rating(items[RATING_POSITION])
        if isinstance(record.rating, int):
            record.rating_decoded = decode_rating(record.rating, record.client_type)
        record.plane = record.flightplan.aircraft
        record.connection_duration = online_duration(record.connection_time, self._clock())
        return record

    def decode_lines(self, lines: Iterable[str], create_rich_record: bool = True) -> DecodeResult:
        """
        Decode every line of a snapshot, preserving input order.

        Malformed participant lines stay in the clean output but are
        skipped for the decoded records.
        """
        result = DecodeResult()
        for line in lines:
            if not is_participant_line(line):
                continue
            result.clean_lines.append(line)
            if not create_rich_record:
                continue

            try:
                record = self.decode(line, create_rich_record=True)
            except MalformedRecordError as e:
                result.skipped += 1
                if self._logger:
                    self._logger.warn("RecordDecoder", "Skipping malformed record", e.details)
                continue
            result.records.setdefault(record.client_type, []).append(record)
        return result
