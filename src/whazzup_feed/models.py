"""
Data models for the whazzup feed pipeline.

This module defines the decoded participant record, its nested value
types, and the positional layout of a snapshot line.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional, Union


# Position in a colon-separated snapshot line -> record attribute path.
# The table on the IVAO wiki does not match the live feed; this one does.
FIELD_POSITIONS: dict[int, str] = {
    0: "callsign",
    1: "vid",
    2: "name",
    3: "client_type",
    4: "frequency",
    5: "position.latitude",
    6: "position.longitude",
    7: "position.altitude",
    8: "flight_data.groundspeed",
    9: "flightplan.aircraft",
    10: "flightplan.cruising_speed",
    11: "flightplan.origin",
    12: "flightplan.cruising_level",
    13: "flightplan.destination",
    14: "server",
    15: "protocol",
    16: "combined_rating",  # Deprecated upstream
    17: "transponder_code",
    18: "facility_type",
    19: "visual_range",
    20: "flightplan.revision",
    21: "flightplan.flight_rules",
    22: "flightplan.dep_time",
    23: "flightplan.actual_dep_time",
    24: "flightplan.eet_hours",
    25: "flightplan.eet_minutes",
    26: "flightplan.endurance_hours",
    27: "flightplan.endurance_minutes",
    28: "flightplan.alternate_aerodrome",
    29: "flightplan.remarks",
    30: "flightplan.route",
    31: "unused1",
    32: "unused2",
    33: "atis",
    34: "atis_time",
    37: "connection_time",
    38: "software.name",
    39: "software.version",
    41: "rating",
    42: "flightplan.alternate_aerodrome2",
    43: "flightplan.type_of_flight",
    44: "flightplan.persons_on_board",
    45: "flight_data.heading",
    46: "flight_data.on_ground",
}

RATING_POSITION = 41

# A line must carry at least this many fields to be decoded
MIN_FIELD_COUNT = max(FIELD_POSITIONS) + 1


@dataclass
class Position:
    """Geographic position of a participant."""

    latitude: str = ""
    longitude: str = ""
    altitude: str = ""


@dataclass
class FlightData:
    """Live flight state reported by a pilot client."""

    groundspeed: str = ""
    heading: str = ""
    on_ground: str = ""


@dataclass
class FlightPlan:
    """Filed flight plan. Empty for ATC clients."""

    aircraft: str = ""
    cruising_speed: str = ""
    origin: str = ""
    cruising_level: str = ""
    destination: str = ""
    revision: str = ""
    flight_rules: str = ""
    dep_time: str = ""
    actual_dep_time: str = ""
    eet_hours: str = ""
    eet_minutes: str = ""
    endurance_hours: str = ""
    endurance_minutes: str = ""
    alternate_aerodrome: str = ""
    alternate_aerodrome2: str = ""
    remarks: str = ""
    route: str = ""
    type_of_flight: str = ""
    persons_on_board: str = ""


@dataclass
class Software:
    """Client software used to connect."""

    name: str = ""
    version: str = ""


@dataclass
class ParticipantRecord:
    """Decoded ATC or PILOT entry from the snapshot."""

    callsign: str
    vid: str
    name: str
    client_type: str
    rating: Union[int, str] = 0  # Raw string when the feed sends garbage
    rating_decoded: Optional[str] = None
    frequency: str = ""
    position: Position = field(default_factory=Position)
    flight_data: FlightData = field(default_factory=FlightData)
    flightplan: FlightPlan = field(default_factory=FlightPlan)
    server: str = ""
    protocol: str = ""
    combined_rating: str = ""
    transponder_code: str = ""
    facility_type: str = ""
    visual_range: str = ""
    unused1: str = ""
    unused2: str = ""
    atis: str = ""
    atis_time: str = ""
    connection_time: str = ""
    connection_duration: Optional[str] = None
    software: Software = field(default_factory=Software)
    plane: str = ""

    def to_dict(self) -> dict:
        """Convert record to the JSON layout consumers expect."""
        return {
            "callsign": self.callsign,
            "user": {
                "vid": self.vid,
                "name": self.name,
                "rating": self.rating,
                "rating_decoded": self.rating_decoded,
            },
            "client_type": self.client_type,
            "frequency": self.frequency,
            "position": asdict(self.position),
            "flight_data": asdict(self.flight_data),
            "flightplan": asdict(self.flightplan),
            "server": self.server,
            "protocol": self.protocol,
            "combined_rating": self.combined_rating,
            "transponder_code": self.transponder_code,
            "facility_type": self.facility_type,
            "visual_range": self.visual_range,
            "unused1": self.unused1,
            "unused2": self.unused2,
            "atis": self.atis,
            "atis_time": self.atis_time,
            "connection_time": self.connection_time,
            "connection_duration": self.connection_duration,
            "software": asdict(self.software),
            "plane": self.plane,
        }

    def to_fields(self, field_count: int = MIN_FIELD_COUNT) -> list[str]:
        """
        Re-serialize the record to its positional field list.

        Positions not covered by FIELD_POSITIONS are left empty.

        Args:
            field_count: Length of the returned list (at least MIN_FIELD_COUNT)

        Returns:
            List of field values indexed by feed position
        """
        fields = [""] * max(field_count, MIN_FIELD_COUNT)
        for index, path in FIELD_POSITIONS.items():
            fields[index] = str(get_path(self, path))
        return fields


def get_path(obj: object, path: str) -> object:
    """Resolve a dotted attribute path such as 'position.latitude'."""
    for part in path.split("."):
        obj = getattr(obj, part)
    return obj


def set_path(obj: object, path: str, value: object) -> None:
    """Assign to a dotted attribute path."""
    head, _, attr = path.rpartition(".")
    if head:
        obj = get_path(obj, head)
    setattr(obj, attr, value)
