"""APRS event models.

The decoder hands callers one of two event types:
- APRSPosition: position reports and object reports
- APRSMessage: addressed text messages

There is no "unknown" event; anything that fails to decode raises a
DecodeError instead.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class APRSPosition:
    """Represents an APRS position or object report."""

    station: str  # Source callsign of the frame
    latitude: float  # Decimal degrees
    longitude: float  # Decimal degrees
    symbol_table: str = "/"
    symbol_code: str = ">"
    comment: str = ""
    grid_square: str = ""  # Maidenhead grid square
    object_name: Optional[str] = None  # Set for ';' object reports
    object_killed: bool = False
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def name(self) -> str:
        """Object name for object reports, else the sending station."""
        return self.object_name or self.station


@dataclass
class APRSMessage:
    """Represents an APRS message."""

    from_call: str
    to_call: str
    message: str
    message_id: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def is_ack(self) -> bool:
        return self.message.lower().startswith("ack")

    @property
    def is_rej(self) -> bool:
        return self.message.lower().startswith("rej")


Event = Union[APRSPosition, APRSMessage]
