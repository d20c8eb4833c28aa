"""
APRS payload dispatcher.

Frames are decoded in three steps:

1. parse_header() finds the source callsign and information field
2. the first payload character (data type identifier) picks a decoder from
   MATCHERS, tried in order
3. identifiers with no decoder, and failed object reports, get one last
   try: a '!' position buried near the start of the payload

Decoded messages then pass the automated-traffic filter.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from packetmap.aprs.message import parse_message
from packetmap.aprs.models import APRSMessage, Event
from packetmap.aprs.noise import automated_reason
from packetmap.aprs.position import parse_normal_position, parse_object
from packetmap.ax25 import parse_header
from packetmap.constants import RECOVERY_SCAN_LIMIT
from packetmap.errors import DecodeError, FilteredEvent, UnsupportedFormat
from packetmap.utils import print_debug


@dataclass(frozen=True)
class PayloadMatcher:
    """Binds a set of data type identifiers to a payload decoder."""

    name: str
    identifiers: str
    decode: Callable[[str, str], Event]
    recover_on_failure: bool = False  # Retry with recovery_scan() on DecodeError

    def matches(self, identifier: str) -> bool:
        return identifier in self.identifiers


MATCHERS = (
    PayloadMatcher("position", "!/=", parse_normal_position),
    PayloadMatcher("object", ";", parse_object, recover_on_failure=True),
    PayloadMatcher("message", ":", parse_message),
)


def find_matcher(identifier: str) -> Optional[PayloadMatcher]:
    for matcher in MATCHERS:
        if matcher.matches(identifier):
            return matcher
    return None


def recovery_scan(source: str, payload: str, raw: Optional[bytes] = None) -> Event:
    """Decode a '!' position found after some leading junk.

    The window is measured in bytes of the information field (``raw``,
    by default the UTF-8 encoding of ``payload``).

    Raises:
        UnsupportedFormat: no '!' within the first RECOVERY_SCAN_LIMIT bytes
        FieldFormatError: a '!' was found but what follows isn't a position
    """
    if raw is None:
        raw = payload.encode("utf-8")
    idx = raw.find(b"!")
    if 0 < idx < RECOVERY_SCAN_LIMIT:
        print_debug(f"APRS: recovering position at byte {idx} from {source}",
                    level=5, stations=[source])
        return parse_normal_position(source, raw[idx:].decode("utf-8", errors="replace"))
    raise UnsupportedFormat(f"unsupported data type '{payload[0]}'")


def decode_payload(source: str, payload: str, raw: Optional[bytes] = None) -> Event:
    """Decode an APRS information field already split from its header.

    ``raw`` is the undecoded field when the caller has it; the recovery
    scan counts its window in those bytes.

    Raises:
        DecodeError: the payload can't be decoded
        FilteredEvent: the payload is an automated message
    """
    if not payload:
        raise UnsupportedFormat("empty payload")

    matcher = find_matcher(payload[0])
    if matcher is None:
        event = recovery_scan(source, payload, raw)
    else:
        try:
            event = matcher.decode(source, payload)
        except DecodeError as e:
            if not matcher.recover_on_failure:
                raise
            print_debug(f"APRS: {matcher.name} from {source} failed ({e.message}), "
                        f"scanning for position", level=5, stations=[source])
            event = recovery_scan(source, payload, raw)

    if isinstance(event, APRSMessage):
        reason = automated_reason(event.from_call, event.to_call, event.message)
        if reason:
            raise FilteredEvent(event, reason)

    return event


def decode_frame(frame: bytes) -> Event:
    """Decode one frame (raw AX.25 or a TNC2 text line) into an event."""
    source, payload = parse_header(frame)
    text = payload.decode("utf-8", errors="replace")
    print_debug(f"APRS: {source}: {text}", level=5, stations=[source])
    return decode_payload(source, text, payload)


def decode_line(line: str) -> Event:
    """Decode an APRS-IS / TNC2 monitor line."""
    return decode_frame(line.encode("utf-8"))
