"""
AX.25 / TNC2 header parsing.

Two header shapes reach the decoder:

- raw AX.25 UI frames recovered from a KISS TNC (binary, shifted-ASCII
  address fields followed by control and PID bytes)
- APRS-IS / TNC2 monitor lines of the form ``SRC>DEST,PATH:payload``

parse_header() auto-detects which one it was given and returns the source
callsign plus the APRS information field.
"""

from typing import Tuple

from packetmap.errors import HeaderError
from packetmap.constants import (
    AX25_ADDR_LEN,
    AX25_MIN_FRAME,
    CONTROL_UI,
    MAX_ADDRESSES,
    MAX_TEXT_CALL_LEN,
    PID_NO_LAYER3,
)
from packetmap.utils import print_debug


def split_callsign(call: str) -> Tuple[str, int]:
    """Split ``CALL-SSID`` into (base, ssid). Missing SSID is 0.

    Raises:
        ValueError: empty base, base longer than 6 chars, or SSID not 0-15
    """
    call = call.strip().upper().rstrip('*')
    if "-" in call:
        base, ssid_str = call.split("-", 1)
        try:
            ssid = int(ssid_str)
        except ValueError:
            raise ValueError(f"Invalid SSID in '{call}'")
    else:
        base, ssid = call, 0

    if not base or len(base) > 6 or not base.isalnum():
        raise ValueError(f"Invalid callsign '{call}'")
    if not 0 <= ssid <= 15:
        raise ValueError(f"SSID out of range (0-15) in '{call}'")
    return base, ssid


def format_callsign(base: str, ssid: int = 0) -> str:
    """Format a callsign, omitting SSID 0."""
    return f"{base}-{ssid}" if ssid else base


def decode_ax25_address(data: bytes, offset: int) -> Tuple[str, int, bool]:
    """Decode a single 7-byte AX.25 address field.

    Decoding is lenient: a NUL ends the callsign early, other non-printable
    characters are skipped and padding spaces are dropped.

    Returns:
        (callsign, offset after the field, is_last)

    Raises:
        HeaderError: field truncated or callsign empty
    """
    if len(data) < offset + AX25_ADDR_LEN:
        raise HeaderError(f"address field at offset {offset} is truncated")

    chars = []
    for b in data[offset:offset + 6]:
        c = b >> 1
        if c < 0x20 or c > 0x7E:
            if c == 0:
                break
            continue
        if c != 0x20:
            chars.append(chr(c))

    callsign = "".join(chars)
    if not callsign:
        raise HeaderError(f"empty callsign in address field at offset {offset}")

    ssid_byte = data[offset + 6]
    ssid = (ssid_byte >> 1) & 0x0F
    is_last = bool(ssid_byte & 0x01)

    return format_callsign(callsign, ssid), offset + AX25_ADDR_LEN, is_last


def parse_binary_header(frame: bytes) -> Tuple[str, bytes]:
    """Parse a raw AX.25 UI frame into (source, information field)."""
    if len(frame) < AX25_MIN_FRAME:
        raise HeaderError(f"frame too short for AX.25 ({len(frame)} bytes)")

    source, offset, _ = decode_ax25_address(frame, AX25_ADDR_LEN)

    # Walk the digipeater path until the extension bit of the previous field
    fields = 2
    while not frame[offset - 1] & 0x01:
        if fields >= MAX_ADDRESSES:
            raise HeaderError(
                f"end of address path not found within {MAX_ADDRESSES} fields"
            )
        if offset + AX25_ADDR_LEN > len(frame):
            raise HeaderError("address path runs past end of frame")
        offset += AX25_ADDR_LEN
        fields += 1

    if offset + 2 > len(frame):
        raise HeaderError("missing control/PID after address path")

    control = frame[offset]
    pid = frame[offset + 1]
    if control != CONTROL_UI:
        raise HeaderError(f"not a UI frame (control 0x{control:02X})")
    if pid != PID_NO_LAYER3:
        # Some TNCs send other PIDs on APRS traffic
        print_debug(f"AX.25: accepting PID 0x{pid:02X} from {source}", level=5,
                    stations=[source])

    payload = frame[offset + 2:]

    # Digipeated traffic sometimes still carries a TNC2 prefix
    colon = payload.find(b":")
    if colon != -1 and b">" in payload[:colon]:
        payload = payload[colon + 1:]

    return source, payload


def parse_text_header(line: bytes) -> Tuple[str, bytes]:
    """Parse a TNC2 line ``SRC>DEST,PATH:payload`` into (source, payload).

    Lines without any ':' are handed to the binary parser.
    """
    colon = line.find(b":")
    if colon == -1:
        return parse_binary_header(line)

    header = line[:colon]
    gt = header.find(b">")
    if gt == -1:
        raise HeaderError("no source separator '>' in header")

    source = header[:gt].decode("ascii", errors="replace")
    if not source or len(source) > MAX_TEXT_CALL_LEN:
        raise HeaderError(f"invalid source callsign '{source}'")

    return source, line[colon + 1:]


def _is_text_header(header: bytes) -> bool:
    return all(0x20 <= b <= 0x7E for b in header)


def parse_header(frame: bytes) -> Tuple[str, bytes]:
    """Return (source callsign, APRS payload) from a binary or text frame.

    A frame is text when everything before its first ':' is printable ASCII.
    Shifted AX.25 address bytes for letters are >= 0x82, so real binary
    frames never look like text.
    """
    colon = frame.find(b":")
    if colon != -1 and _is_text_header(frame[:colon]):
        return parse_text_header(frame)
    return parse_binary_header(frame)
