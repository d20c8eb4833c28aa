"""
Uncompressed position and object report decoding.
"""

import re
from typing import Tuple

from packetmap.aprs.coordinates import (
    latlon_to_maidenhead,
    parse_latitude,
    parse_longitude,
)
from packetmap.aprs.models import APRSPosition
from packetmap.errors import FieldFormatError

# DDMM.mmN <table> DDDMM.mmW <symbol> <comment>
# Minutes may carry blanks for position ambiguity.
POSITION_PATTERN = re.compile(
    r"(\d{2})([0-9 ]{2}\.[0-9 ]{2})([NnSs])"  # Latitude
    r"([/\\0-9A-Z])"  # Symbol table
    r"(\d{3})([0-9 ]{2}\.[0-9 ]{2})([EeWw])"  # Longitude
    r"([\x21-\x7e])"  # Symbol code
    r"(.*)",  # Comment
    re.ASCII | re.DOTALL,
)

MIN_POSITION_LEN = 18  # Identifier + 8 lat + table + 9 lon + symbol
TIMESTAMP_LEN = 7  # DDHHMMz / HHMMSSh / DDHHMM/


def _decode_position_body(payload: str) -> Tuple[float, float, str, str, str]:
    """Decode an identifier-prefixed position into its fields.

    Returns:
        (latitude, longitude, symbol_table, symbol_code, comment)
    """
    if len(payload) < MIN_POSITION_LEN:
        raise FieldFormatError(
            f"position report too short ({len(payload)} < {MIN_POSITION_LEN} chars)"
        )

    body = payload[1:]
    if payload[0] == "/":
        # Timestamp isn't used; skip it
        body = body[TIMESTAMP_LEN:]

    match = POSITION_PATTERN.fullmatch(body)
    if not match:
        raise FieldFormatError(f"invalid uncompressed position '{body[:20]}'")

    (lat_deg, lat_min, lat_dir, table,
     lon_deg, lon_min, lon_dir, symbol, comment) = match.groups()

    lat = parse_latitude(lat_deg, lat_min, lat_dir)
    lon = parse_longitude(lon_deg, lon_min, lon_dir)

    if not -90.0 <= lat <= 90.0:
        raise FieldFormatError(f"latitude {lat:.4f} out of range")
    if not -180.0 <= lon <= 180.0:
        raise FieldFormatError(f"longitude {lon:.4f} out of range")

    return lat, lon, table, symbol, comment.rstrip("\r\n")


def parse_normal_position(source: str, payload: str) -> APRSPosition:
    """Decode a '!', '/' or '=' uncompressed position report.

    '/' reports carry a 7-character timestamp before the position, which is
    skipped. The length check counts the data type identifier.

    Raises:
        FieldFormatError: too short, pattern mismatch, or coordinates out of range
    """
    lat, lon, table, symbol, comment = _decode_position_body(payload)
    return APRSPosition(
        station=source,
        latitude=lat,
        longitude=lon,
        symbol_table=table,
        symbol_code=symbol,
        comment=comment,
        grid_square=latlon_to_maidenhead(lat, lon),
    )


def parse_object(source: str, payload: str) -> APRSPosition:
    """Decode a ';' object report.

    Format: ``;NAME_____*DDHHMMzDDMM.mmN/DDDMM.mmW$comment``. The name is
    9 characters, then '*' (live) or '_' (killed), then a timestamped
    position.
    """
    if len(payload) < MIN_POSITION_LEN:
        raise FieldFormatError(f"object report too short ({len(payload)} chars)")

    marker = payload[10]
    if marker not in "*_":
        raise FieldFormatError(f"invalid object marker '{marker}'")

    position = parse_normal_position(source, "/" + payload[11:])
    position.object_name = payload[1:10].strip()
    position.object_killed = marker == "_"
    return position
