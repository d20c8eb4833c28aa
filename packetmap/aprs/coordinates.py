"""Coordinate conversion utilities.

Provides:
- APRS degree/minute fields (with position ambiguity) to decimal degrees
- decimal degrees back to APRS ``DDMM.mmN`` / ``DDDMM.mmW`` strings
- Maidenhead grid square conversions (latlon <-> grid)
"""

from typing import Tuple

from packetmap.errors import FieldFormatError


def degrees_minutes_to_decimal(degrees, minutes: str, hemisphere: str,
                               hemispheres: str = "NS") -> float:
    """Convert an APRS degrees + minutes field to signed decimal degrees.

    Blank digits in ``minutes`` are ambiguity placeholders and are replaced
    with '5', which centres the value in the ambiguous range.

    Args:
        degrees: Whole degrees (int or digit string)
        minutes: Minutes field, e.g. "03.50" or "0 .  "
        hemisphere: Hemisphere letter, case-insensitive
        hemispheres: Allowed letters, positive one first ("NS" or "EW")

    Returns:
        Decimal degrees, negative for S/W

    Raises:
        FieldFormatError: non-numeric field or hemisphere not allowed
    """
    hemi = hemisphere.upper()
    if len(hemi) != 1 or hemi not in hemispheres:
        raise FieldFormatError(
            f"invalid hemisphere '{hemisphere}' (expected one of {hemispheres})"
        )

    minutes = minutes.replace(" ", "5")
    if not minutes or minutes.count(".") > 1 or not minutes.replace(".", "").isdigit():
        raise FieldFormatError(f"invalid minutes field '{minutes}'")

    try:
        value = int(degrees) + float(minutes) / 60.0
    except ValueError:
        raise FieldFormatError(f"invalid degrees field '{degrees}'")

    if hemi == hemispheres[1]:
        value = -value
    return value


def parse_latitude(degrees, minutes: str, hemisphere: str) -> float:
    return degrees_minutes_to_decimal(degrees, minutes, hemisphere, "NS")


def parse_longitude(degrees, minutes: str, hemisphere: str) -> float:
    return degrees_minutes_to_decimal(degrees, minutes, hemisphere, "EW")


def _format_degrees_minutes(value: float, width: int, hemispheres: str) -> str:
    hemi = hemispheres[0] if value >= 0 else hemispheres[1]
    hundredths = round(abs(value) * 6000)  # hundredths of a minute
    deg, rem = divmod(hundredths, 6000)
    return f"{deg:0{width}d}{rem // 100:02d}.{rem % 100:02d}{hemi}"


def format_latitude(lat: float) -> str:
    """Convert to APRS latitude format (DDMM.mmN/S)."""
    return _format_degrees_minutes(lat, 2, "NS")


def format_longitude(lon: float) -> str:
    """Convert to APRS longitude format (DDDMM.mmE/W)."""
    return _format_degrees_minutes(lon, 3, "EW")


def gridlocator_to_lonlat(code: str) -> Tuple[float, float]:
    """Convert a Maidenhead locator to the (longitude, latitude) of its centre.

    4 characters give the centre of a 2 x 1 degree square; 6 characters
    give the centre of a 5' x 2.5' subsquare within it. A lone fifth
    character, and anything past the sixth, is ignored.

    Raises:
        FieldFormatError: too short, bad characters, or out of range result
    """
    grid = code.strip().upper()
    if len(grid) < 4:
        raise FieldFormatError(f"gridsquare too short: '{code}'")

    if not (grid[0].isalpha() and grid[1].isalpha()):
        raise FieldFormatError(f"characters 1-2 must be letters: '{code}'")
    if not (grid[2] in "0123456789" and grid[3] in "0123456789"):
        raise FieldFormatError(f"characters 3-4 must be digits: '{code}'")
    if len(grid) >= 6 and not (grid[4].isalpha() and grid[5].isalpha()):
        raise FieldFormatError(f"characters 5-6 must be letters: '{code}'")

    # Field: 20 x 10 degrees anchored at -180/-90
    lon = (ord(grid[0]) - ord('A')) * 20.0 - 180.0
    lat = (ord(grid[1]) - ord('A')) * 10.0 - 90.0

    # Square: 2 x 1 degrees
    lon += int(grid[2]) * 2.0
    lat += int(grid[3]) * 1.0

    # Centre of the 4-character square
    lon += 1.0
    lat += 0.5

    if len(grid) >= 6:
        # Replace the square centre with the subsquare centre
        lon -= 1.0
        lat -= 0.5
        lon += (ord(grid[4]) - ord('A')) * (2.0 / 24.0)  # 5' resolution
        lat += (ord(grid[5]) - ord('A')) * (1.0 / 24.0)  # 2.5' resolution
        lon += 1.0 / 24.0
        lat += 0.5 / 24.0

    if lon < -180.0 or lon > 180.0 or lat < -90.0 or lat > 90.0:
        raise FieldFormatError(f"gridsquare '{code}' is out of range")

    return lon, lat


def latlon_to_maidenhead(lat: float, lon: float) -> str:
    """Convert latitude/longitude to 6-digit Maidenhead grid square.

    Args:
        lat: Latitude in decimal degrees (-90 to +90)
        lon: Longitude in decimal degrees (-180 to +180)

    Returns:
        6-character Maidenhead grid square (e.g., "FN31pr")
    """
    # Clamp the upper edges into the last cell
    lon_adj = min(lon + 180, 359.999999)
    lat_adj = min(lat + 90, 179.999999)

    # Field (first 2 chars): 20 lon x 10 lat
    field_lon = int(lon_adj / 20)
    field_lat = int(lat_adj / 10)

    # Square (next 2 digits): 2 lon x 1 lat within field
    square_lon = int((lon_adj % 20) / 2)
    square_lat = int(lat_adj % 10)

    # Subsquare (last 2 chars): 5' lon x 2.5' lat within square
    subsq_lon = int(((lon_adj % 2) * 60) / 5)
    subsq_lat = int(((lat_adj % 1) * 60) / 2.5)

    return (
        chr(ord("A") + field_lon)
        + chr(ord("A") + field_lat)
        + str(square_lon)
        + str(square_lat)
        + chr(ord("a") + subsq_lon)
        + chr(ord("a") + subsq_lat)
    )
