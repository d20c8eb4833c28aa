"""Console output helpers for the packet decoder."""

import html
from datetime import datetime

from prompt_toolkit import print_formatted_text as _print_pt_original
from prompt_toolkit.formatted_text import HTML, to_plain_text

from . import constants

HEADER_RULE = "=" * 70

# Mirror of console output, set by main.py -l
_console_log_file = None


def set_console_log_file(file_handle):
    """Mirror console output to ``file_handle`` (None to stop)."""
    global _console_log_file
    _console_log_file = file_handle


def print_pt(*args, **kwargs):
    """print_formatted_text, plus a timestamped plain-text copy in the log file."""
    _print_pt_original(*args, **kwargs)

    if _console_log_file is None or not args:
        return
    try:
        stamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        _console_log_file.write(f"[{stamp}] {to_plain_text(args[0])}\n")
        _console_log_file.flush()
    except (OSError, ValueError):
        # A closed or full log file must not stop the decoder
        pass


def timestamp():
    return datetime.now().strftime("%H:%M:%S")


def sanitize(text):
    """Make ``text`` safe inside an HTML() template.

    Control characters become ``\\xNN`` escapes; <, > and & are escaped.
    """
    visible = []
    for c in str(text):
        if c in "\n\r\t" or (c >= " " and c != "\x7f"):
            visible.append(c)
        else:
            visible.append(f"\\x{ord(c):02x}")
    return html.escape("".join(visible), quote=False)


def print_header(text):
    print_pt(HTML(f"\n<b><cyan>{HEADER_RULE}</cyan></b>"))
    print_pt(HTML(f"<b><cyan>{sanitize(text)}</cyan></b>"))
    print_pt(HTML(f"<b><cyan>{HEADER_RULE}</cyan></b>"))


def print_info(text):
    print_pt(HTML(f"<green>[INFO]</green> {sanitize(text)}"))


def print_error(text):
    print_pt(HTML(f"<red>[ERROR]</red> {sanitize(text)}"))


def print_status(text):
    print_pt(HTML(f"<blue>[STATUS]</blue> {sanitize(text)}"))


def print_warning(text):
    print_pt(HTML(f"<orange>[WARNING]</orange> {sanitize(text)}"))


def _station_matches(station, filter_call):
    station = station.upper().strip()
    filter_call = filter_call.upper().strip()
    return station == filter_call or station.split('-')[0] == filter_call.split('-')[0]


def debug_enabled(level, stations=None):
    """Return True if a debug message at ``level`` should be shown.

    The global DEBUG_LEVEL wins; otherwise any station in ``stations`` whose
    base callsign has a filter level >= ``level`` enables the message.
    """
    if constants.DEBUG_LEVEL >= level:
        return True
    if not stations:
        return False

    return any(
        filter_level >= level and _station_matches(station, filter_call)
        for station in stations if station
        for filter_call, filter_level in constants.DEBUG_STATION_FILTERS.items()
    )


def print_debug(text, level=2, stations=None):
    """Print debug message with optional per-station filtering.

    Args:
        text: The message to print
        level: Debug level (see constants.DEBUG_LEVEL)
        stations: Callsigns involved, matched against DEBUG_STATION_FILTERS
    """
    if not debug_enabled(level, stations):
        return

    ts = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    print_pt(HTML(f"<gray>[DEBUG {ts}]</gray> {sanitize(text)}"))


def hex_dump(data, bytes_per_line=16):
    """Format bytes as ``offset  hex  ascii`` lines."""
    lines = []
    for offset in range(0, len(data), bytes_per_line):
        chunk = data[offset:offset + bytes_per_line]
        hex_part = " ".join(f"{b:02x}" for b in chunk)
        text = "".join(chr(b) if 0x20 <= b < 0x7f else "." for b in chunk)
        lines.append(f"{offset:04x}  {hex_part:<{bytes_per_line * 3}} {text}")
    return lines
