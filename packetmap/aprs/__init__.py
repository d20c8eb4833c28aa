"""APRS payload decoding."""

from .models import APRSMessage, APRSPosition, Event
from .parser import decode_frame, decode_line, decode_payload
from .passcode import login_credential

__all__ = [
    "APRSMessage",
    "APRSPosition",
    "Event",
    "decode_frame",
    "decode_line",
    "decode_payload",
    "login_credential",
]
