"""Automated-traffic filter for APRS messages.

Telemetry definitions (PARM/UNIT/EQNS/BITS), self-addressed telemetry
and NWS bulletins arrive as ':' messages but are not for people to read.
"""

from typing import Optional

from packetmap.constants import TELEMETRY_KEYWORDS


def automated_reason(from_call: str, to_call: str, body: str) -> Optional[str]:
    """Return why a message looks automated, or None if it doesn't."""
    if from_call == to_call:
        return "self-addressed"

    for keyword in TELEMETRY_KEYWORDS:
        if body.startswith(keyword):
            return f"telemetry {keyword}"

    if "NWS" in from_call:
        return "NWS bulletin"

    return None

