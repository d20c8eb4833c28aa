"""APRS-IS login passcode."""

from packetmap.constants import PASSCODE_SEED


def login_credential(identifier: str) -> int:
    """Compute the APRS-IS passcode for a callsign.

    The SSID is ignored, so N0CALL and N0CALL-9 share a passcode.

    Raises:
        ValueError: base callsign empty or longer than 6 characters
    """
    base = identifier.strip().split("-")[0].upper()
    if not base or len(base) > 6:
        raise ValueError(f"Invalid callsign for passcode: '{identifier}'")

    code = PASSCODE_SEED
    for i, char in enumerate(base):
        # High byte for even positions, low byte for odd
        code ^= ord(char) << (8 if i % 2 == 0 else 0)

    return code & 0x7FFF
