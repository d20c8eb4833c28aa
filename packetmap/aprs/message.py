"""APRS message decoding (':' data type)."""

from packetmap.aprs.models import APRSMessage
from packetmap.errors import FieldFormatError

ADDRESSEE_LEN = 9


def parse_message(source: str, payload: str) -> APRSMessage:
    """Decode ``:ADDRESSEE:text{id``.

    The addressee is a space-padded 9-character field. A trailing ``{id``
    is split off when the last '{' is not the first character of the text.

    Raises:
        FieldFormatError: too short, blank addressee, missing separator, or
            blank message text
    """
    body = payload[1:]
    if len(body) < ADDRESSEE_LEN + 2:
        raise FieldFormatError(f"message too short ({len(body)} chars)")

    to_call = body[:ADDRESSEE_LEN].strip()
    if not to_call:
        raise FieldFormatError("message addressee is blank")

    if body[ADDRESSEE_LEN] != ":":
        raise FieldFormatError("missing ':' after message addressee")

    text = body[ADDRESSEE_LEN + 1:]
    message_id = None

    brace = text.rfind("{")
    if brace > 0:
        message_id = text[brace + 1:].strip() or None
        text = text[:brace]
    text = text.strip()

    if not text:
        raise FieldFormatError("message text is blank")

    return APRSMessage(
        from_call=source,
        to_call=to_call,
        message=text,
        message_id=message_id,
    )
