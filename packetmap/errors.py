"""Decode error taxonomy.

Every failure raised while turning a frame into an event is a DecodeError
subclass; callers skip the frame and keep reading. FilteredEvent is raised
for frames that decoded fine but are automated traffic, and is deliberately
not a DecodeError.
"""


class DecodeError(Exception):

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"{type(self).__name__}: {self.message}"


class FramingError(DecodeError):
    """Truncated escape sequence or end of the byte stream."""


class HeaderError(DecodeError):
    """Bad AX.25 address path or TNC2 header."""


class UnsupportedFormat(DecodeError):
    """Data type identifier we don't decode, with nothing recoverable."""


class FieldFormatError(DecodeError):
    """Fixed-field or pattern mismatch inside a payload."""


class FilteredEvent(Exception):
    """A decoded message that was classified as automated traffic."""

    def __init__(self, event, reason: str):
        super().__init__(reason)
        self.event = event
        self.reason = reason

    def __str__(self):
        return f"FilteredEvent: {self.reason}"
