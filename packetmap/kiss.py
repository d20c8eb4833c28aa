"""
KISS TNC framing - recovers AX.25 frames from a KISS byte stream.
"""

from typing import Optional

from packetmap.errors import FramingError
from packetmap.constants import FEND, FESC, TFEND, TFESC
from packetmap.utils import hex_dump, print_debug

KISS_CMD_DATA = 0x00


class KISSDecoder:
    """Recovers frames from a KISS byte stream.

    ``reader`` is anything with an ``async read(n)`` returning b"" at EOF,
    normally an asyncio.StreamReader. One task at a time may call
    read_frame()/next_frame() on a decoder.
    """

    def __init__(self, reader, chunk_size: int = 1024):
        self._reader = reader
        self._chunk_size = chunk_size
        self._chunk = b""
        self._pos = 0
        self._in_frame = False
        self.last_port: Optional[int] = None

    async def _read_byte(self) -> int:
        if self._pos >= len(self._chunk):
            chunk = await self._reader.read(self._chunk_size)
            if not chunk:
                raise FramingError("end of stream")
            self._chunk = chunk
            self._pos = 0
        b = self._chunk[self._pos]
        self._pos += 1
        return b

    async def read_frame(self) -> bytes:
        """Read the next complete frame (unescaped, KISS command byte included).

        Raises:
            FramingError: the stream ended before a frame completed
        """
        frame = bytearray()

        while True:
            b = await self._read_byte()

            if b == FEND:
                if self._in_frame and frame:
                    # The closing FEND may also open the next frame
                    return bytes(frame)
                self._in_frame = True
            elif not self._in_frame:
                continue
            elif b == FESC:
                b = await self._read_byte()
                if b == TFEND:
                    frame.append(FEND)
                elif b == TFESC:
                    frame.append(FESC)
                else:
                    frame.append(b)
            else:
                frame.append(b)

    async def next_frame(self) -> bytes:
        """Read KISS frames until a data frame arrives; return its AX.25 bytes."""
        while True:
            frame = await self.read_frame()
            command = frame[0]
            if command & 0x0F != KISS_CMD_DATA or len(frame) < 2:
                print_debug(
                    f"KISS: skipping command frame 0x{command:02x} ({len(frame)} bytes)",
                    level=5,
                )
                continue

            self.last_port = command >> 4
            ax25 = frame[1:]
            print_debug(
                f"KISS: frame on port {self.last_port}, {len(ax25)} bytes",
                level=6,
            )
            for line in hex_dump(ax25):
                print_debug(f"  {line}", level=6)
            return ax25
