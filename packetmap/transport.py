"""
Stream openers for KISS TNCs.

Two ways to reach a TNC are supported:

- KISS over TCP (Direwolf, SoundModem, remote TNC bridges)
- KISS over a serial port (hardware TNCs), via pyserial-asyncio

Both hand back an asyncio (reader, writer) pair. KISSConnection wraps that
pair with a KISSDecoder and owns closing it.
"""

import asyncio
import logging
from typing import Tuple

from packetmap.constants import KISS_TCP_PORT, SERIAL_BAUD
from packetmap.kiss import KISSDecoder
from packetmap.utils import print_error, print_info, print_warning

logger = logging.getLogger(__name__)

VALID_BAUD_RATES = [1200, 2400, 4800, 9600, 19200, 38400, 57600, 115200]


def parse_host_port(address: str, default_port: int = KISS_TCP_PORT) -> Tuple[str, int]:
    """Split ``host[:port]`` into (host, port).

    Raises:
        ValueError: empty host, or port not a number in 1-65535
    """
    address = address.strip()
    if ":" in address:
        host, port_str = address.rsplit(":", 1)
        try:
            port = int(port_str)
        except ValueError:
            raise ValueError(f"Invalid port in '{address}'")
    else:
        host, port = address, default_port

    if not host:
        raise ValueError(f"Missing host in '{address}'")
    if not 1 <= port <= 65535:
        raise ValueError(f"Invalid port '{port}': must be between 1 and 65535")
    return host, port


async def open_kiss_tcp(host: str, port: int = KISS_TCP_PORT):
    """Connect to a KISS-over-TCP server.

    Returns:
        (reader, writer) stream pair

    Raises:
        OSError: connection refused or host unreachable
    """
    print_info(f"Connecting to KISS TNC at {host}:{port}...")
    try:
        reader, writer = await asyncio.open_connection(host, port)
    except ConnectionRefusedError:
        print_error(f"Connection refused: {host}:{port}")
        print_error("Is Direwolf or KISS TNC server running?")
        raise
    except OSError as e:
        print_error(f"Cannot connect to {host}:{port}: {e}")
        raise

    logger.info("KISS TCP connected to %s:%d", host, port)
    print_info(f"Connected to KISS TNC at {host}:{port}")
    return reader, writer


async def open_kiss_serial(device: str, baud: int = SERIAL_BAUD):
    """Open a serial KISS TNC at 8N1.

    Returns:
        (reader, writer) stream pair
    """
    if baud not in VALID_BAUD_RATES:
        print_warning(f"Unusual baud rate {baud}, valid rates: {VALID_BAUD_RATES}")

    try:
        import serial_asyncio

        reader, writer = await serial_asyncio.open_serial_connection(
            url=device,
            baudrate=baud,
            bytesize=8,
            parity='N',
            stopbits=1,
        )
    except ImportError:
        print_error("pyserial-asyncio not installed. Run: pip install pyserial-asyncio")
        raise
    except FileNotFoundError:
        print_error(f"Serial port not found: {device}")
        _suggest_available_ports()
        raise
    except PermissionError:
        print_error(f"Permission denied: {device}")
        print_info("Try: sudo usermod -a -G dialout $USER")
        raise

    logger.info("Serial KISS opened on %s @ %d baud", device, baud)
    print_info(f"Serial port opened: {device} @ {baud} baud")
    return reader, writer


def _suggest_available_ports() -> None:
    """Suggest available serial ports to the user."""
    import serial.tools.list_ports

    ports = list(serial.tools.list_ports.comports())
    if ports:
        print_info("Available serial ports:")
        for port in ports:
            print_info(f"  {port.device}: {port.description}")
    else:
        print_info("No serial ports found")


class KISSConnection:
    """An open KISS stream and the decoder reading from it."""

    def __init__(self, reader: asyncio.StreamReader, writer, name: str = "kiss"):
        self.reader = reader
        self.writer = writer
        self.name = name
        self.decoder = KISSDecoder(reader)
        self._closed = False

    @classmethod
    async def tcp(cls, host: str, port: int = KISS_TCP_PORT) -> "KISSConnection":
        reader, writer = await open_kiss_tcp(host, port)
        return cls(reader, writer, name=f"{host}:{port}")

    @classmethod
    async def serial(cls, device: str, baud: int = SERIAL_BAUD) -> "KISSConnection":
        reader, writer = await open_kiss_serial(device, baud)
        return cls(reader, writer, name=device)

    @property
    def closed(self) -> bool:
        return self._closed

    async def next_frame(self) -> bytes:
        """Read the next AX.25 frame (raises FramingError at end of stream)."""
        return await self.decoder.next_frame()

    async def close(self) -> None:
        """Close the stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            # Peer already went away
            logger.debug("%s: error while closing: %s", self.name, e)

        logger.info("KISS connection closed: %s", self.name)
        print_info(f"KISS connection closed: {self.name}")
