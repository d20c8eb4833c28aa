"""
APRS-IS client.

Connects to an APRS-IS server, logs in with a range filter around the
station's grid square and yields the TNC2 lines the server sends.
"""

import asyncio
import logging
from typing import List, Optional

from packetmap.aprs.coordinates import gridlocator_to_lonlat
from packetmap.aprs.passcode import login_credential
from packetmap.constants import (
    APP_NAME,
    APRSIS_LOGIN_TIMEOUT,
    APRSIS_PORT,
    APRSIS_SERVER,
    DEFAULT_FILTER_LAT,
    DEFAULT_FILTER_LON,
    FILTER_RADIUS_KM,
    VERSION,
)
from packetmap.errors import DecodeError
from packetmap.transport import parse_host_port
from packetmap.utils import print_debug, print_error, print_info, print_warning

logger = logging.getLogger(__name__)

READ_ONLY = -1


class APRSISLoginError(Exception):
    """The server closed, timed out or answered for another callsign."""


def build_filter(grid: Optional[str], radius_km: int = FILTER_RADIUS_KM) -> str:
    """Build an APRS-IS range filter ``r/lat/lon/km`` centred on ``grid``.

    Without a usable grid square the filter is centred on a fixed default
    point with twice the radius.
    """
    if grid:
        try:
            lon, lat = gridlocator_to_lonlat(grid)
        except DecodeError as e:
            print_warning(f"Could not parse grid square '{grid}' for APRS-IS filter: "
                          f"{e.message}. Using default filter.")
        else:
            print_debug(f"APRS-IS filter centred on {grid} ({lat:.3f}, {lon:.3f})",
                        level=3)
            return f"r/{lat:.3f}/{lon:.3f}/{radius_km}"
    else:
        print_warning("No grid square configured. Using default APRS-IS filter.")

    return f"r/{DEFAULT_FILTER_LAT:.3f}/{DEFAULT_FILTER_LON:.3f}/{radius_km * 2}"


def resolve_passcode(callsign: str, passcode) -> int:
    """Return the passcode to log in with, or -1 for a read-only login.

    Raises:
        ValueError: callsign can't have a passcode
    """
    try:
        code = int(passcode) if passcode not in (None, "") else 0
    except (TypeError, ValueError):
        print_warning(f"APRS-IS passcode '{passcode}' is not a number, connecting read-only")
        return READ_ONLY

    if code <= 0:
        print_warning("APRS-IS passcode not provided, connecting read-only")
        return READ_ONLY

    expected = login_credential(callsign)
    if code != expected:
        print_warning(f"Passcode {code} does not match {callsign}, connecting read-only")
        return READ_ONLY

    return code


class APRSISClient:
    """A single APRS-IS session."""

    def __init__(self, callsign: str, passcode=None, grid: Optional[str] = None,
                 radius_km: int = FILTER_RADIUS_KM, server: str = APRSIS_SERVER,
                 login_timeout: float = APRSIS_LOGIN_TIMEOUT):
        callsign = callsign.strip().upper()
        if not callsign:
            raise ValueError("Callsign is required for APRS-IS")

        self.callsign = callsign
        self.passcode = resolve_passcode(callsign, passcode)
        self.filter = build_filter(grid, radius_km)
        self.host, self.port = parse_host_port(server, APRSIS_PORT)
        self.login_timeout = login_timeout

        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.verified = False
        self.server_lines: List[str] = []  # '#' lines seen during login
        self._pending: List[str] = []  # data that arrived before logresp

    def login_line(self) -> str:
        return (f"user {self.callsign} pass {self.passcode} "
                f"vers {APP_NAME} {VERSION} filter {self.filter}\r\n")

    async def connect(self) -> None:
        """Open the connection and log in.

        Raises:
            OSError: could not connect
            APRSISLoginError: login handshake failed
        """
        print_info(f"Connecting to APRS-IS server {self.host}:{self.port}...")
        try:
            self.reader, self.writer = await asyncio.open_connection(self.host, self.port)
        except OSError as e:
            print_error(f"Cannot connect to APRS-IS server {self.host}:{self.port}: {e}")
            raise

        logger.info("APRS-IS connected to %s:%d", self.host, self.port)
        try:
            await self.login()
        except APRSISLoginError:
            await self.close()
            raise

    async def login(self) -> None:
        """Send the login line and wait for the server's logresp."""
        print_debug(f"Sending login: user {self.callsign} pass **** vers {APP_NAME} "
                    f"{VERSION} filter {self.filter}", level=3)
        self.writer.write(self.login_line().encode("ascii"))
        await self.writer.drain()

        try:
            await asyncio.wait_for(self._await_logresp(), timeout=self.login_timeout)
        except asyncio.TimeoutError:
            raise APRSISLoginError("timeout waiting for login response from server")

        if self.verified:
            print_info(f"APRS-IS login verified as {self.callsign}")
        else:
            print_info(f"APRS-IS login as {self.callsign} (read-only)")

    async def _await_logresp(self) -> None:
        while True:
            line = await self._read_line()
            if line is None:
                raise APRSISLoginError("connection closed during login")
            if not line:
                continue
            print_debug(f"APRS-IS server: {line}", level=3)

            if line.startswith("# logresp "):
                # # logresp <callsign> verified|unverified, server <id>
                parts = line.split()
                if len(parts) < 4:
                    continue
                if parts[2] != self.callsign:
                    raise APRSISLoginError(
                        f"login response callsign mismatch: expected {self.callsign}, "
                        f"got {parts[2]}"
                    )
                self.verified = parts[3].startswith("verified") and self.passcode != READ_ONLY
                if not parts[3].startswith("verified"):
                    print_warning(f"APRS-IS login status: {parts[3]} (continuing read-only)")
                return

            if line.startswith("#"):
                self.server_lines.append(line)
                continue

            # Data before logresp: treat the login as read-only
            print_warning(f"Unexpected data before login confirmation: {line}")
            self.verified = False
            self._pending.append(line)
            return

    async def _read_line(self) -> Optional[str]:
        raw = await self.reader.readline()
        if not raw:
            return None
        return raw.decode("utf-8", errors="replace").strip()

    async def lines(self):
        """Yield stripped server lines until the connection closes."""
        while self._pending:
            yield self._pending.pop(0)

        while True:
            line = await self._read_line()
            if line is None:
                print_info("APRS-IS connection closed.")
                return
            yield line

    async def close(self) -> None:
        if self.writer is None:
            return
        writer, self.writer = self.writer, None
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug("APRS-IS close: %s", e)
        print_info("Closing APRS-IS connection.")
