"""PacketMap: APRS packet decoding from KISS TNCs and APRS-IS."""

from packetmap.constants import VERSION

__version__ = VERSION
