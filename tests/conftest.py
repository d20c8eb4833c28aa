"""
Test Configuration
==================

Shared fixtures and helpers for the PacketMap tests.
"""

import pytest
from prompt_toolkit.formatted_text import to_plain_text

from packetmap import constants, utils
from tests.framing import build_ui_frame, wrap_kiss


class ChunkReader:
    """Stand-in for asyncio.StreamReader that returns fixed chunks."""

    def __init__(self, *chunks):
        self.chunks = list(chunks)

    async def read(self, n=-1):
        if not self.chunks:
            return b""
        return self.chunks.pop(0)


async def iterate(items):
    """Turn a list into an async iterator."""
    for item in items:
        yield item


@pytest.fixture(autouse=True)
def console_output(monkeypatch):
    """Capture console output as plain text lines instead of writing to the terminal."""
    lines = []

    def record(*args, **kwargs):
        if args:
            lines.append(to_plain_text(args[0]))

    monkeypatch.setattr(utils, "_print_pt_original", record)
    monkeypatch.setattr(constants, "DEBUG_LEVEL", 0)
    monkeypatch.setattr(constants, "DEBUG_STATION_FILTERS", {})
    return lines


@pytest.fixture
def ui_frame():
    """Build a raw AX.25 UI frame: ui_frame(info, source=..., dest=..., path=...)."""
    def build(info, source="N0CALL-9", dest="APRS", path=("WIDE1-1", "WIDE2-1")):
        return build_ui_frame(source, dest, list(path), info)
    return build


@pytest.fixture
def kiss_frame(ui_frame):
    """Build a KISS-wrapped UI frame."""
    def build(info, **kwargs):
        return wrap_kiss(ui_frame(info, **kwargs))
    return build


@pytest.fixture
def position_payload():
    return "!4903.50N/07201.75W-Test"
