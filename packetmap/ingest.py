"""
Reader tasks that turn a frame or line source into decoded events.

Each source gets exactly one reader task. Decoded events are handed to the
consumer through an asyncio.Queue; frames that fail to decode, or that are
automated traffic, are logged at debug level and skipped.
"""

import asyncio

from packetmap.aprs.parser import decode_frame, decode_line
from packetmap.errors import DecodeError, FilteredEvent, FramingError
from packetmap.utils import print_debug, print_info


async def pump_kiss(decoder, queue: asyncio.Queue) -> int:
    """Decode frames from ``decoder`` until the stream ends.

    Args:
        decoder: KISSDecoder (or KISSConnection) providing ``next_frame()``
        queue: Receives APRSPosition / APRSMessage events

    Returns:
        Number of events queued
    """
    count = 0
    while True:
        try:
            frame = await decoder.next_frame()
        except FramingError as e:
            print_info(f"KISS stream ended ({e.message})")
            return count

        try:
            event = decode_frame(frame)
        except FilteredEvent as e:
            print_debug(f"Filtered: {e.reason}", level=4)
            continue
        except DecodeError as e:
            print_debug(f"Decode failed: {e}", level=4)
            continue

        await queue.put(event)
        count += 1


async def pump_lines(lines, queue: asyncio.Queue) -> int:
    """Decode TNC2 text lines from an async iterator (e.g. APRSISClient.lines()).

    Blank lines and server comments ('#') are ignored.

    Returns:
        Number of events queued
    """
    count = 0
    async for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        try:
            event = decode_line(line)
        except FilteredEvent as e:
            print_debug(f"Filtered: {e.reason}", level=4)
            continue
        except DecodeError as e:
            print_debug(f"Decode failed: {e} -- {line}", level=4)
            continue

        await queue.put(event)
        count += 1

    return count
