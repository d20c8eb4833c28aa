"""Tests for the reader tasks feeding the event queue."""

import asyncio

from packetmap.aprs.models import APRSMessage, APRSPosition
from packetmap.ingest import pump_kiss, pump_lines
from packetmap.kiss import KISSDecoder
from tests.conftest import ChunkReader, iterate
from tests.framing import wrap_kiss


def drain(queue):
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


class TestPumpKiss:

    def test_decodes_and_skips(self, kiss_frame):
        stream = b"".join([
            kiss_frame("!4903.50N/07201.75W-Test"),
            wrap_kiss(b"\x9c\x60\x86"),  # too short for AX.25
            kiss_frame(":N0CALL-9 :PARM.Volts"),  # telemetry definition
            kiss_frame(">status only"),  # unsupported
            kiss_frame(":K1ABC    :Hello{7", source="N0CALL"),
        ])

        async def scenario():
            queue = asyncio.Queue()
            # Split the stream to exercise reads that end mid-frame
            reader = ChunkReader(stream[:25], stream[25:60], stream[60:])
            count = await pump_kiss(KISSDecoder(reader), queue)
            return count, drain(queue)

        count, events = asyncio.run(scenario())
        assert count == 2
        assert isinstance(events[0], APRSPosition)
        assert events[0].station == "N0CALL-9"
        assert isinstance(events[1], APRSMessage)
        assert events[1].to_call == "K1ABC"
        assert events[1].message_id == "7"

    def test_empty_stream(self):
        async def scenario():
            queue = asyncio.Queue()
            return await pump_kiss(KISSDecoder(ChunkReader()), queue), queue.qsize()

        assert asyncio.run(scenario()) == (0, 0)

    def test_filtered_frames_are_logged(self, kiss_frame, console_output, monkeypatch):
        from packetmap import constants
        monkeypatch.setattr(constants, "DEBUG_LEVEL", 4)

        async def scenario():
            queue = asyncio.Queue()
            reader = ChunkReader(kiss_frame(":N0CALL-9 :hi", source="N0CALL-9"))
            return await pump_kiss(KISSDecoder(reader), queue)

        assert asyncio.run(scenario()) == 0
        assert any("Filtered: self-addressed" in line for line in console_output)


class TestPumpLines:

    def test_decodes_and_skips(self):
        lines = [
            "# aprsc 2.1.10 19 Oct 2026 12:00:00 GMT T2TEST",
            "",
            "N0CALL-9>APRS,TCPIP*:!4903.50N/07201.75W-Test",
            "garbage without header",
            "K1ABC>APRS::N0CALL   :Meet at 5{12",
            "NWS-WARN>APRS::K1ABC    :Severe thunderstorm",
            "  K1ABC>APRS:=4903.50N/07201.75W-Padded  ",
        ]

        async def scenario():
            queue = asyncio.Queue()
            count = await pump_lines(iterate(lines), queue)
            return count, drain(queue)

        count, events = asyncio.run(scenario())
        assert count == 3
        assert [type(e) for e in events] == [APRSPosition, APRSMessage, APRSPosition]
        assert events[1].message == "Meet at 5"
        assert events[2].comment == "Padded"
