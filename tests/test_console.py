"""Tests for the console monitor and command line."""

import asyncio

import pytest
from prompt_toolkit.formatted_text import to_plain_text

import main
from packetmap.aprs.models import APRSMessage, APRSPosition
from packetmap.console import display_events, format_event, is_serial_device, monitor_kiss
from tests.framing import wrap_kiss


class TestFormatting:

    def test_position(self):
        event = APRSPosition("N0CALL-9", 49.0583, -72.0292, comment="<b>hi</b>",
                             grid_square="FN39xb")
        text = to_plain_text(format_event(event))
        assert "POS N0CALL-9 49.0583, -72.0292 [FN39xb] <b>hi</b>" in text

    def test_object(self):
        event = APRSPosition("K1ABC", 49.0, -72.0, object_name="LEADER", object_killed=True)
        text = to_plain_text(format_event(event))
        assert "LEADER (killed via K1ABC)" in text

    def test_message(self):
        event = APRSMessage("K1ABC", "N0CALL", "Hello", "001")
        text = to_plain_text(format_event(event))
        assert "MSG K1ABC > N0CALL: Hello {001}" in text

    @pytest.mark.parametrize("device,serial", [
        ("/dev/ttyUSB0", True),
        ("COM3", True),
        ("localhost:8001", False),
        ("direwolf.local", False),
    ])
    def test_is_serial_device(self, device, serial):
        assert is_serial_device(device) is serial


class TestMonitor:

    def test_display_events(self, console_output):
        async def scenario():
            queue = asyncio.Queue()
            task = asyncio.create_task(display_events(queue))
            await queue.put(APRSMessage("K1ABC", "N0CALL", "Hello"))
            await queue.join()
            task.cancel()

        asyncio.run(scenario())
        assert any("MSG K1ABC > N0CALL: Hello" in line for line in console_output)

    def test_monitor_kiss_tcp(self, ui_frame, console_output):
        async def scenario():
            async def handle(reader, writer):
                writer.write(wrap_kiss(ui_frame("!4903.50N/07201.75W-Test")))
                writer.write(wrap_kiss(ui_frame("=4903.50N/07201.75W-Two", source="K1ABC")))
                await writer.drain()
                writer.close()

            server = await asyncio.start_server(handle, "127.0.0.1", 0)
            port = server.sockets[0].getsockname()[1]
            try:
                return await monitor_kiss(f"127.0.0.1:{port}")
            finally:
                server.close()
                await server.wait_closed()

        assert asyncio.run(scenario()) == 2
        assert any("POS K1ABC" in line for line in console_output)
        assert any("2 events decoded" in line for line in console_output)
        assert any("[STATUS] Monitoring KISS traffic" in line for line in console_output)


class TestCommandLine:

    def test_passcode(self, capsys):
        assert main.main(["--passcode", "N0CALL-9"]) == 0
        assert capsys.readouterr().out.strip() == "13023"

    def test_invalid_passcode_callsign(self):
        with pytest.raises(SystemExit):
            main.main(["--passcode", "TOOLONGCALL"])

    def test_one_source_only(self):
        with pytest.raises(SystemExit):
            main.main(["--serial", "/dev/ttyUSB0", "--kiss-tcp", "localhost:8001"])

    def test_aprsis_flag_without_server(self):
        args = main.build_parser().parse_args(["--aprsis", "-c", "N0CALL", "-g", "FN31"])
        assert args.aprsis == ""
        assert args.callsign == "N0CALL"
        assert args.grid == "FN31"
        assert args.debug == 0

    def test_show_config(self, tmp_path, console_output):
        path = str(tmp_path / "packetmap.json")
        assert main.main(["--config", path, "--show-config"]) == 0
        assert any("Station Configuration" in line for line in console_output)
        assert any(line.startswith("MYCALL") and "NOCALL" in line for line in console_output)
