"""
Console monitor: connect to a source, decode traffic and print events.
"""

import asyncio
import signal

from prompt_toolkit import HTML

from packetmap.aprs.models import APRSMessage, APRSPosition
from packetmap.aprsis import APRSISClient, APRSISLoginError
from packetmap.constants import APRSIS_SERVER, FILTER_RADIUS_KM, SERIAL_BAUD
from packetmap.ingest import pump_kiss, pump_lines
from packetmap.transport import KISSConnection, parse_host_port
from packetmap.utils import (
    print_error,
    print_header,
    print_info,
    print_pt,
    print_status,
    sanitize,
    timestamp,
)


def is_serial_device(device: str) -> bool:
    """Serial paths look like /dev/ttyUSB0 or COM3; anything else is host:port."""
    return device.startswith("/") or device.upper().startswith("COM")


def format_event(event) -> HTML:
    """Render one decoded event as a console line."""
    ts = timestamp()
    if isinstance(event, APRSMessage):
        msg_id = f" <gray>{{{sanitize(event.message_id)}}}</gray>" if event.message_id else ""
        return HTML(
            f"<gray>{ts}</gray> <b><magenta>MSG</magenta></b> "
            f"<cyan>{sanitize(event.from_call)}</cyan> &gt; "
            f"<cyan>{sanitize(event.to_call)}</cyan>: {sanitize(event.message)}{msg_id}"
        )

    if isinstance(event, APRSPosition):
        if event.object_name is not None:
            state = "killed" if event.object_killed else "object"
            label = (f"<yellow>{sanitize(event.object_name)}</yellow> "
                     f"<gray>({state} via {sanitize(event.station)})</gray>")
        else:
            label = f"<cyan>{sanitize(event.station)}</cyan>"
        comment = f" {sanitize(event.comment)}" if event.comment else ""
        return HTML(
            f"<gray>{ts}</gray> <b><green>POS</green></b> {label} "
            f"{event.latitude:.4f}, {event.longitude:.4f} "
            f"[{sanitize(event.grid_square)}]{comment}"
        )

    return HTML(f"<gray>{ts}</gray> {sanitize(repr(event))}")


async def display_events(queue: asyncio.Queue) -> None:
    """Print events from ``queue`` until cancelled."""
    while True:
        event = await queue.get()
        try:
            print_pt(format_event(event))
        finally:
            queue.task_done()


async def _drain_and_stop(queue: asyncio.Queue, display_task: asyncio.Task) -> None:
    await queue.join()
    display_task.cancel()
    try:
        await display_task
    except asyncio.CancelledError:
        pass


async def monitor_kiss(device: str, baud: int = SERIAL_BAUD) -> int:
    """Monitor a KISS TNC (serial path or host:port) until the stream ends."""
    if is_serial_device(device):
        connection = await KISSConnection.serial(device, baud)
    else:
        host, port = parse_host_port(device)
        connection = await KISSConnection.tcp(host, port)
    print_status(f"Monitoring KISS traffic on {connection.name}")

    queue: asyncio.Queue = asyncio.Queue()
    display_task = asyncio.create_task(display_events(queue))
    try:
        count = await pump_kiss(connection, queue)
        await _drain_and_stop(queue, display_task)
    finally:
        display_task.cancel()
        await connection.close()

    print_info(f"{count} events decoded")
    return count


async def monitor_aprsis(callsign: str, passcode=None, grid=None,
                         radius_km: int = FILTER_RADIUS_KM,
                         server: str = APRSIS_SERVER) -> int:
    """Monitor an APRS-IS feed until the server disconnects."""
    client = APRSISClient(callsign, passcode, grid, radius_km, server)
    await client.connect()
    print_status(f"Monitoring APRS-IS with filter {client.filter}")

    queue: asyncio.Queue = asyncio.Queue()
    display_task = asyncio.create_task(display_events(queue))
    try:
        count = await pump_lines(client.lines(), queue)
        await _drain_and_stop(queue, display_task)
    finally:
        display_task.cancel()
        await client.close()

    print_info(f"{count} events decoded")
    return count


async def main(interface="KISS", device="localhost:8001", baud=SERIAL_BAUD,
               callsign="NOCALL", passcode=None, grid=None,
               radius_km=FILTER_RADIUS_KM, server=APRSIS_SERVER) -> int:
    """Connect to the configured source and print traffic.

    Returns:
        Process exit status
    """
    print_header("PacketMap Monitor")
    try:
        if interface.upper() == "APRSIS":
            await monitor_aprsis(callsign, passcode, grid, radius_km, server)
        else:
            await monitor_kiss(device, baud)
    except APRSISLoginError as e:
        print_error(f"APRS-IS login failed: {e}")
        return 1
    except (OSError, ValueError) as e:
        print_error(f"{type(e).__name__}: {e}")
        return 1
    return 0


def run(**kwargs) -> int:
    """Entry point for the console monitor."""
    def sigterm_handler(signum, frame):
        """Handle SIGTERM by raising SIGINT to stop the event loop."""
        signal.raise_signal(signal.SIGINT)

    signal.signal(signal.SIGTERM, sigterm_handler)

    status = 0
    try:
        status = asyncio.run(main(**kwargs))
    except KeyboardInterrupt:
        print_pt(HTML("\n<yellow>Interrupted by user</yellow>"))

    print_pt(HTML("<gray>Goodbye!</gray>"))
    return status
