#!/usr/bin/env python3
"""
PacketMap - Entry Point

Decodes APRS traffic from a KISS TNC or an APRS-IS feed and prints
positions and messages as they arrive.
"""

import os
import sys
from datetime import datetime

MAX_LOG_SIZE = 10 * 1024 * 1024  # 10MB


def open_log_file(path):
    """Open the console log in append mode, rotating it first if too large."""
    log_path = os.path.expanduser(path)
    if os.path.exists(log_path) and os.path.getsize(log_path) > MAX_LOG_SIZE:
        ts = datetime.now().strftime('%Y%m%d-%H%M%S')
        backup_path = f"{log_path}.{ts}"
        os.rename(log_path, backup_path)
        print(f"Rotated log: {backup_path}", file=sys.stderr)

    print(f"Logging to: {log_path}", file=sys.stderr)
    return open(log_path, 'a', buffering=1)


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(description="PacketMap APRS monitor")
    parser.add_argument(
        "-k",
        "--kiss-tcp",
        metavar="HOST:PORT",
        help="Connect to KISS-over-TCP TNC (e.g., localhost:8001)",
    )
    parser.add_argument(
        "-s",
        "--serial",
        metavar="PORT",
        help="Use serial KISS TNC (e.g., /dev/ttyUSB0)",
    )
    parser.add_argument(
        "-b",
        "--baud",
        type=int,
        help="Serial baud rate (default: from config, 9600)",
    )
    parser.add_argument(
        "-a",
        "--aprsis",
        nargs="?",
        const="",
        metavar="SERVER",
        help="Read from APRS-IS instead of a TNC (default server from config)",
    )
    parser.add_argument(
        "-c",
        "--callsign",
        help="Station callsign (overrides MYCALL)",
    )
    parser.add_argument(
        "-g",
        "--grid",
        metavar="LOCATOR",
        help="Maidenhead grid square for the APRS-IS filter (overrides MYLOCATION)",
    )
    parser.add_argument(
        "-r",
        "--radius",
        type=int,
        metavar="KM",
        help="APRS-IS filter radius in km (overrides FILTER_RADIUS)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Configuration file (default: ~/.packetmap_config.json)",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print the station configuration and exit",
    )
    parser.add_argument(
        "--passcode",
        metavar="CALLSIGN",
        help="Print the APRS-IS passcode for CALLSIGN and exit",
    )
    parser.add_argument(
        "-d",
        "--debug",
        nargs="?",
        type=int,
        const=2,
        default=0,
        metavar="LEVEL",
        help="Enable debug output (optional level 0-6, default: 2)",
    )
    parser.add_argument(
        "-l",
        "--log",
        nargs="?",
        const="~/.packetmap.log",
        metavar="FILE",
        help="Log all console output to file (default: ~/.packetmap.log)",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.passcode:
        from packetmap.aprs.passcode import login_credential

        try:
            print(login_credential(args.passcode))
        except ValueError as e:
            parser.error(str(e))
        return 0

    # Only one source allowed
    sources = [s for s in (args.serial, args.kiss_tcp) if s] + (
        [True] if args.aprsis is not None else []
    )
    if len(sources) > 1:
        parser.error("Use only one of --serial, --kiss-tcp and --aprsis")

    from packetmap import constants
    from packetmap.config import StationConfig
    from packetmap.console import run
    from packetmap.utils import set_console_log_file

    constants.DEBUG_LEVEL = args.debug

    config = StationConfig(args.config)
    if args.show_config:
        config.display()
        return 0

    interface = config.get("INTERFACE") or "KISS"
    device = config.get("DEVICE")
    server = config.get("APRSIS_SERVER") or constants.APRSIS_SERVER
    if args.serial:
        interface, device = "KISS", args.serial
    elif args.kiss_tcp:
        interface, device = "KISS", args.kiss_tcp
    elif args.aprsis is not None:
        interface = "APRSIS"
        server = args.aprsis or server

    # Install logging to file if requested
    log_file = None
    if args.log:
        log_file = open_log_file(args.log)
        set_console_log_file(log_file)

    try:
        return run(
            interface=interface,
            device=device,
            baud=args.baud or config.get_int("BAUD", constants.SERIAL_BAUD),
            callsign=args.callsign or config.get("MYCALL"),
            passcode=config.get("PASSCODE"),
            grid=args.grid or config.get("MYLOCATION"),
            radius_km=args.radius or config.get_int("FILTER_RADIUS", constants.FILTER_RADIUS_KM),
            server=server,
        )
    finally:
        # Close log file if it was opened
        if log_file:
            set_console_log_file(None)
            log_file.close()


if __name__ == "__main__":
    sys.exit(main())
