"""Station configuration management."""

import json
import os

from prompt_toolkit import HTML

from packetmap.aprs.coordinates import gridlocator_to_lonlat
from packetmap.ax25 import split_callsign
from packetmap.constants import APRSIS_SERVER, FILTER_RADIUS_KM, SERIAL_BAUD
from packetmap.errors import DecodeError
from packetmap.utils import (
    print_debug,
    print_error,
    print_header,
    print_info,
    print_pt,
    sanitize,
)

INTERFACES = ("KISS", "APRSIS")


class StationConfig:
    """Station settings persisted as JSON."""

    def __init__(self, config_file=None):
        # Default to user's home directory
        if config_file is None:
            config_file = os.path.expanduser("~/.packetmap_config.json")

        self.config_file = config_file

        self.settings = {
            "MYCALL": "NOCALL",
            "PASSCODE": "",  # APRS-IS passcode (blank = read-only)
            "MYLOCATION": "",  # Maidenhead grid square, centres the APRS-IS filter
            "INTERFACE": "KISS",  # KISS or APRSIS
            "DEVICE": "localhost:8001",  # KISS host:port or serial port path
            "BAUD": str(SERIAL_BAUD),  # Serial baud rate
            "APRSIS_SERVER": APRSIS_SERVER,
            "FILTER_RADIUS": str(FILTER_RADIUS_KM),  # APRS-IS filter radius in km
        }
        self.load()

    def load(self):
        """Load configuration from file over the defaults."""
        if not os.path.exists(self.config_file):
            return
        try:
            with open(self.config_file, "r") as f:
                saved = json.load(f)
        except (OSError, ValueError) as e:
            print_error(f"Could not load config {self.config_file}: {e}")
            return

        if not isinstance(saved, dict):
            print_error(f"Ignoring config {self.config_file}: not a JSON object")
            return

        self.settings.update({str(k).upper(): str(v) for k, v in saved.items()})
        print_debug(f"Loaded station config from {self.config_file}", level=6)

    def save(self):
        """Save configuration to file."""
        try:
            with open(self.config_file, "w") as f:
                json.dump(self.settings, f, indent=2)
            print_debug(f"Saved station config to {self.config_file}", level=6)
        except OSError as e:
            print_error(f"Could not save station config: {e}")

    def set(self, key, value):
        """Set and save a configuration value. Returns False if rejected."""
        key = key.upper()
        if key not in self.settings:
            return False
        value = str(value).strip()

        # Validate MYLOCATION (Maidenhead grid square)
        if key == "MYLOCATION" and value:
            try:
                lon, lat = gridlocator_to_lonlat(value)
            except DecodeError as e:
                print_error(f"Invalid grid square '{value}': {e.message}")
                return False
            value = value.upper()
            print_info(f"MYLOCATION set to {value} ({lat:.6f}, {lon:.6f})")

        if key == "MYCALL":
            try:
                split_callsign(value)
            except ValueError as e:
                print_error(str(e))
                return False
            value = value.upper()

        if key == "INTERFACE":
            value = value.upper()
            if value not in INTERFACES:
                print_error(f"Invalid interface '{value}'. Valid: {', '.join(INTERFACES)}")
                return False

        if key in ("BAUD", "FILTER_RADIUS") or (key == "PASSCODE" and value):
            try:
                number = int(value)
            except ValueError:
                print_error(f"Invalid {key} '{value}': must be a number")
                return False
            if number < 0 or (number == 0 and key != "PASSCODE"):
                print_error(f"Invalid {key} '{value}': must be positive")
                return False
            value = str(number)

        self.settings[key] = value
        self.save()
        return True

    def get(self, key):
        """Get a configuration value."""
        return self.settings.get(key.upper(), "")

    def get_int(self, key, default=0):
        try:
            return int(self.get(key))
        except ValueError:
            return default

    def display(self):
        """Display all settings."""
        print_header("Station Configuration")
        for key in sorted(self.settings.keys()):
            value = self.settings[key]
            if key == "PASSCODE" and value:
                value = "****"
            if value:
                print_pt(HTML(f"<b>{key:14s}</b> {sanitize(value)}"))
            else:
                print_pt(HTML(f"<gray>{key:14s} (not set)</gray>"))
        print_pt("")
