"""Constants and configuration for the packet decoder."""

# --- Version ---
APP_NAME = "PacketMap"
VERSION = "0.1.0"

# --- KISS framing ---
FEND = 0xC0   # Frame End delimiter
FESC = 0xDB   # Frame Escape
TFEND = 0xDC  # Transposed Frame End (after FESC)
TFESC = 0xDD  # Transposed Frame Escape (after FESC)

# --- AX.25 ---
AX25_ADDR_LEN = 7
AX25_MIN_FRAME = 16  # dest(7) + src(7) + control(1) + pid(1)
MAX_ADDRESSES = 10  # dest + src + up to 8 digipeaters
CONTROL_UI = 0x03
PID_NO_LAYER3 = 0xF0

# --- APRS ---
MAX_TEXT_CALL_LEN = 9  # APRS-IS source calls may be longer than AX.25 ones
RECOVERY_SCAN_LIMIT = 40
TELEMETRY_KEYWORDS = ("PARM", "UNIT", "EQNS", "BITS")
PASSCODE_SEED = 0x73E2

# --- Transports ---
KISS_TCP_PORT = 8001  # Default Direwolf KISS port
SERIAL_BAUD = 9600
APRSIS_SERVER = "rotate.aprs.net:14580"
APRSIS_PORT = 14580
APRSIS_LOGIN_TIMEOUT = 10  # seconds
FILTER_RADIUS_KM = 200
DEFAULT_FILTER_LAT = 41.5
DEFAULT_FILTER_LON = -81.0

# Debug level system (0-6)
# 0 = No debugging
# 2 = Connection events and important errors
# 3 = Transport state changes
# 4 = Per-frame decode failures
# 5 = Detailed parsing information
# 6 = Everything including hex dumps
DEBUG_LEVEL = 0

# Per-station debug filters (callsign -> debug_level)
# Example: {"N0CALL-9": 5} = debug level 5 for frames from N0CALL-9 only
DEBUG_STATION_FILTERS = {}
