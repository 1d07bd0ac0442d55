"""Internal constants shared across the library."""

# Quartz level identifiers, in local index order. Index 0 is the video level.
LEVEL_CODES = "VABCDEFGHIJKLMNOPQRSTUWXYZ"
MAX_LEVEL_COUNT = len(LEVEL_CODES)

# 1 video + 16 audio channels on a typical Magnum Quartz interface.
DEFAULT_LEVEL_COUNT = 17

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_SYNC_QUIET_PERIOD = 1.0

# Quartz framing
LINE_START = "."
LINE_END = "\r"
MAX_LINE_LENGTH = 4096
ENCODING = "ascii"
