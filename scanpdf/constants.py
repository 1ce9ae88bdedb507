"""Shared constants for the scan pipeline."""

# =============================================================================
# Blank-Page Heuristic
# =============================================================================
BORDER_FRACTION = 0.03
"""Share of the shorter image side ignored on every edge (scanner-edge artifacts)."""

BRIGHTNESS_THRESHOLD = 32768
"""Average 16-bit channel intensity above which a pixel counts as bright."""

DARK_RATIO_THRESHOLD = 0.0003
"""Pages are kept only when their dark pixel ratio is strictly above this value.

Separator sheets on a flatbed scanner score about 0.0008, truly blank scans far lower.
"""

EIGHT_BIT_TO_SIXTEEN_BIT = 257
"""Multiplier that maps an 8-bit sample onto the 16-bit scale (0xFF -> 0xFFFF)."""

# =============================================================================
# Scanner Protocol
# =============================================================================
ACK_TOKEN = "\n"
"""Token written to the scanner's stdin to confirm the next page."""

PAUSE_PROMPT = "Press <RETURN> to continue"
"""Status line printed by the scanner when it waits for confirmation."""

NO_DEVICE_PHRASE = "no SANE devices found"
"""Status line printed by the scanner when no device is attached."""

DEFAULT_ACK_DELAY = 0.1
"""Seconds to wait after a pause prompt before acknowledging it."""

BATCH_PATTERN = "out%d.pnm"
"""File name pattern the scanner writes raw pages to, inside the workspace."""

OUTPUT_PAGE_SUFFIX = ".pdf"

# =============================================================================
# Worker Pool
# =============================================================================
DEFAULT_WORKERS = 3
MIN_WORKERS = 1
MAX_WORKERS = 32

# =============================================================================
# Scan Resolution
# =============================================================================
DEFAULT_DPI = 200
MIN_DPI = 72
MAX_DPI = 600

# =============================================================================
# Compression
# =============================================================================
DEFAULT_JPEG_QUALITY = 70
"""JPEG quality used by the compressor for every kept page."""

# =============================================================================
# Upload
# =============================================================================
DEFAULT_UPLOAD_TARGET = "scanpdf-target"
"""SSH host alias of the upload destination (resolved through ``ssh -G``)."""

DEFAULT_UPLOAD_DIR = "scaninput/"
"""Remote directory, relative to the prefix, the document is synced into."""

DEFAULT_UPLOAD_ATTEMPTS = 3

PROBE_TIMEOUT_SECONDS = 1.0
"""Connect timeout of the reachability probe against the upload destination."""

# =============================================================================
# Status Signalling
# =============================================================================
DEFAULT_RAMDISK = "/dev/shm"
DEFAULT_LED_PATH = "/sys/class/leds/led0"
DEFAULT_NOTIFY_SOCKET = "/tmp/scanpdf.sock"

LED_PULSE_SECONDS = 0.3
"""Duration of each on and off phase of a status LED pulse."""

# =============================================================================
# Scanner Options
# =============================================================================
PAGE_WIDTH_MM = "221.121"
PAGE_HEIGHT_MM = "876.695"

DEFAULT_SCAN_OPTIONS: list[tuple[str, list[str]]] = [
    ("--mode ", ["--mode=Color"]),
    ("--page-width ", [f"--page-width={PAGE_WIDTH_MM}"]),
    ("--page-height ", [f"--page-height={PAGE_HEIGHT_MM}"]),
    ("-l ", ["-l", "0"]),
    ("-t ", ["-t", "0"]),
    ("-x ", ["-x", PAGE_WIDTH_MM]),
    ("-y ", ["-y", PAGE_HEIGHT_MM]),
    ("--ald", ["--ald=yes"]),
    ("--overscan ", ["--overscan=On"]),
    ("--prepick ", ["--prepick=On"]),
    ("--swcrop", ["--swcrop=yes"]),
    ("--buffermode ", ["--buffermode=On"]),
    ("--sleeptimer ", ["--sleeptimer=10"]),
    ("--brightness ", ["--brightness=9"]),
    ("--contrast ", ["--contrast=9"]),
]
"""(capability token, arguments) pairs; arguments are added when the token is advertised.

``--swdespeck`` and ``--swdeskew`` are not listed: both are too slow for batch feeding.
"""

DUPLEX_SOURCE = "ADF Duplex"
