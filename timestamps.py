"""
Time helpers shared by every stage.

All instants are plain ``int`` epoch seconds interpreted in the local frame,
the same way ExifTool and the EXIF standard treat naive ``YYYY:MM:DD HH:MM:SS``
strings.
"""

import time
from datetime import datetime
from typing import Optional

EXIF_FMT = "%Y:%m:%d %H:%M:%S"
DISPLAY_FMT = "%Y-%m-%d %H:%M:%S"
SECONDS_PER_DAY = 86400

# anything older is zeroed / corrupt metadata
EPOCH_FLOOR = datetime(1980, 1, 1)
FUTURE_SLACK = SECONDS_PER_DAY


def now_seconds() -> int:
    return int(time.time())


def plausible(t: Optional[int], now: Optional[int] = None) -> bool:
    """True if ``t`` is on or after 1980-01-01 local and at most one day ahead of ``now``."""
    if t is None:
        return False
    if now is None:
        now = now_seconds()
    floor = int(EPOCH_FLOOR.timestamp())
    return floor <= t <= now + FUTURE_SLACK


def days_to_seconds(days: int) -> int:
    return int(days) * SECONDS_PER_DAY


def normalize_date_string(raw: str) -> str:
    """
    Bring the many EXIF / XMP date spellings to ``YYYY:MM:DD HH:MM:SS``:
      2021-12-30T21:54:25.123+08:00  ->  2021:12:30 21:54:25
    """
    s = raw.strip().replace("T", " ")
    if len(s) >= 10 and s[4] == "-" and s[7] == "-":
        s = f"{s[:4]}:{s[5:7]}:{s[8:]}"
    # fractional seconds / timezone right after the seconds field
    if len(s) > 19 and s[19] in ".Z+-":
        s = s[:19]
    return s


def parse_exif_datetime(raw) -> Optional[int]:
    """Parse an EXIF/XMP date value (str or bytes) to local epoch seconds, or None."""
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    s = normalize_date_string(raw.rstrip("\x00"))
    if len(s) < 19 or s.startswith("0000:00:00"):
        return None
    try:
        dt = datetime.strptime(s[:19], EXIF_FMT)
        return int(dt.timestamp())
    except (ValueError, OverflowError, OSError):
        return None


def to_exif_string(t: int) -> str:
    return datetime.fromtimestamp(t).strftime(EXIF_FMT)


def format_local(t: Optional[int]) -> str:
    if t is None:
        return ""
    return datetime.fromtimestamp(t).strftime(DISPLAY_FMT)
