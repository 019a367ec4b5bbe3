import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from timestamps import plausible

# Screenshot_20211230_215425 / 20211230_215425 / 20211230215425 / IMG-20211230-215425
# 2021-12-30_21-54-25 / 2021-12-30 215425
FILENAME_PATTERNS = [
    re.compile(r'(\d{4})(\d{2})(\d{2})[_-]?(\d{2})(\d{2})(\d{2})'),
    re.compile(r'(\d{4})-(\d{2})-(\d{2})[_\s-]?(\d{2})[-_]?(\d{2})[-_]?(\d{2})'),
]


def parse_filename_time(path, now: Optional[int] = None) -> Optional[int]:
    """Return the first plausible timestamp embedded in the file stem, or None."""
    stem = Path(path).stem
    for pattern in FILENAME_PATTERNS:
        m = pattern.search(stem)
        if not m:
            continue
        try:
            dt = datetime(*(int(g) for g in m.groups()))
            t = int(dt.timestamp())
        except (ValueError, OverflowError, OSError):
            continue
        if plausible(t, now):
            return t
    return None
