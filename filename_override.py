from typing import Iterable, Optional

from time_records import TimeRecord
from timestamps import days_to_seconds, plausible

OVERRIDE_REASON = "filename override: recorded time(s) diverge beyond threshold"


def clocks_diverge(clocks: Iterable[int], candidate: int, threshold_seconds: int) -> bool:
    """True only if there is at least one clock and every clock is off by more than the threshold."""
    clocks = list(clocks)
    if not clocks:
        return False
    return all(abs(c - candidate) > threshold_seconds for c in clocks)


def apply_override(record: TimeRecord,
                   clocks: Iterable[int],
                   filename_candidate: Optional[int],
                   threshold_days: int,
                   enabled: bool = True,
                   now: Optional[int] = None) -> Optional[int]:
    """
    Trust the filename over the filesystem when every recorded clock is far
    away from it. Only ``target`` changes; shot/shot_source stay as resolved.
    Returns the new target, or None when the rule did not fire.
    """
    if not enabled or not plausible(filename_candidate, now):
        return None
    if not clocks_diverge(clocks, filename_candidate, days_to_seconds(threshold_days)):
        return None
    if record.set_target_if_empty(filename_candidate, OVERRIDE_REASON):
        return filename_candidate
    return None
