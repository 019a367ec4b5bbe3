import logging
from typing import List, Optional, Sequence

from time_records import TimeRecord

logger = logging.getLogger(__name__)


def _next_anchor_targets(records: Sequence[TimeRecord]) -> List[Optional[int]]:
    # target of the closest anchored record after each position
    out: List[Optional[int]] = [None] * len(records)
    upcoming = None
    for i in range(len(records) - 1, -1, -1):
        out[i] = upcoming
        r = records[i]
        if not r.is_filled and r.target is not None:
            upcoming = r.target
    return out


def enforce_unique(records: Sequence[TimeRecord], step_seconds: int = 1) -> dict:
    """
    Make filled targets strictly increasing against the running previous target.

    Only records without their own shot time are bumped (prev + step);
    anchored records keep their target even if it ties or goes backwards.
    Returns {"bumped": n, "overshoots": n}; an overshoot is a bump that lands
    on or past the next anchored target.
    """
    step = max(1, int(step_seconds))
    note = f"unique(+{step}s steps)"
    upcoming = _next_anchor_targets(records)

    bumped = overshoots = 0
    prev_target = None
    for i, r in enumerate(records):
        if r.target is None:
            continue

        if prev_target is not None and r.is_filled and r.target <= prev_target:
            r.bump_target(prev_target + step, note)
            bumped += 1
            if upcoming[i] is not None and r.target >= upcoming[i]:
                overshoots += 1
                logger.warning("Bumped %s to %d, at/after next anchor %d",
                               r.path, r.target, upcoming[i])

        prev_target = r.target

    return {"bumped": bumped, "overshoots": overshoots}
