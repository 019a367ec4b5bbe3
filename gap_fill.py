"""
Fill target times for files that have no shot time of their own.

The sequence (already sorted by mtime) is cut into maximal runs of
anchor-less records. Each run is classified once by what bounds it and
filled with the matching policy:

    NEAREST_ANCHOR  both anchors, gap above the limit  -> first half prev, rest next
    STEP            both anchors, gap < m + 1 seconds  -> prev +/- k*step
    LINEAR          both anchors, enough span          -> prev + trunc(gap*k/(m+1))
    FORWARD         only a previous anchor             -> prev + (j+1)*step  (or prev)
    BACKWARD        only a next anchor                 -> next - (m-j)*step  (or next)
    NONE            no anchor on either side           -> left empty
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence

from time_records import TimeRecord
from timestamps import days_to_seconds

logger = logging.getLogger(__name__)


class FillPolicy(Enum):
    NEAREST_ANCHOR = "nearest_anchor"
    STEP = "step"
    LINEAR = "linear"
    FORWARD = "forward"
    BACKWARD = "backward"
    NONE = "none"


REASONS = {
    FillPolicy.NEAREST_ANCHOR: "gap too large -> nearest anchor fill",
    FillPolicy.STEP: "anchors too close -> step-filled",
    FillPolicy.LINEAR: "interpolated between anchors",
    FillPolicy.FORWARD: "only prev anchor -> filled +step",
    FillPolicy.BACKWARD: "only next anchor -> filled -step",
}
FLAT_REASONS = {
    FillPolicy.FORWARD: "only prev anchor -> filled",
    FillPolicy.BACKWARD: "only next anchor -> filled",
}


@dataclass(frozen=True)
class Run:
    start: int              # index of first anchor-less record
    end: int                # index of last anchor-less record (inclusive)
    prev_anchor: Optional[int]
    next_anchor: Optional[int]

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def find_runs(records: Sequence[TimeRecord]) -> Iterator[Run]:
    n = len(records)
    i = 0
    while i < n:
        if records[i].shot is not None:
            i += 1
            continue
        start = i
        while i < n and records[i].shot is None:
            i += 1
        end = i - 1
        prev_anchor = records[start - 1].shot if start > 0 else None
        next_anchor = records[end + 1].shot if end + 1 < n else None
        yield Run(start, end, prev_anchor, next_anchor)


def classify(run: Run, gap_limit_seconds: int) -> FillPolicy:
    prev, nxt = run.prev_anchor, run.next_anchor
    if prev is not None and nxt is not None:
        abs_gap = abs(nxt - prev)
        if abs_gap > gap_limit_seconds:
            return FillPolicy.NEAREST_ANCHOR
        if abs_gap < run.length + 1:
            return FillPolicy.STEP
        return FillPolicy.LINEAR
    if prev is not None:
        return FillPolicy.FORWARD
    if nxt is not None:
        return FillPolicy.BACKWARD
    return FillPolicy.NONE


def _trunc_div(a: int, b: int) -> int:
    # integer division toward zero (b > 0)
    q = abs(a) // b
    return q if a >= 0 else -q


def _nearest(run: Run, step: int, one_sided: bool) -> List[int]:
    m = run.length
    return [run.prev_anchor if j < m // 2 else run.next_anchor for j in range(m)]


def _step(run: Run, step: int, one_sided: bool) -> List[int]:
    direction = 1 if run.next_anchor - run.prev_anchor >= 0 else -1
    return [run.prev_anchor + direction * k * step for k in range(1, run.length + 1)]


def _linear(run: Run, step: int, one_sided: bool) -> List[int]:
    m = run.length
    gap = run.next_anchor - run.prev_anchor
    return [run.prev_anchor + _trunc_div(gap * k, m + 1) for k in range(1, m + 1)]


def _forward(run: Run, step: int, one_sided: bool) -> List[int]:
    if not one_sided:
        return [run.prev_anchor] * run.length
    return [run.prev_anchor + (j + 1) * step for j in range(run.length)]


def _backward(run: Run, step: int, one_sided: bool) -> List[int]:
    m = run.length
    if not one_sided:
        return [run.next_anchor] * m
    return [run.next_anchor - (m - j) * step for j in range(m)]


_PLANNERS = {
    FillPolicy.NEAREST_ANCHOR: _nearest,
    FillPolicy.STEP: _step,
    FillPolicy.LINEAR: _linear,
    FillPolicy.FORWARD: _forward,
    FillPolicy.BACKWARD: _backward,
}


def plan_run(run: Run, policy: FillPolicy, step_seconds: int, one_sided_step: bool) -> List[Optional[int]]:
    """Target value for each position of the run (None everywhere for NONE)."""
    planner = _PLANNERS.get(policy)
    if planner is None:
        return [None] * run.length
    return planner(run, step_seconds, one_sided_step)


def reason_for(policy: FillPolicy, one_sided_step: bool) -> str:
    if not one_sided_step and policy in FLAT_REASONS:
        return FLAT_REASONS[policy]
    return REASONS.get(policy, "")


def fill_gaps(records: Sequence[TimeRecord],
              gap_limit_days: int,
              step_seconds: int,
              one_sided_step: bool = True) -> int:
    """
    Set targets on anchor-less records (set-if-empty; override targets stay).
    ``records`` must already be in (mtime, path) order. Returns how many
    targets were written.
    """
    gap_limit = days_to_seconds(gap_limit_days)
    written = 0
    for run in find_runs(records):
        policy = classify(run, gap_limit)
        if policy is FillPolicy.NONE:
            logger.info("No anchor around records %d-%d, leaving %d without target",
                        run.start, run.end, run.length)
            continue
        reason = reason_for(policy, one_sided_step)
        values = plan_run(run, policy, step_seconds, one_sided_step)
        for offset, t in enumerate(values):
            if records[run.start + offset].set_target_if_empty(t, reason):
                written += 1
        logger.debug("Run %d-%d (m=%d): %s", run.start, run.end, run.length, policy.value)
    return written
