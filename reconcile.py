"""
Single-pass reconciliation over one fully-read collection:

  sort (mtime, path) -> resolve anchors -> filename override
  -> target := shot -> fill gaps -> unique bump
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from anchor_resolver import resolve_anchor
from filename_override import apply_override
from gap_fill import fill_gaps
from time_records import ShotSource, TimeRecord, order_records
from timefix_options import Options
from unique_times import enforce_unique

logger = logging.getLogger(__name__)

SHOT_REASONS = {
    ShotSource.METADATA: "shot from metadata",
    ShotSource.FILENAME: "shot from filename",
}


@dataclass
class ReconcileStats:
    files: int = 0
    anchors: int = 0
    overrides: int = 0
    filled: int = 0
    bumped: int = 0
    overshoots: int = 0
    no_target: int = 0


@dataclass
class ReconcileResult:
    records: List[TimeRecord] = field(default_factory=list)
    stats: ReconcileStats = field(default_factory=ReconcileStats)


def apply_shot_defaults(records: Iterable[TimeRecord]) -> int:
    n = 0
    for r in records:
        if r.shot is not None and r.set_target_if_empty(r.shot, SHOT_REASONS[r.shot_source]):
            n += 1
    return n


def reconcile(records: Iterable[TimeRecord],
              options: Optional[Options] = None,
              now: Optional[int] = None) -> ReconcileResult:
    opt = options or Options()
    ordered = order_records(records)
    stats = ReconcileStats(files=len(ordered))

    for r in ordered:
        shot, _ = resolve_anchor(r, r.metadata_time, r.filename_time,
                                 opt.allow_filename_fallback, now)
        if shot is not None:
            stats.anchors += 1

    if opt.enable_filename_override:
        for r in ordered:
            if apply_override(r, r.clocks, r.filename_time,
                              opt.override_threshold_days, True, now) is not None:
                stats.overrides += 1

    apply_shot_defaults(ordered)

    fill_gaps(ordered, opt.anchor_gap_limit_days, opt.step_seconds, opt.one_sided_step)
    unique = enforce_unique(ordered, opt.step_seconds)
    stats.bumped = unique["bumped"]
    stats.overshoots = unique["overshoots"]

    stats.filled = sum(1 for r in ordered if r.is_filled and r.target is not None)
    stats.no_target = sum(1 for r in ordered if r.target is None)

    logger.info("Reconciled %d files: %d anchors, %d overrides, %d filled, %d bumped, %d without target",
                stats.files, stats.anchors, stats.overrides, stats.filled,
                stats.bumped, stats.no_target)
    return ReconcileResult(records=ordered, stats=stats)
