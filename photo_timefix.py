#!/usr/bin/env python3
"""
Photo Time Fix: sort media by mtime, read shot times (EXIF/XMP, optional
filename / Takeout JSON fallback), infer the missing ones from their
neighbours, then optionally write EXIF and sync filesystem times.

Run:
    python photo_timefix.py <folder>             # dry-run, report only
    python photo_timefix.py <folder> --apply     # write EXIF + file times
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from tqdm import tqdm

import timefix_options as defaults
from build_time_csv import OUT_CSV, write_times_csv
from exif_times import can_write_exif, write_exif_if_missing
from fs_times import set_file_times
from manifest import MANIFEST_FILE, write_manifest
from metadata import apply_times_csv
from reconcile import ReconcileStats, reconcile
from scan_media import collect_records
from time_records import ShotSource, TimeRecord
from timefix_options import Options
from timestamps import format_local

logger = logging.getLogger(__name__)

LOG_FILE = "photo_timefix.log"


@dataclass
class ApplyStats:
    exif_written: int = 0
    exif_queued: int = 0
    exif_unchanged: int = 0
    fs_written: int = 0
    fs_failed: int = 0


# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Infer missing photo/video capture times from neighbouring files")
    p.add_argument("path", type=Path, help="Media file or folder")
    p.add_argument("--apply", dest="dry_run", action="store_false",
                   help="Write EXIF / file times (default is a dry-run)")
    p.add_argument("--no-recursive", dest="recursive", action="store_false",
                   help="Only scan the top folder")
    p.add_argument("--no-filename-fallback", dest="allow_filename_fallback", action="store_false",
                   help="Never use a filename timestamp as the shot time")
    p.add_argument("--no-filename-override", dest="enable_filename_override", action="store_false",
                   help="Never let a filename timestamp override drifting file times")
    p.add_argument("--override-days", dest="override_threshold_days", type=int,
                   default=defaults.OVERRIDE_THRESHOLD_DAYS,
                   help="Filename override threshold in days (default %(default)s)")
    p.add_argument("--gap-limit-days", dest="anchor_gap_limit_days", type=int,
                   default=defaults.ANCHOR_GAP_LIMIT_DAYS,
                   help="Anchors further apart are not interpolated (default %(default)s)")
    p.add_argument("--no-one-sided-step", dest="one_sided_step", action="store_false",
                   help="Copy the single anchor instead of stepping away from it")
    p.add_argument("--step-seconds", type=int, default=defaults.STEP_SECONDS,
                   help="Step used for step-fill and uniqueness bumps (default %(default)s)")
    p.add_argument("--no-exif", dest="write_exif", action="store_false",
                   help="Do not write EXIF shot times")
    p.add_argument("--no-sync-fs", dest="sync_file_times", action="store_false",
                   help="Do not touch filesystem times")
    p.add_argument("--json-sidecar", dest="use_json_sidecar", action="store_true",
                   help="Use Google Takeout <file>.json photoTakenTime as metadata")
    p.add_argument("--workers", type=int, default=defaults.WORKERS,
                   help="Parallel readers (default %(default)s)")
    p.add_argument("--manifest", type=Path, default=MANIFEST_FILE,
                   help="Audit CSV to write (default %(default)s)")
    p.add_argument("--times-csv", type=Path, default=OUT_CSV,
                   help="ExifTool CSV for formats piexif cannot write (default %(default)s)")
    p.add_argument("--exiftool", action="store_true",
                   help="Run exiftool -csv=<times-csv> after writing it (needs --apply)")
    p.add_argument("--log-file", default=LOG_FILE, help="Log file (default %(default)s)")
    p.add_argument("--quiet", "-q", action="store_true", help="Only print the summary")
    return p


# ---------------------------------------------------------------------------

def print_record(r: TimeRecord):
    if r.target is None:
        print(f"[SKIP] {r.path} (no target time inferred)")
        return
    print(f"{'[OK]  ' if not r.is_filled else '[FILL]'} {r.path}")
    print(f"       target: {format_local(r.target)}   ({r.target_reason})")
    print(f"       mtime : {format_local(r.mtime)}")
    if len(r.clocks) > 1:
        print(f"       clocks: {', '.join(format_local(c) for c in r.clocks)}")


def apply_targets(records: List[TimeRecord], opt: Options, times_csv: Path,
                  root: Path, run_exiftool: bool = False):
    """
    Persist targets. Metadata is only written for files whose shot time did
    not come from metadata; file times are synced for every file with a
    target. A failed write is counted and logged, nothing else changes.
    """
    stats = ApplyStats()
    actions: Dict[Path, List[str]] = {}
    with_target = [r for r in records if r.target is not None]

    # 1) metadata (before file times: rewriting a file bumps its mtime)
    queued = []
    if opt.write_exif:
        for r in tqdm(with_target, desc="Writing EXIF", unit="file"):
            if r.shot_source is ShotSource.METADATA:
                continue
            if not can_write_exif(r.path):
                queued.append(r)
                continue
            if write_exif_if_missing(r.path, r.target):
                stats.exif_written += 1
                actions.setdefault(r.path, []).append("EXIF written (missing keys)")
            else:
                stats.exif_unchanged += 1
                actions.setdefault(r.path, []).append("EXIF not written")

    if queued:
        stats.exif_queued = write_times_csv(queued, times_csv)
        for r in queued:
            actions.setdefault(r.path, []).append(f"queued in {Path(times_csv).name}")
        print(f"📝 {stats.exif_queued} rows for exiftool → {times_csv}")
        if run_exiftool:
            ok, summary = apply_times_csv(times_csv, root, opt.recursive)
            print("\n📋 ExifTool Summary:")
            for l in summary:
                print("  " + l)
            if not ok:
                print("❌ exiftool reported a failure, see log")

    # 2) filesystem times
    if opt.sync_file_times:
        for r in tqdm(with_target, desc="Syncing file times", unit="file"):
            if set_file_times(r.path, r.target):
                stats.fs_written += 1
                actions.setdefault(r.path, []).append("FS times updated")
            else:
                stats.fs_failed += 1
                actions.setdefault(r.path, []).append("FS update failed")

    return stats, actions


def print_summary(stats: ReconcileStats, applied: ApplyStats, dry_run: bool):
    print("\nDone.")
    print(f"Files: {stats.files}, anchors (with shot): {stats.anchors}")
    print(f"Filename overrides: {stats.overrides}")
    print(f"Filled missing (no shot -> inferred target): {stats.filled}")
    print(f"Unique bumps: {stats.bumped}" + (f" ({stats.overshoots} past next anchor)" if stats.overshoots else ""))
    print(f"No-target skipped: {stats.no_target}")
    if dry_run:
        print("🚧 Dry-run mode: no changes made.")
        return
    print(f"EXIF updated (missing-only): {applied.exif_written}")
    if applied.exif_queued:
        print(f"Queued for exiftool: {applied.exif_queued}")
    if applied.exif_unchanged:
        print(f"EXIF not written (already present or unreadable): {applied.exif_unchanged}")
    print(f"Filesystem times updated: {applied.fs_written}")
    if applied.fs_failed:
        print(f"❌ Filesystem time updates failed: {applied.fs_failed}")

# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        opt = Options.from_args(args)
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        filename=args.log_file,
        level=logging.INFO,
        format='%(asctime)s %(levelname)s %(threadName)s %(message)s',
    )

    if args.exiftool and opt.dry_run:
        print("ℹ️  --exiftool has no effect in dry-run mode, add --apply to run it.")

    root = args.path
    if not root.exists():
        print(f"❌ Path not found: {root}")
        return 1

    logger.info(f"Run start: {root} {opt}")
    print(f"🔍 Scanning {root} ({'recursive' if opt.recursive else 'top folder only'})...")
    records = collect_records(root, opt.recursive, opt.use_json_sidecar, opt.workers)
    if not records:
        print("✅ No media files found.")
        return 0

    result = reconcile(records, opt)

    if not args.quiet:
        print("----")
        for r in result.records:
            print_record(r)
        print("----")

    applied = ApplyStats()
    actions = {}
    if not opt.dry_run:
        applied, actions = apply_targets(result.records, opt, args.times_csv, root, args.exiftool)

    write_manifest(result.records, args.manifest, actions)
    print(f"📄 Manifest saved to: {args.manifest}")

    print_summary(result.stats, applied, opt.dry_run)
    return 0


if __name__ == "__main__":
    sys.exit(main())

'''
**Usage (1 sentence)**
Run `python photo_timefix.py <folder>` first as a dry-run to see which files are anchored, filled, overridden or skipped, then re-run with `--apply` to write the missing EXIF shot times and sync every file's modification time to its target.

**Tools / Technologies employed**

* **Python 3 std-lib**: `argparse`, `os`, `pathlib`, `concurrent.futures`, `csv`, `logging` for the CLI, discovery, parallel reads, the audit manifest and the log file.
* **piexif** for EXIF read and missing-key write on JPEG/WebP.
* **Pillow + pillow_heif** for EXIF on PNG/HEIC and other Pillow-readable images.
* **ExifTool (CLI, optional)** via `times.csv` for videos and formats piexif cannot write.
* **tqdm** progress bars for reading, writing and the ExifTool pass.
* **win32-setctime** to move the Windows creation time along with the modification time.

**Idea summary**
Files are ordered by modification time, each gets an anchor from metadata (or its filename), and every run of anchor-less files between two anchors is filled: linearly when the anchors leave room for a distinct second per file, in fixed steps when they are too close, by nearest anchor when they are too far apart, and by stepping away from a single anchor at the ends. A final pass bumps synthesized times so no filled file ties or goes behind the file before it. Files whose recorded times are far from the timestamp in their own name are corrected to the filename time. Existing metadata shot times are never overwritten.
'''
