import csv
import logging
import re
import subprocess
from pathlib import Path
from typing import List, Tuple

from tqdm import tqdm

logger = logging.getLogger(__name__)

PROGRESS_RE = re.compile(r'\[(\d+)/(\d+)\]$')
SUMMARY_WORDS = ("directories", "files updated", "unchanged", "skipped", "error", "warning")


def estimate_total_from_csv(csv_path: Path) -> int:
    with Path(csv_path).open('r', encoding='utf-8', newline='') as f:
        return max(sum(1 for _ in csv.reader(f)) - 1, 0)  # subtract header


def exiftool_command(times_csv: Path, root: Path, recursive: bool = True) -> List[str]:
    cmd = ["exiftool", "-progress", "-overwrite_original", f"-csv={Path(times_csv).resolve()}"]
    if recursive:
        cmd.append("-r")
    cmd.append(str(Path(root).resolve()))
    return cmd


def apply_times_csv(times_csv: Path, root: Path, recursive: bool = True) -> Tuple[bool, List[str]]:
    """
    Run ExifTool over ``root`` with ``-csv=times.csv`` and a live progress bar.
    Returns (success, summary lines). A missing exiftool binary is a failure, not an exception.
    """
    total_estimate = estimate_total_from_csv(times_csv)
    cmd = exiftool_command(times_csv, root, recursive)
    logger.info("Running: %s", " ".join(cmd))

    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1
        )
    except OSError as e:
        logger.error(f"exiftool could not be started: {e}")
        return False, [f"exiftool not available: {e}"]

    bar = tqdm(total=total_estimate, desc="ExifTool Updating", unit="files", dynamic_ncols=True)
    summary_lines = []
    last_count = 0

    for raw_line in proc.stdout:
        line = raw_line.strip()
        match = PROGRESS_RE.search(line)
        if match:
            current = int(match.group(1))
            bar.update(current - last_count)
            last_count = current
        elif any(word in line for word in SUMMARY_WORDS):
            summary_lines.append(line)

    returncode = proc.wait()
    bar.close()

    for l in summary_lines:
        logger.info("exiftool: %s", l)
    return returncode == 0, summary_lines
