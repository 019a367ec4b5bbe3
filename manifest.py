import csv
import shutil
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Dict, Iterable, List, Optional

from time_records import TimeRecord
from timestamps import format_local, to_exif_string

MANIFEST_FILE = Path("timefix_manifest.csv")

FIELDNAMES = [
    "row_type",
    "media_path",
    "mtime",
    "shot_unix",
    "shot_source",
    "target_unix",
    "formatted_time",
    "target_reason",
    "action_taken",
    "notes",
]


def row_type(record: TimeRecord) -> str:
    if record.target is None:
        return "no_target"
    return "filled" if record.is_filled else "anchored"


def append_action(row: dict, text: str):
    """
    Safely append to row['action_taken']:
      - if empty       -> "text"
      - otherwise      -> existing + "; text"
    """
    prev = row.get('action_taken', '').strip()
    if prev:
        row['action_taken'] = f"{prev}; {text}"
    else:
        row['action_taken'] = text


def manifest_row(record: TimeRecord, actions: Optional[List[str]] = None) -> dict:
    row = {
        "row_type": row_type(record),
        "media_path": str(record.path),
        "mtime": format_local(record.mtime),
        "shot_unix": record.shot if record.shot is not None else "",
        "shot_source": record.shot_source.value,
        "target_unix": record.target if record.target is not None else "",
        "formatted_time": to_exif_string(record.target) if record.target is not None else "",
        "target_reason": record.target_reason,
        "action_taken": "",
        "notes": "" if record.target is not None else "no target time inferred",
    }
    for a in actions or []:
        append_action(row, a)
    return row


def write_manifest(records: Iterable[TimeRecord],
                   path: Path = MANIFEST_FILE,
                   actions: Optional[Dict[Path, List[str]]] = None) -> int:
    """Write the audit manifest atomically (temp file in the same folder, then replace)."""
    path = Path(path)
    actions = actions or {}
    rows = [manifest_row(r, actions.get(r.path)) for r in records]

    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("w",
                            delete=False,
                            encoding="utf-8",
                            newline="",
                            dir=path.parent) as tmp:
        writer = csv.DictWriter(tmp, fieldnames=FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)
        tmp_path = Path(tmp.name)

    try:
        tmp_path.replace(path)              # atomic, same mount point
    except OSError:                         # exotic FS edge-case -> fallback
        shutil.move(str(tmp_path), str(path))
    return len(rows)


def read_manifest(path: Path = MANIFEST_FILE) -> List[dict]:
    with Path(path).open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))
