import csv
from pathlib import Path
from typing import Iterable, List

from time_records import TimeRecord
from timestamps import to_exif_string

OUT_CSV = Path("times.csv")

FIELDNAMES = [
    "SourceFile",
    "DateTimeOriginal", "CreateDate", "ModifyDate",
    "MediaCreateDate", "TrackCreateDate",
]
EXIF_FAMILY = {'.jpg', '.jpeg', '.jfif', '.tif', '.tiff', '.dng', '.png', '.heic', '.webp', '.bmp', '.gif'}


def times_row(path: Path, t: int) -> dict:
    """One ExifTool CSV row: EXIF date tags for images, QuickTime tags for everything else."""
    stamp = to_exif_string(t)
    out = {"SourceFile": str(path)}
    if Path(path).suffix.lower() in EXIF_FAMILY:
        out.update({
            "DateTimeOriginal": stamp,
            "CreateDate":       stamp,
            "ModifyDate":       stamp,
            # leave the quicktime tags blank
            "MediaCreateDate":  "",
            "TrackCreateDate":  "",
        })
    else:
        out.update({
            "DateTimeOriginal": "",
            "CreateDate":       "",
            "ModifyDate":       "",
            "MediaCreateDate":  stamp,
            "TrackCreateDate":  stamp,
        })
    return out


def write_times_csv(records: Iterable[TimeRecord], out_csv: Path = OUT_CSV) -> int:
    """Write rows for every record with a target; returns the row count (0 -> no file written)."""
    rows: List[dict] = [times_row(r.path, r.target) for r in records if r.target is not None]
    if not rows:
        return 0
    with Path(out_csv).open("w", newline="", encoding="utf-8") as fout:
        writer = csv.DictWriter(fout, fieldnames=FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)
    return len(rows)
