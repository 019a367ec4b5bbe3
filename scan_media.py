import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Optional

from tqdm import tqdm

from exif_times import read_shot_time
from filename_times import parse_filename_time
from fs_times import file_clocks, file_mtime
from time_records import TimeRecord

logger = logging.getLogger(__name__)

# File type definitions for images and videos
IMAGE_EXTS = {'.jpg', '.jpeg', '.tif', '.tiff', '.png', '.heic', '.webp', '.dng', '.bmp', '.gif'}
VIDEO_EXTS = {'.mp4', '.mov', '.m4v', '.3gp', '.3g2', '.avi', '.mkv', '.wmv'}
MEDIA_EXTS = IMAGE_EXTS | VIDEO_EXTS


def is_media(path: Path) -> bool:
    return path.suffix.lower() in MEDIA_EXTS


def iter_media_paths(root: Path, recursive: bool = True) -> Iterator[Path]:
    """Yield media files under ``root`` (or ``root`` itself if it is one). Unreadable dirs are skipped."""
    root = Path(root)
    if root.is_file():
        if is_media(root):
            yield root
        return
    if not root.is_dir():
        return

    if recursive:
        for folder, dirs, files in os.walk(root, onerror=lambda e: logger.info(f"Skipping: {e}")):
            for fname in sorted(files):
                p = Path(folder) / fname
                if is_media(p) and p.is_file():
                    yield p
    else:
        for p in sorted(root.iterdir()):
            if p.is_file() and is_media(p):
                yield p


def build_record(path: Path, use_json_sidecar: bool = False, now: Optional[int] = None) -> Optional[TimeRecord]:
    """Read everything the pipeline needs from one file; None if the file vanished."""
    try:
        mtime = file_mtime(path)
    except OSError as e:
        logger.info(f"Cannot stat {path}: {e}")
        return None
    return TimeRecord(
        path=path,
        mtime=mtime,
        clocks=file_clocks(path),
        metadata_time=read_shot_time(path, use_json_sidecar, now),
        filename_time=parse_filename_time(path, now),
    )


def collect_records(root: Path,
                    recursive: bool = True,
                    use_json_sidecar: bool = False,
                    workers: int = 8,
                    now: Optional[int] = None) -> List[TimeRecord]:
    paths = list(iter_media_paths(root, recursive))
    logger.info(f"Found {len(paths)} media files under {root}")
    if not paths:
        return []

    def read_one(p):
        return build_record(p, use_json_sidecar, now)

    with ThreadPoolExecutor(max_workers=workers) as ex:
        records = list(tqdm(ex.map(read_one, paths), total=len(paths),
                            desc="Reading shot times", unit="file"))
    return [r for r in records if r is not None]
