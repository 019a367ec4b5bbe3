import logging
import os
import platform
from pathlib import Path
from typing import List

from win32_setctime import setctime

logger = logging.getLogger(__name__)


def is_windows() -> bool:
    return platform.system().lower() == "windows"


def file_mtime(path: Path) -> int:
    return int(os.stat(path).st_mtime)


def file_clocks(path: Path) -> List[int]:
    """
    Independent filesystem clocks used by the filename-override drift test.

    Windows keeps a real creation time next to the write time, so both are
    returned; elsewhere st_ctime is the inode change time, so only the
    modification clock counts.
    """
    try:
        st = os.stat(path)
    except OSError as e:
        logger.info(f"stat failed for {path}: {e}")
        return []
    if is_windows():
        created = getattr(st, "st_birthtime", None) or st.st_ctime
        return [int(created), int(st.st_mtime)]
    return [int(st.st_mtime)]


def set_file_times(path: Path, t: int) -> bool:
    """Set atime and mtime to ``t``; on Windows the creation time as well."""
    try:
        os.utime(path, (t, t))
        if is_windows():
            setctime(str(path), t)
        return True
    except OSError as e:
        logger.info(f"Setting file times failed for {path}: {e}")
        return False
