from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class ShotSource(Enum):
    NONE = "none"
    METADATA = "metadata"
    FILENAME = "filename"


@dataclass
class TimeRecord:
    """
    One media file under reconciliation.

    ``mtime`` + ``str(path)`` is the fixed ordering key. ``metadata_time``,
    ``filename_time`` and ``clocks`` are what the readers found on disk;
    ``shot``/``target`` are filled in by the pipeline.
    """
    path: Path
    mtime: int
    clocks: List[int] = field(default_factory=list)
    metadata_time: Optional[int] = None
    filename_time: Optional[int] = None

    shot: Optional[int] = None
    shot_source: ShotSource = ShotSource.NONE

    target: Optional[int] = None
    target_reason: str = ""

    @property
    def sort_key(self):
        return (self.mtime, str(self.path))

    @property
    def is_filled(self) -> bool:
        # no anchor of its own; any target it has was synthesized
        return self.shot is None

    def claim_shot(self, t: Optional[int], source: ShotSource) -> bool:
        if self.shot is not None or t is None:
            return False
        self.shot = t
        self.shot_source = source
        return True

    def set_target_if_empty(self, t: int, reason: str) -> bool:
        if self.target is not None:
            return False
        self.target = t
        self.target_reason = reason
        return True

    def append_reason(self, text: str):
        """
        Safely append to target_reason:
          - if empty       -> "text"
          - otherwise      -> existing + " + text"
        """
        if self.target_reason:
            self.target_reason = f"{self.target_reason} + {text}"
        else:
            self.target_reason = text

    def bump_target(self, t: int, note: str):
        self.target = t
        self.append_reason(note)


def order_records(records) -> List[TimeRecord]:
    """Sort once by (mtime, path); later stages never re-sort."""
    return sorted(records, key=lambda r: r.sort_key)
