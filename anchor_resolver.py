from typing import Optional, Tuple

from time_records import ShotSource, TimeRecord
from timestamps import plausible


def resolve_anchor(record: TimeRecord,
                   metadata_candidate: Optional[int],
                   filename_candidate: Optional[int],
                   allow_filename_fallback: bool = True,
                   now: Optional[int] = None) -> Tuple[Optional[int], ShotSource]:
    """
    Pick the record's shot time (anchor):
      1) plausible metadata time      -> METADATA
      2) plausible filename time      -> FILENAME   (only with fallback on)
      3) nothing                      -> NONE
    An anchor already on the record is kept as is.
    """
    if record.shot is not None:
        return record.shot, record.shot_source

    if plausible(metadata_candidate, now):
        record.claim_shot(metadata_candidate, ShotSource.METADATA)
    elif allow_filename_fallback and plausible(filename_candidate, now):
        record.claim_shot(filename_candidate, ShotSource.FILENAME)

    return record.shot, record.shot_source
