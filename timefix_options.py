from dataclasses import dataclass, fields

# -------- CONFIG (defaults, every one overridable from the CLI) --------
ALLOW_FILENAME_FALLBACK = True   # no EXIF -> filename timestamp may become the shot time
ENABLE_FILENAME_OVERRIDE = True  # fs clocks far from filename time -> filename wins the target
OVERRIDE_THRESHOLD_DAYS = 7
ANCHOR_GAP_LIMIT_DAYS = 90       # anchors further apart than this -> no interpolation
ONE_SIDED_STEP = True            # single-anchor runs get +/- step instead of a flat copy
STEP_SECONDS = 1
RECURSIVE = True
DRY_RUN = True
WRITE_EXIF = True                # only for files whose shot did not come from metadata
SYNC_FILE_TIMES = True
USE_JSON_SIDECAR = False         # Google Takeout <name>.json photoTakenTime as metadata
WORKERS = 8


@dataclass
class Options:
    allow_filename_fallback: bool = ALLOW_FILENAME_FALLBACK
    enable_filename_override: bool = ENABLE_FILENAME_OVERRIDE
    override_threshold_days: int = OVERRIDE_THRESHOLD_DAYS
    anchor_gap_limit_days: int = ANCHOR_GAP_LIMIT_DAYS
    one_sided_step: bool = ONE_SIDED_STEP
    step_seconds: int = STEP_SECONDS
    recursive: bool = RECURSIVE
    dry_run: bool = DRY_RUN
    write_exif: bool = WRITE_EXIF
    sync_file_times: bool = SYNC_FILE_TIMES
    use_json_sidecar: bool = USE_JSON_SIDECAR
    workers: int = WORKERS

    def __post_init__(self):
        if self.override_threshold_days < 0:
            raise ValueError("override_threshold_days must be >= 0")
        if self.anchor_gap_limit_days < 0:
            raise ValueError("anchor_gap_limit_days must be >= 0")
        if self.step_seconds < 1:
            raise ValueError("step_seconds must be >= 1")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")

    @classmethod
    def from_args(cls, args) -> "Options":
        """Build from an argparse Namespace; attributes it lacks keep their defaults."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in vars(args).items() if k in known and v is not None}
        return cls(**values)
