"""Tests for the uniqueness pass over filled targets."""

from pathlib import Path

from time_records import ShotSource, TimeRecord
from unique_times import enforce_unique


def record(i, target=None, anchored=False):
    r = TimeRecord(path=Path(f"f{i}.jpg"), mtime=i)
    if anchored:
        r.claim_shot(target, ShotSource.METADATA)
        r.set_target_if_empty(target, "shot from metadata")
    elif target is not None:
        r.set_target_if_empty(target, "gap too large -> nearest anchor fill")
    return r


class TestEnforceUnique:
    """Test enforce_unique."""

    def test_filled_duplicates_are_bumped(self) -> None:
        """Filled ties with the previous target move to prev + step."""
        records = [
            record(0, 100, anchored=True),
            record(1, 100),
            record(2, 100),
            record(3, 200, anchored=True),
        ]

        result = enforce_unique(records, step_seconds=1)

        assert [r.target for r in records] == [100, 101, 102, 200]
        assert result == {"bumped": 2, "overshoots": 0}
        assert records[1].target_reason == "gap too large -> nearest anchor fill + unique(+1s steps)"

    def test_filled_behind_previous_is_bumped(self) -> None:
        """A filled value earlier than the running target is pulled forward."""
        records = [record(0, 500, anchored=True), record(1, 450)]

        enforce_unique(records, step_seconds=10)

        assert records[1].target == 510

    def test_anchored_records_never_bumped(self) -> None:
        """Anchored targets stay even when they tie or go backwards."""
        records = [
            record(0, 100, anchored=True),
            record(1, 100, anchored=True),
            record(2, 90, anchored=True),
        ]

        result = enforce_unique(records)

        assert [r.target for r in records] == [100, 100, 90]
        assert result["bumped"] == 0

    def test_records_without_target_are_skipped(self) -> None:
        """Empty targets neither change nor reset the running target."""
        records = [record(0, 100, anchored=True), record(1), record(2, 100)]

        enforce_unique(records)

        assert records[1].target is None
        assert records[2].target == 101

    def test_first_filled_record_kept(self) -> None:
        """Nothing before it means nothing to compare with."""
        records = [record(0, 50), record(1, 60, anchored=True)]

        enforce_unique(records)

        assert records[0].target == 50

    def test_idempotent(self) -> None:
        """A second pass changes nothing."""
        records = [
            record(0, 100, anchored=True),
            record(1, 100),
            record(2, 99),
            record(3, 100, anchored=True),
            record(4, 100),
        ]

        enforce_unique(records, step_seconds=1)
        first = [(r.target, r.target_reason) for r in records]
        result = enforce_unique(records, step_seconds=1)

        assert result["bumped"] == 0
        assert [(r.target, r.target_reason) for r in records] == first

    def test_zero_step_is_clamped_to_one_second(self) -> None:
        """Step below 1 still guarantees strict increase."""
        records = [record(0, 100, anchored=True), record(1, 100)]

        enforce_unique(records, step_seconds=0)

        assert records[1].target == 101
        assert records[1].target_reason.endswith("unique(+1s steps)")

    def test_overshoot_past_next_anchor_is_counted(self) -> None:
        """Bumps are not capped; landing on the next anchor is reported."""
        records = [
            record(0, 100, anchored=True),
            record(1, 100),
            record(2, 101),
            record(3, 101, anchored=True),
        ]

        result = enforce_unique(records)

        assert [r.target for r in records] == [100, 101, 102, 101]
        assert result == {"bumped": 2, "overshoots": 2}
