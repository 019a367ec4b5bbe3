"""Tests for run options."""

from argparse import Namespace

import pytest

from timefix_options import Options


class TestOptions:
    """Test Options defaults and validation."""

    def test_defaults(self) -> None:
        opt = Options()

        assert opt.allow_filename_fallback is True
        assert opt.enable_filename_override is True
        assert opt.override_threshold_days == 7
        assert opt.anchor_gap_limit_days == 90
        assert opt.one_sided_step is True
        assert opt.step_seconds == 1
        assert opt.dry_run is True

    @pytest.mark.parametrize(
        "kwargs",
        [{"step_seconds": 0}, {"override_threshold_days": -1}, {"anchor_gap_limit_days": -5}, {"workers": 0}],
    )
    def test_invalid(self, kwargs) -> None:
        with pytest.raises(ValueError):
            Options(**kwargs)

    def test_zero_days_allowed(self) -> None:
        opt = Options(override_threshold_days=0, anchor_gap_limit_days=0)

        assert opt.override_threshold_days == 0

    def test_from_args(self) -> None:
        """Unknown attributes are ignored, None keeps the default."""
        args = Namespace(path="x", step_seconds=5, override_threshold_days=None, dry_run=False, quiet=True)

        opt = Options.from_args(args)

        assert opt.step_seconds == 5
        assert opt.override_threshold_days == 7
        assert opt.dry_run is False
