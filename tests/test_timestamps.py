"""Tests for time helpers and filename timestamp parsing."""

from datetime import datetime
from pathlib import Path

import pytest

from filename_times import parse_filename_time
from timestamps import (
    EPOCH_FLOOR,
    format_local,
    normalize_date_string,
    parse_exif_datetime,
    plausible,
    to_exif_string,
)

NOW = int(datetime(2024, 1, 1).timestamp())


def local(*parts) -> int:
    return int(datetime(*parts).timestamp())


class TestParseExifDatetime:
    """Test parse_exif_datetime."""

    @pytest.mark.parametrize(
        "raw",
        [
            "2021:12:30 21:54:25",
            b"2021:12:30 21:54:25\x00",
            "2021-12-30T21:54:25",
            "2021-12-30T21:54:25.123",
            "2021-12-30T21:54:25+08:00",
            "2021-12-30 21:54:25Z",
            "  2021:12:30 21:54:25  ",
        ],
    )
    def test_variants(self, raw) -> None:
        """EXIF, XMP and ISO spellings all map to the same local instant."""
        assert parse_exif_datetime(raw) == local(2021, 12, 30, 21, 54, 25)

    @pytest.mark.parametrize(
        "raw",
        [None, "", "0000:00:00 00:00:00", "2021:13:01 00:00:00", "not a date", "2021:12:30"],
    )
    def test_rejects(self, raw) -> None:
        """Zeroed, malformed or truncated values give None."""
        assert parse_exif_datetime(raw) is None

    def test_normalize(self) -> None:
        assert normalize_date_string("2021-12-30T21:54:25.5Z") == "2021:12:30 21:54:25"


class TestPlausible:
    """Test plausible."""

    def test_none(self) -> None:
        assert not plausible(None, NOW)

    def test_floor(self) -> None:
        floor = int(EPOCH_FLOOR.timestamp())
        assert plausible(floor, NOW)
        assert not plausible(floor - 1, NOW)

    def test_ceiling(self) -> None:
        assert plausible(NOW + 86400, NOW)
        assert not plausible(NOW + 86401, NOW)


class TestFormatting:
    """Test string conversion."""

    def test_exif_round_trip(self) -> None:
        t = local(2020, 2, 29, 8, 0, 1)
        assert to_exif_string(t) == "2020:02:29 08:00:01"
        assert parse_exif_datetime(to_exif_string(t)) == t

    def test_format_local(self) -> None:
        assert format_local(local(2020, 2, 29, 8, 0, 1)) == "2020-02-29 08:00:01"
        assert format_local(None) == ""


class TestParseFilenameTime:
    """Test parse_filename_time."""

    @pytest.mark.parametrize(
        "name",
        [
            "Screenshot_20211230_215425.png",
            "IMG_20211230_215425.jpg",
            "20211230215425.jpg",
            "VID-20211230-215425.mp4",
            "2021-12-30_21-54-25.jpg",
            "2021-12-30 215425.mov",
            "PXL_20211230_215425123.jpg",
        ],
    )
    def test_patterns(self, name) -> None:
        """Compact and dashed patterns inside the stem."""
        assert parse_filename_time(Path(name), now=NOW) == local(2021, 12, 30, 21, 54, 25)

    @pytest.mark.parametrize(
        "name",
        ["IMG_1234.jpg", "20211340_215425.jpg", "19700101_000000.jpg", "DSC0001.JPG"],
    )
    def test_no_usable_time(self, name) -> None:
        """No pattern, invalid date or implausible date gives None."""
        assert parse_filename_time(Path(name), now=NOW) is None

    def test_future_rejected(self) -> None:
        assert parse_filename_time(Path("IMG_20300101_000000.jpg"), now=NOW) is None

    def test_extension_digits_ignored(self) -> None:
        """Only the stem is searched."""
        assert parse_filename_time(Path("clip.20211230215425"), now=NOW) is None
