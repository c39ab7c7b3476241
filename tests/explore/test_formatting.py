"""Tests for date and size formatting."""

from datetime import date, datetime, timedelta, timezone

import pytest

from explore.formatting import (
    commit_date_label,
    format_file_size,
    format_relative_time,
    format_repository_size,
    format_short_date,
    parse_timestamp,
)

NOW = datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_zulu_suffix(self):
        """Test that a Z suffix is read as UTC."""
        assert parse_timestamp("2024-03-01T12:00:00Z") == datetime(
            2024, 3, 1, 12, 0, tzinfo=timezone.utc
        )

    def test_offset_is_converted_to_utc(self):
        """Test that offsets are normalized to UTC."""
        parsed = parse_timestamp("2024-03-01T14:00:00+02:00")
        assert parsed.hour == 12
        assert parsed.tzinfo == timezone.utc

    def test_naive_is_assumed_utc(self):
        """Test that naive timestamps get UTC attached."""
        assert parse_timestamp("2024-03-01T12:00:00").tzinfo == timezone.utc

    @pytest.mark.parametrize("value", [None, "", "yesterday-ish"])
    def test_unreadable(self, value):
        """Test that unreadable values return None."""
        assert parse_timestamp(value) is None


class TestFormatRelativeTime:
    """Tests for format_relative_time."""

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=3), "now"),
            (timedelta(seconds=30), "30 seconds ago"),
            (timedelta(seconds=60), "1 minute ago"),
            (timedelta(minutes=5), "5 minutes ago"),
            (timedelta(hours=1), "1 hour ago"),
            (timedelta(hours=2), "2 hours ago"),
            (timedelta(days=1), "1 day ago"),
            (timedelta(days=10), "10 days ago"),
            (timedelta(days=45), "1 month ago"),
            (timedelta(days=100), "3 months ago"),
            (timedelta(days=400), "1 year ago"),
            (timedelta(days=800), "2 years ago"),
        ],
    )
    def test_buckets(self, delta, expected):
        """Test each relative time bucket."""
        assert format_relative_time(NOW - delta, now=NOW) == expected

    def test_accepts_iso_strings(self):
        """Test ISO strings are parsed before formatting."""
        assert format_relative_time("2024-03-10T11:57:00Z", now=NOW) == "3 minutes ago"

    def test_invalid_value(self):
        """Test invalid input gives the unknown label."""
        assert format_relative_time("not a date", now=NOW) == "Unknown"
        assert format_relative_time(None, now=NOW) == "Unknown"


class TestSizes:
    """Tests for size formatting."""

    def test_file_sizes(self):
        """Test byte, kilobyte and megabyte formatting."""
        assert format_file_size(512) == "512 B"
        assert format_file_size(2048) == "2.0 KB"
        assert format_file_size(5 * 1024 * 1024) == "5.0 MB"
        assert format_file_size(None) == "0 B"

    def test_repository_sizes(self):
        """Test repository sizes, which are reported in KB."""
        assert format_repository_size(500) == "500 KB"
        assert format_repository_size(2048) == "2.0 MB"
        assert format_repository_size(3 * 1024 * 1024) == "3.0 GB"


class TestDateLabels:
    """Tests for date labels."""

    def test_short_date(self):
        """Test the short date label."""
        assert format_short_date(date(2024, 3, 5)) == "Mar 5, 2024"

    def test_commit_date_labels(self):
        """Test today, yesterday and older labels."""
        today = date(2024, 3, 10)
        assert commit_date_label("2024-03-10T08:00:00Z", today=today) == "Today"
        assert commit_date_label("2024-03-09T23:59:00Z", today=today) == "Yesterday"
        assert commit_date_label("2024-03-05T08:00:00Z", today=today) == "Mar 5, 2024"
        assert commit_date_label(None, today=today) == "Unknown date"
