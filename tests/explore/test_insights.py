"""Tests for derived repository views."""

from datetime import date

import pytest

from explore.formatting import parse_timestamp
from explore.insights import (
    DEFAULT_LANGUAGE_COLOR,
    average_commits_per_day,
    clean_path,
    commits_by_date,
    contributor_color,
    daily_commits,
    download_urls,
    encode_path,
    language_breakdown,
    line_totals,
    most_active_day,
)
from explore.models import CommitRecord, DiffChange

TODAY = date(2024, 3, 10)


def _commit(sha, raw_date, author="ada"):
    return CommitRecord(
        sha=sha, message=f"commit {sha}", author=author, raw_date=raw_date, date=parse_timestamp(raw_date)
    )


class TestLanguageBreakdown:
    """Tests for language_breakdown."""

    def test_shares_sorted_by_size(self):
        """Test percentages and ordering by byte count."""
        shares = language_breakdown({"Shell": 250, "Python": 750})
        assert [s.name for s in shares] == ["Python", "Shell"]
        assert [s.percentage for s in shares] == [75.0, 25.0]
        assert shares[0].color == "#3572A5"

    def test_unknown_language_color(self):
        """Test languages without a known colour get the default."""
        assert language_breakdown({"Zig": 10})[0].color == DEFAULT_LANGUAGE_COLOR

    def test_top_limit(self):
        """Test only the largest languages are kept."""
        languages = {f"L{i}": i + 1 for i in range(8)}
        assert len(language_breakdown(languages)) == 5

    def test_empty(self):
        """Test empty or zero-sized input."""
        assert language_breakdown({}) == []
        assert language_breakdown(None) == []
        assert language_breakdown({"Python": 0}) == []


class TestDailyCommits:
    """Tests for the seven day activity window."""

    def test_counts_and_bars(self):
        """Test counts per day and bar percentages relative to the busiest day."""
        commits = [
            _commit("a1", "2024-03-10T09:00:00Z"),
            _commit("a2", "2024-03-10T10:00:00Z"),
            _commit("a3", "2024-03-10T11:00:00Z"),
            _commit("a4", "2024-03-10T12:00:00Z"),
            _commit("b1", "2024-03-08T12:00:00Z"),
            _commit("old", "2024-02-01T12:00:00Z"),
        ]
        activity = daily_commits(commits, today=TODAY)

        assert len(activity) == 7
        assert activity[0].day == date(2024, 3, 4)
        assert activity[-1].day == TODAY
        assert activity[-1].count == 4
        assert activity[-1].percentage == 100.0
        assert activity[-3].count == 1
        assert activity[-3].percentage == 25.0
        assert activity[0].percentage == 0.0
        assert activity[-1].label == "Mar 10"

    def test_minimum_bar(self):
        """Test that a small non-zero day keeps a visible bar."""
        commits = [_commit(f"a{i}", "2024-03-10T09:00:00Z") for i in range(20)]
        commits.append(_commit("b", "2024-03-09T09:00:00Z"))
        activity = daily_commits(commits, today=TODAY)
        assert activity[-2].percentage == 10.0

    def test_average_and_most_active(self):
        """Test summary figures over the window."""
        commits = [
            _commit("a", "2024-03-09T09:00:00Z"),
            _commit("b", "2024-03-09T10:00:00Z"),
            _commit("c", "2024-03-10T10:00:00Z"),
        ]
        activity = daily_commits(commits, today=TODAY)
        assert average_commits_per_day(activity) == 0.4
        assert most_active_day(activity) == "Mar 9"

    def test_no_activity(self):
        """Test fallbacks when there is nothing to show."""
        assert most_active_day([]) == "No data"
        assert most_active_day(daily_commits([], today=TODAY)) == "No activity"


class TestCommitsByDate:
    """Tests for commits_by_date."""

    def test_groups_newest_first(self):
        """Test grouping under date labels with unknown dates last."""
        commits = [
            _commit("c1", "2024-03-05T08:00:00Z"),
            _commit("c2", "2024-03-10T08:00:00Z"),
            _commit("c3", None),
            _commit("c4", "2024-03-09T08:00:00Z"),
            _commit("c5", "2024-03-10T07:00:00Z"),
        ]
        groups = commits_by_date(commits, today=TODAY)

        assert [g.label for g in groups] == ["Today", "Yesterday", "Mar 5, 2024", "Unknown date"]
        assert [c.sha for c in groups[0].commits] == ["c2", "c5"]


class TestLineTotals:
    """Tests for line_totals."""

    def test_totals_and_percentages(self):
        """Test sums over changes and the add/delete split."""
        totals = line_totals(
            [DiffChange("a.py", "modified", 30, 10), DiffChange("b.py", "added", 10, 0)]
        )
        assert (totals.additions, totals.deletions, totals.changed_files) == (40, 10, 2)
        assert totals.additions_percentage == pytest.approx(80.0)
        assert totals.deletions_percentage == pytest.approx(20.0)

    def test_no_changes(self):
        """Test percentages are zero when nothing changed."""
        totals = line_totals([])
        assert totals.additions_percentage == 0.0
        assert totals.deletions_percentage == 0.0


class TestPaths:
    """Tests for path helpers and download URLs."""

    def test_contributor_color_wraps(self):
        """Test the palette repeats."""
        assert contributor_color(0) == contributor_color(10)

    def test_clean_path(self):
        """Test leading and repeated slashes are removed."""
        assert clean_path("//docs//img/a.png") == "docs/img/a.png"

    def test_encode_path(self):
        """Test segments are encoded while separators are kept."""
        assert encode_path("my docs/a b#1.png") == "my%20docs/a%20b%231.png"

    def test_download_urls_order(self):
        """Test candidate order for a non-main branch."""
        urls = download_urls("octo", "demo", "dev", "img/logo one.png", download_url="https://x/y")
        assert urls == [
            "https://raw.githubusercontent.com/octo/demo/dev/img/logo%20one.png",
            "https://github.com/octo/demo/raw/dev/img/logo%20one.png",
            "https://raw.githubusercontent.com/octo/demo/dev/img%2Flogo%20one.png",
            "https://raw.githubusercontent.com/octo/demo/main/img/logo%20one.png",
            "https://raw.githubusercontent.com/octo/demo/master/img/logo%20one.png",
            "https://x/y",
        ]

    def test_download_urls_rebuild_path(self):
        """Test the path is rebuilt from the current folder and the name."""
        urls = download_urls("octo", "demo", "main", None, name="a.png", current_path=["img"])
        assert urls[0] == "https://raw.githubusercontent.com/octo/demo/main/img/a.png"
        # No separate main fallback when already on main
        assert len(urls) == 4
        assert urls[3] == "https://raw.githubusercontent.com/octo/demo/master/img/a.png"

    def test_download_urls_without_owner(self):
        """Test no candidates without an owner or repository."""
        assert download_urls("", "demo", "main", "a.png") == []
