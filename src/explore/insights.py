"""Derived views over loaded repository data.

Language breakdown, recent commit activity, commits grouped by day, line
totals for a commit and candidate download URLs for a file. Everything here is
pure and works on records already held by the explorer.
"""

import re
from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from urllib.parse import quote

from .formatting import commit_date_label, parse_timestamp
from .models import CommitGroup, CommitRecord, DailyActivity, DiffChange, LanguageShare, LineTotals

LANGUAGE_COLORS = {
    "JavaScript": "#f1e05a",
    "TypeScript": "#2b7489",
    "HTML": "#e34c26",
    "CSS": "#563d7c",
    "Java": "#b07219",
    "Python": "#3572A5",
    "C++": "#f34b7d",
    "C": "#555555",
    "C#": "#239120",
    "PHP": "#4F5D95",
    "Ruby": "#701516",
    "Go": "#00ADD8",
    "Rust": "#dea584",
    "Swift": "#ffac45",
    "Kotlin": "#F18E33",
    "Dart": "#00B4AB",
    "Shell": "#89e051",
    "PowerShell": "#012456",
    "Dockerfile": "#384d54",
    "YAML": "#cb171e",
    "JSON": "#292929",
    "XML": "#0060ac",
    "Markdown": "#083fa1",
}
DEFAULT_LANGUAGE_COLOR = "#858585"

CONTRIBUTOR_COLORS = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)

ACTIVITY_WINDOW_DAYS = 7
# Non-zero days never render thinner than this
MIN_BAR_PERCENTAGE = 10.0

RAW_BASE_URL = "https://raw.githubusercontent.com"
WEB_BASE_URL = "https://github.com"
# Left unescaped when the whole path is encoded as one component
_WHOLE_PATH_SAFE = "!*'()"


def language_breakdown(languages: dict[str, int] | None, top: int = 5) -> list[LanguageShare]:
    """Largest languages by byte count with their share and display colour.

    Example:
        >>> [s.percentage for s in language_breakdown({"Python": 750, "Shell": 250})]
        [75.0, 25.0]
    """
    if not languages:
        return []
    total = sum(languages.values())
    if total <= 0:
        return []

    shares = [
        LanguageShare(
            name=name,
            bytes=size,
            percentage=round(size / total * 100, 1),
            color=LANGUAGE_COLORS.get(name, DEFAULT_LANGUAGE_COLOR),
        )
        for name, size in languages.items()
    ]
    shares.sort(key=lambda s: s.bytes, reverse=True)
    return shares[:top]


def contributor_color(index: int) -> str:
    return CONTRIBUTOR_COLORS[index % len(CONTRIBUTOR_COLORS)]


def _commit_day(commit: CommitRecord) -> date | None:
    moment = commit.date or parse_timestamp(commit.raw_date)
    return moment.astimezone(timezone.utc).date() if moment else None


def daily_commits(commits: Sequence[CommitRecord], today: date | None = None) -> list[DailyActivity]:
    """Commit counts for each of the last seven days, oldest first.

    Bar percentages are relative to the busiest day; any day with at least one
    commit gets at least ``MIN_BAR_PERCENTAGE``.
    """
    current = today or datetime.now(timezone.utc).date()
    days = [current - timedelta(days=offset) for offset in range(ACTIVITY_WINDOW_DAYS - 1, -1, -1)]

    counts = {day: 0 for day in days}
    for commit in commits:
        day = _commit_day(commit)
        if day in counts:
            counts[day] += 1

    busiest = max(max(counts.values()), 1)
    return [
        DailyActivity(
            day=day,
            label=f"{day:%b} {day.day}",
            count=counts[day],
            percentage=max(counts[day] / busiest * 100, MIN_BAR_PERCENTAGE) if counts[day] else 0.0,
        )
        for day in days
    ]


def average_commits_per_day(activity: Sequence[DailyActivity]) -> float:
    """Mean over the activity window, rounded to one decimal."""
    return round(sum(d.count for d in activity) / ACTIVITY_WINDOW_DAYS, 1)


def most_active_day(activity: Sequence[DailyActivity]) -> str:
    if not activity:
        return "No data"
    busiest = activity[0]
    for day in activity[1:]:
        if day.count > busiest.count:
            busiest = day
    return busiest.label if busiest.count > 0 else "No activity"


def commits_by_date(commits: Sequence[CommitRecord], today: date | None = None) -> list[CommitGroup]:
    """Group commits under date labels, newest day first.

    Commits without a readable date are collected last under ``Unknown date``.
    """
    groups: dict[str, CommitGroup] = {}
    sort_keys: dict[str, date] = {}

    for commit in commits:
        moment = commit.date or commit.raw_date
        label = commit_date_label(moment, today=today)
        if label not in groups:
            groups[label] = CommitGroup(label=label, commits=[])
            sort_keys[label] = _commit_day(commit) or date.min
        groups[label].commits.append(commit)

    return sorted(groups.values(), key=lambda g: sort_keys[g.label], reverse=True)


def line_totals(changes: Sequence[DiffChange]) -> LineTotals:
    return LineTotals(
        additions=sum(c.additions for c in changes),
        deletions=sum(c.deletions for c in changes),
        changed_files=len(changes),
    )


def clean_path(path: str) -> str:
    """Strip leading slashes and collapse repeated ones."""
    return re.sub(r"/+", "/", path.lstrip("/"))


def encode_path(path: str) -> str:
    """Percent-encode each path segment, keeping the separators."""
    return "/".join(quote(segment, safe="!*") for segment in path.split("/"))


def download_urls(
    owner: str,
    repo: str,
    branch: str | None,
    path: str | None,
    name: str | None = None,
    current_path: Sequence[str] = (),
    download_url: str | None = None,
) -> list[str]:
    """Candidate URLs for downloading a file, most reliable first.

    Args:
        owner: Repository owner login
        repo: Repository name
        branch: Branch the file was listed on (default: main)
        path: Repository path of the file; when empty it is rebuilt from
            ``current_path`` and ``name``
        name: Bare file name
        current_path: Folder segments the explorer is currently showing
        download_url: URL reported by the API, tried last

    Returns:
        De-duplicated candidate URLs; empty when owner or repo is unknown
    """
    if not owner or not repo:
        return []

    branch = branch or "main"
    file_path = path
    if not file_path:
        file_path = "/".join([*current_path, name]) if current_path else (name or "")
    file_path = clean_path(file_path)
    encoded = encode_path(file_path)

    candidates = [
        f"{RAW_BASE_URL}/{owner}/{repo}/{branch}/{encoded}",
        f"{WEB_BASE_URL}/{owner}/{repo}/raw/{branch}/{encoded}",
        f"{RAW_BASE_URL}/{owner}/{repo}/{branch}/{quote(file_path, safe=_WHOLE_PATH_SAFE)}",
        f"{RAW_BASE_URL}/{owner}/{repo}/main/{encoded}" if branch != "main" else None,
        f"{RAW_BASE_URL}/{owner}/{repo}/master/{encoded}",
        download_url,
    ]

    urls: list[str] = []
    for url in candidates:
        if url and url not in urls:
            urls.append(url)
    return urls
