"""Commit and contributor statistics reconciliation.

The upstream commit list is paginated and capped, so its length is rarely the
real commit count. This module combines every partially trustworthy source
into one set of figures using a fixed priority order.
"""

import math
from collections.abc import Iterable, Sequence
from urllib.parse import quote

from common.constants import IDENTICON_URL_TEMPLATE, OWNER_AVATAR_URL_TEMPLATE
from common.env import env
from common.logger import get_logger

from .models import (
    CommitRecord,
    Contributor,
    ContributorRecord,
    FileEntry,
    ReconciledStats,
    RepositoryStats,
)

logger = get_logger(__name__)


def identicon_url(name: str) -> str:
    """Generated avatar for an identity that has none."""
    return IDENTICON_URL_TEMPLATE.format(name=quote(name, safe=""))


def estimate_commit_count(
    contributors: Sequence[ContributorRecord],
    files: Sequence[FileEntry],
    commits: Sequence[CommitRecord],
    files_commit_factor: float | None = None,
    truncation_padding: int | None = None,
    page_size: int | None = None,
) -> int:
    """Last-resort commit count when no source reports one directly.

    Args:
        contributors: Contributor aggregates from the API
        files: Root listing of the current branch
        commits: Loaded commit window
        files_commit_factor: Assumed commits per listed file
        truncation_padding: Added when a full commit page was loaded
        page_size: Size of one commit page

    Returns:
        Estimated commit count, 0 when nothing is known
    """
    factor = env.files_commit_factor() if files_commit_factor is None else files_commit_factor
    padding = env.truncation_padding() if truncation_padding is None else truncation_padding
    full_page = env.commit_page_size() if page_size is None else page_size

    contributor_sum = sum(c.commits for c in contributors)
    if contributor_sum > 0:
        return contributor_sum

    if files:
        return math.ceil(len(files) * factor)

    if commits:
        loaded = len(commits)
        return loaded + padding if loaded >= full_page else loaded

    return 0


def _total_commits(
    contributors: Sequence[ContributorRecord],
    commits: Sequence[CommitRecord],
    api_stats: RepositoryStats | None,
    files: Sequence[FileEntry],
    **estimate_options,
) -> int:
    contributor_sum = sum(c.commits for c in contributors)
    if contributor_sum > 0:
        return contributor_sum

    if api_stats is not None and api_stats.total_commits > 0:
        return api_stats.total_commits

    if commits:
        return len(commits)

    return estimate_commit_count(contributors, files, commits, **estimate_options)


def _avatar_from_commits(name: str, commits: Iterable[CommitRecord]) -> str:
    for commit in commits:
        if commit.author == name and commit.avatar_url:
            return commit.avatar_url
    return identicon_url(name)


def merge_contributors(
    contributors: Sequence[ContributorRecord],
    commits: Sequence[CommitRecord],
    latest_commit: CommitRecord | None = None,
    files: Sequence[FileEntry] = (),
) -> dict[str, Contributor]:
    """Build the identity map from every source, in priority order.

    Later sources only add unknown identities; for known ones they may raise
    the commit count but never lower it.
    """
    merged: dict[str, Contributor] = {}

    for record in contributors:
        merged[record.login] = Contributor(
            name=record.login,
            avatar=record.avatar_url or identicon_url(record.login),
            commits=record.commits,
        )

    tally: dict[str, int] = {}
    for commit in commits:
        author = commit.author or "Unknown"
        tally[author] = tally.get(author, 0) + 1

    for author, count in tally.items():
        existing = merged.get(author)
        if existing is None:
            merged[author] = Contributor(
                name=author, avatar=_avatar_from_commits(author, commits), commits=count
            )
        elif count > existing.commits:
            existing.commits = count

    if latest_commit is not None and latest_commit.author and latest_commit.author not in merged:
        merged[latest_commit.author] = Contributor(
            name=latest_commit.author,
            avatar=latest_commit.avatar_url or _avatar_from_commits(latest_commit.author, commits),
            commits=1,
        )

    for entry in files:
        committer = entry.last_commit_author
        if committer and committer not in merged:
            merged[committer] = Contributor(
                name=committer,
                avatar=entry.last_commit_avatar or _avatar_from_commits(committer, commits),
                commits=1,
            )

    return merged


def reconcile(
    contributors: Sequence[ContributorRecord],
    commits: Sequence[CommitRecord],
    api_stats: RepositoryStats | None = None,
    files: Sequence[FileEntry] = (),
    latest_commit: CommitRecord | None = None,
    default_owner: str | None = None,
    owner_avatar: str | None = None,
    **estimate_options,
) -> ReconciledStats:
    """Reconcile commit, contributor and file counts into trusted figures.

    ``total_commits`` takes the first non-zero of: the contributor sum, the
    statistics endpoint, the loaded commit count, the estimation heuristic.

    Args:
        contributors: Contributor aggregates from the contributors endpoint
        commits: Loaded commit window for the current branch
        api_stats: Statistics endpoint result, if it answered
        files: Root listing of the current branch
        latest_commit: Most recent commit of the current branch
        default_owner: Repository owner, used when no identity is known
        owner_avatar: Owner avatar for the synthetic contributor
        **estimate_options: Overrides forwarded to estimate_commit_count

    Returns:
        ReconciledStats with contributors sorted by commits descending

    Example:
        >>> stats = reconcile([ContributorRecord("a", 5), ContributorRecord("b", 3)], [])
        >>> stats.total_commits
        8
    """
    total_commits = _total_commits(contributors, commits, api_stats, files, **estimate_options)

    merged = merge_contributors(contributors, commits, latest_commit, files)
    if not merged:
        owner = default_owner or "unknown"
        merged[owner] = Contributor(
            name=owner,
            avatar=owner_avatar or OWNER_AVATAR_URL_TEMPLATE.format(name=quote(owner, safe="")),
            commits=max(total_commits, 1),
        )

    ranked = sorted(merged.values(), key=lambda c: c.commits, reverse=True)
    total_files = sum(1 for entry in files if entry.type == "file")

    logger.debug(
        f"Reconciled stats: {total_commits} commits, {len(ranked)} contributors, "
        f"{total_files} files"
    )

    return ReconciledStats(
        total_commits=total_commits,
        total_contributors=len(ranked),
        total_files=total_files,
        contributors=ranked,
    )


def contributor_percentage(commits: int, contributors: Sequence[Contributor]) -> int:
    """Share of all merged commits held by one contributor, as a whole percent."""
    total = sum(c.commits for c in contributors)
    if total <= 0:
        return 0
    return math.floor(commits / total * 100 + 0.5)
