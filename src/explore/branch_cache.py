"""Per-branch snapshot cache owned by a single explorer session."""

import time
from collections.abc import Callable, Iterable

from common.logger import get_logger

from .models import CacheEntry, CommitRecord, FileEntry

logger = get_logger(__name__)


class BranchCache:
    """Root listing and latest commit per branch.

    There is at most one entry per branch name and ``put`` always replaces
    the previous entry as a whole; fields of two fetches are never mixed.

    Example:
        >>> cache = BranchCache(clock=lambda: 1000.0)
        >>> cache.put("main", files, commit)
        >>> cache.get("main").fetched_at
        1000.0
    """

    def __init__(self, clock: Callable[[], float] | None = None):
        """Initialize an empty cache.

        Args:
            clock: Source of fetch timestamps (default: time.time)
        """
        self._clock = clock or time.time
        self._entries: dict[str, CacheEntry] = {}

    def get(self, branch: str) -> CacheEntry | None:
        """Return the cached snapshot, or None when the branch must be fetched."""
        return self._entries.get(branch)

    def put(
        self,
        branch: str,
        files: Iterable[FileEntry],
        latest_commit: CommitRecord | None,
    ) -> CacheEntry:
        entry = CacheEntry(
            branch=branch,
            files=tuple(files),
            latest_commit=latest_commit,
            fetched_at=self._clock(),
        )
        self._entries[branch] = entry
        logger.debug(f"Cached {len(entry.files)} entries for branch {branch}")
        return entry

    def invalidate(self, branch: str) -> bool:
        """Drop one branch. Returns True if an entry was removed."""
        removed = self._entries.pop(branch, None) is not None
        if removed:
            logger.debug(f"Invalidated cache for branch {branch}")
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def branches(self) -> list[str]:
        return list(self._entries)

    def file_count(self, branch: str) -> int:
        """Number of non-directory entries cached for the branch (0 if not cached)."""
        entry = self._entries.get(branch)
        if entry is None:
            return 0
        return sum(1 for f in entry.files if not f.is_dir)

    def last_commit(self, branch: str) -> CommitRecord | None:
        entry = self._entries.get(branch)
        return entry.latest_commit if entry else None

    def __contains__(self, branch: object) -> bool:
        return branch in self._entries

    def __len__(self) -> int:
        return len(self._entries)
