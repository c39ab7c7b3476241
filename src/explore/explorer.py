"""Repository exploration session.

``RepositoryExplorer`` drives every fetch against a ``RepositoryAPI``, keeps
the per-branch cache, feeds the reconciler and exposes navigation and file
operations. Public operations never raise: each returns an ``Outcome``.
"""

import base64
import binascii
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from enum import Enum
from typing import Any

from common.constants import (
    DEFAULT_UPLOAD_MESSAGE,
    DESCRIPTION_COMMIT_MESSAGE,
    NO_DIFF_SENTINEL,
    README_PATH,
    UNDECODABLE_CONTENT,
)
from common.env import env
from common.logger import get_logger

from .branch_cache import BranchCache
from .classifier import classify, download_message
from .clients.base import ExplorerError, MutationError, NotFoundError, RepositoryAPI
from .diff_parser import parse_diff
from .formatting import format_relative_time
from .insights import clean_path, download_urls
from .markdown import render_markdown
from .models import (
    Branch,
    CommitRecord,
    ContributorRecord,
    DiffChange,
    FileCategory,
    FileEntry,
    OpenFile,
    Outcome,
    ReconciledStats,
    Repository,
    RepositoryStats,
    UploadFile,
)
from .normalizers.github import (
    BranchNormalizer,
    CommitNormalizer,
    ContributorNormalizer,
    FileContentNormalizer,
    FileEntryNormalizer,
    OverviewNormalizer,
    RepositoryNormalizer,
    StatsNormalizer,
)
from .reconciler import reconcile

logger = get_logger(__name__)

# Failures an operation turns into an Outcome instead of raising
RECOVERABLE_ERRORS = (ExplorerError, ValueError)

CHANGE_TYPES = {"added", "modified", "removed", "renamed"}
EMPTY_DESCRIPTION = "No description provided."


class ExplorerState(str, Enum):
    """Lifecycle states of an explorer session."""

    IDLE = "idle"
    LOADING_OVERVIEW = "loading_overview"
    READY = "ready"
    SWITCHING_BRANCH = "switching_branch"
    ERROR = "error"


def decode_content(content: str | None, encoding: str | None = "base64") -> str:
    """Decode file content from the API into text.

    Returns:
        Decoded text, or the "Unable to decode file content" placeholder
    """
    if content is None:
        return ""
    if encoding != "base64":
        return content
    try:
        raw = base64.b64decode("".join(content.split()), validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return UNDECODABLE_CONTENT


class RepositoryExplorer:
    """Explore one repository through the portal proxy.

    Reads issued when a repository opens run concurrently on a thread pool;
    their results are applied one at a time on the calling thread, and each
    failure is isolated into a notice. Branch switches are exclusive: a
    second switch requested while one is running is rejected.

    Example:
        >>> with RepositoryExplorer(PortalClient()) as explorer:
        ...     explorer.open_repository("42")
        ...     explorer.switch_branch("develop")
        ...     print(explorer.stats.total_commits)
    """

    def __init__(
        self,
        api: RepositoryAPI | None = None,
        max_workers: int | None = None,
        commit_page_size: int | None = None,
        max_upload_bytes: int | None = None,
        clock: Callable[[], float] | None = None,
    ):
        """Initialize an explorer session.

        Args:
            api: Repository API (default: PortalClient configured from env)
            max_workers: Thread pool size for fan-out reads (default: EXPLORER_MAX_WORKERS)
            commit_page_size: Size of the extended commit window (default: EXPLORER_COMMIT_PAGE_SIZE)
            max_upload_bytes: Per-file upload limit (default: EXPLORER_MAX_UPLOAD_MB)
            clock: Timestamp source for cache entries
        """
        if api is None:
            from .clients.portal import PortalClient

            api = PortalClient()
        self.api = api
        self.max_workers = max_workers or env.max_workers()
        self.commit_page_size = commit_page_size or env.commit_page_size()
        self.max_upload_bytes = max_upload_bytes or env.max_upload_bytes()
        self.cache = BranchCache(clock=clock)

        self.repository_normalizer = RepositoryNormalizer()
        self.overview_normalizer = OverviewNormalizer()
        self.file_normalizer = FileEntryNormalizer()
        self.commit_normalizer = CommitNormalizer()
        self.contributor_normalizer = ContributorNormalizer()
        self.branch_normalizer = BranchNormalizer()
        self.stats_normalizer = StatsNormalizer()
        self.content_normalizer = FileContentNormalizer()

        self._switch_lock = threading.Lock()
        self._commit_windows: dict[str, list[CommitRecord]] = {}
        self._readme_sha: str | None = None
        self._reset()

    def _reset(self) -> None:
        self.state = ExplorerState.IDLE
        self.repo_id: str | None = None
        self.repository: Repository | None = None
        self.current_branch: str | None = None
        self.current_path: list[str] = []
        self.files: list[FileEntry] = []
        self.commits: list[CommitRecord] = []
        self.latest_commit: CommitRecord | None = None
        self.latest_commit_age = ""
        self.contributors: list[ContributorRecord] = []
        self.branches: list[Branch] = []
        self.api_stats: RepositoryStats | None = None
        self.stats = ReconciledStats()
        self.selected_commit: CommitRecord | None = None
        self.diff_changes: list[DiffChange] = []
        self.open_file_view: OpenFile | None = None
        self.description = ""
        self.notices: list[str] = []
        self.error: str | None = None
        self.cache.clear()
        self._commit_windows.clear()
        self._readme_sha = None
        self._root_files: list[FileEntry] = []

    # Helpers

    @property
    def owner(self) -> str:
        return self.repository.owner if self.repository else ""

    @property
    def repo_name(self) -> str:
        return self.repository.name if self.repository else ""

    def _note(self, message: str) -> None:
        logger.warning(message)
        self.notices.append(message)

    def _not_open(self) -> Outcome:
        return Outcome.failure("invalid", "No repository is open")

    def _fan_out(self, tasks: dict[str, tuple[Callable[[], Any], Callable[[Any], None]]]) -> list[str]:
        """Run fetches concurrently and apply each result on this thread.

        Args:
            tasks: name -> (fetch, apply). ``fetch`` runs on a worker thread and
                must not touch explorer state; ``apply`` runs here.

        Returns:
            Names of the tasks that failed
        """
        failed: list[str] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(fetch): name for name, (fetch, _) in tasks.items()}
            for future in as_completed(futures):
                name = futures[future]
                try:
                    tasks[name][1](future.result())
                except RECOVERABLE_ERRORS as e:
                    self._note(f"Failed to load {name}: {e}")
                    failed.append(name)
                    continue
                logger.debug(f"Applied {name}")
        return failed

    def _root_listing(self) -> Sequence[FileEntry]:
        entry = self.cache.get(self.current_branch) if self.current_branch else None
        return entry.files if entry else self._root_files

    def _recompute_stats(self) -> None:
        self.stats = reconcile(
            self.contributors,
            self.commits,
            api_stats=self.api_stats,
            files=self._root_listing(),
            latest_commit=self.latest_commit,
            default_owner=self.owner or None,
            owner_avatar=self.repository.owner_avatar_url if self.repository else None,
        )

    def _fetch_listing(self, path: str, branch: str) -> list[FileEntry]:
        payload = self.api.list_files(self.owner, self.repo_name, path, branch)
        return self.file_normalizer.normalize_many(payload)

    def _fetch_commit_window(self, branch: str) -> list[CommitRecord]:
        payload = self.api.list_commits(
            self.owner, self.repo_name, branch, page=1, per_page=self.commit_page_size
        )
        return self.commit_normalizer.normalize_many(payload)

    def _fetch_description(self, branch: str) -> tuple[str, str | None]:
        """README text and sha, trying the branch and then ``main``."""
        candidates = [branch] if branch == "main" else [branch, "main"]
        for index, candidate in enumerate(candidates):
            try:
                payload = self.api.get_file_content(self.owner, self.repo_name, README_PATH, candidate)
            except NotFoundError:
                if index == len(candidates) - 1:
                    logger.debug(f"No {README_PATH} found for {self.owner}/{self.repo_name}")
                    return "", None
                logger.debug(f"No {README_PATH} on {candidate}, trying main")
                continue
            content = self.content_normalizer.normalize(payload, README_PATH)
            sha = content.sha if candidate == branch else None
            return decode_content(content.content, content.encoding), sha
        return "", None

    # Loading

    def open_repository(self, repo_id: str) -> Outcome:
        """Load a repository and everything the details view shows.

        Args:
            repo_id: Portal repository id

        Returns:
            Outcome whose value is the loaded Repository
        """
        if self.state in (ExplorerState.LOADING_OVERVIEW, ExplorerState.SWITCHING_BRANCH):
            return Outcome.failure("rejected", f"Cannot open a repository while {self.state.value}")
        if not repo_id:
            return Outcome.failure("invalid", "Repository ID not provided")

        self._reset()
        self.repo_id = str(repo_id)
        self.state = ExplorerState.LOADING_OVERVIEW
        logger.info(f"Opening repository {repo_id}")

        try:
            payload = self.api.get_repository(self.repo_id)
            self.repository = self.repository_normalizer.normalize(payload, self.repo_id)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"Failed to load repository details for {repo_id}: {e}")
            self.state = ExplorerState.ERROR
            self.error = "Failed to load repository details. Please try again."
            return Outcome.failure("read", self.error)

        branch = self.repository.default_branch
        self.current_branch = branch
        self.description = self.repository.description

        try:
            overview = self.overview_normalizer.normalize(
                self.api.get_overview(self.owner, self.repo_name, branch), branch
            )
            self.files = overview.root_files
            self.commits = overview.recent_commits
            if overview.languages:
                self.repository.languages = overview.languages
        except RECOVERABLE_ERRORS as e:
            self._note(f"Failed to load repository overview: {e}")
            try:
                self.files = self._fetch_listing("", branch)
            except RECOVERABLE_ERRORS as listing_error:
                logger.error(f"Failed to load repository files: {listing_error}")
                self.state = ExplorerState.ERROR
                self.error = "Failed to load repository data"
                return Outcome.failure("read", self.error)

        self.latest_commit = self.commits[0] if self.commits else None
        self._commit_windows[branch] = list(self.commits)
        self._root_files = list(self.files)
        self.cache.put(branch, self.files, self.latest_commit)
        self.state = ExplorerState.READY
        self.refresh_relative_timestamps()

        self._fan_out(
            {
                "contributors": (
                    lambda: self.contributor_normalizer.normalize_many(
                        self.api.list_contributors(self.owner, self.repo_name)
                    ),
                    self._apply_contributors,
                ),
                "branches": (
                    lambda: self.branch_normalizer.normalize_many(
                        self.api.list_branches(self.owner, self.repo_name)
                    ),
                    self._apply_branches,
                ),
                "commits": (lambda: self._fetch_commit_window(branch), self._apply_commits),
                "statistics": (
                    lambda: self.stats_normalizer.normalize(
                        self.api.get_stats(self.owner, self.repo_name, branch)
                    ),
                    self._apply_api_stats,
                ),
                "description": (lambda: self._fetch_description(branch), self._apply_description),
            }
        )
        self._recompute_stats()

        logger.info(
            f"Loaded {self.repository.full_name}@{branch}: {len(self.files)} entries, "
            f"{self.stats.total_commits} commits"
        )
        return Outcome.success(self.repository)

    def refresh(self) -> Outcome:
        """Reload the current repository from scratch."""
        if self.repo_id is None:
            return self._not_open()
        return self.open_repository(self.repo_id)

    def _apply_contributors(self, contributors: list[ContributorRecord]) -> None:
        self.contributors = contributors
        self._recompute_stats()

    def _apply_branches(self, branches: list[Branch]) -> None:
        self.branches = branches

    def _apply_commits(self, commits: list[CommitRecord]) -> None:
        # Only replace the overview's commits when the window has something
        if commits:
            self.commits = commits
            self._commit_windows[self.current_branch] = list(commits)
            if self.latest_commit is None:
                self.latest_commit = commits[0]
        self._recompute_stats()

    def _apply_api_stats(self, stats: RepositoryStats) -> None:
        self.api_stats = stats
        self._recompute_stats()

    def _apply_description(self, result: tuple[str, str | None]) -> None:
        text, sha = result
        if text:
            self.description = text
        self._readme_sha = sha

    # Navigation

    def open_path(self, path: str) -> Outcome:
        """Show the listing of a folder. Failure keeps the current listing and path."""
        if self.state is not ExplorerState.READY:
            return Outcome.failure("rejected", f"Cannot navigate while {self.state.value}")

        cleaned = clean_path(path or "").rstrip("/")
        try:
            listing = self._fetch_listing(cleaned, self.current_branch)
        except RECOVERABLE_ERRORS as e:
            self._note(f"Failed to open folder '{cleaned or '/'}': {e}")
            return Outcome.failure("read", f"Failed to open folder: {cleaned or '/'}")

        self.files = listing
        if not cleaned:
            self._root_files = list(listing)
        self.current_path = cleaned.split("/") if cleaned else []
        self.open_file_view = None
        self.refresh_relative_timestamps()
        return Outcome.success(self.files)

    def open_root(self) -> Outcome:
        """Show the branch root, from cache when it holds an entry."""
        if self.state is not ExplorerState.READY:
            return Outcome.failure("rejected", f"Cannot navigate while {self.state.value}")

        entry = self.cache.get(self.current_branch)
        if entry is None:
            outcome = self.open_path("")
            if outcome.ok:
                self.cache.put(self.current_branch, self.files, self.latest_commit)
            return outcome

        self.files = list(entry.files)
        self.current_path = []
        self.open_file_view = None
        self.refresh_relative_timestamps()
        return Outcome.success(self.files)

    def open_breadcrumb(self, index: int) -> Outcome:
        """Jump to the folder at position ``index`` of the current path; -1 is the root."""
        if index < 0:
            return self.open_root()
        if index >= len(self.current_path):
            return Outcome.failure("invalid", f"No breadcrumb at position {index}")
        return self.open_path("/".join(self.current_path[: index + 1]))

    def switch_branch(self, name: str, force_refresh: bool = False) -> Outcome:
        """Switch the explorer to another branch.

        A cached branch is served from the cache unless ``force_refresh`` is
        set. If the new listing cannot be loaded, the previous branch and its
        listing are restored.
        """
        if not name:
            return Outcome.failure("invalid", "Branch name is required")

        if self.state is ExplorerState.SWITCHING_BRANCH or not self._switch_lock.acquire(
            blocking=False
        ):
            logger.debug(f"Ignoring switch to {name}: another switch is in progress")
            return Outcome.failure("rejected", "A branch switch is already in progress")

        try:
            if self.state is not ExplorerState.READY:
                return Outcome.failure("rejected", f"Cannot switch branch while {self.state.value}")
            if name == self.current_branch and not force_refresh:
                return Outcome.success(name)

            previous = (
                self.current_branch,
                self.files,
                self.current_path,
                self.commits,
                self.latest_commit,
            )
            self.state = ExplorerState.SWITCHING_BRANCH
            self.current_branch = name
            self.current_path = []
            self.open_file_view = None
            self.selected_commit = None
            self.diff_changes = []

            entry = None if force_refresh else self.cache.get(name)
            if entry is not None:
                logger.debug(f"Serving branch {name} from cache")
                self.files = list(entry.files)
                self._root_files = list(entry.files)
                self.latest_commit = entry.latest_commit
                self.commits = list(self._commit_windows.get(name, []))
            else:
                try:
                    listing = self._fetch_listing("", name)
                except RECOVERABLE_ERRORS as e:
                    (
                        self.current_branch,
                        self.files,
                        self.current_path,
                        self.commits,
                        self.latest_commit,
                    ) = previous
                    self.state = ExplorerState.READY
                    self._note(f"Failed to load files for branch {name}: {e}")
                    return Outcome.failure("read", f"Failed to load files for branch: {name}")

                try:
                    commits = self._fetch_commit_window(name)
                except RECOVERABLE_ERRORS as e:
                    self._note(f"Failed to load commits for branch {name}: {e}")
                    commits = []

                self.files = listing
                self._root_files = list(listing)
                self.commits = commits
                self.latest_commit = commits[0] if commits else None
                self._commit_windows[name] = list(commits)
                self.cache.put(name, listing, self.latest_commit)

            self.state = ExplorerState.READY
            self._recompute_stats()
            self.refresh_relative_timestamps()
            logger.info(f"Switched to branch {name}")
            return Outcome.success(name)
        finally:
            if self.state is ExplorerState.SWITCHING_BRANCH:
                self.state = ExplorerState.READY
            self._switch_lock.release()

    def all_branches(self) -> list[str]:
        """Branch names for a selector: default first, then current, then upstream."""
        names: list[str] = []
        candidates = [self.repository.default_branch if self.repository else None, self.current_branch]
        candidates.extend(branch.name for branch in self.branches)
        for candidate in candidates:
            if candidate and candidate not in names:
                names.append(candidate)
        return names

    # Files

    def _find_entry(self, target: FileEntry | str) -> FileEntry | None:
        if isinstance(target, FileEntry):
            return target
        for entry in self.files:
            if target in (entry.path, entry.name):
                return entry
        return None

    def open_file(self, target: FileEntry | str) -> Outcome:
        """Open a file for viewing.

        Only text content is fetched. Images resolve to a download URL, other
        categories get a notice explaining why they cannot be previewed.
        """
        if self.repository is None:
            return self._not_open()

        entry = self._find_entry(target)
        if entry is None:
            return Outcome.failure("invalid", f"File not found in current folder: {target}")
        if entry.is_dir:
            return self.open_path(entry.path)

        classification = classify(entry.name)
        category = classification.category
        view = OpenFile(entry=entry, classification=classification)

        if category is FileCategory.IMAGE:
            urls = download_urls(
                self.owner,
                self.repo_name,
                self.current_branch,
                entry.path,
                name=entry.name,
                current_path=self.current_path,
                download_url=entry.download_url,
            )
            view.image_url = entry.download_url or (urls[0] if urls else None)
        elif category is FileCategory.TEXT:
            try:
                payload = self.api.get_file_content(
                    self.owner, self.repo_name, entry.path, self.current_branch
                )
                content = self.content_normalizer.normalize(payload, entry.path)
            except RECOVERABLE_ERRORS as e:
                self._note(f"Failed to load file '{entry.path}': {e}")
                return Outcome.failure("read", f"Failed to load file: {entry.name}")
            view.content = decode_content(content.content, content.encoding)
            if content.sha:
                entry.sha = content.sha
        else:
            view.message = download_message(category)

        self.open_file_view = view
        return Outcome.success(view)

    def close_file(self) -> Outcome:
        self.open_file_view = None
        return Outcome.success()

    def _reload_directory(self) -> None:
        path = "/".join(self.current_path)
        try:
            self.files = self._fetch_listing(path, self.current_branch)
        except RECOVERABLE_ERRORS as e:
            self._note(f"Failed to refresh folder '{path or '/'}': {e}")
            return
        if not path:
            self._root_files = list(self.files)
        self.refresh_relative_timestamps()

    def _mutate(self, action: str, write: Callable[[], dict[str, Any]], branch: str | None = None) -> Outcome:
        """Run one write; on success invalidate the branch and re-fetch the folder."""
        target = branch or self.current_branch
        try:
            result = write()
        except MutationError as e:
            logger.error(f"Failed to {action}: {e.message}")
            return Outcome.failure("mutation", e.message)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"Failed to {action}: {e}")
            return Outcome.failure("mutation", f"Failed to {action}")

        self.cache.invalidate(target)
        if target == self.current_branch:
            self._reload_directory()
            self._recompute_stats()
        logger.info(f"Completed: {action}")
        return Outcome.success(result)

    def _require_message(self, message: str | None) -> str | None:
        return message.strip() if message and message.strip() else None

    def save_file(self, content: str, message: str) -> Outcome:
        """Commit new content for the open file."""
        if self.repository is None:
            return self._not_open()
        view = self.open_file_view
        if view is None:
            return Outcome.failure("invalid", "No file is open")
        if not view.editable:
            return Outcome.failure("invalid", f"{view.entry.name} cannot be edited")
        commit_message = self._require_message(message)
        if commit_message is None:
            return Outcome.failure("invalid", "Please provide a commit message")
        if not view.entry.sha:
            return Outcome.failure("invalid", "The file's current version is unknown; reopen it")

        entry = view.entry
        outcome = self._mutate(
            "update file",
            lambda: self.api.update_file(
                self.owner,
                self.repo_name,
                entry.path,
                content,
                commit_message,
                entry.sha,
                self.current_branch,
            ),
        )
        if outcome.ok:
            view.content = content
            written = (outcome.value or {}).get("content")
            if isinstance(written, dict) and written.get("sha"):
                entry.sha = written["sha"]
        return outcome

    def create_file(self, path: str, content: str, message: str) -> Outcome:
        """Create a file. Relative paths are resolved against the current folder."""
        if self.repository is None:
            return self._not_open()
        if not path or not path.strip("/"):
            return Outcome.failure("invalid", "A file name is required")
        commit_message = self._require_message(message)
        if commit_message is None:
            return Outcome.failure("invalid", "Please provide a commit message")

        if path.startswith("/"):
            full_path = clean_path(path)
        else:
            full_path = clean_path("/".join([*self.current_path, path]))

        return self._mutate(
            "create file",
            lambda: self.api.create_file(
                self.owner, self.repo_name, full_path, content, commit_message, self.current_branch
            ),
        )

    def replace_file(self, file_name: str, data: bytes, message: str) -> Outcome:
        """Upload new bytes over the open file's path."""
        if self.repository is None:
            return self._not_open()
        view = self.open_file_view
        if view is None:
            return Outcome.failure("invalid", "No file selected for replacement")
        commit_message = self._require_message(message)
        if commit_message is None:
            return Outcome.failure("invalid", "Please select a file and provide a commit message")

        path = view.entry.path
        outcome = self._mutate(
            "replace file",
            lambda: self.api.upload_file(
                self.owner,
                self.repo_name,
                file_name,
                data,
                path,
                commit_message,
                self.current_branch,
            ),
        )
        if outcome.ok:
            self.open_file_view = None
        return outcome

    def delete_file(self, message: str) -> Outcome:
        """Delete the open file."""
        if self.repository is None:
            return self._not_open()
        view = self.open_file_view
        if view is None:
            return Outcome.failure("invalid", "No file selected for deletion")
        commit_message = self._require_message(message)
        if commit_message is None:
            return Outcome.failure("invalid", "Please provide a commit message")
        if not view.entry.sha:
            return Outcome.failure("invalid", "The file's current version is unknown; reopen it")

        entry = view.entry
        outcome = self._mutate(
            "delete file",
            lambda: self.api.delete_file(
                self.owner, self.repo_name, entry.path, commit_message, entry.sha, self.current_branch
            ),
        )
        if outcome.ok:
            self.open_file_view = None
        return outcome

    def upload_files(
        self, files: Sequence[UploadFile], message: str | None = None, branch: str | None = None
    ) -> Outcome:
        """Upload files into the current folder, one at a time.

        Stops at the first rejected upload. The outcome value lists the paths
        that were uploaded before that point.
        """
        if self.repository is None:
            return self._not_open()
        if not files:
            return Outcome.failure("invalid", "Please select files to upload")

        empty = [f.name for f in files if f.size == 0]
        if empty:
            return Outcome.failure("invalid", "Cannot upload empty files: " + ", ".join(empty))
        too_large = [f.name for f in files if f.size > self.max_upload_bytes]
        if too_large:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            return Outcome.failure(
                "invalid", f"Files too large (max {limit_mb}MB): " + ", ".join(too_large)
            )

        target = branch or self.current_branch
        commit_message = self._require_message(message) or DEFAULT_UPLOAD_MESSAGE
        uploaded: list[str] = []

        for upload in files:
            path = clean_path("/".join([*self.current_path, upload.name]))
            try:
                self.api.upload_file(
                    self.owner, self.repo_name, upload.name, upload.data, path, commit_message, target
                )
            except RECOVERABLE_ERRORS as e:
                reason = e.message if isinstance(e, MutationError) else f"Failed to upload {upload.name}"
                logger.error(f"Upload of {path} failed: {e}")
                failure = Outcome.failure("mutation", reason)
                failure.value = uploaded
                if uploaded:
                    self._after_upload(target)
                return failure
            uploaded.append(path)
            logger.debug(f"Uploaded {path}")

        self._after_upload(target)
        logger.info(f"Uploaded {len(uploaded)} file(s) to {target}")
        return Outcome.success(uploaded)

    def _after_upload(self, branch: str) -> None:
        self.cache.invalidate(branch)
        if branch == self.current_branch:
            self._reload_directory()
            self._recompute_stats()

    # Commits

    def select_commit(self, sha: str) -> Outcome:
        """Load a commit's changed files as collapsed diff entries.

        If the detail fetch fails the commit from the loaded list is shown
        without changes.
        """
        if self.repository is None:
            return self._not_open()

        listed = next((c for c in self.commits if c.sha == sha or c.short_sha == sha), None)
        try:
            detail = self.commit_normalizer.normalize(
                self.api.get_commit(self.owner, self.repo_name, listed.sha if listed else sha)
            )
        except RECOVERABLE_ERRORS as e:
            self._note(f"Failed to load commit details for {sha[:7]}: {e}")
            self.selected_commit = listed
            self.diff_changes = []
            return Outcome.failure("read", f"Failed to load commit details for {sha[:7]}")

        self.selected_commit = detail
        self.diff_changes = [
            DiffChange(
                file=changed.filename,
                change_type=changed.status if changed.status in CHANGE_TYPES else "modified",
                additions=changed.additions,
                deletions=changed.deletions,
                is_binary=changed.binary,
                diff=changed.patch or NO_DIFF_SENTINEL,
            )
            for changed in detail.files
        ]
        return Outcome.success(detail)

    def toggle_diff(self, index: int) -> Outcome:
        """Expand or collapse one changed file, parsing its lines on first expansion."""
        if not 0 <= index < len(self.diff_changes):
            return Outcome.failure("invalid", f"No changed file at position {index}")

        change = self.diff_changes[index]
        change.expanded = not change.expanded
        if change.expanded and change.lines is None:
            change.lines = [] if change.is_binary else parse_diff(change.diff)
        return Outcome.success(change)

    # Description

    def update_description(self, text: str) -> Outcome:
        """Write the description to README.md on the current branch."""
        if self.repository is None:
            return self._not_open()

        content = (text or "").strip() or EMPTY_DESCRIPTION
        if self._readme_sha:
            sha = self._readme_sha
            outcome = self._mutate(
                "update description",
                lambda: self.api.update_file(
                    self.owner,
                    self.repo_name,
                    README_PATH,
                    content,
                    DESCRIPTION_COMMIT_MESSAGE,
                    sha,
                    self.current_branch,
                ),
            )
        else:
            outcome = self._mutate(
                "create description",
                lambda: self.api.create_file(
                    self.owner,
                    self.repo_name,
                    README_PATH,
                    content,
                    DESCRIPTION_COMMIT_MESSAGE,
                    self.current_branch,
                ),
            )

        if outcome.ok:
            self.description = content
            self.repository.description = content
            written = (outcome.value or {}).get("content")
            if isinstance(written, dict) and written.get("sha"):
                self._readme_sha = written["sha"]
        return outcome

    def rendered_description(self) -> str:
        return render_markdown(self.description)

    # Presentation

    def refresh_relative_timestamps(self, now: datetime | None = None) -> Outcome:
        """Recompute "3 minutes ago" labels. Never fetches or touches the cache."""
        for entry in self.files:
            if entry.last_commit_date:
                entry.last_modified = format_relative_time(entry.last_commit_date, now)
        if self.latest_commit is not None:
            self.latest_commit_age = format_relative_time(
                self.latest_commit.date or self.latest_commit.raw_date, now
            )
        return Outcome.success(len(self.files))

    def close(self) -> None:
        """Close the underlying API client."""
        self.api.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
