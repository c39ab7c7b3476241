"""Typed records for repository exploration.

Records are built by ``explore.normalizers`` from raw API payloads and are
the only shapes the rest of the engine handles.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

FileType = Literal["file", "dir"]
ChangeType = Literal["added", "modified", "removed", "renamed"]
LineType = Literal["header", "addition", "deletion", "context"]


class FileCategory(str, Enum):
    """Content categories produced by the file classifier."""

    IMAGE = "image"
    HTML = "html"
    OFFICE = "office"
    ARCHIVE = "archive"
    EXECUTABLE = "executable"
    PDF = "pdf"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    BINARY = "binary"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Classification:
    """Category of a file plus what the viewer may do with it."""

    category: FileCategory
    previewable: bool
    editable: bool


@dataclass
class Repository:
    """Repository metadata loaded when the explorer opens."""

    id: str
    owner: str
    name: str
    full_name: str
    default_branch: str
    size: int = 0  # KB
    description: str = ""
    languages: dict[str, int] = field(default_factory=dict)
    owner_avatar_url: str | None = None
    html_url: str | None = None


@dataclass(frozen=True)
class Branch:
    """A branch mirrored read-only from upstream."""

    name: str
    sha: str | None = None
    protected: bool = False


@dataclass(frozen=True)
class ChangedFile:
    """One file touched by a commit, as reported by the commit detail endpoint."""

    filename: str
    status: str = "modified"
    additions: int = 0
    deletions: int = 0
    patch: str | None = None
    binary: bool = False


@dataclass(frozen=True)
class CommitRecord:
    """A fetched commit. Immutable once built."""

    sha: str
    message: str
    author: str
    author_email: str | None = None
    avatar_url: str | None = None
    raw_date: str | None = None
    date: datetime | None = None
    html_url: str | None = None
    files: tuple[ChangedFile, ...] = ()

    @property
    def short_sha(self) -> str:
        """First seven characters of the sha."""
        return self.sha[:7]


@dataclass
class FileEntry:
    """A file or directory in one (repository, branch, directory) listing."""

    path: str
    name: str
    type: FileType
    classification: Classification
    size: int = 0
    sha: str | None = None
    download_url: str | None = None
    html_url: str | None = None
    last_commit_message: str | None = None
    last_commit_author: str | None = None
    last_commit_avatar: str | None = None
    last_commit_date: str | None = None
    # Presentation only, refreshed by the relative-time ticker
    last_modified: str = ""

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


@dataclass(frozen=True)
class ContributorRecord:
    """Contributor aggregate from the upstream contributors endpoint."""

    login: str
    commits: int = 0
    avatar_url: str | None = None
    html_url: str | None = None


@dataclass(frozen=True)
class RepositoryStats:
    """Counts reported by the dedicated statistics endpoint."""

    total_commits: int = 0


@dataclass
class RepositoryOverview:
    """Bundle returned by the overview endpoint."""

    branch: str
    root_files: list[FileEntry]
    recent_commits: list[CommitRecord]
    languages: dict[str, int] = field(default_factory=dict)


@dataclass
class FileContent:
    """Content payload for a single file."""

    path: str
    name: str
    sha: str | None
    content: str | None
    encoding: str | None = "base64"
    download_url: str | None = None


@dataclass(frozen=True)
class LineRecord:
    """One rendered line of a unified diff."""

    type: LineType
    content: str
    old_line_number: int | None = None
    new_line_number: int | None = None


@dataclass
class DiffChange:
    """A changed file of the selected commit, with lazily parsed lines."""

    file: str
    change_type: str
    additions: int = 0
    deletions: int = 0
    is_binary: bool = False
    diff: str = ""
    expanded: bool = False
    lines: list[LineRecord] | None = None


@dataclass(frozen=True)
class CacheEntry:
    """Snapshot of one branch: root listing, latest commit, fetch time."""

    branch: str
    files: tuple[FileEntry, ...]
    latest_commit: CommitRecord | None
    fetched_at: float


@dataclass
class Contributor:
    """A merged contributor identity produced by the reconciler."""

    name: str
    avatar: str
    commits: int


@dataclass
class ReconciledStats:
    """Trusted figures derived from all partially reliable sources."""

    total_commits: int = 0
    total_contributors: int = 0
    total_files: int = 0
    contributors: list[Contributor] = field(default_factory=list)


@dataclass(frozen=True)
class LanguageShare:
    """One row of the language breakdown."""

    name: str
    bytes: int
    percentage: float
    color: str


@dataclass(frozen=True)
class DailyActivity:
    """Commit count for one calendar day, with a bar width percentage."""

    day: date
    label: str
    count: int
    percentage: float


@dataclass
class CommitGroup:
    """Commits sharing one date label (``Today``, ``Yesterday``, ``Mar 5, 2024``)."""

    label: str
    commits: list[CommitRecord]


@dataclass(frozen=True)
class LineTotals:
    """Added and removed line counts over the changes of one commit."""

    additions: int = 0
    deletions: int = 0
    changed_files: int = 0

    @property
    def additions_percentage(self) -> float:
        total = self.additions + self.deletions
        return self.additions / total * 100 if total else 0.0

    @property
    def deletions_percentage(self) -> float:
        total = self.additions + self.deletions
        return self.deletions / total * 100 if total else 0.0


@dataclass
class OpenFile:
    """The file currently shown in the viewer."""

    entry: FileEntry
    classification: Classification
    content: str = ""
    message: str | None = None
    image_url: str | None = None

    @property
    def editable(self) -> bool:
        return self.classification.editable


@dataclass
class UploadFile:
    """A local file queued for upload."""

    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


OutcomeKind = Literal["ok", "read", "mutation", "rejected", "invalid"]


@dataclass
class Outcome:
    """Result of a public explorer operation. Operations never raise."""

    ok: bool
    kind: OutcomeKind = "ok"
    value: Any = None
    error: str | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Outcome":
        return cls(ok=True, kind="ok", value=value)

    @classmethod
    def failure(cls, kind: OutcomeKind, error: str) -> "Outcome":
        return cls(ok=False, kind=kind, error=error)
