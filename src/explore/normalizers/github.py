"""Normalizers for repository payloads relayed by the portal proxy.

The proxy mostly emits camelCase fields of its own (``authorName``,
``lastCommitAuthor``...) but some endpoints pass GitHub's native shapes
through unchanged, so every optional field is read through an alias chain.
"""

from typing import Any

from common.constants import DEFAULT_BRANCH

from ..classifier import classify
from ..formatting import format_relative_time, parse_timestamp
from ..models import (
    Branch,
    ChangedFile,
    Classification,
    CommitRecord,
    ContributorRecord,
    FileCategory,
    FileContent,
    FileEntry,
    Repository,
    RepositoryOverview,
    RepositoryStats,
)
from .base import Normalizer

DIRECTORY_TYPES = {"dir", "folder", "tree"}
DIRECTORY_CLASSIFICATION = Classification(FileCategory.UNKNOWN, previewable=False, editable=False)


class RepositoryNormalizer(Normalizer):
    """Repository details from ``/repositories/{id}``."""

    def normalize(self, payload: dict[str, Any], repo_id: str | None = None) -> Repository:
        data = self._require_object(payload)

        full_name = self._first(data, "fullName", "full_name", default="")
        owner_field = data.get("owner")
        if isinstance(owner_field, dict):
            owner = owner_field.get("login")
        else:
            owner = owner_field
        owner = owner or (full_name.split("/")[0] if "/" in full_name else None)
        name = data.get("name") or (full_name.split("/")[1] if "/" in full_name else None)

        if not owner or not name:
            raise ValueError("Repository payload is missing owner or name")

        identifier = self._first(data, "id", "repositoryId", default=repo_id)
        if identifier is None:
            raise ValueError("Repository payload is missing an id")

        languages = data.get("languages")
        return Repository(
            id=str(identifier),
            owner=owner,
            name=name,
            full_name=full_name or f"{owner}/{name}",
            default_branch=self._first(data, "defaultBranch", "default_branch", default=DEFAULT_BRANCH),
            size=self._int(data.get("size")),
            description=data.get("description") or "",
            languages=dict(languages) if isinstance(languages, dict) else {},
            owner_avatar_url=(
                self._first(owner_field, "avatar_url", "avatarUrl")
                if isinstance(owner_field, dict)
                else None
            ),
            html_url=self._first(data, "htmlUrl", "html_url"),
        )


class FileEntryNormalizer(Normalizer):
    """Directory listing entries, from listings or the overview's ``rootFiles``."""

    def normalize(self, payload: dict[str, Any]) -> FileEntry:
        data = self._require_object(payload)

        path = data.get("path")
        name = data.get("name") or (path.rstrip("/").rsplit("/", 1)[-1] if path else None)
        if not name:
            raise ValueError("File entry is missing both name and path")

        is_dir = str(data.get("type", "file")).lower() in DIRECTORY_TYPES
        raw_date = self._first(
            data, "lastModified", "lastCommitDate", "date", "authorDate", "committerDate"
        )

        return FileEntry(
            path=path or name,
            name=name,
            type="dir" if is_dir else "file",
            classification=DIRECTORY_CLASSIFICATION if is_dir else classify(name),
            size=self._int(data.get("size")),
            sha=data.get("sha"),
            download_url=self._first(data, "downloadUrl", "download_url"),
            html_url=self._first(data, "htmlUrl", "html_url"),
            last_commit_message=self._first(data, "lastCommitMessage", "message"),
            last_commit_author=self._text(self._first(data, "lastCommitAuthor", "committer")),
            last_commit_avatar=self._first(data, "lastCommitAuthorAvatar", "committerAvatar"),
            last_commit_date=raw_date,
            last_modified=format_relative_time(raw_date) if raw_date else "",
        )


class ChangedFileNormalizer(Normalizer):
    def normalize(self, payload: dict[str, Any]) -> ChangedFile:
        data = self._require_object(payload)
        filename = self._first(data, "filename", "path", "name")
        if not filename:
            raise ValueError("Changed file is missing a filename")
        return ChangedFile(
            filename=filename,
            status=data.get("status") or "modified",
            additions=self._int(data.get("additions")),
            deletions=self._int(data.get("deletions")),
            patch=data.get("patch"),
            binary=bool(data.get("binary", False)),
        )


class CommitNormalizer(Normalizer):
    """Commits from list, overview and detail endpoints.

    Reads both the proxy's flattened shape and GitHub's nested
    ``commit.author`` shape.
    """

    def __init__(self):
        self.changed_file_normalizer = ChangedFileNormalizer()

    def normalize(self, payload: dict[str, Any]) -> CommitRecord:
        data = self._require_object(payload)

        sha = data.get("sha")
        if not sha or not isinstance(sha, str):
            raise ValueError("Commit payload is missing a sha")

        # Identities key the contributor map, so only strings are accepted
        author = (
            self._text(data.get("authorName"))
            or self._text(data.get("author"))
            or self._text(data.get("githubAuthorLogin"))
            or self._text(self._safe_get(data, "commit", "author", "name"))
            or self._text(self._safe_get(data, "author", "login"))
            or "Unknown"
        )

        raw_date = self._first(data, "date", "authorDate", "committerDate") or self._safe_get(
            data, "commit", "author", "date"
        )

        files = data.get("files")
        changed = (
            tuple(self.changed_file_normalizer.normalize(f) for f in files)
            if isinstance(files, list)
            else ()
        )

        return CommitRecord(
            sha=sha,
            message=self._first(data, "message") or self._safe_get(data, "commit", "message", default=""),
            author=author,
            author_email=self._first(data, "authorEmail", "email")
            or self._safe_get(data, "commit", "author", "email"),
            avatar_url=self._first(data, "githubAuthorAvatarUrl", "authorAvatarUrl", "avatarUrl")
            or self._safe_get(data, "author", "avatar_url"),
            raw_date=raw_date,
            date=parse_timestamp(raw_date),
            html_url=self._first(data, "htmlUrl", "html_url"),
            files=changed,
        )


class ContributorNormalizer(Normalizer):
    def normalize(self, payload: dict[str, Any]) -> ContributorRecord:
        data = self._require_object(payload)
        login = self._first(data, "login", "name")
        if not login:
            raise ValueError("Contributor payload is missing a login")
        if not isinstance(login, str):
            raise ValueError(f"Contributor login must be a string, got {type(login).__name__}")
        return ContributorRecord(
            login=login,
            commits=self._int(self._first(data, "contributions", "commits")),
            avatar_url=self._first(data, "avatarUrl", "avatar_url"),
            html_url=self._first(data, "htmlUrl", "html_url"),
        )


class BranchNormalizer(Normalizer):
    def normalize(self, payload: dict[str, Any]) -> Branch:
        data = self._require_object(payload)
        name = data.get("name")
        if not name:
            raise ValueError("Branch payload is missing a name")
        return Branch(
            name=name,
            sha=self._safe_get(data, "commit", "sha") or data.get("sha"),
            protected=bool(data.get("protected", False)),
        )


class StatsNormalizer(Normalizer):
    """Statistics endpoint; a bare number or any of the known count fields."""

    def normalize(self, payload: Any) -> RepositoryStats:
        if isinstance(payload, (int, float)) and not isinstance(payload, bool):
            return RepositoryStats(total_commits=int(payload))
        data = self._require_object(payload)
        count = self._first(data, "totalCommits", "commitCount", "commits", "total", "count")
        return RepositoryStats(total_commits=max(self._int(count), 0))


class OverviewNormalizer(Normalizer):
    def __init__(self):
        self.file_normalizer = FileEntryNormalizer()
        self.commit_normalizer = CommitNormalizer()

    def normalize(self, payload: dict[str, Any], branch: str | None = None) -> RepositoryOverview:
        data = self._require_object(payload)
        languages = data.get("languages")
        return RepositoryOverview(
            branch=self._first(data, "currentBranch", default=branch or DEFAULT_BRANCH),
            root_files=self.file_normalizer.normalize_many(data.get("rootFiles") or []),
            recent_commits=self.commit_normalizer.normalize_many(data.get("recentCommits") or []),
            languages=dict(languages) if isinstance(languages, dict) else {},
        )


class FileContentNormalizer(Normalizer):
    def normalize(self, payload: dict[str, Any], path: str | None = None) -> FileContent:
        data = self._require_object(payload)
        file_path = data.get("path") or path
        if not file_path:
            raise ValueError("File content payload is missing a path")
        return FileContent(
            path=file_path,
            name=data.get("name") or file_path.rsplit("/", 1)[-1],
            sha=data.get("sha"),
            content=data.get("content"),
            encoding=self._first(data, "encoding", default="base64"),
            download_url=self._first(data, "downloadUrl", "download_url"),
        )
