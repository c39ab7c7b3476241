"""Abstract repository API and the error types shared by its implementations."""

from abc import ABC, abstractmethod
from typing import Any


class RepositoryAPI(ABC):
    """Read and write access to one hosted repository service.

    Reads return the raw decoded JSON of the upstream response; turning it into
    records is the job of ``explore.normalizers``. Writes return the upstream
    acknowledgement (usually the new commit and content sha).
    """

    @abstractmethod
    def get_repository(self, repo_id: str) -> dict[str, Any]:
        """Get repository details by portal id.

        Raises:
            APIError: If the request fails
            NotFoundError: If the repository does not exist
        """
        pass

    @abstractmethod
    def get_overview(self, owner: str, repo: str, branch: str) -> dict[str, Any]:
        """Get root files, recent commits and languages for a branch in one call."""
        pass

    @abstractmethod
    def list_files(self, owner: str, repo: str, path: str, branch: str) -> list[dict[str, Any]]:
        """List one directory. An empty path lists the repository root."""
        pass

    @abstractmethod
    def get_file_content(self, owner: str, repo: str, path: str, branch: str) -> dict[str, Any]:
        """Get one file with base64 encoded content and its current sha."""
        pass

    @abstractmethod
    def list_commits(
        self, owner: str, repo: str, branch: str, page: int = 1, per_page: int = 30
    ) -> list[dict[str, Any]]:
        """List commits of a branch, newest first."""
        pass

    @abstractmethod
    def get_commit(self, owner: str, repo: str, sha: str) -> dict[str, Any]:
        """Get one commit including its changed files and patches."""
        pass

    @abstractmethod
    def list_contributors(self, owner: str, repo: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def list_branches(self, owner: str, repo: str) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def get_stats(self, owner: str, repo: str, branch: str) -> Any:
        """Get repository statistics (at least a total commit count)."""
        pass

    @abstractmethod
    def create_file(
        self, owner: str, repo: str, path: str, content: str, message: str, branch: str
    ) -> dict[str, Any]:
        """Create a file. ``content`` is plain text; encoding is the proxy's job.

        Raises:
            MutationError: If the upstream rejects the write
        """
        pass

    @abstractmethod
    def update_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        sha: str,
        branch: str,
    ) -> dict[str, Any]:
        """Update a file whose current content hash is ``sha``.

        Raises:
            MutationError: If the upstream rejects the write (e.g. stale sha)
        """
        pass

    @abstractmethod
    def delete_file(
        self, owner: str, repo: str, path: str, message: str, sha: str, branch: str
    ) -> dict[str, Any]:
        """Delete a file whose current content hash is ``sha``.

        Raises:
            MutationError: If the upstream rejects the delete
        """
        pass

    @abstractmethod
    def upload_file(
        self,
        owner: str,
        repo: str,
        file_name: str,
        data: bytes,
        path: str,
        message: str,
        branch: str,
    ) -> dict[str, Any]:
        """Upload raw bytes to ``path``, creating or replacing the file.

        Raises:
            MutationError: If the upstream rejects the upload
        """
        pass

    def close(self) -> None:
        """Release any held connections."""
        pass


class ExplorerError(Exception):
    """Base exception for repository exploration errors."""

    pass


class APIError(ExplorerError):
    """Read request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429)."""

    pass


class NotFoundError(APIError):
    """Requested repository, branch, path or commit does not exist (HTTP 404)."""

    pass


class MutationError(ExplorerError):
    """Write request rejected by the proxy or the upstream service.

    ``message`` is the text meant for the user: the upstream's own message
    when it sent one, otherwise a status-specific explanation.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
