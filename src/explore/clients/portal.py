"""Portal backend proxy client for repository data."""

from typing import Any

import requests

from common.env import env
from common.logger import get_logger

from .base import APIError, MutationError, NotFoundError, RateLimitError, RepositoryAPI
from .rate_limiter import RateLimiter

logger = get_logger(__name__)

# Shown when a rejected write carries no message of its own
STATUS_MESSAGES = {
    400: "Bad request. Please check your file and try again.",
    401: "Authentication failed. Please check your GitHub connection.",
    403: "Access denied. You may not have permission to modify this repository.",
    404: "Repository not found or branch does not exist.",
}


class PortalClient(RepositoryAPI):
    """Client for the portal's student repository proxy.

    The proxy forwards reads and writes to GitHub on behalf of the signed-in
    student. All repository routes live under
    ``{base_url}/api/student/github/{owner}/{repo}/``; repository details are
    looked up by portal id under ``{base_url}/api/student/repositories/{id}``.

    Example:
        >>> with PortalClient("https://portal.example.edu", token="...") as client:
        ...     branches = client.list_branches("octo", "demo")
    """

    API_PREFIX = "/api/student"

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        requests_per_minute: int | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize the portal client.

        Args:
            base_url: Portal backend URL (default: PORTAL_API_URL)
            token: Bearer token (default: PORTAL_API_TOKEN)
            timeout: Per-request timeout in seconds (default: EXPLORER_HTTP_TIMEOUT)
            requests_per_minute: Client-side rate limit (default: EXPLORER_REQUESTS_PER_MINUTE)
            session: Preconfigured session, mainly for tests
        """
        self.base_url = (base_url or env.portal_api_url()).rstrip("/")
        self.api_url = f"{self.base_url}{self.API_PREFIX}"
        self.timeout = timeout if timeout is not None else env.http_timeout()
        self.rate_limiter = RateLimiter(
            requests_per_period=requests_per_minute or env.requests_per_minute(),
            period_seconds=60,
        )
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json", "User-Agent": "repo-explorer/1.0"})

        token = token if token is not None else env.portal_api_token()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _repo_url(self, owner: str, repo: str, *parts: str) -> str:
        return "/".join([f"{self.api_url}/github/{owner}/{repo}", *parts])

    def _get(self, url: str, params: dict[str, Any] | None = None, what: str = "resource") -> Any:
        """GET and decode JSON, translating transport failures to APIError."""
        self.rate_limiter.wait_if_needed()
        logger.debug(f"GET {url} {params or ''}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            raise APIError(f"Portal timeout while fetching {what}") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 429:
                raise RateLimitError(f"Portal rate limit exceeded while fetching {what}", 429) from e
            if status == 404:
                raise NotFoundError(f"{what.capitalize()} not found", 404) from e
            raise APIError(f"Portal error while fetching {what}: {e}", status) from e
        except ValueError as e:
            raise APIError(f"Portal returned invalid JSON for {what}") from e
        except requests.exceptions.RequestException as e:
            raise APIError(f"Portal request failed while fetching {what}: {e}") from e

    def _mutation_message(self, response: requests.Response | None) -> str | None:
        if response is None:
            return None
        try:
            body = response.json()
        except ValueError:
            body = response.text
        if isinstance(body, dict):
            for key in ("message", "error"):
                value = body.get(key)
                if isinstance(value, str) and value:
                    return value
        elif isinstance(body, str) and body.strip():
            return body.strip()
        return STATUS_MESSAGES.get(response.status_code)

    def _send(self, method: str, url: str, action: str, **kwargs: Any) -> dict[str, Any]:
        """Perform a write; any rejection becomes a MutationError with a user-facing message."""
        self.rate_limiter.wait_if_needed()
        logger.debug(f"{method.upper()} {url}")

        try:
            response = getattr(self.session, method)(url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise MutationError(f"The portal did not respond in time while trying to {action}") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            message = self._mutation_message(e.response) or f"Failed to {action}"
            raise MutationError(message, status) from e
        except requests.exceptions.RequestException as e:
            raise MutationError(f"Failed to {action}: {e}") from e

        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {"result": body}

    # Reads

    def get_repository(self, repo_id: str) -> dict[str, Any]:
        return self._get(f"{self.api_url}/repositories/{repo_id}", what="repository")

    def get_overview(self, owner: str, repo: str, branch: str) -> dict[str, Any]:
        return self._get(
            self._repo_url(owner, repo, "overview"), params={"branch": branch}, what="overview"
        )

    def list_files(self, owner: str, repo: str, path: str, branch: str) -> list[dict[str, Any]]:
        return self._get(
            self._repo_url(owner, repo, "files"),
            params={"path": path, "branch": branch},
            what="directory listing",
        )

    def get_file_content(self, owner: str, repo: str, path: str, branch: str) -> dict[str, Any]:
        return self._get(
            self._repo_url(owner, repo, "file-content"),
            params={"path": path, "branch": branch},
            what="file content",
        )

    def list_commits(
        self, owner: str, repo: str, branch: str, page: int = 1, per_page: int = 30
    ) -> list[dict[str, Any]]:
        return self._get(
            self._repo_url(owner, repo, "commits"),
            params={"branch": branch, "page": page, "per_page": per_page},
            what="commits",
        )

    def get_commit(self, owner: str, repo: str, sha: str) -> dict[str, Any]:
        return self._get(self._repo_url(owner, repo, "commits", sha), what="commit")

    def list_contributors(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return self._get(self._repo_url(owner, repo, "contributors"), what="contributors")

    def list_branches(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return self._get(self._repo_url(owner, repo, "branches"), what="branches")

    def get_stats(self, owner: str, repo: str, branch: str) -> Any:
        return self._get(
            self._repo_url(owner, repo, "stats"), params={"branch": branch}, what="statistics"
        )

    # Writes

    def create_file(
        self, owner: str, repo: str, path: str, content: str, message: str, branch: str
    ) -> dict[str, Any]:
        return self._send(
            "post",
            self._repo_url(owner, repo, "files"),
            "create file",
            json={"path": path, "content": content, "message": message, "branch": branch},
        )

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
        return self._send(
            "put",
            self._repo_url(owner, repo, "files"),
            "update file",
            json={
                "path": path,
                "content": content,
                "message": message,
                "sha": sha,
                "branch": branch,
            },
        )

    def delete_file(
        self, owner: str, repo: str, path: str, message: str, sha: str, branch: str
    ) -> dict[str, Any]:
        return self._send(
            "delete",
            self._repo_url(owner, repo, "files"),
            "delete file",
            params={"path": path, "message": message, "sha": sha, "branch": branch},
        )

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
        return self._send(
            "post",
            self._repo_url(owner, repo, "upload"),
            "upload file",
            files={"file": (file_name, data)},
            data={"path": path, "message": message, "branch": branch},
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
