"""Shared fixtures for explorer tests."""

import base64
import copy

import pytest

from explore.clients.base import NotFoundError, RepositoryAPI
from explore.explorer import RepositoryExplorer

MAIN_HEAD = "a1b2c3d4e5f6a7b8c9d0"
MAIN_PREVIOUS = "b2c3d4e5f6a7b8c9d0e1"
MAIN_OLDEST = "c3d4e5f6a7b8c9d0e1f2"
DEVELOP_HEAD = "d4e5f6a7b8c9d0e1f2a3"

APP_PATCH = "@@ -1,2 +1,2 @@\n import os\n-print('a')\n+print('b')"


def encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


ROOT_FILES = [
    {
        "name": "README.md",
        "path": "README.md",
        "type": "file",
        "size": 120,
        "sha": "readme-sha",
        "lastCommitAuthor": "ada",
        "lastCommitDate": "2024-03-09T10:00:00Z",
    },
    {"name": "src", "path": "src", "type": "dir"},
    {
        "name": "logo.png",
        "path": "logo.png",
        "type": "file",
        "size": 2048,
        "sha": "logo-sha",
        "downloadUrl": "https://raw.githubusercontent.com/octo/demo/main/logo.png",
    },
    {
        "name": "app.py",
        "path": "app.py",
        "type": "file",
        "size": 40,
        "sha": "app-sha",
        "lastCommitAuthor": "lin",
        "lastCommitDate": "2024-03-08T09:00:00Z",
    },
    {"name": "bundle.zip", "path": "bundle.zip", "type": "file", "size": 4096},
]

MAIN_COMMITS = [
    {
        "sha": MAIN_HEAD,
        "message": "Fix bug",
        "authorName": "ada",
        "date": "2024-03-10T09:00:00Z",
        "githubAuthorAvatarUrl": "https://avatars.example.com/ada.png",
    },
    {"sha": MAIN_PREVIOUS, "message": "Add app", "authorName": "lin", "date": "2024-03-08T09:00:00Z"},
    {"sha": MAIN_OLDEST, "message": "Initial commit", "authorName": "lin", "date": "2024-03-01T09:00:00Z"},
]


class FakeRepositoryAPI(RepositoryAPI):
    """In-memory RepositoryAPI serving canned payloads and recording every call.

    ``failures`` maps a method name to the exception it raises; ``hooks`` maps
    a method name to a callable invoked with the call arguments before the
    payload is returned.
    """

    def __init__(self):
        self.repository = {
            "id": 42,
            "name": "demo",
            "fullName": "octo/demo",
            "owner": {"login": "octo", "avatar_url": "https://avatars.example.com/octo.png"},
            "defaultBranch": "main",
            "size": 2048,
            "description": "Demo repository",
        }
        self.overview = {
            "currentBranch": "main",
            "rootFiles": ROOT_FILES,
            "recentCommits": MAIN_COMMITS[:2],
            "languages": {"Python": 900, "Shell": 100},
        }
        self.listings = {
            ("main", ""): ROOT_FILES,
            ("main", "src"): [
                {"name": "util.py", "path": "src/util.py", "type": "file", "sha": "util-sha"},
                {"name": "lib", "path": "src/lib", "type": "dir"},
            ],
            ("develop", ""): [
                {"name": "README.md", "path": "README.md", "type": "file", "sha": "readme-dev"},
                {"name": "feature.py", "path": "feature.py", "type": "file", "sha": "feature-sha"},
            ],
        }
        self.contents = {
            ("main", "README.md"): {
                "path": "README.md",
                "sha": "readme-sha",
                "content": encode("# Demo\n\nHello"),
                "encoding": "base64",
            },
            ("main", "app.py"): {
                "path": "app.py",
                "sha": "app-sha",
                "content": encode("print('hi')\n"),
                "encoding": "base64",
            },
            ("main", "src/util.py"): {
                "path": "src/util.py",
                "sha": "util-sha",
                "content": encode("def util():\n    return 1\n"),
                "encoding": "base64",
            },
        }
        self.commit_windows = {
            "main": MAIN_COMMITS,
            "develop": [
                {"sha": DEVELOP_HEAD, "message": "Add feature", "authorName": "kim", "date": "2024-03-10T08:00:00Z"}
            ],
        }
        self.commit_details = {
            MAIN_HEAD: {
                **MAIN_COMMITS[0],
                "files": [
                    {"filename": "app.py", "status": "modified", "additions": 1, "deletions": 1, "patch": APP_PATCH},
                    {"filename": "logo.png", "status": "added", "binary": True},
                    {"filename": "notes.txt", "status": "copied"},
                ],
            }
        }
        self.contributors = [
            {"login": "ada", "contributions": 5, "avatar_url": "https://avatars.example.com/ada.png"},
            {"login": "lin", "contributions": 2},
        ]
        self.branches = [{"name": "main", "commit": {"sha": MAIN_HEAD}}, {"name": "develop"}]
        self.stats = {"totalCommits": 7}

        self.failures = {}
        self.upload_failures = {}
        self.hooks = {}
        self.write_result = {"content": {"sha": "new-sha"}}
        self.calls = []
        self.writes = []
        self.closed = False

    def _record(self, method, *args):
        self.calls.append((method, *args))
        if method in self.failures:
            raise self.failures[method]
        hook = self.hooks.get(method)
        if hook is not None:
            hook(*args)

    def calls_to(self, method):
        return [call[1:] for call in self.calls if call[0] == method]

    # Reads

    def get_repository(self, repo_id):
        self._record("get_repository", repo_id)
        return copy.deepcopy(self.repository)

    def get_overview(self, owner, repo, branch):
        self._record("get_overview", owner, repo, branch)
        return copy.deepcopy(self.overview)

    def list_files(self, owner, repo, path, branch):
        self._record("list_files", owner, repo, path, branch)
        if (branch, path) not in self.listings:
            raise NotFoundError("Directory listing not found", 404)
        return copy.deepcopy(self.listings[(branch, path)])

    def get_file_content(self, owner, repo, path, branch):
        self._record("get_file_content", owner, repo, path, branch)
        if (branch, path) not in self.contents:
            raise NotFoundError("File content not found", 404)
        return copy.deepcopy(self.contents[(branch, path)])

    def list_commits(self, owner, repo, branch, page=1, per_page=30):
        self._record("list_commits", owner, repo, branch, page, per_page)
        return copy.deepcopy(self.commit_windows.get(branch, []))

    def get_commit(self, owner, repo, sha):
        self._record("get_commit", owner, repo, sha)
        if sha not in self.commit_details:
            raise NotFoundError("Commit not found", 404)
        return copy.deepcopy(self.commit_details[sha])

    def list_contributors(self, owner, repo):
        self._record("list_contributors", owner, repo)
        return copy.deepcopy(self.contributors)

    def list_branches(self, owner, repo):
        self._record("list_branches", owner, repo)
        return copy.deepcopy(self.branches)

    def get_stats(self, owner, repo, branch):
        self._record("get_stats", owner, repo, branch)
        return copy.deepcopy(self.stats)

    # Writes

    def _write(self, method, **fields):
        self._record(method, fields)
        self.writes.append((method, fields))
        return copy.deepcopy(self.write_result)

    def create_file(self, owner, repo, path, content, message, branch):
        return self._write("create_file", path=path, content=content, message=message, branch=branch)

    def update_file(self, owner, repo, path, content, message, sha, branch):
        return self._write(
            "update_file", path=path, content=content, message=message, sha=sha, branch=branch
        )

    def delete_file(self, owner, repo, path, message, sha, branch):
        return self._write("delete_file", path=path, message=message, sha=sha, branch=branch)

    def upload_file(self, owner, repo, file_name, data, path, message, branch):
        if path in self.upload_failures:
            raise self.upload_failures[path]
        return self._write(
            "upload_file", file_name=file_name, data=data, path=path, message=message, branch=branch
        )

    def close(self):
        self.closed = True


@pytest.fixture
def fake_api():
    """Fresh in-memory API with a small two-branch repository."""
    return FakeRepositoryAPI()


@pytest.fixture
def explorer(fake_api):
    """Explorer wired to the fake API with deterministic settings."""
    return RepositoryExplorer(
        fake_api,
        max_workers=2,
        commit_page_size=30,
        max_upload_bytes=2 * 1024 * 1024,
        clock=lambda: 1000.0,
    )


@pytest.fixture
def opened(explorer):
    """Explorer with repository 42 loaded on main."""
    outcome = explorer.open_repository("42")
    assert outcome.ok
    return explorer
