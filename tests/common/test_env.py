"""Tests for environment configuration interface."""

from common.env import Environment, env


class TestEnvironment:
    """Tests for Environment class."""

    def test_portal_api_url_default(self, monkeypatch):
        """Test portal_api_url returns default value."""
        monkeypatch.delenv("PORTAL_API_URL", raising=False)
        assert Environment.portal_api_url() == "http://localhost:8080"

    def test_portal_api_url_strips_trailing_slash(self, monkeypatch):
        """Test portal_api_url drops a trailing slash."""
        monkeypatch.setenv("PORTAL_API_URL", "https://portal.example.edu/")
        assert Environment.portal_api_url() == "https://portal.example.edu"

    def test_portal_api_token_default(self, monkeypatch):
        """Test portal_api_token is None when unset."""
        monkeypatch.delenv("PORTAL_API_TOKEN", raising=False)
        assert Environment.portal_api_token() is None

    def test_portal_api_token_empty_is_none(self, monkeypatch):
        """Test an empty token is treated as unset."""
        monkeypatch.setenv("PORTAL_API_TOKEN", "")
        assert Environment.portal_api_token() is None

    def test_portal_api_token_from_env(self, monkeypatch):
        """Test portal_api_token reads from environment."""
        monkeypatch.setenv("PORTAL_API_TOKEN", "secret")
        assert Environment.portal_api_token() == "secret"

    def test_http_timeout_default(self, monkeypatch):
        """Test http_timeout returns default value."""
        monkeypatch.delenv("EXPLORER_HTTP_TIMEOUT", raising=False)
        assert Environment.http_timeout() == 10.0

    def test_http_timeout_from_env(self, monkeypatch):
        """Test http_timeout reads from environment."""
        monkeypatch.setenv("EXPLORER_HTTP_TIMEOUT", "2.5")
        assert Environment.http_timeout() == 2.5

    def test_requests_per_minute_default(self, monkeypatch):
        """Test requests_per_minute returns default value."""
        monkeypatch.delenv("EXPLORER_REQUESTS_PER_MINUTE", raising=False)
        assert Environment.requests_per_minute() == 120

    def test_max_workers_from_env(self, monkeypatch):
        """Test max_workers reads from environment."""
        monkeypatch.setenv("EXPLORER_MAX_WORKERS", "8")
        assert Environment.max_workers() == 8

    def test_commit_page_size_default(self, monkeypatch):
        """Test commit_page_size returns default value."""
        monkeypatch.delenv("EXPLORER_COMMIT_PAGE_SIZE", raising=False)
        assert Environment.commit_page_size() == 100

    def test_files_commit_factor_default(self, monkeypatch):
        """Test files_commit_factor returns default value."""
        monkeypatch.delenv("EXPLORER_FILES_COMMIT_FACTOR", raising=False)
        assert Environment.files_commit_factor() == 2.5

    def test_truncation_padding_from_env(self, monkeypatch):
        """Test truncation_padding reads from environment."""
        monkeypatch.setenv("EXPLORER_TRUNCATION_PADDING", "20")
        assert Environment.truncation_padding() == 20

    def test_max_upload_bytes_default(self, monkeypatch):
        """Test max_upload_bytes defaults to 100 MB."""
        monkeypatch.delenv("EXPLORER_MAX_UPLOAD_MB", raising=False)
        assert Environment.max_upload_bytes() == 100 * 1024 * 1024

    def test_max_upload_bytes_from_env(self, monkeypatch):
        """Test max_upload_bytes converts megabytes to bytes."""
        monkeypatch.setenv("EXPLORER_MAX_UPLOAD_MB", "1")
        assert Environment.max_upload_bytes() == 1024 * 1024


class TestEnvSingleton:
    """Tests for env singleton instance."""

    def test_env_is_environment_instance(self):
        """Test that env is an instance of Environment."""
        assert isinstance(env, Environment)

    def test_env_singleton_methods_work(self, monkeypatch):
        """Test that env singleton methods work."""
        monkeypatch.setenv("EXPLORER_MAX_WORKERS", "2")
        assert env.max_workers() == 2
