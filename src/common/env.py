"""Environment configuration interface for repo-explorer.

All environment variable access goes through this module so the rest of the
code never touches ``os.environ`` directly.
"""

import os

from dotenv import load_dotenv

from common.constants import COMMIT_PAGE_SIZE, FILES_COMMIT_FACTOR, TRUNCATION_PADDING

# Load environment variables from .env file if it exists
load_dotenv()


class Environment:
    """Interface for accessing environment configuration."""

    @staticmethod
    def portal_api_url() -> str:
        """Get the base URL of the portal backend proxy.

        Returns:
            Base URL without trailing slash, defaults to http://localhost:8080
        """
        return os.getenv("PORTAL_API_URL", "http://localhost:8080").rstrip("/")

    @staticmethod
    def portal_api_token() -> str | None:
        """Get the bearer token used to authenticate against the portal.

        Returns:
            Token string, or None when unauthenticated access is intended
        """
        return os.getenv("PORTAL_API_TOKEN") or None

    @staticmethod
    def http_timeout() -> float:
        """Get the per-request HTTP timeout in seconds.

        Returns:
            Timeout, defaults to 10 seconds
        """
        return float(os.getenv("EXPLORER_HTTP_TIMEOUT", "10"))

    @staticmethod
    def requests_per_minute() -> int:
        """Get the client-side rate limit.

        Returns:
            Requests allowed per minute, defaults to 120
        """
        return int(os.getenv("EXPLORER_REQUESTS_PER_MINUTE", "120"))

    @staticmethod
    def max_workers() -> int:
        """Get the size of the thread pool used for fan-out reads.

        Returns:
            Worker count, defaults to 4
        """
        return int(os.getenv("EXPLORER_MAX_WORKERS", "4"))

    @staticmethod
    def commit_page_size() -> int:
        """Get the number of commits requested for the extended commit window.

        Returns:
            Page size, defaults to 100 (the upstream per-page cap)
        """
        return int(os.getenv("EXPLORER_COMMIT_PAGE_SIZE", COMMIT_PAGE_SIZE))

    @staticmethod
    def files_commit_factor() -> float:
        """Get the commits-per-file multiplier used when estimating commit totals.

        Returns:
            Multiplier, defaults to 2.5
        """
        return float(os.getenv("EXPLORER_FILES_COMMIT_FACTOR", FILES_COMMIT_FACTOR))

    @staticmethod
    def truncation_padding() -> int:
        """Get the padding added to a full, truncated commit page when estimating.

        Returns:
            Padding, defaults to 50
        """
        return int(os.getenv("EXPLORER_TRUNCATION_PADDING", TRUNCATION_PADDING))

    @staticmethod
    def max_upload_bytes() -> int:
        """Get the maximum accepted size for a single uploaded file.

        Returns:
            Size in bytes, defaults to 100 MB
        """
        return int(os.getenv("EXPLORER_MAX_UPLOAD_MB", "100")) * 1024 * 1024


# Singleton instance for convenient access
env = Environment()
