"""Shared constants for the repo-explorer application.

For environment-based configuration (portal URL, page sizes, estimation
factors), use the env module:
    from common.env import env
    page_size = env.commit_page_size()
"""

# Defaults mirrored by common.env; used when callers bypass the environment
DEFAULT_BRANCH = "main"
COMMIT_PAGE_SIZE = 100
FILES_COMMIT_FACTOR = 2.5
TRUNCATION_PADDING = 50

# Avatar used when an identity has no avatar of its own
IDENTICON_URL_TEMPLATE = "https://github.com/identicons/{name}.png"
OWNER_AVATAR_URL_TEMPLATE = "https://github.com/{name}.png"

# Placeholder strings shown instead of content
NO_DIFF_SENTINEL = "No diff available"
UNDECODABLE_CONTENT = "Unable to decode file content"
UNKNOWN_DATE = "Unknown"

README_PATH = "README.md"
DEFAULT_UPLOAD_MESSAGE = "Add files via upload"
DESCRIPTION_COMMIT_MESSAGE = "Update repository description"
