"""Application constants - centralized configuration values."""

# =============================================================================
# GitHub API
# =============================================================================
GITHUB_SERVICE = "github"  # rate limiter key
REPOSITORIES_PAGE_SIZE = 100  # single page, larger orgs are truncated
BRANCHES_PAGE_SIZE = 100
FALLBACK_BRANCHES = ("main", "master")
MERGE_COMMIT_PREFIX = "Merge"

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
API_TIMEOUT_EXTERNAL = 15.0

# =============================================================================
# Connection pool
# =============================================================================
POOL_MAX_CONNECTIONS = 20
POOL_MAX_KEEPALIVE = 10
POOL_KEEPALIVE_EXPIRY = 30

# =============================================================================
# Game
# =============================================================================
MIN_MEMBERS = 2
MIN_AUTHORS = 2
SHUTDOWN_TIMEOUT = 10.0
