"""GitHub integration module.

Read-only access to the GitHub REST API for the quiz:
- Organizations, members and repositories of the authenticated user
- Branch listing with a main/master fallback
- Commit sampling across all branches of a repository

Usage:
    from src.services.github import GitHubClient, collect_author_commits

    client = GitHubClient(token="ghp_...")
    orgs = await list_organizations(client)
    commits = await collect_author_commits(client, repository, "octocat")
"""

from src.services.github.client import (
    DecodeError,
    GitHubClient,
    GitHubConnectionError,
    GitHubError,
    InvalidCredentialError,
    RateLimitedError,
    RemoteError,
)
from src.services.github.commits import (
    collect_author_commits,
    collect_repository_commits,
    dedupe_commits,
    is_playable,
)
from src.services.github.directory import (
    list_branches,
    list_members,
    list_organizations,
    list_repositories,
)
from src.services.github.models import Commit, Member, Organization, Repository

__all__ = [
    # Client
    "GitHubClient",
    "GitHubError",
    "InvalidCredentialError",
    "RateLimitedError",
    "RemoteError",
    "DecodeError",
    "GitHubConnectionError",
    # Directory
    "list_organizations",
    "list_members",
    "list_repositories",
    "list_branches",
    # Commits
    "collect_repository_commits",
    "collect_author_commits",
    "dedupe_commits",
    "is_playable",
    # Models
    "Organization",
    "Member",
    "Repository",
    "Commit",
]
