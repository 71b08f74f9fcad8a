"""Multi-branch commit collection.

Commits are sampled from every branch of a repository at once, merged,
deduplicated by sha and filtered down to messages worth guessing.
Both entry points degrade to an empty list on failure: the deck builder
sweeps many repositories and needs whatever partial results it can get.
"""

import asyncio
import logging
import math
from collections.abc import Iterable
from typing import Any

from src.config import get_settings
from src.constants import MERGE_COMMIT_PREFIX
from src.services.github.client import GitHubClient, GitHubConnectionError, GitHubError
from src.services.github.directory import list_branches
from src.services.github.models import Commit, Repository
from src.utils.logging import LogContext
from src.utils.retry import RetryConfig, retry_async

logger = logging.getLogger(__name__)


def _branch_retry_config() -> RetryConfig:
    return RetryConfig(
        max_retries=get_settings().commit_fetch_max_retries,
        base_delay=0.5,
        max_delay=5.0,
        retryable_exceptions=(GitHubConnectionError,),
        exhausted_log_level=logging.WARNING,
    )


def dedupe_commits(commits: Iterable[Commit]) -> list[Commit]:
    """Drop repeated shas, keeping the first occurrence and the input order."""
    unique: dict[str, Commit] = {}
    for commit in commits:
        unique.setdefault(commit.sha, commit)
    return list(unique.values())


def is_playable(commit: Commit, author_login: str | None = None) -> bool:
    """Check whether a commit can be used as a quiz question.

    Args:
        commit: Commit to check
        author_login: When given, the commit must be attributed to this login

    Returns:
        False for empty or merge messages, commits without a linked
        author profile and, if requested, commits by someone else
    """
    if not commit.message or not commit.message.strip():
        return False
    if commit.message.startswith(MERGE_COMMIT_PREFIX):
        return False
    if not commit.has_author_profile:
        return False
    if author_login is not None and commit.author_login != author_login:
        return False
    return True


async def _fetch_branch(
    client: GitHubClient,
    repo_full_name: str,
    params: dict[str, Any],
    log: LogContext,
) -> list[Commit]:
    """Fetch one branch's commits; any failure counts as zero commits."""
    path = f"/repos/{repo_full_name}/commits"
    branch = params["sha"]
    try:
        payload = await retry_async(
            client.get,
            path,
            params=params,
            config=_branch_retry_config(),
            operation_name=f"commits {repo_full_name}@{branch}",
        )
    except GitHubError as e:
        log.warning(f"Failed to fetch commits from branch {branch}: {e}")
        return []

    if payload is None:
        log.warning(f"Giving up on branch {branch} after retries")
        return []

    if not isinstance(payload, list):
        log.warning(f"Unexpected commits payload from branch {branch}")
        return []

    commits = []
    for item in payload:
        try:
            commits.append(Commit.from_api(item))
        except (KeyError, TypeError, AttributeError):
            log.debug(f"Skipping malformed commit entry on branch {branch}")
    return commits


async def _collect(
    client: GitHubClient,
    repository: Repository,
    page_size_hint: int,
    author_login: str | None,
) -> list[Commit]:
    context = {"repo": repository.full_name}
    if author_login:
        context["author"] = author_login
    log = LogContext(logger, **context)

    branches = await list_branches(client, repository.full_name)
    per_branch = max(1, math.ceil(page_size_hint / len(branches)))

    requests = []
    for branch in branches:
        params: dict[str, Any] = {"sha": branch, "per_page": per_branch}
        if author_login:
            params["author"] = author_login
        requests.append(_fetch_branch(client, repository.full_name, params, log))

    results = await asyncio.gather(*requests)

    merged = dedupe_commits(commit for branch_commits in results for commit in branch_commits)
    playable = [commit for commit in merged if is_playable(commit, author_login)]

    log.debug(f"Found {len(playable)} commits across {len(branches)} branches")
    return playable


async def collect_repository_commits(
    client: GitHubClient,
    repository: Repository,
    page_size_hint: int | None = None,
) -> list[Commit]:
    """Collect playable commits by anyone across all branches of a repository.

    Args:
        client: Authenticated GitHub client
        repository: Repository to sample
        page_size_hint: Total commits wanted, split evenly across branches

    Returns:
        Deduplicated, filtered commits (possibly empty, never raises)
    """
    if page_size_hint is None:
        page_size_hint = get_settings().commits_per_repository_hint
    try:
        return await _collect(client, repository, page_size_hint, author_login=None)
    except GitHubError as e:
        logger.warning(f"Failed to fetch commits for {repository.full_name}: {e}")
        return []


async def collect_author_commits(
    client: GitHubClient,
    repository: Repository,
    author_login: str,
    page_size_hint: int | None = None,
) -> list[Commit]:
    """Collect playable commits by one author across all branches of a repository.

    The author filter is applied server side and checked again locally, so
    commits GitHub returns for a different login are dropped.

    Args:
        client: Authenticated GitHub client
        repository: Repository to sample
        author_login: GitHub login of the author
        page_size_hint: Total commits wanted, split evenly across branches

    Returns:
        Deduplicated, filtered commits (possibly empty, never raises)
    """
    if page_size_hint is None:
        page_size_hint = get_settings().commits_per_author_hint
    try:
        return await _collect(client, repository, page_size_hint, author_login=author_login)
    except GitHubError as e:
        logger.warning(
            f"Failed to fetch commits for {author_login} in {repository.full_name}: {e}"
        )
        return []
