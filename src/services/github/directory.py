"""Organization, member, repository and branch listings."""

import logging
from typing import Any, Callable, TypeVar

from src.constants import BRANCHES_PAGE_SIZE, FALLBACK_BRANCHES, REPOSITORIES_PAGE_SIZE
from src.services.github.client import DecodeError, GitHubClient, GitHubError
from src.services.github.models import Member, Organization, Repository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _expect_list(payload: Any, path: str) -> list[dict[str, Any]]:
    if not isinstance(payload, list):
        raise DecodeError(f"Expected a JSON array from {path}, got {type(payload).__name__}")
    return payload


def _parse_all(
    payload: list[dict[str, Any]],
    factory: Callable[[dict[str, Any]], T],
    path: str,
) -> list[T]:
    try:
        return [factory(item) for item in payload]
    except (KeyError, TypeError, AttributeError) as e:
        raise DecodeError(f"Unexpected item shape from {path}: {e!r}") from e


async def list_organizations(client: GitHubClient) -> list[Organization]:
    """List organizations the authenticated user belongs to."""
    path = "/user/orgs"
    payload = _expect_list(await client.get(path), path)
    return _parse_all(payload, Organization.from_api, path)


async def list_members(client: GitHubClient, org_login: str) -> list[Member]:
    """List members of an organization."""
    path = f"/orgs/{org_login}/members"
    payload = _expect_list(await client.get(path), path)
    return _parse_all(payload, Member.from_api, path)


async def list_repositories(client: GitHubClient, org_login: str) -> list[Repository]:
    """List repositories of an organization.

    Only the first page is fetched; organizations with more than
    REPOSITORIES_PAGE_SIZE repositories are truncated.
    """
    path = f"/orgs/{org_login}/repos"
    payload = _expect_list(
        await client.get(path, params={"per_page": REPOSITORIES_PAGE_SIZE}), path
    )
    return _parse_all(payload, Repository.from_api, path)


async def list_branches(client: GitHubClient, repo_full_name: str) -> list[str]:
    """List branch names of a repository.

    Never raises on API failure: a repository whose branches cannot be listed
    falls back to FALLBACK_BRANCHES so the rest of the sweep can go on.
    """
    path = f"/repos/{repo_full_name}/branches"
    try:
        payload = _expect_list(
            await client.get(path, params={"per_page": BRANCHES_PAGE_SIZE}), path
        )
        branches = [
            item["name"] for item in payload if isinstance(item, dict) and item.get("name")
        ]
    except GitHubError as e:
        logger.warning(f"Failed to fetch branches for {repo_full_name}: {e}")
        return list(FALLBACK_BRANCHES)

    if not branches:
        logger.warning(f"No branches listed for {repo_full_name}, using fallback")
        return list(FALLBACK_BRANCHES)

    return branches
