"""Balanced deck construction.

Authors contribute wildly different commit volumes. The balancer caps
every author at the same target, interleaves authors round-robin so the
cap is reached evenly, then shuffles so position gives nothing away.
"""

import logging
import random
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import zip_longest

from src.config import get_settings
from src.constants import MIN_AUTHORS
from src.services.github.client import GitHubClient
from src.services.github.commits import collect_author_commits, dedupe_commits
from src.services.github.models import Commit, Member, Repository
from src.services.quiz.errors import InsufficientAuthorsError, NoRepositoriesSelectedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalancePolicy:
    """Per-author target: ``max(min_per_author, deck_budget // authors)``."""

    deck_budget: int = 50
    min_per_author: int = 5

    @classmethod
    def from_settings(cls) -> "BalancePolicy":
        settings = get_settings()
        return cls(
            deck_budget=settings.deck_budget,
            min_per_author=settings.min_commits_per_author,
        )

    def target_per_author(self, author_count: int) -> int:
        if author_count < 1:
            raise ValueError("author_count must be at least 1")
        return max(self.min_per_author, self.deck_budget // author_count)


@dataclass(frozen=True)
class Deck:
    """Shuffled quiz items plus the per-author counts they contain."""

    commits: tuple[Commit, ...] = ()
    distribution: dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.commits)


def compute_distribution(commits: Sequence[Commit]) -> dict[str, int]:
    """Count commits per author login."""
    return dict(Counter(commit.author_login for commit in commits))


def _round_robin(queues: list[list[Commit]], limit: int) -> list[Commit]:
    interleaved: list[Commit] = []
    for round_items in zip_longest(*queues):
        for commit in round_items:
            if commit is None:
                continue  # this author is exhausted
            if len(interleaved) >= limit:
                return interleaved
            interleaved.append(commit)
    return interleaved


def balance_deck(
    commits_by_author: dict[str, list[Commit]],
    policy: BalancePolicy | None = None,
    rng: random.Random | None = None,
) -> Deck:
    """Build a balanced, shuffled deck from per-author commit lists.

    Args:
        commits_by_author: Commits keyed by login, in the order authors
            should be visited by the round-robin
        policy: Target formula (defaults to settings)
        rng: Random source for the shuffle

    Returns:
        Deck whose distribution matches its own commits

    Raises:
        InsufficientAuthorsError: Fewer than two authors have commits
    """
    policy = policy or BalancePolicy.from_settings()
    rng = rng or random.Random()

    qualifying = [(login, commits) for login, commits in commits_by_author.items() if commits]
    if len(qualifying) < MIN_AUTHORS:
        raise InsufficientAuthorsError(len(qualifying))

    target = policy.target_per_author(len(qualifying))
    queues = [commits[:target] for _, commits in qualifying]
    interleaved = _round_robin(queues, limit=target * len(qualifying))

    rng.shuffle(interleaved)
    distribution = compute_distribution(interleaved)

    logger.info(
        f"Built deck of {len(interleaved)} commits from {len(qualifying)} authors "
        f"(target {target} per author): {distribution}"
    )
    return Deck(commits=tuple(interleaved), distribution=distribution)


async def collect_commits_by_author(
    client: GitHubClient,
    members: Sequence[Member],
    repositories: Sequence[Repository],
    page_size_hint: int | None = None,
) -> dict[str, list[Commit]]:
    """Sweep every selected repository for every member's commits.

    Members are processed one after another to stay gentle on the rate
    limit; within a repository the collector still fans out per branch.
    """
    commits_by_author: dict[str, list[Commit]] = {}

    for member in members:
        member_commits: list[Commit] = []
        for repository in repositories:
            member_commits.extend(
                await collect_author_commits(
                    client, repository, member.login, page_size_hint=page_size_hint
                )
            )
        commits_by_author[member.login] = dedupe_commits(member_commits)
        logger.debug(f"Found {len(commits_by_author[member.login])} commits for {member.login}")

    return commits_by_author


async def build_deck(
    client: GitHubClient,
    members: Sequence[Member],
    repositories: Sequence[Repository],
    policy: BalancePolicy | None = None,
    page_size_hint: int | None = None,
    rng: random.Random | None = None,
) -> Deck:
    """Collect commits for all members and balance them into a deck.

    Raises:
        NoRepositoriesSelectedError: ``repositories`` is empty
        InsufficientAuthorsError: Fewer than two members have commits
    """
    if not repositories:
        raise NoRepositoriesSelectedError()

    logger.info(
        f"Fetching commits for {len(members)} members across {len(repositories)} repositories"
    )
    commits_by_author = await collect_commits_by_author(
        client, members, repositories, page_size_hint=page_size_hint
    )
    return balance_deck(commits_by_author, policy=policy, rng=rng)
