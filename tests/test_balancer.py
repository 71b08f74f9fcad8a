"""Tests for balanced deck construction."""

import random
from collections import Counter

import pytest

from src.services.github.client import GitHubClient
from src.services.github.models import Commit, Member, Repository
from src.services.quiz.balancer import (
    BalancePolicy,
    balance_deck,
    build_deck,
    collect_commits_by_author,
    compute_distribution,
)
from src.services.quiz.errors import InsufficientAuthorsError, NoRepositoriesSelectedError
from tests.factories import FakeGitHub, make_commit, make_member, make_repo


def _commits(login: str, count: int) -> list[Commit]:
    return [
        Commit.from_api(make_commit(f"{login}-{i}", login, f"{login} change {i}"))
        for i in range(count)
    ]


def _members(*logins: str) -> list[Member]:
    return [Member.from_api(make_member(i, login)) for i, login in enumerate(logins)]


def _repos(*names: str) -> list[Repository]:
    return [Repository.from_api(make_repo(100 + i, name)) for i, name in enumerate(names)]


class TestBalancePolicy:
    """Tests for the per-author target formula."""

    @pytest.mark.parametrize(
        "authors, target",
        [(1, 50), (2, 25), (3, 16), (7, 7), (10, 5), (11, 5), (40, 5)],
    )
    def test_default_target(self, authors: int, target: int):
        assert BalancePolicy().target_per_author(authors) == target

    def test_custom_policy(self):
        policy = BalancePolicy(deck_budget=20, min_per_author=3)
        assert policy.target_per_author(2) == 10
        assert policy.target_per_author(10) == 3

    def test_rejects_zero_authors(self):
        with pytest.raises(ValueError):
            BalancePolicy().target_per_author(0)

    def test_from_settings_matches_defaults(self):
        assert BalancePolicy.from_settings() == BalancePolicy(deck_budget=50, min_per_author=5)


class TestBalanceDeck:
    """Tests for balance_deck."""

    def test_requires_two_authors(self):
        with pytest.raises(InsufficientAuthorsError) as exc_info:
            balance_deck({"alice": _commits("alice", 10), "bob": [], "carol": []})

        assert exc_info.value.authors_found == 1
        assert "at least 2" in str(exc_info.value)

    def test_no_authors_at_all(self):
        with pytest.raises(InsufficientAuthorsError):
            balance_deck({})

    def test_caps_each_author_at_target(self):
        """Test that no author exceeds the target and the deck stays bounded."""
        deck = balance_deck(
            {
                "alice": _commits("alice", 100),
                "bob": _commits("bob", 40),
                "carol": _commits("carol", 2),
            },
            rng=random.Random(7),
        )

        target = BalancePolicy().target_per_author(3)
        assert max(deck.distribution.values()) <= target
        assert len(deck) <= target * 3
        assert deck.distribution == {"alice": 16, "bob": 16, "carol": 2}

    def test_distribution_matches_deck(self):
        deck = balance_deck(
            {"alice": _commits("alice", 9), "bob": _commits("bob", 4)},
            rng=random.Random(1),
        )

        assert deck.distribution == dict(Counter(c.author_login for c in deck.commits))

    def test_keeps_earliest_fetched_commits(self):
        """Test that truncation keeps each author's first commits."""
        policy = BalancePolicy(deck_budget=4, min_per_author=1)
        deck = balance_deck(
            {"alice": _commits("alice", 5), "bob": _commits("bob", 5)},
            policy=policy,
        )

        assert {c.sha for c in deck.commits} == {"alice-0", "alice-1", "bob-0", "bob-1"}

    def test_deck_contains_no_duplicates(self):
        deck = balance_deck(
            {"alice": _commits("alice", 30), "bob": _commits("bob", 30)},
            rng=random.Random(3),
        )

        shas = [c.sha for c in deck.commits]
        assert len(shas) == len(set(shas)) == 50

    def test_shuffle_uses_given_rng(self):
        commits = {"alice": _commits("alice", 10), "bob": _commits("bob", 10)}

        first = balance_deck(commits, rng=random.Random(42))
        second = balance_deck(commits, rng=random.Random(42))

        assert [c.sha for c in first.commits] == [c.sha for c in second.commits]

    def test_end_to_end_example(self):
        """Test the 12 + 3 commits example with an idle third member."""
        deck = balance_deck(
            {"A": _commits("A", 12), "B": _commits("B", 3), "C": []},
            rng=random.Random(0),
        )

        assert len(deck) == 15
        assert deck.distribution == {"A": 12, "B": 3}


class TestComputeDistribution:
    def test_counts_per_login(self):
        commits = _commits("alice", 2) + _commits("bob", 1)
        assert compute_distribution(commits) == {"alice": 2, "bob": 1}

    def test_empty(self):
        assert compute_distribution([]) == {}


class TestBuildDeck:
    """Tests for collecting and balancing against the GitHub API."""

    @pytest.fixture
    def org(self, fake_github: FakeGitHub) -> FakeGitHub:
        """A has 12 commits and B has 3 across two repositories; C has none."""
        for name in ("api", "web"):
            fake_github.branches[f"acme/{name}"] = ["main"]
        fake_github.add_commits(
            "acme/api", "main", *[make_commit(f"a-api-{i}", "A") for i in range(6)]
        )
        fake_github.add_commits(
            "acme/web", "main", *[make_commit(f"a-web-{i}", "A") for i in range(6)]
        )
        fake_github.add_commits(
            "acme/api",
            "main",
            make_commit("b-1", "B"),
            make_commit("b-2", "B"),
            make_commit("b-merge", "B", "Merge branch 'main' into feature"),
        )
        fake_github.add_commits("acme/web", "main", make_commit("b-3", "B"))
        return fake_github

    @pytest.mark.asyncio
    async def test_collect_commits_by_author(self, github_client: GitHubClient, org: FakeGitHub):
        commits_by_author = await collect_commits_by_author(
            github_client, _members("A", "B", "C"), _repos("api", "web")
        )

        assert list(commits_by_author) == ["A", "B", "C"]
        assert len(commits_by_author["A"]) == 12
        assert [c.sha for c in commits_by_author["B"]] == ["b-1", "b-2", "b-3"]
        assert commits_by_author["C"] == []

    @pytest.mark.asyncio
    async def test_dedupes_member_commits_across_repositories(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        """Test that a sha seen in two repositories (a fork) counts once."""
        for name in ("api", "api-fork"):
            fake_github.branches[f"acme/{name}"] = ["main"]
            fake_github.add_commits(f"acme/{name}", "main", make_commit("same", "A"))

        commits_by_author = await collect_commits_by_author(
            github_client, _members("A"), _repos("api", "api-fork")
        )

        assert [c.sha for c in commits_by_author["A"]] == ["same"]

    @pytest.mark.asyncio
    async def test_build_deck_end_to_end(self, github_client: GitHubClient, org: FakeGitHub):
        deck = await build_deck(
            github_client, _members("A", "B", "C"), _repos("api", "web"), rng=random.Random(5)
        )

        assert len(deck) == 15
        assert deck.distribution == {"A": 12, "B": 3}
        assert all(c.author_login in {"A", "B"} for c in deck.commits)

    @pytest.mark.asyncio
    async def test_build_deck_requires_repositories(self, github_client: GitHubClient):
        with pytest.raises(NoRepositoriesSelectedError):
            await build_deck(github_client, _members("A", "B"), [])

    @pytest.mark.asyncio
    async def test_build_deck_insufficient_authors(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        fake_github.branches["acme/api"] = ["main"]
        fake_github.add_commits("acme/api", "main", make_commit("a1", "A"))

        with pytest.raises(InsufficientAuthorsError):
            await build_deck(github_client, _members("A", "B"), _repos("api"))
