"""Tests for multi-branch commit collection."""

import logging
from unittest.mock import patch

import httpx
import pytest

from src.services.github.client import GitHubClient, RateLimitedError
from src.services.github.commits import (
    collect_author_commits,
    collect_repository_commits,
    dedupe_commits,
    is_playable,
)
from src.services.github.models import Commit, Repository
from tests.factories import FakeGitHub, make_commit

API = Repository(id=100, name="api", full_name="acme/api")


def _commit(sha: str, login: str | None = "alice", message: str = "Fix bug") -> Commit:
    return Commit.from_api(make_commit(sha, login, message))


class TestFiltering:
    """Tests for dedupe_commits and is_playable."""

    def test_dedupe_keeps_first_occurrence(self):
        first = _commit("x1", message="first")
        duplicate = _commit("x1", message="second")
        other = _commit("x2")

        result = dedupe_commits([first, other, duplicate])

        assert result == [first, other]

    @pytest.mark.parametrize(
        "message",
        ["", "   \n", "Merge pull request #12 from acme/feature", "Merge branch 'main'"],
    )
    def test_rejects_empty_and_merge_messages(self, message: str):
        assert is_playable(_commit("x1", message=message)) is False

    def test_rejects_commit_without_author_profile(self):
        assert is_playable(_commit("x1", login=None)) is False

    def test_rejects_other_author_when_scoped(self):
        commit = _commit("x1", login="bob")
        assert is_playable(commit) is True
        assert is_playable(commit, author_login="alice") is False

    def test_merge_prefix_is_case_sensitive(self):
        """Test that only messages starting with "Merge" count as merges."""
        assert is_playable(_commit("x1", message="merged the two parsers")) is True


class TestCollectAuthorCommits:
    """Tests for collect_author_commits."""

    @pytest.mark.asyncio
    async def test_dedupes_across_branches(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        """Test that a commit reachable from two branches is returned once."""
        fake_github.branches["acme/api"] = ["main", "develop"]
        shared = make_commit("s1", "alice", "Shared history")
        fake_github.add_commits("acme/api", "main", shared, make_commit("m1", "alice", "Main only"))
        fake_github.add_commits("acme/api", "develop", shared, make_commit("d1", "alice", "Dev"))

        commits = await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        shas = [c.sha for c in commits]
        assert sorted(shas) == ["d1", "m1", "s1"]
        assert len(shas) == len(set(shas))

    @pytest.mark.asyncio
    async def test_splits_page_size_across_branches(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        """Test that each branch asks for ceil(hint / branches) commits."""
        fake_github.branches["acme/api"] = ["main", "develop", "release"]

        await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        commit_requests = [r for r in fake_github.requests if r.url.path.endswith("/commits")]
        assert len(commit_requests) == 3
        assert {r.url.params["sha"] for r in commit_requests} == {"main", "develop", "release"}
        assert {r.url.params["per_page"] for r in commit_requests} == {"4"}
        assert {r.url.params["author"] for r in commit_requests} == {"alice"}

    @pytest.mark.asyncio
    async def test_filters_unplayable_commits(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        fake_github.branches["acme/api"] = ["main"]
        fake_github.add_commits(
            "acme/api",
            "main",
            make_commit("ok", "alice", "Add cache"),
            make_commit("merge", "alice", "Merge pull request #1"),
            make_commit("blank", "alice", "  "),
        )

        commits = await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        assert [c.sha for c in commits] == ["ok"]

    @pytest.mark.asyncio
    async def test_guards_against_author_filter_drift(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        """Test that commits GitHub returns for other logins are dropped."""
        fake_github.ignore_author_filter = True
        fake_github.branches["acme/api"] = ["main"]
        fake_github.add_commits(
            "acme/api",
            "main",
            make_commit("a1", "alice"),
            make_commit("b1", "bob"),
            make_commit("g1", None),
        )

        commits = await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        assert [c.sha for c in commits] == ["a1"]

    @pytest.mark.asyncio
    async def test_failing_branch_counts_as_empty(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        """Test that one broken branch does not fail the whole collection."""
        fake_github.branches["acme/api"] = ["main", "broken"]
        fake_github.add_commits("acme/api", "main", make_commit("a1", "alice"))

        fake_github.branch_failures[("acme/api", "broken")] = 409

        commits = await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        assert [c.sha for c in commits] == ["a1"]

    @pytest.mark.asyncio
    async def test_uses_fallback_branches(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        """Test that main and master are tried when branches cannot be listed."""
        fake_github.failures["/repos/acme/api/branches"] = 403
        fake_github.add_commits("acme/api", "master", make_commit("a1", "alice"))

        commits = await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        assert [c.sha for c in commits] == ["a1"]
        branches = {
            r.url.params["sha"] for r in fake_github.requests if r.url.path.endswith("/commits")
        }
        assert branches == {"main", "master"}

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, github_client: GitHubClient, fake_github: FakeGitHub):
        """Test that a 5xx on a branch fetch is retried before giving up."""
        fake_github.branches["acme/api"] = ["main"]
        fake_github.failures["/repos/acme/api/commits"] = 503

        with patch("src.utils.retry.asyncio.sleep") as sleep:
            commits = await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        assert commits == []
        commit_requests = [r for r in fake_github.requests if r.url.path.endswith("/commits")]
        assert len(commit_requests) == 3  # first attempt + 2 retries
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_log_warning(
        self, github_client: GitHubClient, fake_github: FakeGitHub, caplog
    ):
        """Test that giving up on a branch is a warning, not an error."""
        fake_github.branches["acme/api"] = ["main"]
        fake_github.failures["/repos/acme/api/commits"] = 503

        with patch("src.utils.retry.asyncio.sleep"), caplog.at_level(logging.DEBUG):
            await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert any("Giving up on branch main" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_skips_malformed_entries(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        """Test that one bad entry is dropped without losing the rest of the branch."""
        fake_github.branches["acme/api"] = ["main"]
        bad_message = make_commit("x1", "alice")
        bad_message["commit"]["message"] = 42
        bad_sha = make_commit("x2", "alice")
        bad_sha["sha"] = ["not", "a", "sha"]
        fake_github.add_commits(
            "acme/api", "main", bad_message, bad_sha, make_commit("a1", "alice")
        )

        commits = await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        assert [c.sha for c in commits] == ["a1"]

    @pytest.mark.asyncio
    async def test_undecodable_branch_counts_as_empty(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        fake_github.branches["acme/api"] = ["main"]
        fake_github.raises["/repos/acme/api/commits"] = httpx.DecodingError("bad gzip")

        commits = await collect_author_commits(github_client, API, "alice", page_size_hint=10)

        assert commits == []

    @pytest.mark.asyncio
    async def test_redirect_loop_counts_as_empty(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        fake_github.branches["acme/api"] = ["main"]
        fake_github.raises["/repos/acme/api/commits"] = httpx.TooManyRedirects("loop")

        with patch("src.utils.retry.asyncio.sleep"):
            commits = await collect_repository_commits(github_client, API)

        assert commits == []

    @pytest.mark.asyncio
    async def test_never_raises(self, github_client: GitHubClient):
        """Test that unexpected errors degrade to an empty list."""
        with patch(
            "src.services.github.commits.list_branches",
            side_effect=RateLimitedError(),
        ):
            assert await collect_author_commits(github_client, API, "alice") == []


class TestCollectRepositoryCommits:
    """Tests for collect_repository_commits."""

    @pytest.mark.asyncio
    async def test_returns_commits_by_everyone(
        self, github_client: GitHubClient, fake_github: FakeGitHub
    ):
        fake_github.branches["acme/api"] = ["main", "develop"]
        fake_github.add_commits(
            "acme/api", "main", make_commit("a1", "alice"), make_commit("b1", "bob")
        )
        fake_github.add_commits(
            "acme/api", "develop", make_commit("b1", "bob"), make_commit("g1", None)
        )

        commits = await collect_repository_commits(github_client, API, page_size_hint=30)

        assert sorted(c.sha for c in commits) == ["a1", "b1"]
        commit_requests = [r for r in fake_github.requests if r.url.path.endswith("/commits")]
        assert all("author" not in r.url.params for r in commit_requests)
        assert {r.url.params["per_page"] for r in commit_requests} == {"15"}

    @pytest.mark.asyncio
    async def test_empty_repository(self, github_client: GitHubClient, fake_github: FakeGitHub):
        fake_github.branches["acme/api"] = ["main"]

        assert await collect_repository_commits(github_client, API) == []
