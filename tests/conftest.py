"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.constants import GITHUB_SERVICE
from src.main import app
from src.services.github.client import GitHubClient
from src.services.quiz.controller import GameController
from src.services.quiz.registry import GameRegistry, get_registry
from src.utils.rate_limiter import RateLimitConfig, rate_limiter
from tests.factories import TEST_TOKEN, FakeGitHub, make_commit, make_member, make_repo


@pytest.fixture(autouse=True)
def unthrottled_github():
    """Let tests hit the fake API as fast as they like."""
    rate_limiter.configure(GITHUB_SERVICE, RateLimitConfig(requests_per_second=0))


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest_asyncio.fixture
async def http_client(fake_github: FakeGitHub) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler)) as client:
        yield client


@pytest.fixture
def github_client(http_client: httpx.AsyncClient) -> GitHubClient:
    return GitHubClient(TEST_TOKEN, http_client=http_client)


@pytest.fixture
def client_factory(http_client: httpx.AsyncClient):
    def factory(token: str) -> GitHubClient:
        return GitHubClient(token, http_client=http_client)

    return factory


@pytest.fixture
def seeded_github(fake_github: FakeGitHub) -> FakeGitHub:
    """Organization acme: alice and bob commit, carol never does."""
    fake_github.orgs = [{"id": 1, "login": "acme", "description": "Acme Corp"}]
    fake_github.members["acme"] = [
        make_member(10, "alice"),
        make_member(11, "bob"),
        make_member(12, "carol"),
    ]
    fake_github.repos["acme"] = [make_repo(100, "api"), make_repo(101, "web")]
    fake_github.branches["acme/api"] = ["main"]
    fake_github.branches["acme/web"] = ["main"]
    fake_github.add_commits(
        "acme/api",
        "main",
        make_commit("a1", "alice", "Add login endpoint"),
        make_commit("b1", "bob", "Tidy README"),
    )
    fake_github.add_commits(
        "acme/web",
        "main",
        make_commit("a2", "alice", "Fix navbar overflow"),
        make_commit("b2", "bob", "Bump dependencies"),
    )
    return fake_github


@pytest_asyncio.fixture
async def api_client(client_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose games talk to the fake GitHub."""
    registry = GameRegistry(
        controller_factory=lambda: GameController(
            client_factory=client_factory, feedback_delay=None
        )
    )
    app.dependency_overrides[get_registry] = lambda: registry

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    await registry.close_all()
    app.dependency_overrides.clear()
