"""GitHub REST API client.

Thin authenticated GET transport. Status codes are mapped to typed errors
here; retry policy is left to callers.
Documentation: https://docs.github.com/en/rest
"""

import logging
from typing import Any

import httpx

from src.config import get_settings
from src.constants import GITHUB_SERVICE
from src.utils.http_client import get_github_client
from src.utils.rate_limiter import rate_limiter

logger = logging.getLogger(__name__)


class GitHubError(Exception):
    """Base exception for GitHub API errors."""

    pass


class InvalidCredentialError(GitHubError):
    """The token was rejected (401)."""

    def __init__(self, message: str = "Invalid GitHub token. Please check your token and try again."):
        super().__init__(message)


class RateLimitedError(GitHubError):
    """Rate limit exceeded or access forbidden (403)."""

    def __init__(self, message: str = "Rate limit exceeded. Please wait a moment and try again."):
        super().__init__(message)


class RemoteError(GitHubError):
    """Any other non-2xx response."""

    def __init__(self, status: int, reason: str = ""):
        self.status = status
        self.reason = reason
        super().__init__(f"GitHub API error: {status} {reason}".rstrip())


class DecodeError(GitHubError):
    """The response body was not the JSON we expected."""

    pass


class GitHubConnectionError(GitHubError):
    """Network failure or timeout talking to GitHub."""

    pass


class GitHubClient:
    """Client for the GitHub REST API.

    Usage:
        client = GitHubClient(token="ghp_...")
        orgs = await client.get("/user/orgs")
        commits = await client.get(
            "/repos/acme/api/commits", params={"sha": "main", "per_page": 10}
        )
    """

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize GitHub client.

        Args:
            token: Personal access token, forwarded verbatim
            base_url: API root (defaults to settings.github_api_url)
            http_client: Client to send requests with (defaults to the shared pool)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self._token = token
        self._http_client = http_client
        self._headers = {
            "Authorization": f"token {token}",
            "Accept": settings.github_accept,
            "User-Agent": settings.github_user_agent,
        }

    def __repr__(self) -> str:
        return f"GitHubClient(base_url={self.base_url!r})"

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Make an authenticated GET request.

        Args:
            path: API path starting with "/" (e.g. "/user/orgs")
            params: Query parameters

        Returns:
            Decoded JSON value

        Raises:
            InvalidCredentialError: On 401
            RateLimitedError: On 403
            RemoteError: On any other non-2xx status
            DecodeError: On a malformed JSON or undecodable body
            GitHubConnectionError: On connection errors, timeouts and any
                other httpx request failure (e.g. too many redirects)
        """
        url = f"{self.base_url}{path}"
        client = self._http_client or get_github_client()

        await rate_limiter.acquire(GITHUB_SERVICE)

        try:
            response = await client.get(url, headers=self._headers, params=params)
        except httpx.TimeoutException as e:
            raise GitHubConnectionError(f"Connection timeout: {e}") from e
        except httpx.TransportError as e:
            raise GitHubConnectionError(f"Cannot connect to GitHub: {e}") from e
        except httpx.DecodingError as e:
            raise DecodeError(f"Undecodable response body from {path}: {e}") from e
        except httpx.HTTPError as e:
            raise GitHubConnectionError(f"Request to GitHub failed: {e}") from e

        if response.status_code == 401:
            raise InvalidCredentialError()

        if response.status_code == 403:
            raise RateLimitedError()

        if not response.is_success:
            raise RemoteError(response.status_code, response.reason_phrase)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Malformed JSON from {path}: {e}") from e
