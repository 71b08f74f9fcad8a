"""GitHub entities used by the quiz.

Only the fields the game needs are kept; everything else in the API
payloads is dropped at parse time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class Organization:
    """A GitHub organization the credential belongs to."""

    id: int
    login: str
    description: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Organization":
        return cls(
            id=data["id"],
            login=data["login"],
            description=data.get("description") or None,
        )


@dataclass(frozen=True)
class Member:
    """An organization member, i.e. a possible answer."""

    id: int
    login: str
    avatar_url: str = ""
    html_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Member":
        return cls(
            id=data["id"],
            login=data["login"],
            avatar_url=data.get("avatar_url") or "",
            html_url=data.get("html_url") or "",
        )


@dataclass(frozen=True)
class Repository:
    """A repository of the organization."""

    id: int
    name: str
    full_name: str  # "org/name"
    private: bool = False
    html_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Repository":
        return cls(
            id=data["id"],
            name=data["name"],
            full_name=data["full_name"],
            private=bool(data.get("private", False)),
            html_url=data.get("html_url") or "",
        )


@dataclass(frozen=True)
class Commit:
    """A commit as returned by the commits listing endpoint.

    ``author_login`` comes from the linked GitHub profile, not from the git
    metadata. It is None when GitHub could not map the commit email to an
    account; such commits cannot be attributed and never reach a deck.
    """

    sha: str
    message: str
    author_name: str = ""
    author_email: str = ""
    authored_at: datetime | None = None
    author_login: str | None = None
    author_avatar_url: str = ""
    html_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Commit":
        commit = data.get("commit") or {}
        git_author = commit.get("author") or {}
        profile = data.get("author") or {}
        sha = data["sha"]
        message = commit.get("message") or ""
        login = profile.get("login")
        if not isinstance(sha, str) or not isinstance(message, str):
            raise TypeError(f"Malformed commit entry: {sha!r}")
        return cls(
            sha=sha,
            message=message,
            author_name=git_author.get("name") or "",
            author_email=git_author.get("email") or "",
            authored_at=_parse_datetime(git_author.get("date")),
            author_login=login if isinstance(login, str) else None,
            author_avatar_url=profile.get("avatar_url") or "",
            html_url=data.get("html_url") or "",
        )

    @property
    def has_author_profile(self) -> bool:
        return bool(self.author_login)
