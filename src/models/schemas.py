"""Pydantic schemas for API validation and serialization."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.services.github.models import Commit, Member, Organization, Repository
from src.services.quiz.session import Guess, Phase, Session


# Request schemas
class ConnectRequest(BaseModel):
    """Request to connect with a GitHub token."""

    token: str = Field(..., description="GitHub personal access token (read:org, repo)")


class OrganizationSelect(BaseModel):
    """Request to pick an organization."""

    login: str = Field(..., min_length=1, description="Organization login")


class GuessRequest(BaseModel):
    """Request to guess the author of the current commit."""

    login: str = Field(..., min_length=1, description="Login of the guessed member")


# Entity schemas
class OrganizationRead(BaseModel):
    id: int
    login: str
    description: str | None = None

    @classmethod
    def from_entity(cls, org: Organization) -> "OrganizationRead":
        return cls(id=org.id, login=org.login, description=org.description)


class MemberRead(BaseModel):
    id: int
    login: str
    avatar_url: str
    html_url: str

    @classmethod
    def from_entity(cls, member: Member) -> "MemberRead":
        return cls(
            id=member.id,
            login=member.login,
            avatar_url=member.avatar_url,
            html_url=member.html_url,
        )


class RepositoryRead(BaseModel):
    id: int
    name: str
    full_name: str
    private: bool
    html_url: str
    selected: bool = False

    @classmethod
    def from_entity(cls, repo: Repository, selected: bool) -> "RepositoryRead":
        return cls(
            id=repo.id,
            name=repo.name,
            full_name=repo.full_name,
            private=repo.private,
            html_url=repo.html_url,
            selected=selected,
        )


class CommitQuestion(BaseModel):
    """A commit as shown while guessing: nothing that names the author."""

    sha: str
    message: str

    @classmethod
    def from_entity(cls, commit: Commit) -> "CommitQuestion":
        return cls(sha=commit.sha, message=commit.message)


class CommitReveal(CommitQuestion):
    """A commit after grading, with its authorship."""

    author_login: str | None
    author_name: str
    author_avatar_url: str
    authored_at: datetime | None = None
    html_url: str

    @classmethod
    def from_entity(cls, commit: Commit) -> "CommitReveal":
        return cls(
            sha=commit.sha,
            message=commit.message,
            author_login=commit.author_login,
            author_name=commit.author_name,
            author_avatar_url=commit.author_avatar_url,
            authored_at=commit.authored_at,
            html_url=commit.html_url,
        )


class ScoreRead(BaseModel):
    correct: int
    total: int
    streak: int


class GuessRead(BaseModel):
    guessed_login: str
    correct_login: str
    is_correct: bool
    commit: CommitReveal

    @classmethod
    def from_entity(cls, guess: Guess) -> "GuessRead":
        return cls(
            guessed_login=guess.guessed_login,
            correct_login=guess.correct_login,
            is_correct=guess.is_correct,
            commit=CommitReveal.from_entity(guess.commit),
        )


class SessionSnapshot(BaseModel):
    """Everything a client needs to render the current phase.

    The GitHub token is never part of a snapshot.
    """

    phase: Phase
    error: str | None = None
    connected: bool
    organizations: list[OrganizationRead] = []
    organization: OrganizationRead | None = None
    members: list[MemberRead] = []
    repositories: list[RepositoryRead] = []
    selected_count: int = 0
    current_commit: CommitQuestion | None = None
    remaining: int = 0
    distribution: dict[str, int] = {}
    score: ScoreRead
    last_guess: GuessRead | None = None

    @classmethod
    def from_session(cls, session: Session) -> "SessionSnapshot":
        commit = session.current_commit
        return cls(
            phase=session.phase,
            error=session.error,
            connected=session.connected,
            organizations=[OrganizationRead.from_entity(o) for o in session.organizations],
            organization=(
                OrganizationRead.from_entity(session.organization)
                if session.organization
                else None
            ),
            members=[MemberRead.from_entity(m) for m in session.members],
            repositories=[
                RepositoryRead.from_entity(r, session.is_selected(r))
                for r in session.repositories
            ],
            selected_count=len(session.selected_repositories),
            current_commit=CommitQuestion.from_entity(commit) if commit else None,
            remaining=session.remaining,
            distribution=dict(session.distribution),
            score=ScoreRead(
                correct=session.score.correct,
                total=session.score.total,
                streak=session.score.streak,
            ),
            last_guess=(
                GuessRead.from_entity(session.last_guess) if session.last_guess else None
            ),
        )


class GameCreated(BaseModel):
    session_id: str
    session: SessionSnapshot
