"""Quiz session state and its transition function.

A Session is an immutable snapshot. ``transition(session, event)`` builds
the next snapshot and never touches the previous one, so a reader holding
a snapshot never sees a half-applied change.

Phases:
    setup -> loading -> setup (organizations listed)
    setup -> loading -> repo_selection
    repo_selection -> loading -> game
    game -> feedback -> game, or -> loading -> game when the deck runs out
    any failure -> setup (organization-scoped state cleared)
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from src.services.github.models import Commit, Member, Organization, Repository
from src.services.quiz.balancer import Deck
from src.services.quiz.errors import InvalidTransitionError, UnknownMemberError


class Phase(str, Enum):
    """Session phases."""

    SETUP = "setup"
    LOADING = "loading"
    REPO_SELECTION = "repo_selection"
    GAME = "game"
    FEEDBACK = "feedback"


@dataclass(frozen=True)
class Score:
    correct: int = 0
    total: int = 0
    streak: int = 0

    def record(self, is_correct: bool) -> "Score":
        """Return the score after one more answer."""
        return Score(
            correct=self.correct + (1 if is_correct else 0),
            total=self.total + 1,
            streak=self.streak + 1 if is_correct else 0,
        )


@dataclass(frozen=True)
class Guess:
    """The last answer and the truth it was graded against."""

    guessed_login: str
    correct_login: str
    commit: Commit

    @property
    def is_correct(self) -> bool:
        return self.guessed_login == self.correct_login


@dataclass(frozen=True)
class Session:
    """Snapshot of one player's game."""

    credential: str | None = field(default=None, repr=False)
    organizations: tuple[Organization, ...] = ()
    organization: Organization | None = None
    members: tuple[Member, ...] = ()
    repositories: tuple[Repository, ...] = ()
    selected_repositories: tuple[Repository, ...] = ()
    deck: tuple[Commit, ...] = ()
    position: int = 0
    distribution: dict[str, int] = field(default_factory=dict)
    score: Score = field(default_factory=Score)
    phase: Phase = Phase.SETUP
    error: str | None = None
    last_guess: Guess | None = None
    epoch: int = 0

    @property
    def connected(self) -> bool:
        return self.credential is not None

    @property
    def current_commit(self) -> Commit | None:
        if self.phase not in (Phase.GAME, Phase.FEEDBACK):
            return None
        if self.position >= len(self.deck):
            return None
        return self.deck[self.position]

    @property
    def remaining(self) -> int:
        """Deck items left, the current one included."""
        return max(0, len(self.deck) - self.position)

    def is_selected(self, repository: Repository) -> bool:
        return any(r.id == repository.id for r in self.selected_repositories)

    def find_member(self, login: str) -> Member | None:
        return next((m for m in self.members if m.login == login), None)


# ==================== Events ====================


@dataclass(frozen=True)
class LoadingStarted:
    pass


@dataclass(frozen=True)
class Connected:
    credential: str
    organizations: tuple[Organization, ...]


@dataclass(frozen=True)
class OrganizationLoaded:
    organization: Organization
    members: tuple[Member, ...]
    repositories: tuple[Repository, ...]


@dataclass(frozen=True)
class RepositoryToggled:
    repository_id: int


@dataclass(frozen=True)
class AllRepositoriesSelected:
    pass


@dataclass(frozen=True)
class AllRepositoriesDeselected:
    pass


@dataclass(frozen=True)
class DeckLoaded:
    deck: Deck


@dataclass(frozen=True)
class GuessSubmitted:
    login: str


@dataclass(frozen=True)
class Advanced:
    pass


@dataclass(frozen=True)
class Failed:
    """A fatal error: back to setup without organization-scoped state."""

    message: str


@dataclass(frozen=True)
class ValidationFailed:
    """A recoverable input error: phase is kept."""

    message: str


@dataclass(frozen=True)
class Reset:
    pass


Event = (
    LoadingStarted
    | Connected
    | OrganizationLoaded
    | RepositoryToggled
    | AllRepositoriesSelected
    | AllRepositoriesDeselected
    | DeckLoaded
    | GuessSubmitted
    | Advanced
    | Failed
    | ValidationFailed
    | Reset
)


# ==================== Transitions ====================


def _require(session: Session, *phases: Phase) -> None:
    if session.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise InvalidTransitionError(
            f"Not allowed while {session.phase.value} (expected {allowed})"
        )


def _clear_organization(session: Session, **changes) -> Session:
    return replace(
        session,
        organization=None,
        members=(),
        repositories=(),
        selected_repositories=(),
        deck=(),
        position=0,
        distribution={},
        last_guess=None,
        **changes,
    )


def transition(session: Session, event: Event) -> Session:
    """Apply an event and return the next snapshot.

    Raises:
        InvalidTransitionError: The event is not valid in the current phase
        UnknownMemberError: A guess names someone outside the organization
    """
    if isinstance(event, Reset):
        return Session(epoch=session.epoch + 1)

    if isinstance(event, Failed):
        return _clear_organization(session, phase=Phase.SETUP, error=event.message)

    if isinstance(event, ValidationFailed):
        return replace(session, error=event.message)

    if isinstance(event, LoadingStarted):
        _require(session, Phase.SETUP, Phase.REPO_SELECTION)
        return replace(session, phase=Phase.LOADING, error=None)

    if isinstance(event, Connected):
        _require(session, Phase.LOADING)
        return _clear_organization(
            session,
            credential=event.credential,
            organizations=tuple(event.organizations),
            phase=Phase.SETUP,
            error=None,
        )

    if isinstance(event, OrganizationLoaded):
        _require(session, Phase.LOADING)
        repositories = tuple(event.repositories)
        return replace(
            session,
            organization=event.organization,
            members=tuple(event.members),
            repositories=repositories,
            selected_repositories=repositories,
            phase=Phase.REPO_SELECTION,
            error=None,
        )

    if isinstance(event, RepositoryToggled):
        _require(session, Phase.REPO_SELECTION)
        selected_ids = {r.id for r in session.selected_repositories}
        selected_ids ^= {event.repository_id}
        return replace(
            session,
            selected_repositories=tuple(r for r in session.repositories if r.id in selected_ids),
        )

    if isinstance(event, AllRepositoriesSelected):
        _require(session, Phase.REPO_SELECTION)
        return replace(session, selected_repositories=session.repositories)

    if isinstance(event, AllRepositoriesDeselected):
        _require(session, Phase.REPO_SELECTION)
        return replace(session, selected_repositories=())

    if isinstance(event, DeckLoaded):
        _require(session, Phase.LOADING)
        return replace(
            session,
            deck=tuple(event.deck.commits),
            position=0,
            distribution=dict(event.deck.distribution),
            phase=Phase.GAME,
            error=None,
            last_guess=None,
        )

    if isinstance(event, GuessSubmitted):
        _require(session, Phase.GAME)
        commit = session.current_commit
        if commit is None:
            raise InvalidTransitionError("No commit to guess")
        if session.find_member(event.login) is None:
            raise UnknownMemberError(event.login)
        guess = Guess(
            guessed_login=event.login,
            correct_login=commit.author_login or "",
            commit=commit,
        )
        return replace(
            session,
            score=session.score.record(guess.is_correct),
            last_guess=guess,
            phase=Phase.FEEDBACK,
        )

    if isinstance(event, Advanced):
        _require(session, Phase.FEEDBACK)
        next_position = session.position + 1
        if next_position >= len(session.deck):
            # Deck exhausted, the controller rebuilds it
            return replace(session, position=next_position, phase=Phase.LOADING, error=None)
        return replace(session, position=next_position, phase=Phase.GAME, last_guess=None)

    raise TypeError(f"Unknown event: {event!r}")
