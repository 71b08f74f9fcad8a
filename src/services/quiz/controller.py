"""Game orchestration.

GameController owns the only mutable state in the quiz: a reference to
the current Session snapshot, swapped whole after every transition. Each
operation that awaits the network remembers the epoch it started in and
drops its result if a reset happened meanwhile.
"""

import asyncio
import logging
import random
from collections.abc import Callable

from src.config import get_settings
from src.constants import MIN_MEMBERS
from src.services.github.client import GitHubClient, GitHubError
from src.services.github.directory import list_members, list_organizations, list_repositories
from src.services.quiz.balancer import BalancePolicy, build_deck
from src.services.quiz.errors import (
    InsufficientMembersError,
    InsufficientOrganizationsError,
    InsufficientRepositoriesError,
    InvalidTransitionError,
    MissingCredentialError,
    NoRepositoriesSelectedError,
    QuizError,
)
from src.services.quiz.session import (
    Advanced,
    AllRepositoriesDeselected,
    AllRepositoriesSelected,
    Connected,
    DeckLoaded,
    Event,
    Failed,
    GuessSubmitted,
    LoadingStarted,
    OrganizationLoaded,
    Phase,
    RepositoryToggled,
    Reset,
    Session,
    ValidationFailed,
    transition,
)

logger = logging.getLogger(__name__)

_USE_SETTINGS = object()
UNEXPECTED_ERROR_MESSAGE = "Something went wrong while talking to GitHub. Please try again."


class GameController:
    """Drives one player's session through its phases.

    Usage:
        game = GameController()
        await game.connect("ghp_...")
        await game.select_organization("acme")
        await game.start_game()
        session = await game.submit_guess("octocat")
    """

    def __init__(
        self,
        client_factory: Callable[[str], GitHubClient] = GitHubClient,
        policy: BalancePolicy | None = None,
        feedback_delay: float | None | object = _USE_SETTINGS,
        rng: random.Random | None = None,
    ):
        """Initialize controller.

        Args:
            client_factory: Builds a GitHub client from a credential
            policy: Deck balancing policy (defaults to settings)
            feedback_delay: Seconds before feedback auto-advances; None
                disables the automatic advance
            rng: Random source for deck shuffling
        """
        self._client_factory = client_factory
        self._policy = policy
        self._rng = rng
        if feedback_delay is _USE_SETTINGS:
            feedback_delay = get_settings().feedback_delay_seconds
        self._feedback_delay = feedback_delay
        self._session = Session()
        self._advance_task: asyncio.Task | None = None

    @property
    def session(self) -> Session:
        """Latest snapshot."""
        return self._session

    @property
    def advance_task(self) -> asyncio.Task | None:
        """Pending feedback continuation, if any."""
        return self._advance_task

    def _apply(self, event: Event) -> Session:
        self._session = transition(self._session, event)
        return self._session

    def _is_current(self, epoch: int) -> bool:
        return self._session.epoch == epoch

    def _fail_unexpected(self, epoch: int) -> Session:
        # Never leave the session parked in loading
        if self._is_current(epoch):
            self._apply(Failed(UNEXPECTED_ERROR_MESSAGE))
        return self._session

    def _client(self) -> GitHubClient:
        if self._session.credential is None:
            raise InvalidTransitionError("Connect to GitHub first")
        return self._client_factory(self._session.credential)

    # ==================== Setup ====================

    async def connect(self, credential: str) -> Session:
        """Validate a token and list its organizations."""
        if not credential or not credential.strip():
            return self._apply(ValidationFailed(str(MissingCredentialError())))

        epoch = self._session.epoch
        self._apply(LoadingStarted())

        try:
            organizations = await list_organizations(self._client_factory(credential))
            if not organizations:
                raise InsufficientOrganizationsError()
        except (GitHubError, QuizError) as e:
            if self._is_current(epoch):
                logger.warning(f"Connect failed: {e}")
                self._apply(Failed(str(e)))
            return self._session
        except Exception:
            logger.exception("Unexpected error while connecting")
            return self._fail_unexpected(epoch)

        if not self._is_current(epoch):
            logger.debug("Discarding stale connect result")
            return self._session

        logger.info(f"Connected to GitHub, {len(organizations)} organization(s) available")
        return self._apply(Connected(credential=credential, organizations=tuple(organizations)))

    async def select_organization(self, login: str) -> Session:
        """Load members and repositories of one of the listed organizations."""
        organization = next(
            (org for org in self._session.organizations if org.login == login), None
        )
        if organization is None:
            raise InvalidTransitionError(f"Unknown organization: {login}")

        client = self._client()
        epoch = self._session.epoch
        self._apply(LoadingStarted())

        try:
            members, repositories = await asyncio.gather(
                list_members(client, organization.login),
                list_repositories(client, organization.login),
            )
            if len(members) < MIN_MEMBERS:
                raise InsufficientMembersError()
            if not repositories:
                raise InsufficientRepositoriesError()
        except (GitHubError, QuizError) as e:
            if self._is_current(epoch):
                logger.warning(f"Loading organization {login} failed: {e}")
                self._apply(Failed(str(e)))
            return self._session
        except Exception:
            logger.exception(f"Unexpected error while loading organization {login}")
            return self._fail_unexpected(epoch)

        if not self._is_current(epoch):
            logger.debug(f"Discarding stale result for organization {login}")
            return self._session

        logger.info(
            f"Loaded {organization.login}: {len(members)} members, "
            f"{len(repositories)} repositories"
        )
        return self._apply(
            OrganizationLoaded(
                organization=organization,
                members=tuple(members),
                repositories=tuple(repositories),
            )
        )

    # ==================== Repository selection ====================

    def toggle_repository(self, repository_id: int) -> Session:
        if self._session.phase != Phase.REPO_SELECTION:
            raise InvalidTransitionError(
                f"Cannot toggle repositories during {self._session.phase.value}"
            )
        if not any(r.id == repository_id for r in self._session.repositories):
            raise KeyError(repository_id)
        return self._apply(RepositoryToggled(repository_id))

    def select_all_repositories(self) -> Session:
        return self._apply(AllRepositoriesSelected())

    def deselect_all_repositories(self) -> Session:
        return self._apply(AllRepositoriesDeselected())

    # ==================== Game ====================

    async def start_game(self) -> Session:
        """Build the first deck from the selected repositories."""
        if self._session.phase != Phase.REPO_SELECTION:
            raise InvalidTransitionError("Select repositories before starting")
        if not self._session.selected_repositories:
            return self._apply(ValidationFailed(str(NoRepositoriesSelectedError())))

        self._apply(LoadingStarted())
        return await self._load_deck(self._session.epoch)

    async def _load_deck(self, epoch: int) -> Session:
        session = self._session
        try:
            deck = await build_deck(
                self._client(),
                session.members,
                session.selected_repositories,
                policy=self._policy,
                rng=self._rng,
            )
        except (GitHubError, QuizError) as e:
            if self._is_current(epoch):
                logger.warning(f"Building deck failed: {e}")
                self._apply(Failed(str(e)))
            return self._session
        except Exception:
            logger.exception("Unexpected error while building deck")
            return self._fail_unexpected(epoch)

        if not self._is_current(epoch):
            logger.debug("Discarding stale deck")
            return self._session

        return self._apply(DeckLoaded(deck))

    async def submit_guess(self, login: str) -> Session:
        """Grade a guess for the current commit and schedule the next one."""
        session = self._apply(GuessSubmitted(login))

        if self._feedback_delay is not None:
            self._advance_task = asyncio.create_task(
                self._advance_later(session.epoch, session.score.total),
                name="feedback_advance",
            )
        return session

    async def _advance_later(self, epoch: int, guesses: int) -> None:
        await asyncio.sleep(self._feedback_delay)
        # Re-read the latest snapshot; the player may have reset or moved on
        session = self._session
        if (
            session.epoch != epoch
            or session.phase != Phase.FEEDBACK
            or session.score.total != guesses
        ):
            return
        await self.advance()

    async def advance(self) -> Session:
        """Move past feedback, rebuilding the deck when it is exhausted."""
        session = self._apply(Advanced())
        if session.phase == Phase.LOADING:
            logger.info("Deck exhausted, rebuilding")
            return await self._load_deck(session.epoch)
        return session

    # ==================== Lifecycle ====================

    def reset(self) -> Session:
        """Forget everything, credential included."""
        self._cancel_pending()
        return self._apply(Reset())

    def _cancel_pending(self) -> None:
        task = self._advance_task
        self._advance_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def close(self) -> None:
        """Cancel the pending feedback continuation and wait for it to stop."""
        task = self._advance_task
        self._cancel_pending()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
