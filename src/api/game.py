"""Game API endpoints.

Every route returns the session snapshot after the operation. Failures
from GitHub or from validation are reported in ``snapshot.error``; only
misuse (wrong phase, unknown member or session) becomes an HTTP error.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.models.schemas import (
    ConnectRequest,
    GameCreated,
    GuessRequest,
    OrganizationSelect,
    SessionSnapshot,
)
from src.services.quiz.controller import GameController
from src.services.quiz.errors import InvalidTransitionError, UnknownMemberError
from src.services.quiz.registry import GameRegistry, get_registry

router = APIRouter()
logger = logging.getLogger(__name__)


def get_game(
    session_id: str,
    registry: Annotated[GameRegistry, Depends(get_registry)],
) -> GameController:
    """Resolve the controller for a session id."""
    try:
        return registry.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Game not found")


Game = Annotated[GameController, Depends(get_game)]


def _snapshot(game: GameController) -> SessionSnapshot:
    return SessionSnapshot.from_session(game.session)


# ==================== Sessions ====================


@router.post("", response_model=GameCreated, status_code=201)
async def create_game(
    registry: Annotated[GameRegistry, Depends(get_registry)],
) -> GameCreated:
    """Start a fresh game in the setup phase."""
    session_id, game = registry.create()
    return GameCreated(session_id=session_id, session=_snapshot(game))


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_game_state(game: Game) -> SessionSnapshot:
    """Get the current snapshot."""
    return _snapshot(game)


@router.delete("/{session_id}")
async def delete_game(
    session_id: str,
    registry: Annotated[GameRegistry, Depends(get_registry)],
) -> dict[str, str]:
    """Discard a game and its in-memory state."""
    if not await registry.discard(session_id):
        raise HTTPException(status_code=404, detail="Game not found")
    return {"status": "deleted"}


# ==================== Setup ====================


@router.post("/{session_id}/connect", response_model=SessionSnapshot)
async def connect(request: ConnectRequest, game: Game) -> SessionSnapshot:
    """Connect with a GitHub token and list organizations."""
    try:
        await game.connect(request.token)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(game)


@router.post("/{session_id}/organization", response_model=SessionSnapshot)
async def select_organization(request: OrganizationSelect, game: Game) -> SessionSnapshot:
    """Pick an organization and load its members and repositories."""
    try:
        await game.select_organization(request.login)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(game)


# ==================== Repository selection ====================


@router.post("/{session_id}/repositories/select-all", response_model=SessionSnapshot)
async def select_all_repositories(game: Game) -> SessionSnapshot:
    try:
        game.select_all_repositories()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(game)


@router.post("/{session_id}/repositories/deselect-all", response_model=SessionSnapshot)
async def deselect_all_repositories(game: Game) -> SessionSnapshot:
    try:
        game.deselect_all_repositories()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(game)


@router.post("/{session_id}/repositories/{repository_id}/toggle", response_model=SessionSnapshot)
async def toggle_repository(repository_id: int, game: Game) -> SessionSnapshot:
    try:
        game.toggle_repository(repository_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Repository not found")
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(game)


# ==================== Game ====================


@router.post("/{session_id}/start", response_model=SessionSnapshot)
async def start_game(game: Game) -> SessionSnapshot:
    """Build a deck from the selected repositories and start guessing."""
    try:
        await game.start_game()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(game)


@router.post("/{session_id}/guess", response_model=SessionSnapshot)
async def submit_guess(request: GuessRequest, game: Game) -> SessionSnapshot:
    """Guess the author of the current commit."""
    try:
        await game.submit_guess(request.login)
    except UnknownMemberError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(game)


@router.post("/{session_id}/advance", response_model=SessionSnapshot)
async def advance(game: Game) -> SessionSnapshot:
    """Leave feedback now instead of waiting for the automatic advance."""
    try:
        await game.advance()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _snapshot(game)


@router.post("/{session_id}/reset", response_model=SessionSnapshot)
async def reset(game: Game) -> SessionSnapshot:
    """Forget the token and everything loaded with it."""
    game.reset()
    return _snapshot(game)
