"""Commit attribution quiz.

Turns per-author commit samples into a balanced deck and runs the game
loop over it:
- Deck balancing (per-author cap, round-robin interleave, shuffle)
- Immutable session snapshots and their transition function
- A controller that performs the network calls and replenishes the deck

Usage:
    from src.services.quiz import GameController

    game = GameController()
    await game.connect(token)
    await game.select_organization("acme")
    session = await game.start_game()
"""

from src.services.quiz.balancer import (
    BalancePolicy,
    Deck,
    balance_deck,
    build_deck,
    collect_commits_by_author,
    compute_distribution,
)
from src.services.quiz.controller import GameController
from src.services.quiz.errors import (
    InsufficientAuthorsError,
    InsufficientMembersError,
    InsufficientOrganizationsError,
    InsufficientRepositoriesError,
    InvalidTransitionError,
    MissingCredentialError,
    NoRepositoriesSelectedError,
    QuizError,
    UnknownMemberError,
)
from src.services.quiz.registry import GameRegistry, game_registry, get_registry
from src.services.quiz.session import Guess, Phase, Score, Session, transition

__all__ = [
    # Balancer
    "BalancePolicy",
    "Deck",
    "balance_deck",
    "build_deck",
    "collect_commits_by_author",
    "compute_distribution",
    # Session
    "Guess",
    "Phase",
    "Score",
    "Session",
    "transition",
    # Controller
    "GameController",
    "GameRegistry",
    "game_registry",
    "get_registry",
    # Errors
    "QuizError",
    "MissingCredentialError",
    "InsufficientOrganizationsError",
    "InsufficientMembersError",
    "InsufficientRepositoriesError",
    "InsufficientAuthorsError",
    "NoRepositoriesSelectedError",
    "UnknownMemberError",
    "InvalidTransitionError",
]
