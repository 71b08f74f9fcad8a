"""In-memory registry of running games, keyed by opaque session id."""

import logging
import uuid
from collections.abc import Callable

from src.services.quiz.controller import GameController

logger = logging.getLogger(__name__)


class GameRegistry:
    """Holds one GameController per player. Nothing survives a restart."""

    def __init__(self, controller_factory: Callable[[], GameController] = GameController):
        self._controller_factory = controller_factory
        self._games: dict[str, GameController] = {}

    def __len__(self) -> int:
        return len(self._games)

    def create(self) -> tuple[str, GameController]:
        session_id = uuid.uuid4().hex
        controller = self._controller_factory()
        self._games[session_id] = controller
        logger.debug(f"Created game {session_id}")
        return session_id, controller

    def get(self, session_id: str) -> GameController:
        """Look up a game.

        Raises:
            KeyError: Unknown session id
        """
        return self._games[session_id]

    async def discard(self, session_id: str) -> bool:
        controller = self._games.pop(session_id, None)
        if controller is None:
            return False
        await controller.close()
        logger.debug(f"Discarded game {session_id}")
        return True

    async def close_all(self) -> None:
        for session_id in list(self._games):
            await self.discard(session_id)


# Global registry used by the API
game_registry = GameRegistry()


def get_registry() -> GameRegistry:
    """FastAPI dependency returning the global registry."""
    return game_registry
