"""API models."""

from src.models.schemas import (
    ConnectRequest,
    GameCreated,
    GuessRequest,
    OrganizationSelect,
    SessionSnapshot,
)

__all__ = [
    "ConnectRequest",
    "GameCreated",
    "GuessRequest",
    "OrganizationSelect",
    "SessionSnapshot",
]
