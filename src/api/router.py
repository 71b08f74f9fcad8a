"""Main API router."""

from fastapi import APIRouter

from src.api.game import router as game_router

api_router = APIRouter(prefix="/api")

api_router.include_router(game_router, prefix="/games", tags=["games"])
