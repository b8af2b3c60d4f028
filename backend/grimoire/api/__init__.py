"""API routes."""

from .folders import router as folders_router
from .spells import router as spells_router
from .characters import router as characters_router

__all__ = [
    "folders_router",
    "spells_router",
    "characters_router",
]
