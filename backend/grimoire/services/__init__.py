"""Business logic services."""

from .character_service import CharacterService, can_learn, is_eligible
from .folder_service import FolderService
from .spell_service import SpellService

__all__ = ["CharacterService", "FolderService", "SpellService", "can_learn", "is_eligible"]
