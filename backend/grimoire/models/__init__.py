"""Database models."""

from .enums import Convocation, CharacterRank, DeleteStrategy
from .folder import Folder
from .spell import Spell
from .character import Character, character_spells

__all__ = [
    "Convocation", "CharacterRank", "DeleteStrategy",
    "Folder", "Spell", "Character", "character_spells",
]
