"""Data access repositories."""

from .base import BaseRepository
from .interfaces import FolderStore, SpellStore, CharacterStore
from .folder_repository import FolderRepository
from .spell_repository import SpellRepository
from .character_repository import CharacterRepository
from .memory import (
    InMemoryStore,
    InMemoryFolderRepository,
    InMemorySpellRepository,
    InMemoryCharacterRepository,
)

__all__ = [
    "BaseRepository",
    "FolderStore",
    "SpellStore",
    "CharacterStore",
    "FolderRepository",
    "SpellRepository",
    "CharacterRepository",
    "InMemoryStore",
    "InMemoryFolderRepository",
    "InMemorySpellRepository",
    "InMemoryCharacterRepository",
]
