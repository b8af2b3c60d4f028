"""Pydantic schemas for API validation."""

from .folder import (
    FolderCreate,
    FolderRenameRequest,
    FolderMoveRequest,
    FolderResponse,
    FolderWithPath,
    FolderTreeNode,
    FolderContents,
    FolderCreatedResponse,
    FolderOperationResult,
)
from .spell import (
    BonusEffect,
    SpellCreate,
    SpellUpdate,
    SpellMoveRequest,
    SpellImportRequest,
    SpellResponse,
    SpellImportResult,
)
from .character import (
    CharacterCreate,
    CharacterUpdate,
    CharacterResponse,
    AddSpellRequest,
    CharacterImport,
    CharacterImportRequest,
    CharacterImportResult,
)

__all__ = [
    "FolderCreate",
    "FolderRenameRequest",
    "FolderMoveRequest",
    "FolderResponse",
    "FolderWithPath",
    "FolderTreeNode",
    "FolderContents",
    "FolderCreatedResponse",
    "FolderOperationResult",
    "BonusEffect",
    "SpellCreate",
    "SpellUpdate",
    "SpellMoveRequest",
    "SpellImportRequest",
    "SpellResponse",
    "SpellImportResult",
    "CharacterCreate",
    "CharacterUpdate",
    "CharacterResponse",
    "AddSpellRequest",
    "CharacterImport",
    "CharacterImportRequest",
    "CharacterImportResult",
]
