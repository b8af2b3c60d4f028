"""Per-request service construction.

Each request gets repositories bound to its own SQLAlchemy session; the
services receive them explicitly.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..repositories import CharacterRepository, FolderRepository, SpellRepository
from ..services import CharacterService, FolderService, SpellService


def get_folder_service(db: Session = Depends(get_db)) -> FolderService:
    return FolderService(FolderRepository(db), SpellRepository(db))


def get_spell_service(db: Session = Depends(get_db)) -> SpellService:
    return SpellService(SpellRepository(db), FolderRepository(db))


def get_character_service(db: Session = Depends(get_db)) -> CharacterService:
    return CharacterService(CharacterRepository(db), SpellRepository(db))
