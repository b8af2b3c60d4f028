"""Spell catalog operations."""

import logging
import uuid
from typing import List, Optional

from ..exceptions import FolderNotFoundError, SpellNotFoundError, ValidationError
from ..repositories.interfaces import FolderStore, SpellStore
from ..schemas.spell import SpellCreate, SpellUpdate
from .character_service import is_eligible

logger = logging.getLogger(__name__)


class SpellService:
    """CRUD, search, placement and import for spells."""

    def __init__(self, spell_repo: SpellStore, folder_repo: FolderStore):
        self.spell_repo = spell_repo
        self.folder_repo = folder_repo

    def _require_spell(self, spell_id: str):
        spell = self.spell_repo.find_by_id(spell_id)
        if spell is None:
            raise SpellNotFoundError(spell_id)
        return spell

    def _require_folder(self, folder_id: int) -> None:
        if not self.folder_repo.exists(folder_id):
            raise FolderNotFoundError(folder_id)

    def list_spells(self, folder_id: Optional[int] = None, convocation: Optional[str] = None) -> List:
        return self.spell_repo.list_all(folder_id=folder_id, convocation=convocation)

    def get_spell(self, spell_id: str):
        return self._require_spell(spell_id)

    def search_spells(self, query: str) -> List:
        query = query.strip()
        if not query:
            return []
        return self.spell_repo.search(query)

    def create_spell(self, data: SpellCreate):
        self._require_folder(data.folder_id)
        values = data.model_dump(mode="json")
        values["id"] = str(uuid.uuid4())
        spell = self.spell_repo.create(values)
        logger.info(
            "Spell created",
            extra={"spell_id": spell.id, "folder_id": spell.folder_id, "convocation": spell.convocation},
        )
        return spell

    def update_spell(self, spell_id: str, data: SpellUpdate):
        """Apply a partial update.

        A convocation change is refused while a character that could not
        learn the new convocation already knows the spell.
        """
        self._require_spell(spell_id)
        changes = data.model_dump(mode="json", exclude_unset=True)
        changes = {key: value for key, value in changes.items() if value is not None}

        if "folder_id" in changes:
            self._require_folder(changes["folder_id"])

        if "convocation" in changes:
            blocked = [
                character for character in self.spell_repo.characters_knowing(spell_id)
                if not is_eligible(character.convocations, changes["convocation"])
            ]
            if blocked:
                raise ValidationError(
                    f"Cannot change convocation to {changes['convocation']}: known by "
                    + ", ".join(character.name for character in blocked),
                    field="convocation",
                    details={"character_ids": [character.id for character in blocked]},
                )

        spell = self.spell_repo.update(spell_id, changes)
        logger.info("Spell updated", extra={"spell_id": spell_id, "fields": sorted(changes)})
        return spell

    def delete_spell(self, spell_id: str) -> None:
        self._require_spell(spell_id)
        self.spell_repo.delete(spell_id)
        logger.info("Spell deleted", extra={"spell_id": spell_id})

    def move_spell(self, spell_id: str, folder_id: int):
        spell = self._require_spell(spell_id)
        self._require_folder(folder_id)
        if spell.folder_id == folder_id:
            return spell
        moved = self.spell_repo.update(spell_id, {"folder_id": folder_id})
        logger.info(
            "Spell moved",
            extra={"spell_id": spell_id, "old_folder_id": spell.folder_id, "folder_id": folder_id},
        )
        return moved

    def move_spells_to_folder(self, from_folder_id: int, to_folder_id: int) -> int:
        """Move every spell directly in one folder into another; returns the count."""
        if not self.folder_repo.exists(from_folder_id):
            raise FolderNotFoundError(from_folder_id, message="Source folder not found")
        if not self.folder_repo.exists(to_folder_id):
            raise FolderNotFoundError(to_folder_id, message="Target folder not found")

        moved = self.spell_repo.move_spells_to_folder(from_folder_id, to_folder_id)
        logger.info(
            "Spells moved between folders",
            extra={"old_folder_id": from_folder_id, "folder_id": to_folder_id, "moved": moved},
        )
        return moved

    def import_spells(self, items: List[SpellCreate]) -> List:
        """Insert a batch of spells in one transaction.

        Every target folder is checked before anything is written.
        """
        for folder_id in dict.fromkeys(item.folder_id for item in items):
            self._require_folder(folder_id)

        rows = []
        for item in items:
            values = item.model_dump(mode="json")
            values["id"] = str(uuid.uuid4())
            rows.append(values)

        spells = self.spell_repo.create_many(rows) if rows else []
        logger.info("Spells imported", extra={"imported": len(spells)})
        return spells
