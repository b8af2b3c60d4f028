"""Spell repository for database operations."""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, or_

from ..exceptions import SpellNotFoundError
from ..models import Character, Spell, character_spells
from .base import BaseRepository


class SpellRepository(BaseRepository[Spell]):
    """Repository for spell CRUD operations."""

    model_class = Spell
    not_found_error = SpellNotFoundError

    def list_all(self, folder_id: Optional[int] = None, convocation: Optional[str] = None) -> List[Spell]:
        query = self.db.query(Spell)
        if folder_id is not None:
            query = query.filter(Spell.folder_id == folder_id)
        if convocation is not None:
            query = query.filter(Spell.convocation == convocation)
        return query.order_by(Spell.name, Spell.id).all()

    def find_by_id(self, spell_id: str) -> Optional[Spell]:
        return self.get_by_id_optional(spell_id)

    def find_by_ids(self, spell_ids: Iterable[str]) -> List[Spell]:
        """Batched lookup; unknown ids are skipped."""
        ids = list(dict.fromkeys(spell_ids))
        if not ids:
            return []
        return self.db.query(Spell).filter(Spell.id.in_(ids)).order_by(Spell.name, Spell.id).all()

    def find_by_folder_id(self, folder_id: int) -> List[Spell]:
        return self.list_all(folder_id=folder_id)

    def find_by_names(self, names: Iterable[str]) -> List[Spell]:
        """Case-insensitive exact name match."""
        lowered = {name.lower() for name in names if name}
        if not lowered:
            return []
        return (
            self.db.query(Spell)
            .filter(func.lower(Spell.name).in_(lowered))
            .order_by(Spell.name, Spell.id)
            .all()
        )

    def search(self, query: str) -> List[Spell]:
        pattern = f"%{query}%"
        return (
            self.db.query(Spell)
            .filter(or_(
                Spell.name.ilike(pattern),
                Spell.description.ilike(pattern),
                Spell.convocation.ilike(pattern),
            ))
            .order_by(Spell.name, Spell.id)
            .all()
        )

    def create(self, values: Dict[str, Any]) -> Spell:
        spell = Spell(**values)
        self.db.add(spell)
        self.db.commit()
        self.db.refresh(spell)
        return spell

    def create_many(self, rows: List[Dict[str, Any]]) -> List[Spell]:
        """Insert every row or none of them."""
        spells = [Spell(**values) for values in rows]
        with self._atomic():
            self.db.add_all(spells)
        for spell in spells:
            self.db.refresh(spell)
        return spells

    def update(self, spell_id: str, changes: Dict[str, Any]) -> Spell:
        spell = self.get_by_id(spell_id)
        for key, value in changes.items():
            setattr(spell, key, value)
        self.db.commit()
        self.db.refresh(spell)
        return spell

    def delete(self, spell_id: str) -> None:
        spell = self.get_by_id(spell_id)
        with self._atomic():
            self.db.execute(
                character_spells.delete().where(character_spells.c.spell_id == spell_id)
            )
            self.db.delete(spell)

    def move_spells_to_folder(self, from_folder_id: int, to_folder_id: int) -> int:
        with self._atomic():
            count = self.db.query(Spell).filter(Spell.folder_id == from_folder_id).update(
                {Spell.folder_id: to_folder_id}, synchronize_session=False
            )
        self.db.expire_all()
        return count

    def characters_knowing(self, spell_id: str) -> List[Character]:
        return (
            self.db.query(Character)
            .join(character_spells, character_spells.c.character_id == Character.id)
            .filter(character_spells.c.spell_id == spell_id)
            .order_by(Character.name)
            .all()
        )
