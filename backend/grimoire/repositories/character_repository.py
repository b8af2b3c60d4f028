"""Character repository, including the character <-> spell association."""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_

from ..exceptions import CharacterNotFoundError
from ..models import Character, Spell, character_spells
from .base import BaseRepository


class CharacterRepository(BaseRepository[Character]):
    """Repository for character CRUD and known-spell links."""

    model_class = Character
    not_found_error = CharacterNotFoundError

    def list_all(self) -> List[Character]:
        return self.db.query(Character).order_by(Character.name, Character.id).all()

    def find_by_id(self, character_id: str) -> Optional[Character]:
        return self.get_by_id_optional(character_id)

    def search(self, query: str) -> List[Character]:
        pattern = f"%{query}%"
        return (
            self.db.query(Character)
            .filter(or_(
                Character.name.ilike(pattern),
                Character.game.ilike(pattern),
                Character.rank.ilike(pattern),
            ))
            .order_by(Character.name, Character.id)
            .all()
        )

    def create(self, values: Dict[str, Any], spell_ids: Iterable[str] = ()) -> Character:
        """Insert a character together with its initial known spells."""
        character = Character(**values)
        ids = list(dict.fromkeys(spell_ids))
        with self._atomic():
            if ids:
                character.spells = self.db.query(Spell).filter(Spell.id.in_(ids)).all()
            self.db.add(character)
        self.db.refresh(character)
        return character

    def update(self, character_id: str, changes: Dict[str, Any]) -> Character:
        character = self.get_by_id(character_id)
        for key, value in changes.items():
            setattr(character, key, value)
        self.db.commit()
        self.db.refresh(character)
        return character

    def delete(self, character_id: str) -> None:
        character = self.get_by_id(character_id)
        # The ORM clears the secondary rows of the loaded spells collection.
        with self._atomic():
            self.db.delete(character)

    # -- Association ------------------------------------------------------

    def has_spell(self, character_id: str, spell_id: str) -> bool:
        row = self.db.execute(
            character_spells.select().where(
                character_spells.c.character_id == character_id,
                character_spells.c.spell_id == spell_id,
            )
        ).first()
        return row is not None

    def add_spell(self, character_id: str, spell_id: str) -> None:
        """Insert the pair; an existing pair is left as is."""
        if self.has_spell(character_id, spell_id):
            return
        with self._atomic():
            self.db.execute(
                character_spells.insert().values(character_id=character_id, spell_id=spell_id)
            )
        self.db.expire_all()

    def remove_spell(self, character_id: str, spell_id: str) -> None:
        """Delete the pair; a missing pair is not an error here."""
        with self._atomic():
            self.db.execute(
                character_spells.delete().where(
                    character_spells.c.character_id == character_id,
                    character_spells.c.spell_id == spell_id,
                )
            )
        self.db.expire_all()
