"""Character management and the character <-> spell relationship guard.

Every path that writes to the association goes through ``is_eligible`` so
that a stored pair always satisfies the convocation rule: the spell is
Neutral or its convocation is one of the character's.
"""

import logging
import uuid
from typing import Dict, Iterable, List, Set

from ..exceptions import (
    CharacterNotFoundError,
    CharacterSpellNotFoundError,
    ConvocationNotEligibleError,
    SpellAlreadyKnownError,
    SpellNotFoundError,
    ValidationError,
)
from ..models.enums import Convocation
from ..repositories.interfaces import CharacterStore, SpellStore
from ..schemas.character import (
    CharacterCreate,
    CharacterImport,
    CharacterImportError,
    CharacterImportPreview,
    CharacterImportResult,
    CharacterUpdate,
    IncompatibleSpell,
    SpellResolution,
)

logger = logging.getLogger(__name__)


def _value(convocation) -> str:
    return convocation.value if isinstance(convocation, Convocation) else str(convocation)


def is_eligible(character_convocations: Iterable, spell_convocation) -> bool:
    """Whether a character with these convocations may learn the spell."""
    spell_value = _value(spell_convocation)
    if spell_value == Convocation.NEUTRAL.value:
        return True
    return spell_value in {_value(c) for c in character_convocations}


def can_learn(character, spell) -> bool:
    return is_eligible(character.convocations, spell.convocation)


def unique_character_name(name: str, taken_lower: Set[str]) -> str:
    """``name``, or ``name (2)``, ``name (3)``, ... compared case-insensitively."""
    if name.lower() not in taken_lower:
        return name
    counter = 2
    while f"{name} ({counter})".lower() in taken_lower:
        counter += 1
    return f"{name} ({counter})"


class CharacterService:
    """Character CRUD, known-spell management and bulk import."""

    def __init__(self, character_repo: CharacterStore, spell_repo: SpellStore):
        self.character_repo = character_repo
        self.spell_repo = spell_repo

    def _require_character(self, character_id: str):
        character = self.character_repo.find_by_id(character_id)
        if character is None:
            raise CharacterNotFoundError(character_id)
        return character

    # ------------------------------------------------------------------
    # Relationship guard
    # ------------------------------------------------------------------

    def add_spell_to_character(self, character_id: str, spell_id: str) -> None:
        character = self._require_character(character_id)
        spell = self.spell_repo.find_by_id(spell_id)
        if spell is None:
            raise SpellNotFoundError(spell_id)
        if self.character_repo.has_spell(character_id, spell_id):
            raise SpellAlreadyKnownError(character_id, spell_id)
        if not can_learn(character, spell):
            raise ConvocationNotEligibleError(
                character_id,
                spell_id,
                _value(spell.convocation),
                [_value(c) for c in character.convocations],
            )

        self.character_repo.add_spell(character_id, spell_id)
        logger.info(
            "Spell added to character",
            extra={"character_id": character_id, "spell_id": spell_id},
        )

    def remove_spell_from_character(self, character_id: str, spell_id: str) -> None:
        self._require_character(character_id)
        if not self.character_repo.has_spell(character_id, spell_id):
            raise CharacterSpellNotFoundError(character_id, spell_id)

        self.character_repo.remove_spell(character_id, spell_id)
        logger.info(
            "Spell removed from character",
            extra={"character_id": character_id, "spell_id": spell_id},
        )

    def get_character_spells(self, character_id: str) -> List:
        character = self._require_character(character_id)
        return self.spell_repo.find_by_ids(character.known_spell_ids)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def list_characters(self) -> List:
        return self.character_repo.list_all()

    def get_character(self, character_id: str):
        return self._require_character(character_id)

    def search_characters(self, query: str) -> List:
        return self.character_repo.search(query)

    def create_character(self, data: CharacterCreate):
        values = data.model_dump(mode="json")
        values["id"] = str(uuid.uuid4())
        character = self.character_repo.create(values)
        logger.info("Character created", extra={"character_id": character.id})
        return character

    def update_character(self, character_id: str, data: CharacterUpdate):
        """Apply a partial update.

        Dropping a convocation is refused while the character still knows a
        spell that depends on it.
        """
        character = self._require_character(character_id)
        changes = data.model_dump(mode="json", exclude_unset=True)
        changes = {key: value for key, value in changes.items() if value is not None}

        if "convocations" in changes:
            stranded = [
                spell for spell in self.spell_repo.find_by_ids(character.known_spell_ids)
                if not is_eligible(changes["convocations"], spell.convocation)
            ]
            if stranded:
                raise ValidationError(
                    "Convocation change would leave known spells ineligible: "
                    + ", ".join(spell.name for spell in stranded),
                    field="convocations",
                    details={"spell_ids": [spell.id for spell in stranded]},
                )

        updated = self.character_repo.update(character_id, changes)
        logger.info(
            "Character updated",
            extra={"character_id": character_id, "fields": sorted(changes)},
        )
        return updated

    def delete_character(self, character_id: str) -> None:
        self._require_character(character_id)
        self.character_repo.delete(character_id)
        logger.info("Character deleted", extra={"character_id": character_id})

    # ------------------------------------------------------------------
    # Bulk import
    # ------------------------------------------------------------------

    def _resolve_spells(self, entry: CharacterImport) -> tuple:
        """Split the entry's spell names into eligible ids and a resolution report."""
        catalog: Dict[str, object] = {}
        for spell in self.spell_repo.find_by_names(entry.known_spells):
            catalog.setdefault(spell.name.lower(), spell)

        resolution = SpellResolution()
        spell_ids: List[str] = []
        for raw_name in dict.fromkeys(n.strip() for n in entry.known_spells if n.strip()):
            spell = catalog.get(raw_name.lower())
            if spell is None:
                resolution.not_found.append(raw_name)
            elif not is_eligible(entry.convocations, spell.convocation):
                resolution.incompatible.append(IncompatibleSpell(
                    name=spell.name,
                    convocation=_value(spell.convocation),
                    reason=f"Convocation {_value(spell.convocation)} not in character convocations",
                ))
            elif spell.id not in spell_ids:
                resolution.found.append(spell.name)
                spell_ids.append(spell.id)
        return spell_ids, resolution

    def import_characters(self, entries: List[CharacterImport]) -> CharacterImportResult:
        """Create characters from an import batch.

        Names are made unique against existing characters and earlier
        entries of the same batch. Unknown or ineligible spells are reported
        and skipped; a failing entry is recorded and does not stop the rest.
        """
        taken = {c.name.lower() for c in self.character_repo.list_all()}
        previews: List[CharacterImportPreview] = []
        errors: List[CharacterImportError] = []
        imported = 0
        assigned = 0

        for entry in entries:
            try:
                final_name = unique_character_name(entry.name, taken)
                spell_ids, resolution = self._resolve_spells(entry)

                warnings = []
                if final_name != entry.name:
                    warnings.append(f"Renamed to '{final_name}' to avoid a duplicate name")
                if resolution.not_found:
                    warnings.append(f"{len(resolution.not_found)} spell(s) not found")
                if resolution.incompatible:
                    warnings.append(f"{len(resolution.incompatible)} spell(s) incompatible with convocations")

                values = entry.model_dump(mode="json", exclude={"known_spells"})
                values["id"] = str(uuid.uuid4())
                values["name"] = final_name
                self.character_repo.create(values, spell_ids)
            except Exception as e:
                logger.warning("Character import failed for %s: %s", entry.name, e, exc_info=True)
                errors.append(CharacterImportError(name=entry.name, error=str(e)))
                continue

            taken.add(final_name.lower())
            imported += 1
            assigned += len(spell_ids)
            previews.append(CharacterImportPreview(
                name=entry.name,
                final_name=final_name,
                spells=resolution,
                warnings=warnings,
            ))

        logger.info(
            "Characters imported",
            extra={"total": len(entries), "imported": imported, "spells_assigned": assigned},
        )
        return CharacterImportResult(
            message=f"Imported {imported} of {len(entries)} characters",
            total_attempted=len(entries),
            characters_imported=imported,
            spells_assigned=assigned,
            previews=previews,
            errors=errors,
        )
