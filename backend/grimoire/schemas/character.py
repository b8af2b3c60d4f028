"""Character schemas."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from ..models.enums import Convocation, CharacterRank


def _dedupe(values: List[Convocation]) -> List[Convocation]:
    seen: List[Convocation] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


class CharacterBase(BaseModel):
    """Base character schema."""
    name: str = Field(min_length=1, max_length=255)
    convocations: List[Convocation] = Field(min_length=1)
    rank: CharacterRank
    game: str = ""

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Character name cannot be blank")
        return v

    @field_validator('convocations')
    @classmethod
    def unique_convocations(cls, v: List[Convocation]) -> List[Convocation]:
        return _dedupe(v)


class CharacterCreate(CharacterBase):
    """Schema for creating a character."""
    pass


class CharacterUpdate(BaseModel):
    """Partial update; omitted fields keep their value."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    convocations: Optional[List[Convocation]] = Field(default=None, min_length=1)
    rank: Optional[CharacterRank] = None
    game: Optional[str] = None

    @field_validator('convocations')
    @classmethod
    def unique_convocations(cls, v: Optional[List[Convocation]]) -> Optional[List[Convocation]]:
        return _dedupe(v) if v is not None else v


class CharacterResponse(BaseModel):
    """Schema for character response."""
    id: str
    name: str
    convocations: List[str]
    rank: str
    game: str = ""
    known_spell_ids: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AddSpellRequest(BaseModel):
    spell_id: str = Field(min_length=1)


# -- Bulk import ------------------------------------------------------------

class CharacterImport(CharacterBase):
    """One character in an import batch; spells are referenced by name."""
    known_spells: List[str] = []


class CharacterImportRequest(BaseModel):
    characters: List[CharacterImport]


class IncompatibleSpell(BaseModel):
    name: str
    convocation: str
    reason: str


class SpellResolution(BaseModel):
    """How the imported spell names resolved against the catalog."""
    found: List[str] = []
    not_found: List[str] = []
    incompatible: List[IncompatibleSpell] = []


class CharacterImportPreview(BaseModel):
    name: str
    final_name: str
    spells: SpellResolution
    warnings: List[str] = []


class CharacterImportError(BaseModel):
    name: str
    error: str


class CharacterImportResult(BaseModel):
    message: str
    total_attempted: int
    characters_imported: int
    spells_assigned: int
    previews: List[CharacterImportPreview] = []
    errors: List[CharacterImportError] = []
