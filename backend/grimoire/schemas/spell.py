"""Spell schemas."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from ..core.hierarchy import ROOT_FOLDER_ID
from ..models.enums import Convocation


class BonusEffect(BaseModel):
    """Extra effect unlocked at a mastery level."""
    mastery_level_minimum: int = Field(ge=1)
    effects_description: str = Field(min_length=1)


class SpellBase(BaseModel):
    """Base spell schema."""
    name: str = Field(min_length=1, max_length=255)
    convocation: Convocation
    complexity_level: int = Field(ge=1, le=20)
    description: str = Field(min_length=1)
    bonus_effects: List[BonusEffect] = []
    casting_time: str = ""
    range: str = ""
    duration: str = ""
    folder_id: int = Field(default=ROOT_FOLDER_ID, ge=1)
    source_book: str = ""
    source_page: str = ""

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Spell name cannot be blank")
        return v


class SpellCreate(SpellBase):
    """Schema for creating a spell."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Fire Bolt",
                    "convocation": "Peleahn",
                    "complexity_level": 3,
                    "description": "A bolt of flame streaks toward the target.",
                    "casting_time": "1 round",
                    "range": "30 feet",
                    "duration": "Instant",
                    "folder_id": 1,
                }
            ]
        }
    }


class SpellUpdate(BaseModel):
    """Partial update; omitted fields keep their value."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    convocation: Optional[Convocation] = None
    complexity_level: Optional[int] = Field(default=None, ge=1, le=20)
    description: Optional[str] = Field(default=None, min_length=1)
    bonus_effects: Optional[List[BonusEffect]] = None
    casting_time: Optional[str] = None
    range: Optional[str] = None
    duration: Optional[str] = None
    folder_id: Optional[int] = Field(default=None, ge=1)
    source_book: Optional[str] = None
    source_page: Optional[str] = None


class SpellMoveRequest(BaseModel):
    folder_id: int = Field(ge=1)


class SpellImportRequest(BaseModel):
    spells: List[SpellCreate]


class SpellResponse(SpellBase):
    """Schema for spell response."""
    id: str
    convocation: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SpellImportResult(BaseModel):
    imported_count: int
    spells: List[SpellResponse]
