"""Character API: CRUD, search, import and known-spell management."""

from fastapi import APIRouter, Depends, Query, Response
from typing import List

from ..schemas.character import (
    AddSpellRequest,
    CharacterCreate,
    CharacterImportRequest,
    CharacterImportResult,
    CharacterResponse,
    CharacterUpdate,
)
from ..schemas.spell import SpellResponse
from ..services.character_service import CharacterService
from .deps import get_character_service

router = APIRouter(prefix="/api/characters", tags=["characters"])


# -- Characters -------------------------------------------------------------

@router.get("", response_model=List[CharacterResponse])
def list_characters(service: CharacterService = Depends(get_character_service)):
    return service.list_characters()


@router.get("/search", response_model=List[CharacterResponse])
def search_characters(
    q: str = Query(..., min_length=1),
    service: CharacterService = Depends(get_character_service),
):
    return service.search_characters(q)


@router.get("/{character_id}", response_model=CharacterResponse)
def get_character(character_id: str, service: CharacterService = Depends(get_character_service)):
    return service.get_character(character_id)


@router.post("", response_model=CharacterResponse, status_code=201)
def create_character(
    data: CharacterCreate,
    service: CharacterService = Depends(get_character_service),
):
    return service.create_character(data)


@router.post("/import", response_model=CharacterImportResult, status_code=201)
def import_characters(
    data: CharacterImportRequest,
    service: CharacterService = Depends(get_character_service),
):
    """Bulk create; spells are matched by name and per-entry failures are reported."""
    return service.import_characters(data.characters)


@router.put("/{character_id}", response_model=CharacterResponse)
def update_character(
    character_id: str,
    data: CharacterUpdate,
    service: CharacterService = Depends(get_character_service),
):
    return service.update_character(character_id, data)


@router.delete("/{character_id}", status_code=204)
def delete_character(character_id: str, service: CharacterService = Depends(get_character_service)):
    service.delete_character(character_id)
    return Response(status_code=204)


# -- Known spells -----------------------------------------------------------

@router.get("/{character_id}/spells", response_model=List[SpellResponse])
def get_character_spells(
    character_id: str,
    service: CharacterService = Depends(get_character_service),
):
    return service.get_character_spells(character_id)


@router.post("/{character_id}/spells", response_model=CharacterResponse, status_code=201)
def add_spell_to_character(
    character_id: str,
    data: AddSpellRequest,
    service: CharacterService = Depends(get_character_service),
):
    """Teach a spell; refused when the convocation is not eligible."""
    service.add_spell_to_character(character_id, data.spell_id)
    return service.get_character(character_id)


@router.delete("/{character_id}/spells/{spell_id}", status_code=204)
def remove_spell_from_character(
    character_id: str,
    spell_id: str,
    service: CharacterService = Depends(get_character_service),
):
    service.remove_spell_from_character(character_id, spell_id)
    return Response(status_code=204)
