"""Spell API: catalog CRUD, search, placement and import."""

from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional

from ..models.enums import Convocation
from ..schemas.spell import (
    SpellCreate,
    SpellImportRequest,
    SpellImportResult,
    SpellMoveRequest,
    SpellResponse,
    SpellUpdate,
)
from ..services.spell_service import SpellService
from .deps import get_spell_service

router = APIRouter(prefix="/api/spells", tags=["spells"])


@router.get("", response_model=List[SpellResponse])
def list_spells(
    folder_id: Optional[int] = Query(None),
    convocation: Optional[Convocation] = Query(None),
    service: SpellService = Depends(get_spell_service),
):
    return service.list_spells(
        folder_id=folder_id,
        convocation=convocation.value if convocation else None,
    )


@router.get("/search", response_model=List[SpellResponse])
def search_spells(
    q: str = Query(..., min_length=1),
    service: SpellService = Depends(get_spell_service),
):
    """Substring match on name, description and convocation."""
    return service.search_spells(q)


@router.get("/{spell_id}", response_model=SpellResponse)
def get_spell(spell_id: str, service: SpellService = Depends(get_spell_service)):
    return service.get_spell(spell_id)


@router.post("", response_model=SpellResponse, status_code=201)
def create_spell(data: SpellCreate, service: SpellService = Depends(get_spell_service)):
    return service.create_spell(data)


@router.post("/import", response_model=SpellImportResult, status_code=201)
def import_spells(data: SpellImportRequest, service: SpellService = Depends(get_spell_service)):
    """Create every spell of the batch, or none of them."""
    spells = service.import_spells(data.spells)
    return SpellImportResult(
        imported_count=len(spells),
        spells=[SpellResponse.model_validate(spell) for spell in spells],
    )


@router.put("/{spell_id}", response_model=SpellResponse)
def update_spell(
    spell_id: str,
    data: SpellUpdate,
    service: SpellService = Depends(get_spell_service),
):
    return service.update_spell(spell_id, data)


@router.patch("/{spell_id}/move", response_model=SpellResponse)
def move_spell(
    spell_id: str,
    data: SpellMoveRequest,
    service: SpellService = Depends(get_spell_service),
):
    return service.move_spell(spell_id, data.folder_id)


@router.delete("/{spell_id}", status_code=204)
def delete_spell(spell_id: str, service: SpellService = Depends(get_spell_service)):
    service.delete_spell(spell_id)
    return Response(status_code=204)
