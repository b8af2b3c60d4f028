"""Folder API: tree, lookups, create, rename, move and delete.

Single router for all folder operations. Delegates to FolderService (deep module).
"""

from fastapi import APIRouter, Depends, Query
from typing import List

from ..models.enums import DeleteStrategy
from ..schemas.folder import (
    FolderContents,
    FolderCreate,
    FolderCreatedResponse,
    FolderMoveRequest,
    FolderOperationResult,
    FolderRenameRequest,
    FolderTreeNode,
    FolderWithPath,
)
from ..services.folder_service import FolderService
from .deps import get_folder_service

router = APIRouter(prefix="/api/folders", tags=["folders"])


# -- Reads ------------------------------------------------------------------

@router.get("", response_model=List[FolderTreeNode])
def get_tree(service: FolderService = Depends(get_folder_service)):
    """Full folder tree starting at the root."""
    return service.get_tree()


@router.get("/flat", response_model=List[FolderWithPath])
def list_folders(service: FolderService = Depends(get_folder_service)):
    return service.list_folders()


@router.get("/by-path", response_model=FolderWithPath)
def get_folder_by_path(
    path: str = Query(..., description="Slash path from the root, e.g. /Elementalism/Fire"),
    service: FolderService = Depends(get_folder_service),
):
    return service.get_folder_by_path(path)


@router.get("/{folder_id}", response_model=FolderWithPath)
def get_folder(folder_id: int, service: FolderService = Depends(get_folder_service)):
    return service.get_folder(folder_id)


@router.get("/{folder_id}/contents", response_model=FolderContents)
def get_folder_contents(folder_id: int, service: FolderService = Depends(get_folder_service)):
    """Direct counts, direct subfolders and recursive totals."""
    return service.get_folder_contents(folder_id)


# -- Mutations --------------------------------------------------------------

@router.post("", response_model=FolderCreatedResponse, status_code=201)
def create_folder(data: FolderCreate, service: FolderService = Depends(get_folder_service)):
    folder_id = service.create_folder(data.name, data.parent_id)
    return FolderCreatedResponse(folder_id=folder_id)


@router.patch("/{folder_id}/rename", response_model=FolderOperationResult)
def rename_folder(
    folder_id: int,
    data: FolderRenameRequest,
    service: FolderService = Depends(get_folder_service),
):
    return service.rename_folder(folder_id, data.new_name)


@router.patch("/{folder_id}/move", response_model=FolderOperationResult)
def move_folder(
    folder_id: int,
    data: FolderMoveRequest,
    service: FolderService = Depends(get_folder_service),
):
    return service.move_folder(folder_id, data.new_parent_id)


@router.delete("/{folder_id}", response_model=FolderOperationResult)
def delete_folder(
    folder_id: int,
    strategy: str = Query(
        DeleteStrategy.EMPTY_ONLY.value,
        description="empty-only, move-to-parent or recursive",
    ),
    service: FolderService = Depends(get_folder_service),
):
    """Delete a folder; *strategy* decides what happens to its contents."""
    return service.delete_folder(folder_id, strategy)
