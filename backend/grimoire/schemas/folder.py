"""Folder and tree schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List

from ..core.hierarchy import ROOT_FOLDER_ID


class FolderCreate(BaseModel):
    """Schema for creating a folder.

    Name shape is checked by the folder service so that every caller gets
    the same validation error.
    """
    name: str
    parent_id: Optional[int] = ROOT_FOLDER_ID


class FolderRenameRequest(BaseModel):
    """Request to rename a folder in place."""
    new_name: str


class FolderMoveRequest(BaseModel):
    """Request to move a folder under a new parent (null means root)."""
    new_parent_id: Optional[int] = None


class FolderResponse(BaseModel):
    """Schema for folder response."""
    id: int
    name: str
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FolderWithPath(FolderResponse):
    """Folder plus its slash path from the root."""
    path: str


class FolderTreeNode(FolderWithPath):
    """Schema for tree navigation."""
    children: List['FolderTreeNode'] = []


class FolderContents(BaseModel):
    """Direct and recursive contents of a folder."""
    spell_count: int
    subfolder_count: int
    subfolders: List[FolderWithPath]
    total_spells_recursive: int
    total_subfolders_recursive: int


class FolderCreatedResponse(BaseModel):
    folder_id: int
    message: str = "Folder created successfully"


class FolderOperationResult(BaseModel):
    """Outcome of a folder mutation (rename, move, delete)."""
    folder_id: int
    message: str
    strategy: Optional[str] = None
    affected_spells: int = 0
    affected_folders: int = 0
