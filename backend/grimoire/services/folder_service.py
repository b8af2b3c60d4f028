"""Deep module for all folder operations: create, rename, move, delete and tree reads.

Callers hand in ids and names; the service owns every structural rule of the
hierarchy (root immutability, sibling-name uniqueness, acyclicity) and the
order in which those rules are checked. Storage is reached only through the
injected repositories, so the same service runs over SQL or in-memory state.
"""

import logging
from typing import List, Optional

from ..core.hierarchy import (
    HierarchySnapshot,
    ROOT_FOLDER_ID,
    normalize_parent_id,
    validate_folder_name,
)
from ..exceptions import (
    FolderCycleError,
    FolderNameConflictError,
    FolderNotEmptyError,
    FolderNotFoundError,
    InvalidDeleteStrategyError,
    RootFolderImmutableError,
)
from ..models.enums import DeleteStrategy
from ..repositories.interfaces import FolderStore, SpellStore
from ..schemas.folder import (
    FolderContents,
    FolderOperationResult,
    FolderTreeNode,
    FolderWithPath,
)

logger = logging.getLogger(__name__)


class FolderService:
    """All folder and tree operations behind a simple interface.

    Public methods:
        create_folder       -- validated insert under an existing parent
        rename_folder       -- no-op when the name is unchanged
        move_folder         -- rejects cycles; no-op for the current parent
        delete_folder       -- empty-only, move-to-parent or recursive
        get_folder_contents -- direct and recursive counts
        get_folder / get_folder_by_path / list_folders / get_tree
    """

    def __init__(self, folder_repo: FolderStore, spell_repo: SpellStore):
        self.folder_repo = folder_repo
        self.spell_repo = spell_repo

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_folder(self, name: str, parent_id: Optional[int] = ROOT_FOLDER_ID) -> int:
        clean_name = validate_folder_name(name)
        parent_id = normalize_parent_id(parent_id)

        snap = self.folder_repo.snapshot()
        if not snap.contains(parent_id):
            raise FolderNotFoundError(parent_id, message="Parent folder not found")
        if clean_name in snap.sibling_names(parent_id):
            raise FolderNameConflictError(clean_name, parent_id)

        folder_id = self.folder_repo.create(clean_name, parent_id)
        logger.info(
            "Folder created",
            extra={"folder_id": folder_id, "parent_id": parent_id, "folder_name": clean_name},
        )
        return folder_id

    def rename_folder(self, folder_id: int, new_name: str) -> FolderOperationResult:
        if folder_id == ROOT_FOLDER_ID:
            raise RootFolderImmutableError("rename")
        clean_name = validate_folder_name(new_name)

        snap = self.folder_repo.snapshot()
        if not snap.contains(folder_id):
            raise FolderNotFoundError(folder_id)
        if snap.name_of(folder_id) == clean_name:
            return FolderOperationResult(folder_id=folder_id, message="Folder name unchanged")

        parent_id = snap.parent_of(folder_id)
        if clean_name in snap.sibling_names(parent_id, exclude=folder_id):
            raise FolderNameConflictError(clean_name, parent_id)

        self.folder_repo.rename(folder_id, clean_name)
        logger.info(
            "Folder renamed",
            extra={"folder_id": folder_id, "old_name": snap.name_of(folder_id), "folder_name": clean_name},
        )
        return FolderOperationResult(folder_id=folder_id, message="Folder renamed successfully")

    def move_folder(self, folder_id: int, new_parent_id: Optional[int]) -> FolderOperationResult:
        if folder_id == ROOT_FOLDER_ID:
            raise RootFolderImmutableError("move")
        new_parent_id = normalize_parent_id(new_parent_id)

        snap = self.folder_repo.snapshot()
        if not snap.contains(folder_id):
            raise FolderNotFoundError(folder_id)
        if not snap.contains(new_parent_id):
            raise FolderNotFoundError(new_parent_id, message="Target parent folder not found")
        if snap.is_descendant(new_parent_id, folder_id):
            raise FolderCycleError(folder_id, new_parent_id)

        if snap.parent_of(folder_id) == new_parent_id:
            return FolderOperationResult(folder_id=folder_id, message="Folder already in target parent")

        name = snap.name_of(folder_id)
        if name in snap.sibling_names(new_parent_id, exclude=folder_id):
            raise FolderNameConflictError(
                name,
                new_parent_id,
                message="A folder with this name already exists in the target parent",
            )

        self.folder_repo.move(folder_id, new_parent_id)
        logger.info(
            "Folder moved",
            extra={
                "folder_id": folder_id,
                "old_parent_id": snap.parent_of(folder_id),
                "parent_id": new_parent_id,
            },
        )
        return FolderOperationResult(folder_id=folder_id, message="Folder moved successfully")

    def delete_folder(self, folder_id: int, strategy: str = DeleteStrategy.EMPTY_ONLY.value) -> FolderOperationResult:
        """Delete a folder, handling its contents according to *strategy*.

        empty-only     -- refuse unless the folder has no spells and no subfolders.
        move-to-parent -- spells and subfolders go to the parent; colliding
                          subfolder names get a ``_N`` suffix.
        recursive      -- the whole subtree and every spell in it are removed.
        """
        if folder_id == ROOT_FOLDER_ID:
            raise RootFolderImmutableError("delete")

        snap = self.folder_repo.snapshot()
        if not snap.contains(folder_id):
            raise FolderNotFoundError(folder_id)

        try:
            chosen = DeleteStrategy(strategy)
        except ValueError:
            raise InvalidDeleteStrategyError(strategy, [s.value for s in DeleteStrategy])

        if chosen is DeleteStrategy.EMPTY_ONLY:
            if self.folder_repo.has_spells(folder_id) or self.folder_repo.has_subfolders(folder_id):
                raise FolderNotEmptyError(folder_id)
            self.folder_repo.delete(folder_id)
            affected_spells, affected_folders = 0, 0
        elif chosen is DeleteStrategy.MOVE_TO_PARENT:
            contents = self.folder_repo.get_contents(folder_id)
            self.folder_repo.move_contents_to_parent(folder_id)
            affected_spells, affected_folders = contents.spell_count, contents.subfolder_count
        else:
            contents = self.folder_repo.get_contents(folder_id)
            self.folder_repo.delete_recursive(folder_id)
            affected_spells = contents.total_spells_recursive
            affected_folders = contents.total_subfolders_recursive

        logger.info(
            "Folder deleted",
            extra={
                "folder_id": folder_id,
                "parent_id": snap.parent_of(folder_id),
                "strategy": chosen.value,
                "affected_spells": affected_spells,
                "affected_folders": affected_folders,
            },
        )
        return FolderOperationResult(
            folder_id=folder_id,
            message="Folder deleted successfully",
            strategy=chosen.value,
            affected_spells=affected_spells,
            affected_folders=affected_folders,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_folder_contents(self, folder_id: int) -> FolderContents:
        return self.folder_repo.get_contents(folder_id)

    def get_folder(self, folder_id: int) -> FolderWithPath:
        folder = self.folder_repo.find_by_id(folder_id)
        if folder is None:
            raise FolderNotFoundError(folder_id)
        return self._with_path(folder, self.folder_repo.snapshot())

    def get_folder_by_path(self, path: str) -> FolderWithPath:
        folder = self.folder_repo.find_by_path(path)
        if folder is None:
            raise FolderNotFoundError(path, message=f"Folder not found at path: {path}")
        return self._with_path(folder, self.folder_repo.snapshot())

    def list_folders(self) -> List[FolderWithPath]:
        folders = self.folder_repo.list_all()
        snap = HierarchySnapshot.from_folders(folders)
        return [self._with_path(f, snap) for f in folders]

    def get_tree(self) -> List[FolderTreeNode]:
        """Nested tree rooted at the root folder, children sorted by name."""
        folders = self.folder_repo.list_all()
        snap = HierarchySnapshot.from_folders(folders)
        by_id = {f.id: f for f in folders}

        def build(folder_id: int) -> FolderTreeNode:
            folder = by_id[folder_id]
            return FolderTreeNode(
                id=folder.id,
                name=folder.name,
                parent_id=folder.parent_id,
                created_at=folder.created_at,
                path=snap.path_of(folder.id),
                children=[build(cid) for cid in snap.children_of(folder_id)],
            )

        return [build(fid) for fid in snap.children_of(None)]

    @staticmethod
    def _with_path(folder, snap: HierarchySnapshot) -> FolderWithPath:
        return FolderWithPath(
            id=folder.id,
            name=folder.name,
            parent_id=folder.parent_id,
            created_at=folder.created_at,
            path=snap.path_of(folder.id),
        )
