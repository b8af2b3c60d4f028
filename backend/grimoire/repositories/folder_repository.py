"""Repository for folder database operations."""

from typing import Dict, List, Optional

from sqlalchemy import func

from ..core.hierarchy import HierarchySnapshot, ROOT_FOLDER_ID, unique_sibling_name
from ..exceptions import FolderNotFoundError
from ..models import Folder, Spell, character_spells
from ..schemas.folder import FolderContents, FolderWithPath
from .base import BaseRepository


class FolderRepository(BaseRepository[Folder]):
    """Data access layer for the folder tree."""

    model_class = Folder
    not_found_error = FolderNotFoundError

    # -- Reads ------------------------------------------------------------

    def list_all(self) -> List[Folder]:
        return self.db.query(Folder).order_by(Folder.id).all()

    def snapshot(self) -> HierarchySnapshot:
        """Load every folder once and return the in-memory parent graph."""
        rows = self.db.query(Folder.id, Folder.name, Folder.parent_id).all()
        return HierarchySnapshot(
            parents={row.id: row.parent_id for row in rows},
            names={row.id: row.name for row in rows},
        )

    def find_by_id(self, folder_id: int) -> Optional[Folder]:
        return self.get_by_id_optional(folder_id)

    def find_by_path(self, path: str) -> Optional[Folder]:
        folder_id = self.snapshot().find_by_path(path)
        return self.find_by_id(folder_id) if folder_id is not None else None

    def has_spells(self, folder_id: int) -> bool:
        return self.db.query(Spell.id).filter(Spell.folder_id == folder_id).first() is not None

    def has_subfolders(self, folder_id: int) -> bool:
        return self.db.query(Folder.id).filter(Folder.parent_id == folder_id).first() is not None

    def is_empty(self, folder_id: int) -> bool:
        return not self.has_spells(folder_id) and not self.has_subfolders(folder_id)

    def _spell_counts(self) -> Dict[int, int]:
        rows = (
            self.db.query(Spell.folder_id, func.count(Spell.id))
            .group_by(Spell.folder_id)
            .all()
        )
        return {folder_id: count for folder_id, count in rows}

    def get_contents(self, folder_id: int) -> FolderContents:
        """Direct and recursive counts, computed from one snapshot."""
        snap = self.snapshot()
        if not snap.contains(folder_id):
            raise FolderNotFoundError(folder_id)

        spell_counts = self._spell_counts()
        child_ids = snap.children_of(folder_id)
        subtree = snap.subtree(folder_id)

        children = {
            f.id: f for f in self.db.query(Folder).filter(Folder.id.in_(child_ids)).all()
        } if child_ids else {}
        subfolders = [
            FolderWithPath(
                id=cid,
                name=children[cid].name,
                parent_id=children[cid].parent_id,
                created_at=children[cid].created_at,
                path=snap.path_of(cid),
            )
            for cid in child_ids
        ]

        return FolderContents(
            spell_count=spell_counts.get(folder_id, 0),
            subfolder_count=len(child_ids),
            subfolders=subfolders,
            total_spells_recursive=sum(
                spell_counts.get(fid, 0) for fid in [folder_id] + subtree
            ),
            total_subfolders_recursive=len(subtree),
        )

    # -- Single-row writes ------------------------------------------------

    def create(self, name: str, parent_id: Optional[int]) -> int:
        folder = Folder(name=name, parent_id=parent_id)
        self.db.add(folder)
        self.db.commit()
        self.db.refresh(folder)
        return folder.id

    def rename(self, folder_id: int, name: str) -> None:
        folder = self.get_by_id(folder_id)
        folder.name = name
        self.db.commit()

    def move(self, folder_id: int, parent_id: Optional[int]) -> None:
        folder = self.get_by_id(folder_id)
        folder.parent_id = parent_id
        self.db.commit()

    def delete(self, folder_id: int) -> None:
        folder = self.get_by_id(folder_id)
        self.db.delete(folder)
        self.db.commit()

    # -- Atomic structural writes -----------------------------------------

    def delete_recursive(self, folder_id: int) -> None:
        """Delete the folder, every descendant folder and all their spells.

        Association rows of the removed spells go too. Folders are removed
        deepest first so no statement leaves a dangling parent reference.
        """
        snap = self.snapshot()
        if not snap.contains(folder_id):
            raise FolderNotFoundError(folder_id)

        doomed = [folder_id] + snap.subtree(folder_id)

        with self._atomic():
            spell_ids = [
                row.id for row in self.db.query(Spell.id).filter(Spell.folder_id.in_(doomed)).all()
            ]
            if spell_ids:
                self.db.execute(
                    character_spells.delete().where(character_spells.c.spell_id.in_(spell_ids))
                )
                self.db.query(Spell).filter(Spell.id.in_(spell_ids)).delete(synchronize_session=False)

            by_depth: Dict[int, List[int]] = {}
            for fid in doomed:
                by_depth.setdefault(snap.depth(fid), []).append(fid)
            for depth in sorted(by_depth, reverse=True):
                self.db.query(Folder).filter(Folder.id.in_(by_depth[depth])).delete(
                    synchronize_session=False
                )

        self.db.expire_all()

    def move_contents_to_parent(self, folder_id: int) -> None:
        """Hand spells and subfolders to the parent, then delete the folder.

        A subfolder whose name is already used at the parent is renamed
        ``name_1``, ``name_2``, ... so sibling names stay unique.
        """
        folder = self.get_by_id(folder_id)
        parent_id = folder.parent_id if folder.parent_id is not None else ROOT_FOLDER_ID
        snap = self.snapshot()
        taken = snap.sibling_names(parent_id)

        with self._atomic():
            self.db.query(Spell).filter(Spell.folder_id == folder_id).update(
                {Spell.folder_id: parent_id}, synchronize_session=False
            )

            children = (
                self.db.query(Folder)
                .filter(Folder.parent_id == folder_id)
                .order_by(Folder.name, Folder.id)
                .all()
            )
            for child in children:
                new_name = unique_sibling_name(child.name, taken)
                taken.add(new_name)
                child.parent_id = parent_id
                child.name = new_name
            self.db.flush()

            self.db.delete(folder)

        self.db.expire_all()
