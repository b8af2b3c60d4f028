"""Repository capability sets consumed by the services.

Any object satisfying these protocols can back the services: the
SQLAlchemy repositories in this package, or the in-memory doubles in
``memory.py``. Records only need the attributes the services read
(``id``, ``name``, ``parent_id`` for folders; ``id``, ``name``,
``convocation``, ``folder_id`` for spells; ``id``, ``name``,
``convocations``, ``known_spell_ids`` for characters).
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol

from ..core.hierarchy import HierarchySnapshot
from ..schemas.folder import FolderContents


class FolderStore(Protocol):

    def list_all(self) -> List[Any]: ...

    def snapshot(self) -> HierarchySnapshot:
        """One consistent view of every folder id, name and parent."""
        ...

    def count(self) -> int: ...

    def find_by_id(self, folder_id: int) -> Optional[Any]: ...

    def find_by_path(self, path: str) -> Optional[Any]: ...

    def create(self, name: str, parent_id: Optional[int]) -> int: ...

    def delete(self, folder_id: int) -> None: ...

    def rename(self, folder_id: int, name: str) -> None: ...

    def move(self, folder_id: int, parent_id: Optional[int]) -> None: ...

    def exists(self, folder_id: int) -> bool: ...

    def is_empty(self, folder_id: int) -> bool: ...

    def has_spells(self, folder_id: int) -> bool: ...

    def has_subfolders(self, folder_id: int) -> bool: ...

    def get_contents(self, folder_id: int) -> FolderContents: ...

    def delete_recursive(self, folder_id: int) -> None:
        """Remove the folder, its subtree and every spell inside, atomically."""
        ...

    def move_contents_to_parent(self, folder_id: int) -> None:
        """Reparent direct spells and subfolders, then delete, atomically."""
        ...


class SpellStore(Protocol):

    def list_all(self, folder_id: Optional[int] = None, convocation: Optional[str] = None) -> List[Any]: ...

    def find_by_id(self, spell_id: str) -> Optional[Any]: ...

    def find_by_ids(self, spell_ids: Iterable[str]) -> List[Any]: ...

    def find_by_folder_id(self, folder_id: int) -> List[Any]: ...

    def find_by_names(self, names: Iterable[str]) -> List[Any]: ...

    def search(self, query: str) -> List[Any]: ...

    def create(self, values: Dict[str, Any]) -> Any: ...

    def create_many(self, rows: List[Dict[str, Any]]) -> List[Any]: ...

    def update(self, spell_id: str, changes: Dict[str, Any]) -> Any: ...

    def delete(self, spell_id: str) -> None: ...

    def move_spells_to_folder(self, from_folder_id: int, to_folder_id: int) -> int: ...

    def count(self) -> int: ...

    def characters_knowing(self, spell_id: str) -> List[Any]: ...


class CharacterStore(Protocol):

    def list_all(self) -> List[Any]: ...

    def find_by_id(self, character_id: str) -> Optional[Any]: ...

    def search(self, query: str) -> List[Any]: ...

    def create(self, values: Dict[str, Any], spell_ids: Iterable[str] = ()) -> Any: ...

    def update(self, character_id: str, changes: Dict[str, Any]) -> Any: ...

    def delete(self, character_id: str) -> None: ...

    def has_spell(self, character_id: str, spell_id: str) -> bool: ...

    def add_spell(self, character_id: str, spell_id: str) -> None: ...

    def remove_spell(self, character_id: str, spell_id: str) -> None: ...

    def count(self) -> int: ...
