"""Storage-independent rules for the folder hierarchy.

Every repository backend and the folder service share these helpers so that
name validation, cycle detection and subtree walks behave identically
whether the folders live in SQL or in memory.

``HierarchySnapshot`` is built once from the complete folder list and then
answers every structural question from that single view. Callers must not
mix answers from two snapshots inside one decision.
"""

from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from ..exceptions import ValidationError

ROOT_FOLDER_ID = 1
ROOT_FOLDER_NAME = ""
PATH_SEPARATOR = "/"
MAX_FOLDER_NAME_LENGTH = 255


def normalize_parent_id(parent_id: Optional[int]) -> int:
    """A missing parent means the root folder."""
    return ROOT_FOLDER_ID if parent_id is None else parent_id


def validate_folder_name(name: Optional[str]) -> str:
    """Return the stripped folder name or raise ValidationError."""
    if name is None or not name.strip():
        raise ValidationError("Folder name cannot be empty", field="name")
    if PATH_SEPARATOR in name:
        raise ValidationError("Folder name cannot contain slashes", field="name")
    stripped = name.strip()
    if len(stripped) > MAX_FOLDER_NAME_LENGTH:
        raise ValidationError(
            f"Folder name cannot exceed {MAX_FOLDER_NAME_LENGTH} characters", field="name"
        )
    return stripped


def unique_sibling_name(name: str, taken: Set[str]) -> str:
    """Return *name*, or the first free ``name_N`` when it is already taken."""
    if name not in taken:
        return name
    counter = 1
    candidate = f"{name}_{counter}"
    while candidate in taken:
        counter += 1
        candidate = f"{name}_{counter}"
    return candidate


class HierarchySnapshot:
    """Read-only view of the parent-pointer graph.

    Accepts any objects exposing ``id``, ``name`` and ``parent_id``
    (ORM rows or in-memory records).
    """

    def __init__(self, parents: Dict[int, Optional[int]], names: Dict[int, str]):
        self._parents = dict(parents)
        self._names = dict(names)
        self._children: Dict[Optional[int], List[int]] = {}
        for folder_id, parent_id in self._parents.items():
            self._children.setdefault(parent_id, []).append(folder_id)
        for ids in self._children.values():
            ids.sort(key=lambda fid: (self._names[fid].lower(), fid))

    @classmethod
    def from_folders(cls, folders: Iterable) -> "HierarchySnapshot":
        parents: Dict[int, Optional[int]] = {}
        names: Dict[int, str] = {}
        for folder in folders:
            parents[folder.id] = folder.parent_id
            names[folder.id] = folder.name
        return cls(parents, names)

    def __len__(self) -> int:
        return len(self._parents)

    def contains(self, folder_id: int) -> bool:
        return folder_id in self._parents

    def name_of(self, folder_id: int) -> str:
        return self._names[folder_id]

    def parent_of(self, folder_id: int) -> Optional[int]:
        return self._parents[folder_id]

    def children_of(self, folder_id: Optional[int]) -> List[int]:
        return list(self._children.get(folder_id, []))

    def sibling_names(self, parent_id: Optional[int], exclude: Optional[int] = None) -> Set[str]:
        return {
            self._names[fid]
            for fid in self._children.get(parent_id, [])
            if fid != exclude
        }

    def ancestors(self, folder_id: int) -> List[int]:
        """Ids from the direct parent up to the top, nearest first.

        Stops on a repeated id so corrupted data cannot loop forever.
        """
        chain: List[int] = []
        seen = {folder_id}
        current = self._parents.get(folder_id)
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            current = self._parents.get(current)
        return chain

    def is_descendant(self, candidate_id: int, ancestor_id: int) -> bool:
        """True when *candidate_id* is *ancestor_id* or lies below it.

        Walks the ancestor chain upward from the candidate until reaching the
        top of the tree or finding the ancestor.
        """
        if candidate_id == ancestor_id:
            return True
        return ancestor_id in self.ancestors(candidate_id)

    def subtree(self, folder_id: int) -> List[int]:
        """Breadth-first ids of every folder below *folder_id* (excluded)."""
        result: List[int] = []
        seen = {folder_id}
        queue = deque(self._children.get(folder_id, []))
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            result.append(current)
            queue.extend(self._children.get(current, []))
        return result

    def depth(self, folder_id: int) -> int:
        return len(self.ancestors(folder_id))

    def path_of(self, folder_id: int) -> str:
        """Slash path built from names, ``"/"`` for the root."""
        if self._parents.get(folder_id) is None:
            return PATH_SEPARATOR
        chain = [folder_id] + self.ancestors(folder_id)
        names = [self._names[fid] for fid in reversed(chain) if self._parents.get(fid) is not None]
        return PATH_SEPARATOR + PATH_SEPARATOR.join(names)

    def find_by_path(self, path: str) -> Optional[int]:
        """Resolve ``/a/b`` from the root; None if any segment is missing."""
        segments = [part for part in path.split(PATH_SEPARATOR) if part]
        current = ROOT_FOLDER_ID
        if not self.contains(current):
            return None
        for segment in segments:
            match = next(
                (fid for fid in self._children.get(current, []) if self._names[fid] == segment),
                None,
            )
            if match is None:
                return None
            current = match
        return current
