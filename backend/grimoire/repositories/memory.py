"""In-memory repository backend.

Implements the same capability sets as the SQLAlchemy repositories on top
of plain dictionaries. The three repositories share one ``InMemoryStore``
so that folder deletion can reach spells and spell deletion can reach the
character associations, exactly as foreign keys do in the database.

Records handed out are copies; mutating them never changes the store.
"""

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..core.hierarchy import (
    HierarchySnapshot,
    ROOT_FOLDER_ID,
    ROOT_FOLDER_NAME,
    unique_sibling_name,
)
from ..exceptions import CharacterNotFoundError, FolderNotFoundError, SpellNotFoundError
from ..schemas.folder import FolderContents, FolderWithPath


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FolderRecord:
    id: int
    name: str
    parent_id: Optional[int]
    created_at: datetime = field(default_factory=_now)


@dataclass
class SpellRecord:
    id: str
    name: str
    convocation: str
    complexity_level: int
    description: str
    bonus_effects: List[Dict[str, Any]] = field(default_factory=list)
    casting_time: str = ""
    range: str = ""
    duration: str = ""
    folder_id: int = ROOT_FOLDER_ID
    source_book: str = ""
    source_page: str = ""
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class CharacterRecord:
    id: str
    name: str
    convocations: List[str]
    rank: str
    game: str = ""
    known_spell_ids: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


@dataclass
class _State:
    folders: Dict[int, FolderRecord] = field(default_factory=dict)
    spells: Dict[str, SpellRecord] = field(default_factory=dict)
    characters: Dict[str, CharacterRecord] = field(default_factory=dict)
    # (character_id, spell_id) pairs
    known: Set[Tuple[str, str]] = field(default_factory=set)
    next_folder_id: int = ROOT_FOLDER_ID + 1


class InMemoryStore:
    """Shared state for the in-memory repositories."""

    def __init__(self, seed_root: bool = True):
        self.state = _State()
        if seed_root:
            self.state.folders[ROOT_FOLDER_ID] = FolderRecord(
                id=ROOT_FOLDER_ID, name=ROOT_FOLDER_NAME, parent_id=None
            )

    @contextmanager
    def atomic(self) -> Iterator[_State]:
        """Apply writes to a copy and swap it in only if the block succeeds."""
        working = copy.deepcopy(self.state)
        yield working
        self.state = working

    def repositories(self) -> Tuple["InMemoryFolderRepository", "InMemorySpellRepository", "InMemoryCharacterRepository"]:
        return (
            InMemoryFolderRepository(self),
            InMemorySpellRepository(self),
            InMemoryCharacterRepository(self),
        )


class _InMemoryRepository:

    def __init__(self, store: InMemoryStore):
        self.store = store

    @property
    def state(self) -> _State:
        return self.store.state


class InMemoryFolderRepository(_InMemoryRepository):

    def _require(self, folder_id: int) -> FolderRecord:
        folder = self.state.folders.get(folder_id)
        if folder is None:
            raise FolderNotFoundError(folder_id)
        return folder

    def snapshot(self) -> HierarchySnapshot:
        return HierarchySnapshot.from_folders(self.state.folders.values())

    def list_all(self) -> List[FolderRecord]:
        return [copy.copy(self.state.folders[fid]) for fid in sorted(self.state.folders)]

    def find_by_id(self, folder_id: int) -> Optional[FolderRecord]:
        folder = self.state.folders.get(folder_id)
        return copy.copy(folder) if folder else None

    def find_by_path(self, path: str) -> Optional[FolderRecord]:
        folder_id = self.snapshot().find_by_path(path)
        return self.find_by_id(folder_id) if folder_id is not None else None

    def exists(self, folder_id: int) -> bool:
        return folder_id in self.state.folders

    def has_spells(self, folder_id: int) -> bool:
        return any(s.folder_id == folder_id for s in self.state.spells.values())

    def has_subfolders(self, folder_id: int) -> bool:
        return any(f.parent_id == folder_id for f in self.state.folders.values())

    def is_empty(self, folder_id: int) -> bool:
        return not self.has_spells(folder_id) and not self.has_subfolders(folder_id)

    def count(self) -> int:
        return len(self.state.folders)

    def get_contents(self, folder_id: int) -> FolderContents:
        snap = self.snapshot()
        if not snap.contains(folder_id):
            raise FolderNotFoundError(folder_id)

        spell_counts: Dict[int, int] = {}
        for spell in self.state.spells.values():
            spell_counts[spell.folder_id] = spell_counts.get(spell.folder_id, 0) + 1

        child_ids = snap.children_of(folder_id)
        subtree = snap.subtree(folder_id)
        subfolders = []
        for cid in child_ids:
            child = self.state.folders[cid]
            subfolders.append(FolderWithPath(
                id=child.id,
                name=child.name,
                parent_id=child.parent_id,
                created_at=child.created_at,
                path=snap.path_of(cid),
            ))

        return FolderContents(
            spell_count=spell_counts.get(folder_id, 0),
            subfolder_count=len(child_ids),
            subfolders=subfolders,
            total_spells_recursive=sum(spell_counts.get(fid, 0) for fid in [folder_id] + subtree),
            total_subfolders_recursive=len(subtree),
        )

    def create(self, name: str, parent_id: Optional[int]) -> int:
        with self.store.atomic() as state:
            folder_id = state.next_folder_id
            state.next_folder_id += 1
            state.folders[folder_id] = FolderRecord(id=folder_id, name=name, parent_id=parent_id)
        return folder_id

    def rename(self, folder_id: int, name: str) -> None:
        self._require(folder_id).name = name

    def move(self, folder_id: int, parent_id: Optional[int]) -> None:
        self._require(folder_id).parent_id = parent_id

    def delete(self, folder_id: int) -> None:
        self._require(folder_id)
        del self.state.folders[folder_id]

    def delete_recursive(self, folder_id: int) -> None:
        snap = self.snapshot()
        if not snap.contains(folder_id):
            raise FolderNotFoundError(folder_id)
        doomed = set([folder_id] + snap.subtree(folder_id))

        with self.store.atomic() as state:
            spell_ids = {sid for sid, s in state.spells.items() if s.folder_id in doomed}
            state.known = {pair for pair in state.known if pair[1] not in spell_ids}
            for sid in spell_ids:
                del state.spells[sid]
            for fid in sorted(doomed, key=snap.depth, reverse=True):
                del state.folders[fid]

    def move_contents_to_parent(self, folder_id: int) -> None:
        folder = self._require(folder_id)
        parent_id = folder.parent_id if folder.parent_id is not None else ROOT_FOLDER_ID
        taken = self.snapshot().sibling_names(parent_id)

        with self.store.atomic() as state:
            for spell in state.spells.values():
                if spell.folder_id == folder_id:
                    spell.folder_id = parent_id
            children = sorted(
                (f for f in state.folders.values() if f.parent_id == folder_id),
                key=lambda f: (f.name, f.id),
            )
            for child in children:
                child.name = unique_sibling_name(child.name, taken)
                taken.add(child.name)
                child.parent_id = parent_id
            del state.folders[folder_id]


class InMemorySpellRepository(_InMemoryRepository):

    def _require(self, spell_id: str) -> SpellRecord:
        spell = self.state.spells.get(spell_id)
        if spell is None:
            raise SpellNotFoundError(spell_id)
        return spell

    @staticmethod
    def _sorted(spells: Iterable[SpellRecord]) -> List[SpellRecord]:
        return [copy.deepcopy(s) for s in sorted(spells, key=lambda s: (s.name, s.id))]

    def list_all(self, folder_id: Optional[int] = None, convocation: Optional[str] = None) -> List[SpellRecord]:
        return self._sorted(
            s for s in self.state.spells.values()
            if (folder_id is None or s.folder_id == folder_id)
            and (convocation is None or s.convocation == convocation)
        )

    def find_by_id(self, spell_id: str) -> Optional[SpellRecord]:
        spell = self.state.spells.get(spell_id)
        return copy.deepcopy(spell) if spell else None

    def find_by_ids(self, spell_ids: Iterable[str]) -> List[SpellRecord]:
        wanted = set(spell_ids)
        return self._sorted(s for sid, s in self.state.spells.items() if sid in wanted)

    def find_by_folder_id(self, folder_id: int) -> List[SpellRecord]:
        return self.list_all(folder_id=folder_id)

    def find_by_names(self, names: Iterable[str]) -> List[SpellRecord]:
        lowered = {name.lower() for name in names if name}
        return self._sorted(s for s in self.state.spells.values() if s.name.lower() in lowered)

    def search(self, query: str) -> List[SpellRecord]:
        needle = query.lower()
        return self._sorted(
            s for s in self.state.spells.values()
            if needle in s.name.lower()
            or needle in s.description.lower()
            or needle in s.convocation.lower()
        )

    def count(self) -> int:
        return len(self.state.spells)

    def create(self, values: Dict[str, Any]) -> SpellRecord:
        return self.create_many([values])[0]

    def create_many(self, rows: List[Dict[str, Any]]) -> List[SpellRecord]:
        created = []
        with self.store.atomic() as state:
            for values in rows:
                spell = SpellRecord(**values)
                if spell.folder_id not in state.folders:
                    raise FolderNotFoundError(spell.folder_id)
                state.spells[spell.id] = spell
                created.append(copy.deepcopy(spell))
        return created

    def update(self, spell_id: str, changes: Dict[str, Any]) -> SpellRecord:
        spell = self._require(spell_id)
        for key, value in changes.items():
            setattr(spell, key, value)
        spell.updated_at = _now()
        return copy.deepcopy(spell)

    def delete(self, spell_id: str) -> None:
        self._require(spell_id)
        with self.store.atomic() as state:
            del state.spells[spell_id]
            state.known = {pair for pair in state.known if pair[1] != spell_id}

    def move_spells_to_folder(self, from_folder_id: int, to_folder_id: int) -> int:
        moved = 0
        for spell in self.state.spells.values():
            if spell.folder_id == from_folder_id:
                spell.folder_id = to_folder_id
                moved += 1
        return moved

    def characters_knowing(self, spell_id: str) -> List[CharacterRecord]:
        repo = InMemoryCharacterRepository(self.store)
        ids = {cid for cid, sid in self.state.known if sid == spell_id}
        return [c for c in repo.list_all() if c.id in ids]


class InMemoryCharacterRepository(_InMemoryRepository):

    def _require(self, character_id: str) -> CharacterRecord:
        character = self.state.characters.get(character_id)
        if character is None:
            raise CharacterNotFoundError(character_id)
        return character

    def _view(self, character: CharacterRecord) -> CharacterRecord:
        view = copy.deepcopy(character)
        view.known_spell_ids = sorted(
            sid for cid, sid in self.state.known if cid == character.id
        )
        return view

    def list_all(self) -> List[CharacterRecord]:
        return [
            self._view(c)
            for c in sorted(self.state.characters.values(), key=lambda c: (c.name, c.id))
        ]

    def find_by_id(self, character_id: str) -> Optional[CharacterRecord]:
        character = self.state.characters.get(character_id)
        return self._view(character) if character else None

    def search(self, query: str) -> List[CharacterRecord]:
        needle = query.lower()
        return [
            c for c in self.list_all()
            if needle in c.name.lower() or needle in c.game.lower() or needle in c.rank.lower()
        ]

    def count(self) -> int:
        return len(self.state.characters)

    def create(self, values: Dict[str, Any], spell_ids: Iterable[str] = ()) -> CharacterRecord:
        with self.store.atomic() as state:
            character = CharacterRecord(**values)
            state.characters[character.id] = character
            for sid in spell_ids:
                if sid in state.spells:
                    state.known.add((character.id, sid))
        return self.find_by_id(character.id)

    def update(self, character_id: str, changes: Dict[str, Any]) -> CharacterRecord:
        character = self._require(character_id)
        for key, value in changes.items():
            setattr(character, key, value)
        character.updated_at = _now()
        return self._view(character)

    def delete(self, character_id: str) -> None:
        self._require(character_id)
        with self.store.atomic() as state:
            del state.characters[character_id]
            state.known = {pair for pair in state.known if pair[0] != character_id}

    def has_spell(self, character_id: str, spell_id: str) -> bool:
        return (character_id, spell_id) in self.state.known

    def add_spell(self, character_id: str, spell_id: str) -> None:
        self.state.known.add((character_id, spell_id))

    def remove_spell(self, character_id: str, spell_id: str) -> None:
        self.state.known.discard((character_id, spell_id))
