"""Unit tests for FolderService, run against both repository backends.

Covers validation order, root immutability, cycle prevention, sibling-name
uniqueness and the three deletion strategies.
"""

import pytest

from grimoire.core.hierarchy import HierarchySnapshot, ROOT_FOLDER_ID
from grimoire.repositories import folder_repository, memory
from grimoire.exceptions import (
    ErrorKind,
    FolderCycleError,
    FolderNameConflictError,
    FolderNotEmptyError,
    FolderNotFoundError,
    InvalidDeleteStrategyError,
    RootFolderImmutableError,
    ValidationError,
)
from tests.conftest import create_character, create_spell


class TestCreateFolder:

    def test_create_returns_new_id(self, folder_service):
        folder_id = folder_service.create_folder("Elementalism", ROOT_FOLDER_ID)
        assert folder_id != ROOT_FOLDER_ID
        assert folder_service.get_folder(folder_id).path == "/Elementalism"

    def test_duplicate_sibling_name_conflicts(self, folder_service):
        folder_service.create_folder("Elementalism", ROOT_FOLDER_ID)
        with pytest.raises(FolderNameConflictError) as exc:
            folder_service.create_folder("Elementalism", ROOT_FOLDER_ID)
        assert exc.value.kind == ErrorKind.CONFLICT

    def test_same_name_under_different_parents(self, folder_service):
        a = folder_service.create_folder("A")
        b = folder_service.create_folder("B")
        folder_service.create_folder("Shared", a)
        folder_service.create_folder("Shared", b)

    def test_name_is_stripped(self, folder_service):
        folder_id = folder_service.create_folder("  Wards ")
        assert folder_service.get_folder(folder_id).name == "Wards"

    def test_none_parent_means_root(self, folder_service):
        folder_id = folder_service.create_folder("Top", None)
        assert folder_service.get_folder(folder_id).parent_id == ROOT_FOLDER_ID

    def test_missing_parent_is_not_found(self, folder_service):
        with pytest.raises(FolderNotFoundError):
            folder_service.create_folder("Orphan", 999)

    def test_name_shape_checked_before_parent(self, folder_service):
        with pytest.raises(ValidationError):
            folder_service.create_folder("a/b", 999)


class TestRenameFolder:

    def test_rename(self, folder_service):
        folder_id = folder_service.create_folder("Old")
        folder_service.rename_folder(folder_id, "New")
        assert folder_service.get_folder(folder_id).name == "New"

    def test_rename_to_current_name_is_noop(self, folder_service):
        folder_id = folder_service.create_folder("Same")
        result = folder_service.rename_folder(folder_id, "Same")
        assert result.folder_id == folder_id
        assert folder_service.get_folder(folder_id).name == "Same"

    def test_rename_conflicts_with_sibling(self, folder_service):
        folder_service.create_folder("Taken")
        folder_id = folder_service.create_folder("Other")
        with pytest.raises(FolderNameConflictError):
            folder_service.rename_folder(folder_id, "Taken")

    def test_rename_root_rejected(self, folder_service):
        with pytest.raises(RootFolderImmutableError):
            folder_service.rename_folder(ROOT_FOLDER_ID, "Root")

    def test_rename_missing_is_not_found(self, folder_service):
        with pytest.raises(FolderNotFoundError):
            folder_service.rename_folder(999, "Ghost")


class TestMoveFolder:

    def test_move_under_new_parent(self, folder_service):
        a = folder_service.create_folder("A")
        b = folder_service.create_folder("B")
        folder_service.move_folder(b, a)
        assert folder_service.get_folder(b).path == "/A/B"

    def test_move_into_own_child_is_cycle(self, folder_service):
        a = folder_service.create_folder("A")
        b = folder_service.create_folder("B", a)
        with pytest.raises(FolderCycleError) as exc:
            folder_service.move_folder(a, b)
        assert exc.value.kind == ErrorKind.VALIDATION

    def test_move_into_deep_descendant_is_cycle(self, folder_service):
        a = folder_service.create_folder("A")
        b = folder_service.create_folder("B", a)
        c = folder_service.create_folder("C", b)
        with pytest.raises(FolderCycleError):
            folder_service.move_folder(a, c)

    def test_move_into_itself_is_cycle(self, folder_service):
        a = folder_service.create_folder("A")
        with pytest.raises(FolderCycleError):
            folder_service.move_folder(a, a)

    def test_move_name_conflict_at_target(self, folder_service):
        a = folder_service.create_folder("A")
        folder_service.create_folder("Dup", a)
        dup = folder_service.create_folder("Dup")
        with pytest.raises(FolderNameConflictError):
            folder_service.move_folder(dup, a)

    def test_move_to_root_with_none(self, folder_service):
        a = folder_service.create_folder("A")
        b = folder_service.create_folder("B", a)
        folder_service.move_folder(b, None)
        assert folder_service.get_folder(b).parent_id == ROOT_FOLDER_ID

    def test_move_to_current_parent_is_noop(self, folder_service):
        a = folder_service.create_folder("A")
        folder_service.move_folder(a, ROOT_FOLDER_ID)
        assert folder_service.get_folder(a).parent_id == ROOT_FOLDER_ID

    def test_move_root_rejected(self, folder_service):
        a = folder_service.create_folder("A")
        with pytest.raises(RootFolderImmutableError):
            folder_service.move_folder(ROOT_FOLDER_ID, a)

    def test_missing_target_is_not_found(self, folder_service):
        a = folder_service.create_folder("A")
        with pytest.raises(FolderNotFoundError):
            folder_service.move_folder(a, 999)


class TestDeleteFolder:

    def test_empty_only_deletes_empty_folder(self, folder_service):
        a = folder_service.create_folder("A")
        result = folder_service.delete_folder(a, "empty-only")
        assert result.strategy == "empty-only"
        with pytest.raises(FolderNotFoundError):
            folder_service.get_folder(a)

    def test_empty_only_checks_without_listing_spells(self, folder_service, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("spells listed")

        monkeypatch.setattr(folder_service.spell_repo, "list_all", fail)
        a = folder_service.create_folder("A")
        result = folder_service.delete_folder(a, "empty-only")
        assert (result.affected_spells, result.affected_folders) == (0, 0)

    def test_empty_only_refuses_folder_with_spell(self, folder_service, spell_service):
        f = folder_service.create_folder("F")
        create_spell(spell_service, folder_id=f)
        with pytest.raises(FolderNotEmptyError):
            folder_service.delete_folder(f, "empty-only")

    def test_empty_only_refuses_folder_with_subfolder(self, folder_service):
        f = folder_service.create_folder("F")
        folder_service.create_folder("Child", f)
        with pytest.raises(FolderNotEmptyError):
            folder_service.delete_folder(f, "empty-only")

    def test_recursive_removes_subtree_and_spells(self, folder_service, spell_service):
        f = folder_service.create_folder("F")
        child = folder_service.create_folder("Child", f)
        # Keep ids only: ORM rows removed by the bulk delete cannot be refreshed.
        spell_ids = [
            create_spell(spell_service, name="Top", folder_id=f).id,
            create_spell(spell_service, name="Deep", folder_id=child).id,
        ]

        result = folder_service.delete_folder(f, "recursive")

        assert result.affected_spells == 2
        assert result.affected_folders == 1
        for spell_id in spell_ids:
            assert spell_service.spell_repo.find_by_id(spell_id) is None
        assert folder_service.folder_repo.find_by_id(child) is None

    def test_recursive_clears_known_spells(self, folder_service, spell_service, character_service):
        f = folder_service.create_folder("F")
        spell = create_spell(spell_service, convocation="Neutral", folder_id=f)
        character = create_character(character_service)
        character_service.add_spell_to_character(character.id, spell.id)

        folder_service.delete_folder(f, "recursive")

        assert character_service.get_character(character.id).known_spell_ids == []

    def test_move_to_parent_reparents_contents(self, folder_service, spell_service):
        outer = folder_service.create_folder("Outer")
        f = folder_service.create_folder("F", outer)
        child = folder_service.create_folder("Child", f)
        spell = create_spell(spell_service, folder_id=f)

        result = folder_service.delete_folder(f, "move-to-parent")

        assert result.affected_spells == 1
        assert result.affected_folders == 1
        assert spell_service.get_spell(spell.id).folder_id == outer
        assert folder_service.get_folder(child).parent_id == outer

    def test_move_to_parent_renames_colliding_children(self, folder_service):
        folder_service.create_folder("Shared")
        f = folder_service.create_folder("F")
        moved = folder_service.create_folder("Shared", f)
        same_as_deleted = folder_service.create_folder("F", f)

        folder_service.delete_folder(f, "move-to-parent")

        assert folder_service.get_folder(moved).name == "Shared_1"
        assert folder_service.get_folder(same_as_deleted).name == "F_1"
        names = [node.name for node in folder_service.get_tree()[0].children]
        assert len(names) == len(set(names))

    def test_root_cannot_be_deleted(self, folder_service):
        for strategy in ("empty-only", "move-to-parent", "recursive"):
            with pytest.raises(RootFolderImmutableError):
                folder_service.delete_folder(ROOT_FOLDER_ID, strategy)

    def test_missing_folder_is_not_found(self, folder_service):
        with pytest.raises(FolderNotFoundError):
            folder_service.delete_folder(999, "recursive")

    def test_unknown_strategy(self, folder_service):
        a = folder_service.create_folder("A")
        with pytest.raises(InvalidDeleteStrategyError) as exc:
            folder_service.delete_folder(a, "shred")
        assert "recursive" in exc.value.details["allowed"]


class TestDeleteAtomicity:
    """A failure halfway through a structural delete leaves nothing changed."""

    @staticmethod
    def _fail(*args, **kwargs):
        raise RuntimeError("storage failure")

    def test_move_to_parent_rolls_back(self, folder_service, spell_service, monkeypatch):
        f = folder_service.create_folder("F")
        child = folder_service.create_folder("Child", f)
        spell_id = create_spell(spell_service, folder_id=f).id
        monkeypatch.setattr(folder_repository, "unique_sibling_name", self._fail)
        monkeypatch.setattr(memory, "unique_sibling_name", self._fail)

        with pytest.raises(RuntimeError):
            folder_service.delete_folder(f, "move-to-parent")

        assert spell_service.get_spell(spell_id).folder_id == f
        assert folder_service.get_folder(f).id == f
        assert folder_service.get_folder(child).parent_id == f

    def test_recursive_rolls_back(self, folder_service, spell_service, character_service, monkeypatch):
        f = folder_service.create_folder("F")
        child = folder_service.create_folder("Child", f)
        spell_id = create_spell(spell_service, convocation="Neutral", folder_id=child).id
        character_id = create_character(character_service).id
        character_service.add_spell_to_character(character_id, spell_id)
        # Folder removal is ordered by depth after the spells are gone.
        monkeypatch.setattr(HierarchySnapshot, "depth", self._fail)

        with pytest.raises(RuntimeError):
            folder_service.delete_folder(f, "recursive")

        assert spell_service.get_spell(spell_id).folder_id == child
        assert folder_service.get_folder(child).parent_id == f
        assert character_service.get_character(character_id).known_spell_ids == [spell_id]


class TestReads:

    def test_contents_counts(self, folder_service, spell_service):
        f = folder_service.create_folder("F")
        child = folder_service.create_folder("Child", f)
        folder_service.create_folder("Grandchild", child)
        create_spell(spell_service, name="One", folder_id=f)
        create_spell(spell_service, name="Two", folder_id=child)

        contents = folder_service.get_folder_contents(f)

        assert contents.spell_count == 1
        assert contents.subfolder_count == 1
        assert [s.name for s in contents.subfolders] == ["Child"]
        assert contents.subfolders[0].path == "/F/Child"
        assert contents.total_spells_recursive == 2
        assert contents.total_subfolders_recursive == 2

    def test_contents_missing_folder(self, folder_service):
        with pytest.raises(FolderNotFoundError):
            folder_service.get_folder_contents(999)

    def test_tree_nests_children(self, folder_service):
        a = folder_service.create_folder("A")
        folder_service.create_folder("B", a)
        tree = folder_service.get_tree()
        assert len(tree) == 1
        assert tree[0].id == ROOT_FOLDER_ID
        assert tree[0].children[0].name == "A"
        assert tree[0].children[0].children[0].path == "/A/B"

    def test_get_by_path(self, folder_service):
        a = folder_service.create_folder("A")
        b = folder_service.create_folder("B", a)
        assert folder_service.get_folder_by_path("/A/B").id == b
        with pytest.raises(FolderNotFoundError):
            folder_service.get_folder_by_path("/A/Missing")

    def test_list_folders_includes_root(self, folder_service):
        folder_service.create_folder("A")
        paths = {f.path for f in folder_service.list_folders()}
        assert paths == {"/", "/A"}
