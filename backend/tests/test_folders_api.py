"""Tests for folder endpoints."""

from tests.conftest import make_spell


def _create(client, name, parent_id=1):
    resp = client.post("/api/folders", json={"name": name, "parent_id": parent_id})
    assert resp.status_code == 201, resp.text
    return resp.json()["folder_id"]


class TestTree:

    def test_tree_starts_at_root(self, client):
        resp = client.get("/api/folders")
        assert resp.status_code == 200
        tree = resp.json()
        assert len(tree) == 1
        assert tree[0]["id"] == 1
        assert tree[0]["path"] == "/"

    def test_tree_reflects_folders(self, client):
        a = _create(client, "Elementalism")
        _create(client, "Fire", a)
        root = client.get("/api/folders").json()[0]
        assert root["children"][0]["name"] == "Elementalism"
        assert root["children"][0]["children"][0]["path"] == "/Elementalism/Fire"

    def test_flat_listing(self, client):
        _create(client, "A")
        resp = client.get("/api/folders/flat")
        assert {f["path"] for f in resp.json()} == {"/", "/A"}


class TestFolderCrud:

    def test_create_and_get(self, client):
        folder_id = _create(client, "Wards")
        resp = client.get(f"/api/folders/{folder_id}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Wards"

    def test_duplicate_returns_409(self, client):
        _create(client, "Dup")
        resp = client.post("/api/folders", json={"name": "Dup"})
        assert resp.status_code == 409
        body = resp.json()
        assert body["error"] == "FOLDER_NAME_CONFLICT"
        assert body["kind"] == "conflict"

    def test_slash_in_name_returns_400(self, client):
        resp = client.post("/api/folders", json={"name": "a/b"})
        assert resp.status_code == 400
        assert resp.json()["kind"] == "validation"

    def test_missing_parent_returns_404(self, client):
        resp = client.post("/api/folders", json={"name": "X", "parent_id": 999})
        assert resp.status_code == 404

    def test_by_path(self, client):
        a = _create(client, "A")
        b = _create(client, "B", a)
        resp = client.get("/api/folders/by-path", params={"path": "/A/B"})
        assert resp.status_code == 200
        assert resp.json()["id"] == b

    def test_rename(self, client):
        folder_id = _create(client, "Old")
        resp = client.patch(f"/api/folders/{folder_id}/rename", json={"new_name": "New"})
        assert resp.status_code == 200
        assert client.get(f"/api/folders/{folder_id}").json()["name"] == "New"

    def test_rename_root_returns_400(self, client):
        resp = client.patch("/api/folders/1/rename", json={"new_name": "Root"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "ROOT_FOLDER_IMMUTABLE"

    def test_move_cycle_returns_400(self, client):
        a = _create(client, "A")
        b = _create(client, "B", a)
        resp = client.patch(f"/api/folders/{a}/move", json={"new_parent_id": b})
        assert resp.status_code == 400
        assert resp.json()["error"] == "FOLDER_CYCLE"

    def test_move_to_root_with_null(self, client):
        a = _create(client, "A")
        b = _create(client, "B", a)
        resp = client.patch(f"/api/folders/{b}/move", json={"new_parent_id": None})
        assert resp.status_code == 200
        assert client.get(f"/api/folders/{b}").json()["parent_id"] == 1


class TestDeleteAndContents:

    def test_contents(self, client):
        f = _create(client, "F")
        _create(client, "Child", f)
        client.post("/api/spells", json=make_spell(folder_id=f))
        resp = client.get(f"/api/folders/{f}/contents")
        assert resp.status_code == 200
        data = resp.json()
        assert data["spell_count"] == 1
        assert data["subfolder_count"] == 1
        assert data["total_spells_recursive"] == 1

    def test_delete_default_is_empty_only(self, client):
        f = _create(client, "F")
        client.post("/api/spells", json=make_spell(folder_id=f))
        resp = client.delete(f"/api/folders/{f}")
        assert resp.status_code == 400
        assert resp.json()["error"] == "FOLDER_NOT_EMPTY"

    def test_delete_recursive(self, client):
        f = _create(client, "F")
        spell_id = client.post("/api/spells", json=make_spell(folder_id=f)).json()["id"]
        resp = client.delete(f"/api/folders/{f}", params={"strategy": "recursive"})
        assert resp.status_code == 200
        assert resp.json()["affected_spells"] == 1
        assert client.get(f"/api/folders/{f}").status_code == 404
        assert client.get(f"/api/spells/{spell_id}").status_code == 404

    def test_delete_move_to_parent(self, client):
        f = _create(client, "F")
        spell_id = client.post("/api/spells", json=make_spell(folder_id=f)).json()["id"]
        resp = client.delete(f"/api/folders/{f}", params={"strategy": "move-to-parent"})
        assert resp.status_code == 200
        assert client.get(f"/api/spells/{spell_id}").json()["folder_id"] == 1

    def test_delete_unknown_strategy(self, client):
        f = _create(client, "F")
        resp = client.delete(f"/api/folders/{f}", params={"strategy": "shred"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "INVALID_DELETE_STRATEGY"

    def test_delete_root_recursive_returns_400(self, client):
        resp = client.delete("/api/folders/1", params={"strategy": "recursive"})
        assert resp.status_code == 400
