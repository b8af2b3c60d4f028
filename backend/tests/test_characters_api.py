"""Tests for character endpoints and the known-spell relationship."""

from tests.conftest import make_character, make_spell


def _spell(client, **kwargs) -> str:
    return client.post("/api/spells", json=make_spell(**kwargs)).json()["id"]


def _character(client, **kwargs) -> str:
    resp = client.post("/api/characters", json=make_character(**kwargs))
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


class TestCharacterCrud:

    def test_create_and_get(self, client):
        character_id = _character(client, name="Aldric")
        resp = client.get(f"/api/characters/{character_id}")
        assert resp.status_code == 200
        body = resp.json()
        assert body["name"] == "Aldric"
        assert body["known_spell_ids"] == []

    def test_empty_convocations_is_422(self, client):
        resp = client.post("/api/characters", json=make_character(convocations=[]))
        assert resp.status_code == 422

    def test_list_and_search(self, client):
        _character(client, name="Aldric")
        _character(client, name="Brenna")
        assert len(client.get("/api/characters").json()) == 2
        resp = client.get("/api/characters/search", params={"q": "bren"})
        assert [c["name"] for c in resp.json()] == ["Brenna"]

    def test_update(self, client):
        character_id = _character(client)
        resp = client.put(f"/api/characters/{character_id}", json={"rank": "Sheneva"})
        assert resp.status_code == 200
        assert resp.json()["rank"] == "Sheneva"

    def test_delete(self, client):
        character_id = _character(client)
        assert client.delete(f"/api/characters/{character_id}").status_code == 204
        assert client.get(f"/api/characters/{character_id}").status_code == 404


class TestKnownSpells:

    def test_add_eligible_spell(self, client):
        character_id = _character(client, convocations=["Lyahvi"])
        spell_id = _spell(client, convocation="Lyahvi")
        resp = client.post(f"/api/characters/{character_id}/spells", json={"spell_id": spell_id})
        assert resp.status_code == 201
        assert resp.json()["known_spell_ids"] == [spell_id]

        spells = client.get(f"/api/characters/{character_id}/spells").json()
        assert [s["id"] for s in spells] == [spell_id]

    def test_ineligible_spell_returns_400(self, client):
        character_id = _character(client, convocations=["Lyahvi"])
        spell_id = _spell(client, convocation="Peleahn")
        resp = client.post(f"/api/characters/{character_id}/spells", json={"spell_id": spell_id})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "CONVOCATION_NOT_ELIGIBLE"
        assert "Peleahn" in body["message"]

    def test_add_twice_returns_409(self, client):
        character_id = _character(client, convocations=["Lyahvi"])
        spell_id = _spell(client, convocation="Neutral")
        client.post(f"/api/characters/{character_id}/spells", json={"spell_id": spell_id})
        resp = client.post(f"/api/characters/{character_id}/spells", json={"spell_id": spell_id})
        assert resp.status_code == 409

    def test_remove(self, client):
        character_id = _character(client)
        spell_id = _spell(client, convocation="Neutral")
        client.post(f"/api/characters/{character_id}/spells", json={"spell_id": spell_id})
        resp = client.delete(f"/api/characters/{character_id}/spells/{spell_id}")
        assert resp.status_code == 204

    def test_remove_absent_relation_returns_404(self, client):
        character_id = _character(client)
        spell_id = _spell(client, convocation="Neutral")
        resp = client.delete(f"/api/characters/{character_id}/spells/{spell_id}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "CHARACTER_SPELL_NOT_FOUND"


class TestImport:

    def test_import_characters(self, client):
        _spell(client, name="Glimmer", convocation="Lyahvi")
        payload = {"characters": [dict(make_character(name="Aldric"), known_spells=["glimmer", "Missing"])]}
        resp = client.post("/api/characters/import", json=payload)
        assert resp.status_code == 201
        body = resp.json()
        assert body["characters_imported"] == 1
        assert body["spells_assigned"] == 1
        assert body["previews"][0]["spells"]["not_found"] == ["Missing"]
