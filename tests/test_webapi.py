"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from apps.webapi.app import create_app
from apps.webapi.settings import WebApiSettings


@pytest.fixture
def client(db) -> TestClient:
    return TestClient(create_app(db=db))


class TestMeta:
    """Test metadata and table browsing."""

    def test_healthz(self, client) -> None:
        assert client.get("/healthz").json() == {"ok": True}

    def test_meta(self, client) -> None:
        body = client.get("/api/v1/meta").json()
        assert body["source"] == {"mode": "memory"}
        assert body["tables"]["items"] == 5
        assert "project_version" in body

    def test_tables(self, client) -> None:
        tables = {t["name"]: t["rows"] for t in client.get("/api/v1/tables").json()["tables"]}
        assert tables["perks"] == 5
        assert tables["damage_table"] == 3
        assert tables["attr_str"] == 3

    def test_record(self, client) -> None:
        body = client.get("/api/v1/tables/items/sword_t5").json()
        assert body["record"]["ItemID"] == "Sword_T5"
        assert client.get("/api/v1/tables/damage_table/1hSword_Heavy1").json()["record"]["DmgCoef"] == 1.5
        levels = client.get("/api/v1/tables/attr_str/20").json()["record"]
        assert [r["Health"] for r in levels] == [120]

    def test_record_not_found(self, client) -> None:
        assert client.get("/api/v1/tables/nope/x").status_code == 404
        assert client.get("/api/v1/tables/items/nope").status_code == 404


class TestLoot:
    """Test the loot tree endpoint."""

    def test_tree(self, client) -> None:
        resp = client.get("/api/v1/loot/tables/Root", params={"value": "Level=50", "highlight": "Sword_T5"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["context"]["values"] == {"Level": 50.0}
        assert body["root"]["highlight"] is True
        refs = {c["ref"] for c in body["root"]["children"]}
        assert refs == {"Sub", "Gem", "BucketA"}

    def test_bucket_root(self, client) -> None:
        body = client.get("/api/v1/loot/tables/BucketA").json()
        assert body["root"]["type"] == "bucket"

    def test_unknown(self, client) -> None:
        assert client.get("/api/v1/loot/tables/Nope").status_code == 404

    def test_bad_value_pair(self, client) -> None:
        assert client.get("/api/v1/loot/tables/Root", params={"value": "Level"}).status_code == 422


class TestMannequin:
    """Test build resolution over HTTP."""

    def _payload(self, **extra):
        payload = {
            "level": 60,
            "equipped_items": [
                {"slot": "weapon1", "item_id": "Sword_T5", "gear_score": 600},
                {"slot": "chest", "item_id": "Chest_T5", "gear_score": 500},
            ],
            "enforced_effects": [{"id": "TownBuff_Dmg", "stack": 3}],
        }
        payload.update(extra)
        return payload

    def test_resolve(self, client) -> None:
        resp = client.post("/api/v1/mannequin", json=self._payload())
        assert resp.status_code == 200
        body = resp.json()
        assert body["weapon"]["weapon_tag"] == "Sword"
        assert body["attributes"]["str"]["total"] == 20
        assert body["stats"]["DMGSlash"]["value"] == pytest.approx(0.2)
        assert body["equip_load_category"] == "fast"
        assert body["gear_score"] == 110

    def test_bonuses(self, client) -> None:
        body = client.post(
            "/api/v1/mannequin",
            json=self._payload(bonuses=[{"key": "DMGSlash", "value": 0.1, "name": "fort"}]),
        ).json()
        assert body["stats"]["DMGSlash"]["value"] == pytest.approx(0.3)
        assert body["stats"]["DMGSlash"]["source"][0]["source"] == {"label": "fort"}

    def test_validation(self, client) -> None:
        assert client.post("/api/v1/mannequin", json=self._payload(level=0)).status_code == 422
        assert client.post("/api/v1/mannequin", json={"equipped_items": [{"slot": "weapon1"}]}).status_code == 422


class TestDmg:
    """Test the damage sandbox endpoint."""

    def test_simulate(self, client) -> None:
        body = client.post("/api/v1/dmg", json={"weapon_id": "1hSword_T5", "attack_id": "1hSword_Heavy1"}).json()
        assert body["attack"]["id"] == "1hSword_Heavy1"
        assert body["damage"]["crit"] > body["damage"]["standard"]

    def test_unknown_weapon(self, client) -> None:
        assert client.post("/api/v1/dmg", json={"weapon_id": "Nope"}).status_code == 404

    def test_penetration_bounds(self, client) -> None:
        resp = client.post("/api/v1/dmg", json={"weapon_id": "1hSword_T5", "armor_penetration": 2})
        assert resp.status_code == 422


class TestExpression:
    """Test the expression endpoint."""

    def test_solve(self, client) -> None:
        body = client.post(
            "/api/v1/expression",
            json={"text": "${perkMultiplier * 10}%", "item_id": "PerkID_Stat_Str", "gear_score": 600},
        ).json()
        assert body == {"text": "15%", "error": None}

    def test_lenient_error(self, client) -> None:
        body = client.post("/api/v1/expression", json={"text": "Gain ${foo}"}).json()
        assert body["text"] == "Gain ${foo}"
        assert body["error"]["token"] == "foo"

    def test_strict_error(self, client) -> None:
        resp = client.post("/api/v1/expression", json={"text": "Gain ${foo}", "strict": True})
        assert resp.status_code == 422
        assert resp.json()["detail"]["token"] == "foo"

    def test_non_arithmetic_is_lenient(self, client) -> None:
        resp = client.post("/api/v1/expression", json={"text": "x ${(1)(2)} y"})
        assert resp.status_code == 200
        assert resp.json()["text"] == "x ${(1)(2)} y"


class TestSettings:
    """Test settings parsing."""

    def test_root_path(self) -> None:
        assert WebApiSettings.normalize_root_path("") == ""
        assert WebApiSettings.normalize_root_path("azoth/") == "/azoth"

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("AZOTH_ROOT_PATH", "/lab")
        monkeypatch.setenv("AZOTH_CORS_ORIGINS", "http://a, http://b")
        monkeypatch.delenv("AZOTH_DATA_ROOT", raising=False)
        s = WebApiSettings.from_env()
        assert s.root_path == "/lab"
        assert s.cors_allow_origins == ["http://a", "http://b"]
        assert s.data_root is None
