"""Tests for mounting datatables sources."""

import json
import zipfile

import pytest

from azoth.engine import AzothEngine, TableError


def _write(path, data) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


class TestMount:
    """Test source detection."""

    def test_folder(self, data_dir) -> None:
        engine = AzothEngine(str(data_dir), silent=True)
        assert engine.mode == "folder"
        assert "readme.txt" not in engine.file_list
        assert "weaponabilities/javelindata_ability_sword.json" in engine.file_list

    def test_zip(self, tmp_path, data_dir) -> None:
        archive = tmp_path / "datatables.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            for path in data_dir.rglob("*.json"):
                zf.write(path, path.relative_to(data_dir).as_posix())
        with AzothEngine(str(archive), silent=True) as engine:
            assert engine.mode == "zip"
            assert len(engine.load_table("items")) == 5

    def test_missing_source(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            AzothEngine(str(tmp_path / "nope"), silent=True)


class TestTables:
    """Test table loading."""

    def test_table_files_by_pattern(self, data_dir) -> None:
        """Split tables collect every matching file."""
        engine = AzothEngine(str(data_dir), silent=True)
        assert len(engine.table_files("items")) == 2
        assert engine.table_files("abilities") == ["weaponabilities/javelindata_ability_sword.json"]
        assert engine.table_files("housings") == []

    def test_unknown_table(self, data_dir) -> None:
        engine = AzothEngine(str(data_dir), silent=True)
        with pytest.raises(KeyError):
            engine.table_files("nope")

    def test_rows_wrapper(self, data_dir) -> None:
        """A {"rows": [...]} document is unwrapped."""
        engine = AzothEngine(str(data_dir), silent=True)
        assert [r["PerkID"] for r in engine.load_table("perks")][0] == "PerkID_Stat_Str"

    def test_bad_json(self, data_dir) -> None:
        (data_dir / "javelindata_perks.json").write_text("{not json", encoding="utf-8")
        engine = AzothEngine(str(data_dir), silent=True)
        with pytest.raises(TableError):
            engine.load_table("perks")

    def test_not_a_row_list(self, data_dir) -> None:
        _write(data_dir / "javelindata_perks.json", {"PerkID": "x"})
        engine = AzothEngine(str(data_dir), silent=True)
        with pytest.raises(TableError):
            engine.load_table("perks")

    def test_db_is_indexed_once(self, data_dir) -> None:
        engine = AzothEngine(str(data_dir), silent=True)
        db = engine.db()
        assert engine.db() is db
        assert db.items.get("ring") is not None
        assert db.abilities.get("Ability_Refresh")["CritDamage"] == 0.1
        assert db.loot_tables.get("Root")["AndOr"] == "OR"
        assert len(db.bucket_rows("BucketA")) == 2
        assert db.stats()["housings"] == 0
