"""Tests for the table manifest builder and its rebuild cache."""

from azoth.engine import AzothEngine
from devtools import build_cache
from devtools.build_table_index import build_table_index


class TestTableIndex:
    """Test the manifest document."""

    def test_manifest(self, data_dir) -> None:
        with AzothEngine(str(data_dir), silent=True) as engine:
            index = build_table_index(engine)
        assert index["meta"]["tool"] == "devtools/build_table_index.py"
        assert index["meta"]["sources"]["mode"] == "folder"
        assert index["tables"]["items"]["rows"] == 5
        assert len(index["tables"]["items"]["files"]) == 2
        assert index["tables"]["housings"] == {"files": [], "rows": 0}
        assert index["indexed"]["items"] == 5


class TestBuildCache:
    """Test signatures and the up-to-date check."""

    def test_missing_file_sig(self, tmp_path) -> None:
        assert build_cache.file_sig(tmp_path / "nope.json")["exists"] is False

    def test_roundtrip_and_skip(self, tmp_path) -> None:
        path = tmp_path / "cache.json"
        assert build_cache.load_cache(path) == {}
        inputs = {"schema": 1}
        outputs = {"out": build_cache.file_sig(tmp_path / "out.json")}
        build_cache.save_cache({"k": {"signature": inputs, "outputs": outputs}}, path)
        cache = build_cache.load_cache(path)
        assert build_cache.is_up_to_date(cache, "k", inputs, outputs)
        assert not build_cache.is_up_to_date(cache, "k", {"schema": 2}, outputs)
        assert not build_cache.is_up_to_date(cache, "other", inputs, outputs)

    def test_broken_cache_is_empty(self, tmp_path) -> None:
        path = tmp_path / "cache.json"
        path.write_text("{broken", encoding="utf-8")
        assert build_cache.load_cache(path) == {}

    def test_folder_source_sig(self, data_dir) -> None:
        with AzothEngine(str(data_dir), silent=True) as engine:
            sig = build_cache.source_sig(engine)
        assert sig["mode"] == "folder"
        assert sig["source"]["count"] == len(engine.file_list)
