"""Tests for id-keyed table lookups and loot row normalization."""

from azoth.loot.convert import convert_loot_buckets, convert_loot_tables, parse_bucket_tags, parse_quantity
from azoth.tables import CaseInsensitiveDict, CaseInsensitiveSet, DbSlice, TableIndex, as_list, as_number


class TestCaseInsensitiveContainers:
    """Test case-folded dict and set behaviour."""

    def test_dict_lookup_ignores_case(self) -> None:
        """Keys are found regardless of spelling, original spelling is kept."""
        d = CaseInsensitiveDict([("Level", 10)])
        assert d["level"] == 10
        assert "LEVEL" in d
        assert d.keys() == ["Level"]

    def test_numeric_ids_match_string_form(self) -> None:
        """A numeric key is reachable through its string form."""
        d = CaseInsensitiveDict([(5, "five")])
        assert d.get("5") == "five"

    def test_set_ignores_empty_items(self) -> None:
        """None and empty strings are never members."""
        s = CaseInsensitiveSet(["Named", "", None])
        assert len(s) == 1
        assert "named" in s
        assert None not in s


class TestTableIndex:
    """Test TableIndex construction rules."""

    def test_first_row_wins_and_rows_without_id_are_skipped(self) -> None:
        """Duplicate ids keep the first row; rows lacking the key are dropped."""
        index = TableIndex(
            [{"PerkID": "A", "n": 1}, {"PerkID": "a", "n": 2}, {"n": 3}, "junk"],
            key="PerkID",
        )
        assert len(index) == 1
        assert index.get("A")["n"] == 1
        assert index.ids() == ["A"]

    def test_missing_id_returns_default(self) -> None:
        """Unknown ids return the default instead of raising."""
        assert TableIndex([], key="PerkID").get("X", {}) == {}


class TestCellHelpers:
    """Test list and number coercion of table cells."""

    def test_as_list(self) -> None:
        """Comma strings, lists and empty cells normalize to lists."""
        assert as_list("a, b,,c") == ["a", "b", "c"]
        assert as_list(["a", None, ""]) == ["a"]
        assert as_list(None) == []
        assert as_list(3) == [3]

    def test_as_number(self) -> None:
        """Numeric strings convert, junk falls back to the default."""
        assert as_number("0.5") == 0.5
        assert as_number("abc", 7) == 7
        assert as_number(None) == 0.0


class TestLootConversion:
    """Test normalization of raw loot rows."""

    def test_table_rows_are_merged(self, raw_tables) -> None:
        """Main, _Probs and _Qty rows fold into one entry with typed items."""
        tables = {t["LootTableID"]: t for t in convert_loot_tables(raw_tables["loot_tables"])}
        assert set(tables) == {"Root", "Sub", "Loop"}
        root = tables["Root"]
        assert root["AndOr"] == "OR"
        assert root["MaxRoll"] == 100
        assert root["Conditions"] == []
        assert root["Items"][0] == {"LootTableID": "Sub", "Prob": "0", "Qty": "1"}
        assert root["Items"][1]["ItemID"] == "Gem"
        assert root["Items"][2]["LootBucketID"] == "BucketA"
        assert tables["Sub"]["Conditions"] == ["Level"]

    def test_bucket_columns_are_flattened(self, raw_tables) -> None:
        """Column-wise bucket rows become one dict per item."""
        rows = convert_loot_buckets(raw_tables["loot_buckets"])
        assert [r["Item"] for r in rows] == ["Pearl", "Amber"]
        pearl = rows[0]
        assert pearl["LootBucket"] == "BucketA"
        assert pearl["MatchOne"] is True
        assert pearl["Quantity"] == [1, 2]
        assert pearl["Tags"]["level"]["Value"] == [10, 20]
        assert pearl["Tags"]["Named"]["Value"] is None

    def test_parse_quantity(self) -> None:
        """Ranges, single numbers and junk."""
        assert parse_quantity("1-3") == [1, 3]
        assert parse_quantity(4) == [4]
        assert parse_quantity("x") == []

    def test_parse_bucket_tags(self) -> None:
        """Tags with and without values."""
        tags = parse_bucket_tags("Level:30,Elite")
        assert tags["LEVEL"] == {"Name": "Level", "Value": [30]}
        assert tags["elite"] == {"Name": "Elite", "Value": None}


class TestDbSlice:
    """Test DbSlice assembly."""

    def test_from_tables_indexes_everything(self, db: DbSlice) -> None:
        """Indexed tables answer case-insensitive lookups."""
        assert db.items.get("sword_t5")["ItemStatsRef"] == "1hSword_T5"
        assert db.loot_tables.get("root") is not None
        assert len(db.bucket_rows("bucketa")) == 2
        assert db.level_table("str")[0]["Level"] == 5

    def test_stats_counts_rows(self, db: DbSlice) -> None:
        """stats() reports one count per table."""
        stats = db.stats()
        assert stats["loot_tables"] == 3
        assert stats["loot_buckets"] == 2
        assert stats["damage_table"] == 3
        assert stats["attr_str"] == 3

    def test_empty_slice(self) -> None:
        """An empty DbSlice is valid."""
        empty = DbSlice.from_tables({})
        assert empty.stats()["items"] == 0
        assert empty.bucket_rows("x") == []
