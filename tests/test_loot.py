"""Tests for loot gating and loot graph expansion."""

import pytest

from azoth.loot import LootContext, LootGraph, build_loot_graph
from azoth.loot import context as loot_context
from azoth.loot.convert import parse_bucket_tags


def _bucket_entry(tags: str, match_one: bool, bucket: str = "B") -> dict:
    return {"LootBucket": bucket, "Item": "X", "MatchOne": match_one, "Tags": parse_bucket_tags(tags)}


class TestTableConditions:
    """Test table and table row gates."""

    def test_row_probability_gate(self) -> None:
        """Level 50 passes a Prob 40 row and fails a Prob 60 row."""
        ctx = LootContext.create(values={"Level": 50})
        assert loot_context.test_table_row_condition("Level", ctx, {"Prob": "60"}) is False
        assert loot_context.test_table_row_condition("Level", ctx, {"Prob": "40"}) is True

    def test_row_condition_falls_back_to_tag(self) -> None:
        """Without a value the row condition is a tag presence check."""
        ctx = LootContext.create(tags=["Named"])
        assert loot_context.test_table_row_condition("named", ctx, {"Prob": "1000"}) is True
        assert loot_context.test_table_row_condition("Elite", ctx, {"Prob": "0"}) is False

    def test_table_condition_is_presence_only(self) -> None:
        """A value or tag of that name unlocks the table, whatever its number."""
        ctx = LootContext.create(tags=["Elite"], values={"Level": 1})
        assert loot_context.test_table_condition("Level", ctx)
        assert loot_context.test_table_condition("ELITE", ctx)
        assert not loot_context.test_table_condition("Named", ctx)
        assert loot_context.test_table_condition("", ctx)

    def test_access_table_respects_ignore_ids(self) -> None:
        """Ignored tables are closed even without conditions."""
        table = {"LootTableID": "T", "Conditions": [], "Items": [{"ItemID": "a", "Prob": "0"}]}
        assert LootContext().access_table(table)
        ctx = LootContext(ignore_ids=["t"])
        assert not ctx.access_table(table)
        assert ctx.access_loottable(table) == []

    def test_access_loottable_filters_rows(self) -> None:
        """Only rows passing every condition are returned."""
        rows = [{"ItemID": "a", "Prob": "10"}, {"ItemID": "b", "Prob": "90"}]
        table = {"LootTableID": "T", "Conditions": ["Level"], "Items": rows}
        ctx = LootContext.create(values={"Level": 50})
        assert [r["ItemID"] for r in ctx.access_loottable(table)] == ["a"]
        assert LootContext().access_loottable({"LootTableID": "T", "Items": rows}) == rows


class TestBucketConditions:
    """Test bucket row gates."""

    def test_match_one_semantics(self) -> None:
        """MatchOne rows need one passing tag, other rows need all of them."""
        ctx = LootContext.create(tags=["Named"], values={"Level": 50})
        assert ctx.access_bucket_row(_bucket_entry("Level:10-20,Named", match_one=True))
        assert not ctx.access_bucket_row(_bucket_entry("Level:10-20,Named", match_one=False))

    def test_range_bounds_are_inclusive(self) -> None:
        """Two-value tags are inclusive ranges, one-value tags are minimums."""
        entry = _bucket_entry("Level:10-20", match_one=False)
        for level, expected in ((9, False), (10, True), (20, True), (21, False)):
            ctx = LootContext.create(values={"Level": level})
            assert loot_context.test_bucket_condition("Level", ctx, entry) is expected
        single = _bucket_entry("Level:30", match_one=False)
        assert loot_context.test_bucket_condition("Level", LootContext.create(values={"Level": 30}), single)
        assert not loot_context.test_bucket_condition("Level", LootContext.create(values={"Level": 29}), single)

    def test_bad_value_length_fails(self) -> None:
        """Tag values with neither one nor two bounds fail the range gate."""
        entry = _bucket_entry("Level", match_one=False)
        assert not loot_context.test_bucket_condition("Level", LootContext.create(values={"Level": 30}), entry)

    def test_bucket_tag_allow_list(self) -> None:
        """A non-empty allow-list excludes rows that share none of its tags."""
        entry = _bucket_entry("Named", match_one=False)
        assert LootContext(tags=["Named"]).access_bucket_row(entry)
        assert not LootContext(tags=["Named"], bucket_tags=["Elite"]).access_bucket_row(entry)
        assert LootContext(tags=["Named"], bucket_tags=["named"]).access_bucket_row(entry)

    def test_ignored_bucket(self) -> None:
        """Rows of an ignored bucket are never accessible."""
        entry = _bucket_entry("Named", match_one=False, bucket="Skip")
        assert not LootContext(tags=["Named"], ignore_ids=["skip"]).access_bucket_row(entry)

    def test_plain_dict_tags_match_case_insensitively(self) -> None:
        """Rows built by hand with a plain Tags dict gate like converted rows."""
        entry = {
            "LootBucket": "B",
            "Item": "X",
            "MatchOne": False,
            "Tags": {"level": {"Name": "level", "Value": [10, 20]}, "NAMED": None},
        }
        ctx = LootContext.create(tags=["Named"], values={"Level": 15})
        assert ctx.access_bucket_row(entry)
        assert loot_context.test_bucket_condition("LEVEL", ctx, entry)
        assert not LootContext.create(tags=["Named"], values={"Level": 25}).access_bucket_row(entry)
        assert LootContext.create(tags=["Named"], values={"Level": 15}, bucket_tags=["named"]).access_bucket_row(entry)


class TestLootGraph:
    """Test loot tree expansion."""

    def test_unknown_ref(self, db) -> None:
        """Unknown ids produce no node."""
        assert build_loot_graph(db, "Nope") is None

    def test_self_reference_terminates(self, db) -> None:
        """A table listing itself is expanded once."""
        node = build_loot_graph(db, "Loop")
        assert node is not None
        refs = [n.ref for n in node.walk() if n.type == "table"]
        assert refs == ["Loop"]
        assert [c.ref for c in node.children] == ["Gem"]

    def test_cycle_through_subtable(self, db) -> None:
        """Root -> Sub -> Root stops at the second Root."""
        node = build_loot_graph(db, "Root", values={"Level": 50})
        tables = [n.ref for n in node.walk() if n.type == "table"]
        assert tables.count("Root") == 1
        assert tables.count("Sub") == 1

    def test_or_table_chances(self, db) -> None:
        """OR rows own the roll window up to the next threshold."""
        node = build_loot_graph(db, "Root", values={"Level": 50})
        rel = {c.ref: c.chance_relative for c in node.children}
        assert rel["Sub"] == pytest.approx(0.5)
        assert rel["Gem"] == pytest.approx(0.3)
        assert rel["BucketA"] == pytest.approx(0.2)

    def test_and_table_chances_and_row_gates(self, db) -> None:
        """AND rows roll independently; rows above the context value stay locked."""
        node = build_loot_graph(db, "Root", values={"Level": 50})
        sub = next(c for c in node.children if c.ref == "Sub")
        assert sub.unlocked
        items = {c.ref: c for c in sub.children}
        assert set(items) == {"Sword_T5", "Ring"}
        assert items["Sword_T5"].unlocked
        assert items["Sword_T5"].chance_relative == pytest.approx(0.9)
        assert items["Sword_T5"].chance_absolute == pytest.approx(0.45)
        assert not items["Ring"].unlocked
        assert items["Ring"].chance_absolute == 0
        assert sub.unlocked_item_count == 1
        assert sub.total_item_count == 2

    def test_missing_condition_locks_subtree(self, db) -> None:
        """Without a Level value the Sub table is locked, and so are its rows."""
        node = build_loot_graph(db, "Root")
        sub = next(c for c in node.children if c.ref == "Sub")
        assert not sub.unlocked
        assert all(not c.unlocked for c in sub.children)
        assert sub.chance_absolute == 0

    def test_bucket_rows_split_evenly(self, db) -> None:
        """Open bucket rows share the bucket's chance."""
        node = build_loot_graph(db, "Root", tags=["Named"], values={"Level": 50})
        bucket = next(c for c in node.children if c.ref == "BucketA")
        rows = {c.ref: c for c in bucket.children}
        assert rows["Pearl"].unlocked and rows["Amber"].unlocked
        assert rows["Pearl"].chance_relative == pytest.approx(0.5)
        assert rows["Amber"].chance_absolute == pytest.approx(0.2 * 0.5)

    def test_highlight_propagates_to_ancestors(self, db) -> None:
        """Highlighted items mark every table on their path."""
        node = build_loot_graph(db, "Root", values={"Level": 50}, highlight=["sword_t5"])
        assert node.highlight
        sub = next(c for c in node.children if c.ref == "Sub")
        assert sub.highlight
        bucket = next(c for c in node.children if c.ref == "BucketA")
        assert not bucket.highlight

    def test_ignore_ids_lock_subtable(self, db) -> None:
        """Caller-ignored tables stay in the tree but are locked."""
        node = build_loot_graph(db, "Root", values={"Level": 50}, ignore_ids=["Sub"])
        sub = next(c for c in node.children if c.ref == "Sub")
        assert not sub.unlocked
        assert sub.unlocked_item_count == 0

    def test_bucket_root(self, db) -> None:
        """A bucket id works as a root reference."""
        node = LootGraph(db, LootContext.create(values={"Level": 35})).build_bucket("BucketA")
        assert node.type == "bucket"
        assert [c.ref for c in node.children if c.unlocked] == ["Amber"]

    def test_to_dict(self, db) -> None:
        """Serialized nodes keep the tree shape."""
        doc = build_loot_graph(db, "Root", values={"Level": 50}).to_dict()
        assert doc["type"] == "table"
        assert doc["table"]["AndOr"] == "OR"
        assert {c["ref"] for c in doc["children"]} == {"Sub", "Gem", "BucketA"}
