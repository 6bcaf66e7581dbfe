# -*- coding: utf-8 -*-
"""Loot graph expansion.

Expands a loot table (or bucket) into a tree of typed nodes:

    table -> table-item | table (nested) | bucket -> bucket-row

Each node carries ``unlocked`` (context gating), ``chance_relative`` (chance
given the parent was reached) and ``chance_absolute`` (product along the
path). The only recursion in the project lives here and is bounded by a
per-traversal visited set.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from azoth.loot.context import LootContext
from azoth.tables import CaseInsensitiveSet, DbSlice, as_number

__all__ = ["LootGraph", "LootNode", "build_loot_graph"]

NODE_TABLE = "table"
NODE_TABLE_ITEM = "table-item"
NODE_BUCKET = "bucket"
NODE_BUCKET_ROW = "bucket-row"


@dataclass
class LootNode:
    type: str
    ref: str
    data: Optional[Dict[str, Any]] = None
    row: Optional[Dict[str, Any]] = None
    children: List["LootNode"] = field(default_factory=list)
    unlocked: bool = True
    highlight: bool = False
    chance_relative: float = 1.0
    chance_absolute: float = 1.0
    unlocked_item_count: int = 0
    total_item_count: int = 0

    @property
    def item_id(self) -> Optional[str]:
        if self.type == NODE_TABLE_ITEM:
            return (self.row or {}).get("ItemID")
        if self.type == NODE_BUCKET_ROW:
            return (self.data or {}).get("Item")
        return None

    def walk(self) -> Iterable["LootNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "type": self.type,
            "ref": self.ref,
            "unlocked": self.unlocked,
            "highlight": self.highlight,
            "chance_relative": self.chance_relative,
            "chance_absolute": self.chance_absolute,
            "unlocked_item_count": self.unlocked_item_count,
            "total_item_count": self.total_item_count,
        }
        if self.item_id:
            out["item_id"] = self.item_id
        if self.row is not None:
            out["row"] = {k: v for k, v in self.row.items()}
        if self.type == NODE_TABLE and self.data:
            out["table"] = {
                "LootTableID": self.data.get("LootTableID"),
                "AndOr": self.data.get("AndOr"),
                "MaxRoll": self.data.get("MaxRoll"),
                "Conditions": list(self.data.get("Conditions") or []),
            }
        if self.type == NODE_BUCKET_ROW and self.data:
            out["quantity"] = list(self.data.get("Quantity") or [])
            out["tags"] = [_tag_label(t) for t in (self.data.get("Tags") or {}).values()]
            out["match_one"] = bool(self.data.get("MatchOne"))
        out["children"] = [c.to_dict() for c in self.children]
        return out


def _tag_label(tag: Dict[str, Any]) -> str:
    value = tag.get("Value")
    if value:
        return f"{tag.get('Name')} {'-'.join(str(v) for v in value)}"
    return str(tag.get("Name"))


def _row_chances(table: Dict[str, Any]) -> List[float]:
    """Relative chance of every table row, in row order."""
    rows = table.get("Items") or []
    max_roll = as_number(table.get("MaxRoll"))
    if max_roll <= 0:
        return [1.0 for _ in rows]

    probs = [as_number(r.get("Prob")) for r in rows]
    if str(table.get("AndOr") or "").upper() == "AND":
        return [min(1.0, max(0.0, (max_roll - p) / max_roll)) for p in probs]

    # OR: one pick per roll; a row owns the window up to the next higher threshold
    thresholds = sorted(set(probs))
    share: Dict[float, int] = defaultdict(int)
    for p in probs:
        share[p] += 1
    out: List[float] = []
    for p in probs:
        idx = thresholds.index(p)
        upper = thresholds[idx + 1] if idx + 1 < len(thresholds) else max_roll
        window = max(0.0, min(upper, max_roll) - max(p, 0.0)) / max_roll
        out.append(window / share[p])
    return out


class LootGraph:
    """Builds loot node trees against a fixed DbSlice and LootContext."""

    def __init__(
        self,
        db: DbSlice,
        context: Optional[LootContext] = None,
        *,
        highlight: Optional[Iterable[str]] = None,
    ):
        self.db = db
        self.context = context or LootContext()
        self.highlight_ids = CaseInsensitiveSet(highlight or [])

    def build_table(self, table_id: str) -> Optional[LootNode]:
        table = self.db.loot_tables.get(table_id)
        if table is None:
            return None
        visited: Set[str] = set()
        node = self._table_node(table, row=None, parent_unlocked=True, parent_chance=1.0, visited=visited)
        return node

    def build_bucket(self, bucket_id: str) -> Optional[LootNode]:
        rows = self.db.bucket_rows(bucket_id)
        if not rows:
            return None
        visited: Set[str] = set()
        return self._bucket_node(str(bucket_id), row=None, parent_unlocked=True, parent_chance=1.0, visited=visited)

    # --------------------------------------------------------
    # Expansion
    # --------------------------------------------------------

    def _table_node(
        self,
        table: Dict[str, Any],
        *,
        row: Optional[Dict[str, Any]],
        parent_unlocked: bool,
        parent_chance: float,
        visited: Set[str],
    ) -> LootNode:
        tid = str(table.get("LootTableID"))
        visited.add(tid.lower())

        unlocked = parent_unlocked and self.context.access_table(table)
        node = LootNode(type=NODE_TABLE, ref=tid, data=table, row=row, unlocked=unlocked)
        node.chance_absolute = parent_chance if unlocked else 0.0

        rows = table.get("Items") or []
        chances = _row_chances(table)
        for item_row, rel in zip(rows, chances):
            if not isinstance(item_row, dict):
                continue
            row_unlocked = unlocked and self.context.access_table_row(table, item_row)
            row_abs = node.chance_absolute * rel if row_unlocked else 0.0

            child: Optional[LootNode] = None
            if item_row.get("LootTableID"):
                ref = str(item_row.get("LootTableID"))
                sub = self.db.loot_tables.get(ref)
                if sub is None or ref.lower() in visited:
                    continue
                child = self._table_node(sub, row=item_row, parent_unlocked=row_unlocked, parent_chance=row_abs, visited=visited)
            elif item_row.get("LootBucketID"):
                ref = str(item_row.get("LootBucketID"))
                if ref.lower() in visited:
                    continue
                child = self._bucket_node(ref, row=item_row, parent_unlocked=row_unlocked, parent_chance=row_abs, visited=visited)
            elif item_row.get("ItemID"):
                ref = str(item_row.get("ItemID"))
                child = LootNode(type=NODE_TABLE_ITEM, ref=ref, row=item_row, unlocked=row_unlocked)
                child.chance_absolute = row_abs
                child.highlight = ref in self.highlight_ids
                child.total_item_count = 1
                child.unlocked_item_count = 1 if row_unlocked else 0
            if child is None:
                continue
            child.chance_relative = rel
            node.children.append(child)

        self._aggregate(node)
        return node

    def _bucket_node(
        self,
        bucket_id: str,
        *,
        row: Optional[Dict[str, Any]],
        parent_unlocked: bool,
        parent_chance: float,
        visited: Set[str],
    ) -> LootNode:
        visited.add(bucket_id.lower())
        node = LootNode(type=NODE_BUCKET, ref=bucket_id, row=row, unlocked=parent_unlocked)
        node.chance_absolute = parent_chance if parent_unlocked else 0.0

        entries = self.db.bucket_rows(bucket_id)
        flags = [parent_unlocked and self.context.access_bucket_row(e) for e in entries]
        open_count = sum(1 for f in flags if f)
        for entry, entry_unlocked in zip(entries, flags):
            rel = 1.0 / open_count if entry_unlocked and open_count else 0.0
            child = LootNode(
                type=NODE_BUCKET_ROW,
                ref=str(entry.get("Item")),
                data=entry,
                unlocked=entry_unlocked,
                chance_relative=rel,
                chance_absolute=node.chance_absolute * rel,
                highlight=entry.get("Item") in self.highlight_ids,
                total_item_count=1,
                unlocked_item_count=1 if entry_unlocked else 0,
            )
            node.children.append(child)

        self._aggregate(node)
        return node

    @staticmethod
    def _aggregate(node: LootNode) -> None:
        node.total_item_count = sum(c.total_item_count for c in node.children)
        node.unlocked_item_count = sum(c.unlocked_item_count for c in node.children)
        if any(c.highlight for c in node.children):
            node.highlight = True


def build_loot_graph(
    db: DbSlice,
    ref: str,
    *,
    tags: Optional[Iterable[str]] = None,
    values: Optional[Dict[str, Any]] = None,
    ignore_ids: Optional[Iterable[str]] = None,
    bucket_tags: Optional[Iterable[str]] = None,
    highlight: Optional[Iterable[str]] = None,
) -> Optional[LootNode]:
    """Convenience entry: table id first, bucket id as fallback."""
    ctx = LootContext.create(tags=tags, values=values, ignore_ids=ignore_ids, bucket_tags=bucket_tags)
    graph = LootGraph(db, ctx, highlight=highlight)
    return graph.build_table(ref) or graph.build_bucket(ref)
