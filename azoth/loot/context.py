# -*- coding: utf-8 -*-
"""Loot access gating.

A LootContext carries the conditions that are currently true (``tags``) and
named condition values (``values``, e.g. Level, EnemyLevel). Tables, table
rows and bucket rows are tested against it.

Two threshold conventions coexist and are kept apart on purpose:
- table rows: ``context_value >= Prob`` (roll threshold)
- bucket tags: ``Value[0] <= context_value [<= Value[1]]`` (tag range)
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from azoth.loot.convert import parse_bucket_tags
from azoth.tables import CaseInsensitiveDict, CaseInsensitiveSet

__all__ = [
    "LOOT_BUCKET_CONDITION_NAMES",
    "LOOT_TABLE_CONDITION_NAMES",
    "LOOT_TABLE_TAGS",
    "LootContext",
    "test_bucket_condition",
    "test_table_condition",
    "test_table_row_condition",
]

Number = Union[int, float]

LOOT_TABLE_CONDITION_NAMES = ("Level", "EnemyLevel", "MinPOIContLevel")

LOOT_BUCKET_CONDITION_NAMES = (
    "Level",
    "EnemyLevel",
    "MinContLevel",
    # high water marks
    "HWMBlunderbuss",
    "HWMLoot2HAxe",
    "HWMLoot2HHammer",
    "HWMLootAmulet",
    "HWMLootBow",
    "HWMLootChest",
    "HWMLootFeet",
    "HWMLootFireStaff",
    "HWMLootHands",
    "HWMLootHatchet",
    "HWMLootHead",
    "HWMLootIceMagic",
    "HWMLootLegs",
    "HWMLootLifeStaff",
    "HWMLootMusket",
    "HWMLootRapier",
    "HWMLootRing",
    "HWMLootShield",
    "HWMLootSpear",
    "HWMLootSword",
    "HWMLootToken",
    "HWMLootVoidGauntlet",
)

LOOT_TABLE_TAGS = (
    "GlobalMod",
    # mobs
    "Common",
    "Elite",
    "Named",
    "Goblin",
    # dungeons
    "Amrine",
    "CutlassKeys00",
    "Ebonscale00",
    "Ebonscale00_Mut",
    "Edengrove00",
    "Reekwater00",
    "RestlessShores01",
    "ShatterMtn00",
    "ShatteredObelisk",
    "MutDiff",
    # mutation elements
    "Fire",
    "Ice",
    "Void",
    "Nature",
    # fishing
    "FishRarity",
    "FishSize",
    "Fresh",
    "Salt",
    "SummerFishRarity",
    "LootTableDiverted",
    # gypsum
    "GypsumBlack",
    "GypsumBlue",
    "GypsumYellow",
)


def _num(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


class LootContext:
    """Conditions of a single loot resolution request."""

    def __init__(
        self,
        tags: Optional[Iterable[str]] = None,
        values: Optional[Mapping[str, Union[Number, str]]] = None,
        *,
        ignore_ids: Optional[Iterable[str]] = None,
        bucket_tags: Optional[Iterable[str]] = None,
    ):
        self.tags = CaseInsensitiveSet(tags or [])
        self.values = CaseInsensitiveDict((values or {}).items())
        # caller supplied, constant for the whole resolution
        self.ignore_ids = CaseInsensitiveSet(ignore_ids or [])
        # collect only bucket rows carrying one of these tags (when non-empty)
        self.bucket_tags: List[str] = [str(t) for t in (bucket_tags or []) if t]

    @classmethod
    def create(
        cls,
        tags: Optional[Iterable[str]] = None,
        values: Optional[Mapping[str, Union[Number, str]]] = None,
        **kwargs: Any,
    ) -> "LootContext":
        return cls(tags=tags, values=values, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tags": sorted(str(t) for t in self.tags),
            "values": {str(k): v for k, v in self.values.items()},
            "ignore_ids": sorted(str(i) for i in self.ignore_ids),
            "bucket_tags": list(self.bucket_tags),
        }

    # --------------------------------------------------------
    # Access checks
    # --------------------------------------------------------

    def access_loottable(self, table: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Rows of ``table`` reachable in this context."""
        if self.is_ignored_id(table.get("LootTableID")):
            return []
        conditions = table.get("Conditions") or []
        rows = [r for r in table.get("Items") or [] if isinstance(r, dict)]
        if not conditions:
            return rows
        return [r for r in rows if all(test_table_row_condition(c, self, r) for c in conditions)]

    def access_table(self, table: Dict[str, Any]) -> bool:
        if self.is_ignored_id(table.get("LootTableID")):
            return False
        conditions = table.get("Conditions") or []
        if not conditions:
            return True
        return all(test_table_condition(c, self) for c in conditions)

    def access_table_row(self, table: Dict[str, Any], row: Dict[str, Any]) -> bool:
        if self.is_ignored_id(table.get("LootTableID")):
            return False
        conditions = table.get("Conditions") or []
        if not conditions:
            return True
        return all(test_table_row_condition(c, self, row) for c in conditions)

    def access_bucket_row(self, entry: Dict[str, Any]) -> bool:
        if self.is_ignored_id(entry.get("LootBucket")) or self.is_excluded_entry(entry):
            return False
        tags = list(_entry_tags(entry).keys())
        if entry.get("MatchOne"):
            return any(test_bucket_condition(tag, self, entry) for tag in tags)
        return all(test_bucket_condition(tag, self, entry) for tag in tags)

    def is_ignored_id(self, table_or_bucket_id: Any) -> bool:
        return table_or_bucket_id in self.ignore_ids

    def is_excluded_entry(self, entry: Dict[str, Any]) -> bool:
        if not self.bucket_tags:
            return False
        tags = _entry_tags(entry)
        return not any(tag in tags for tag in self.bucket_tags)


def _entry_tags(entry: Dict[str, Any]) -> CaseInsensitiveDict:
    tags = entry.get("Tags")
    if isinstance(tags, CaseInsensitiveDict):
        return tags
    return parse_bucket_tags(tags)


def test_table_condition(condition: str, context: LootContext) -> bool:
    """Presence check: the condition is a known tag or a known value name."""
    if not condition:
        return True
    return condition in context.tags or condition in context.values


def test_table_row_condition(condition: str, context: LootContext, row: Dict[str, Any]) -> bool:
    """Numeric gate ``value >= Prob`` when a value exists, else tag presence."""
    if not condition:
        return True
    if condition in context.values:
        value = _num(context.values.get(condition))
        prob = _num(row.get("Prob"))
        if value is None or prob is None:
            return False
        return value >= prob
    return condition in context.tags


def test_bucket_condition(condition: str, context: LootContext, entry: Dict[str, Any]) -> bool:
    """Range gate on the bucket row's tag Value when a value exists, else tag presence."""
    if not condition:
        return True
    if condition in context.values:
        tag = _entry_tags(entry).get(condition) or {}
        bounds = tag.get("Value") or []
        value = _num(context.values.get(condition))
        if value is None:
            return False
        if len(bounds) == 1:
            return float(bounds[0]) <= value
        if len(bounds) == 2:
            return float(bounds[0]) <= value <= float(bounds[1])
        return False
    return condition in context.tags
