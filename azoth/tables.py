# -*- coding: utf-8 -*-
"""Id-keyed lookups over imported datatables.

Every id comparison in the project is case-insensitive; the containers here
are where that rule lives.

Public API
- CaseInsensitiveDict / CaseInsensitiveSet
- TableIndex(rows, key)
- DbSlice.from_tables({...})
- eq_case_insensitive(a, b), as_list(value), as_number(value)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

__all__ = [
    "CaseInsensitiveDict",
    "CaseInsensitiveSet",
    "DbSlice",
    "TableIndex",
    "as_list",
    "as_number",
    "eq_case_insensitive",
]


def _fold(key: Any) -> Any:
    if isinstance(key, str):
        return key.strip().lower()
    if isinstance(key, bool):
        return key
    if isinstance(key, (int, float)):
        # numeric ids are also reachable through their string form
        return str(int(key)) if float(key).is_integer() else str(key)
    return key


def eq_case_insensitive(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return str(a).lower() == str(b).lower()


def as_list(value: Any) -> List[Any]:
    """Normalize list-ish table cells ("a,b", ["a", "b"], None) into a list."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple, set)):
        return [v for v in value if v not in (None, "")]
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    return [value]


def as_number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


class CaseInsensitiveDict:
    """Mapping with case-folded string keys. Keeps the original key spelling."""

    def __init__(self, items: Optional[Iterable[Tuple[Any, Any]]] = None):
        self._data: Dict[Any, Tuple[Any, Any]] = {}
        if isinstance(items, Mapping):
            items = items.items()
        for k, v in items or []:
            self[k] = v

    def __setitem__(self, key: Any, value: Any) -> None:
        self._data[_fold(key)] = (key, value)

    def __getitem__(self, key: Any) -> Any:
        return self._data[_fold(key)][1]

    def __contains__(self, key: Any) -> bool:
        if key is None:
            return False
        return _fold(key) in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Any]:
        for k, _ in self._data.values():
            yield k

    def __repr__(self) -> str:
        return f"CaseInsensitiveDict({dict(self.items())!r})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CaseInsensitiveDict):
            return {k: v[1] for k, v in self._data.items()} == {k: v[1] for k, v in other._data.items()}
        return NotImplemented

    def get(self, key: Any, default: Any = None) -> Any:
        if key is None:
            return default
        hit = self._data.get(_fold(key))
        return hit[1] if hit is not None else default

    def has(self, key: Any) -> bool:
        return key in self

    def keys(self) -> List[Any]:
        return [k for k, _ in self._data.values()]

    def values(self) -> List[Any]:
        return [v for _, v in self._data.values()]

    def items(self) -> List[Tuple[Any, Any]]:
        return list(self._data.values())


class CaseInsensitiveSet:
    def __init__(self, items: Optional[Iterable[Any]] = None):
        self._data: Dict[Any, Any] = {}
        for it in items or []:
            self.add(it)

    def add(self, item: Any) -> None:
        if item is None or item == "":
            return
        self._data.setdefault(_fold(item), item)

    def __contains__(self, item: Any) -> bool:
        if item is None:
            return False
        return _fold(item) in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._data.values()))

    def __repr__(self) -> str:
        return f"CaseInsensitiveSet({sorted(map(str, self._data.values()))!r})"

    def has(self, item: Any) -> bool:
        return item in self


class TableIndex:
    """Immutable id -> record lookup built once per table.

    Rows without the id column are skipped; the first row wins on duplicate ids.
    """

    def __init__(self, rows: Optional[Iterable[Dict[str, Any]]] = None, key: str = "id"):
        self.key = key
        self._rows: List[Dict[str, Any]] = []
        self._index = CaseInsensitiveDict()
        for row in rows or []:
            if not isinstance(row, dict):
                continue
            rid = row.get(key)
            if rid is None or rid == "":
                continue
            if rid in self._index:
                continue
            self._index[rid] = row
            self._rows.append(row)

    def get(self, rid: Any, default: Any = None) -> Optional[Dict[str, Any]]:
        return self._index.get(rid, default)

    def __contains__(self, rid: Any) -> bool:
        return rid in self._index

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self._rows)

    def ids(self) -> List[Any]:
        return [r.get(self.key) for r in self._rows]

    def rows(self) -> List[Dict[str, Any]]:
        return list(self._rows)


# logical table name -> id column
TABLE_KEYS: Dict[str, str] = {
    "items": "ItemID",
    "weapons": "WeaponID",
    "armors": "WeaponID",
    "ammos": "AmmoID",
    "runes": "WeaponID",
    "consumables": "ConsumableID",
    "housings": "HouseItemID",
    "perks": "PerkID",
    "affixes": "StatusID",
    "effects": "StatusID",
    "abilities": "AbilityID",
    "cooldowns": "AbilityID",
    "loot_tables": "LootTableID",
}

LEVEL_TABLES = ("attr_con", "attr_dex", "attr_foc", "attr_int", "attr_str")


@dataclass
class DbSlice:
    """The subset of indexed game data consumed by loot and build resolution."""

    items: TableIndex = field(default_factory=lambda: TableIndex(key="ItemID"))
    weapons: TableIndex = field(default_factory=lambda: TableIndex(key="WeaponID"))
    armors: TableIndex = field(default_factory=lambda: TableIndex(key="WeaponID"))
    ammos: TableIndex = field(default_factory=lambda: TableIndex(key="AmmoID"))
    runes: TableIndex = field(default_factory=lambda: TableIndex(key="WeaponID"))
    consumables: TableIndex = field(default_factory=lambda: TableIndex(key="ConsumableID"))
    housings: TableIndex = field(default_factory=lambda: TableIndex(key="HouseItemID"))
    perks: TableIndex = field(default_factory=lambda: TableIndex(key="PerkID"))
    affixes: TableIndex = field(default_factory=lambda: TableIndex(key="StatusID"))
    effects: TableIndex = field(default_factory=lambda: TableIndex(key="StatusID"))
    abilities: TableIndex = field(default_factory=lambda: TableIndex(key="AbilityID"))
    cooldowns: TableIndex = field(default_factory=lambda: TableIndex(key="AbilityID"))
    loot_tables: TableIndex = field(default_factory=lambda: TableIndex(key="LootTableID"))
    loot_buckets: List[Dict[str, Any]] = field(default_factory=list)
    damage_table: List[Dict[str, Any]] = field(default_factory=list)
    attr_con: List[Dict[str, Any]] = field(default_factory=list)
    attr_dex: List[Dict[str, Any]] = field(default_factory=list)
    attr_foc: List[Dict[str, Any]] = field(default_factory=list)
    attr_int: List[Dict[str, Any]] = field(default_factory=list)
    attr_str: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_tables(cls, tables: Mapping[str, Any]) -> "DbSlice":
        """Index plain row lists. Loot rows are normalized on the way in."""
        from azoth.loot.convert import convert_loot_buckets, convert_loot_tables

        kwargs: Dict[str, Any] = {}
        for name, key in TABLE_KEYS.items():
            rows = tables.get(name) or []
            if name == "loot_tables":
                rows = convert_loot_tables(rows)
            kwargs[name] = TableIndex(rows, key=key)
        kwargs["loot_buckets"] = convert_loot_buckets(tables.get("loot_buckets") or [])
        kwargs["damage_table"] = [r for r in (tables.get("damage_table") or []) if isinstance(r, dict)]
        for name in LEVEL_TABLES:
            kwargs[name] = [r for r in (tables.get(name) or []) if isinstance(r, dict)]
        return cls(**kwargs)

    def level_table(self, attr: str) -> List[Dict[str, Any]]:
        return list(getattr(self, f"attr_{attr}", None) or [])

    def bucket_rows(self, bucket_id: Any) -> List[Dict[str, Any]]:
        return [r for r in self.loot_buckets if eq_case_insensitive(r.get("LootBucket"), bucket_id)]

    def stats(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for name in TABLE_KEYS:
            out[name] = len(getattr(self, name))
        out["loot_buckets"] = len(self.loot_buckets)
        out["damage_table"] = len(self.damage_table)
        for name in LEVEL_TABLES:
            out[name] = len(getattr(self, name))
        return out
