# -*- coding: utf-8 -*-
"""Normalize raw loot datatables.

Raw loot tables come as three rows per table:

    {"LootTableID": "X", "AND/OR": "OR", "MaxRoll": 100000, "Conditions": "Level", "Item1": "...", ...}
    {"LootTableID": "X_Probs", "Item1": "0", ...}
    {"LootTableID": "X_Qty", "Item1": "1-2", ...}

Item cells prefixed with ``[LTID]`` reference a nested table, ``[LBID]`` a bucket.

Raw loot buckets are column-wise: a ``FIRSTROW`` placeholder row names every
``LootBucketN`` column, following rows carry ``ItemN/QuantityN/MatchOneN/TagsN``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from azoth.tables import CaseInsensitiveDict, as_list

__all__ = [
    "convert_loot_buckets",
    "convert_loot_tables",
    "parse_bucket_tags",
    "parse_quantity",
]

_ITEM_COL_RE = re.compile(r"^Item(\d+)$")
_BUCKET_COL_RE = re.compile(r"^LootBucket(\d+)$")

TABLE_REF_PREFIX = "[LTID]"
BUCKET_REF_PREFIX = "[LBID]"


def _to_num(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            f = float(s)
        except ValueError:
            return None
        return int(f) if f.is_integer() else f
    return None


def _is_truthy_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().upper() in ("TRUE", "1", "YES")
    return bool(value)


def parse_quantity(value: Any) -> List[float]:
    """"1-3" -> [1, 3]; "2" -> [2]; 4 -> [4]; junk -> []."""
    if isinstance(value, (list, tuple)):
        return [n for n in (_to_num(v) for v in value) if n is not None]
    num = _to_num(value)
    if num is not None:
        return [num]
    if isinstance(value, str) and "-" in value:
        parts = [_to_num(p) for p in value.split("-")]
        return [p for p in parts if p is not None]
    return []


def parse_bucket_tags(value: Any) -> CaseInsensitiveDict:
    """Parse "Level:10-20,Named" into {Name -> {"Name", "Value"}}."""
    out = CaseInsensitiveDict()
    if isinstance(value, (dict, CaseInsensitiveDict)):
        for name, tag in value.items():
            if isinstance(tag, dict):
                out[name] = {"Name": tag.get("Name") or name, "Value": tag.get("Value")}
            elif tag is None or isinstance(tag, (list, tuple)):
                # bare bounds
                out[name] = {"Name": name, "Value": list(tag) if tag else None}
        return out
    for token in as_list(value):
        token = str(token).strip()
        if not token:
            continue
        if ":" in token:
            name, raw = token.split(":", 1)
            name = name.strip()
            nums = [_to_num(p) for p in raw.split("-")]
            nums = [n for n in nums if n is not None]
            out[name] = {"Name": name, "Value": nums or None}
        else:
            out[token] = {"Name": token, "Value": None}
    return out


def _item_ref(raw: str) -> Dict[str, Any]:
    if raw.startswith(TABLE_REF_PREFIX):
        return {"LootTableID": raw[len(TABLE_REF_PREFIX) :].strip()}
    if raw.startswith(BUCKET_REF_PREFIX):
        return {"LootBucketID": raw[len(BUCKET_REF_PREFIX) :].strip()}
    return {"ItemID": raw.strip()}


def _normalized_table(row: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(row)
    out["Conditions"] = [str(c) for c in as_list(row.get("Conditions"))]
    out["AndOr"] = str(row.get("AndOr") or row.get("AND/OR") or "OR").upper()
    out["MaxRoll"] = _to_num(row.get("MaxRoll")) or 0
    items = []
    for it in row.get("Items") or []:
        if isinstance(it, dict):
            items.append(dict(it))
    out["Items"] = items
    return out


def convert_loot_tables(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Merge main/_Probs/_Qty rows into normalized loot table entries."""
    by_id: Dict[str, Dict[str, Any]] = {}
    main: List[Dict[str, Any]] = []
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        tid = str(row.get("LootTableID") or "").strip()
        if not tid:
            continue
        by_id[tid.lower()] = row
        if tid.endswith("_Probs") or tid.endswith("_Qty"):
            continue
        main.append(row)

    out: List[Dict[str, Any]] = []
    for row in main:
        if isinstance(row.get("Items"), list):
            out.append(_normalized_table(row))
            continue

        tid = str(row.get("LootTableID")).strip()
        probs = by_id.get(f"{tid}_Probs".lower()) or {}
        qty = by_id.get(f"{tid}_Qty".lower()) or {}

        cols = []
        for key in row.keys():
            m = _ITEM_COL_RE.match(str(key))
            if m:
                cols.append((int(m.group(1)), key))
        cols.sort()

        items: List[Dict[str, Any]] = []
        for _, key in cols:
            raw = row.get(key)
            if not isinstance(raw, str) or not raw.strip():
                continue
            entry = _item_ref(raw)
            entry["Prob"] = str(probs.get(key) if probs.get(key) is not None else "0")
            entry["Qty"] = str(qty.get(key) if qty.get(key) is not None else "1")
            items.append(entry)

        table = {k: v for k, v in row.items() if not _ITEM_COL_RE.match(str(k))}
        table["Items"] = items
        out.append(_normalized_table(table))
    return out


def convert_loot_buckets(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten column-wise bucket rows into LootBucketRow dicts.

    Rows that already look normalized (have LootBucket + Item) pass through.
    """
    rows = [r for r in rows or [] if isinstance(r, dict)]
    if not rows:
        return []

    out: List[Dict[str, Any]] = []
    names: Dict[str, str] = {}
    first = rows[0]
    start = 0
    if str(first.get("RowPlaceholders") or "").upper() == "FIRSTROW":
        for key, val in first.items():
            m = _BUCKET_COL_RE.match(str(key))
            if m and isinstance(val, str) and val.strip():
                names[m.group(1)] = val.strip()
        start = 1

    for index, row in enumerate(rows[start:], start=start):
        if "LootBucket" in row and "Item" in row:
            out.append(
                {
                    "LootBucket": row.get("LootBucket"),
                    "Item": row.get("Item"),
                    "Quantity": parse_quantity(row.get("Quantity")),
                    "MatchOne": _is_truthy_flag(row.get("MatchOne")),
                    "Tags": parse_bucket_tags(row.get("Tags")),
                    "Row": index,
                    "Column": 0,
                }
            )
            continue

        for col, bucket in sorted(names.items(), key=lambda kv: int(kv[0])):
            item = row.get(f"Item{col}")
            if not isinstance(item, str) or not item.strip():
                continue
            out.append(
                {
                    "LootBucket": bucket,
                    "Item": item.strip(),
                    "Quantity": parse_quantity(row.get(f"Quantity{col}")),
                    "MatchOne": _is_truthy_flag(row.get(f"MatchOne{col}")),
                    "Tags": parse_bucket_tags(row.get(f"Tags{col}")),
                    "Row": index,
                    "Column": int(col),
                }
            )
    return out
