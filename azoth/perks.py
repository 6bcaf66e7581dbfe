# -*- coding: utf-8 -*-
"""Perk classification, gear-score multiplier and affix stat extraction."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Union

from azoth.tables import as_list

__all__ = [
    "get_affix_abss",
    "get_affix_mods",
    "get_affix_properties",
    "get_perk_multiplier",
    "has_perk_inherent_affix",
    "is_perk_applicable_to_item",
    "is_perk_gem",
    "is_perk_generated",
    "is_perk_inherent",
    "strip_ability_properties",
    "strip_affix_properties",
]

PERK_MIN_GEAR_SCORE = 100

Value = Union[int, float, str]


def is_perk_inherent(perk: Optional[Dict[str, Any]]) -> bool:
    return (perk or {}).get("PerkType") == "Inherent"


def is_perk_gem(perk: Optional[Dict[str, Any]]) -> bool:
    return (perk or {}).get("PerkType") == "Gem"


def is_perk_generated(perk: Optional[Dict[str, Any]]) -> bool:
    return (perk or {}).get("PerkType") == "Generated"


def is_perk_applicable_to_item(perk: Optional[Dict[str, Any]], item: Optional[Dict[str, Any]]) -> bool:
    if not perk or not item:
        return False
    a = {str(c).lower() for c in as_list(perk.get("ItemClass"))}
    b = {str(c).lower() for c in as_list(item.get("ItemClass"))}
    if not a or not b:
        return False
    return bool(a & b)


def has_perk_inherent_affix(perk: Optional[Dict[str, Any]]) -> bool:
    return is_perk_inherent(perk) and bool((perk or {}).get("Affix"))


def get_perk_multiplier(perk: Optional[Dict[str, Any]], gear_score: float) -> float:
    """``max(0, gs - 100) * round(ScalingPerGearScore, 8) + 1``.

    The 8-digit rounding matches the game's fixed-point values; without it
    float drift shows up in the floored MOD numbers.
    """
    raw = (perk or {}).get("ScalingPerGearScore") or 0
    try:
        scale = round(float(raw), 8)
    except (TypeError, ValueError):
        scale = 0.0
    return max(0.0, float(gear_score or 0) - PERK_MIN_GEAR_SCORE) * scale + 1


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            f = float(value.strip())
        except ValueError:
            return None
        return f if math.isfinite(f) else None
    return None


def get_affix_properties(affix: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Non-empty affix properties; ``"Key": "Name=0.1"`` becomes ``"Key Name": 0.1``."""
    out: List[Dict[str, Any]] = []
    for key, value in (affix or {}).items():
        if key in ("StatusID", "$source"):
            continue
        if isinstance(value, str) and "=" in value:
            a, b = value.split("=", 1)
            key = f"{key} {a}"
            value = _as_float(b)
        if not value:
            continue
        out.append({"key": key, "value": value})
    return out


def get_affix_mods(affix: Optional[Dict[str, Any]], scale: float) -> List[Dict[str, Any]]:
    """MOD* entries, floored after scaling (attribute points are integers)."""
    out: List[Dict[str, Any]] = []
    for prop in get_affix_properties(affix):
        key = prop["key"]
        if not key.startswith("MOD"):
            continue
        num = _as_float(prop["value"])
        out.append(
            {
                "key": key,
                "label": f"ui_{key.replace('MOD', '', 1).lower()}",
                "value": math.floor(num * scale) if num is not None else prop["value"],
            }
        )
    return out


def get_affix_abss(affix: Optional[Dict[str, Any]], scale: float) -> List[Dict[str, Any]]:
    """ABS* entries, scaled but not floored (percent units)."""
    out: List[Dict[str, Any]] = []
    for prop in get_affix_properties(affix):
        key = prop["key"]
        if not key.startswith("ABS"):
            continue
        name = key.replace("ABS", "", 1).lower()
        if name.startswith("vitalscategory "):
            label = f"VC_{name.replace('vitalscategory ', '', 1)}"
        else:
            label = f"{name}_DamageName"
        num = _as_float(prop["value"])
        out.append(
            {
                "key": key,
                "label": [label, "ui_resistance"],
                "value": num * scale if num is not None else prop["value"],
            }
        )
    return out


def strip_affix_properties(affix: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (affix or {}).items() if k not in ("StatusID", "$source") and v}


def strip_ability_properties(ability: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (ability or {}).items() if k not in ("AbilityID", "$source") and v}
