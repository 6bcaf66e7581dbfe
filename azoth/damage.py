# -*- coding: utf-8 -*-
"""Damage and armor formulas.

Pure numeric helpers shared by the build resolver and the damage sandbox.
Constants mirror the game's global tuning values.
"""

from __future__ import annotations

import math
from typing import Dict, Mapping, Optional

__all__ = [
    "armor_rating_for_gs",
    "damage_factor_for_attrs",
    "damage_factor_for_gs",
    "damage_factor_for_level",
    "damage_for_weapon",
    "damage_mitigation_percent",
    "damage_scale_attrs",
    "round_gear_score",
]

NW_MIN_GEAR_SCORE = 100
NW_MIN_ARMOR_MITIGATION = 0
NW_MAX_ARMOR_MITIGATION = 2
NW_PHYSICAL_ARMOR_SCALE_FACTOR = 1850
NW_ELEMENTAL_ARMOR_SCALE_FACTOR = 1850
NW_ARMOR_SET_RATING_EXPONENT = 1.2
NW_ARMOR_MITIGATION_EXPONENT = 1.2
NW_ARMOR_RATING_DECIMAL_ACCURACY = 1
NW_BASE_DAMAGE_COMPOUND_INCREASE = 0.0112
NW_COMPOUND_INCREASE_DIMINISHING_MULTIPLIER = 0.6667
NW_BASE_DAMAGE_GEAR_SCORE_INTERVAL = 5
NW_MIN_POSSIBLE_WEAPON_GEAR_SCORE = 100
NW_DIMINISHING_GEAR_SCORE_THRESHOLD = 500
NW_ROUND_GEARSCORE_UP = True
NW_GEAR_SCORE_ROUNDING_INTERVAL = 5
NW_MAX_POINTS_PER_ATTRIBUTE = 500
NW_LEVEL_DAMAGE_MULTIPLIER = 0.025

NW_EQUIP_LOAD_MAX = 50
NW_EQUIP_LOAD_RATIO_FAST = 0
NW_EQUIP_LOAD_RATIO_NORMAL = 26
NW_EQUIP_LOAD_RATIO_SLOW = 46
NW_EQUIP_LOAD_DAMAGE_MULT_FAST = 0.2
NW_EQUIP_LOAD_DAMAGE_MULT_NORMAL = 0.1
NW_EQUIP_LOAD_DAMAGE_MULT_SLOW = 0
NW_EQUIP_LOAD_HEAL_MULT_FAST = 1.3
NW_EQUIP_LOAD_HEAL_MULT_NORMAL = 1
NW_EQUIP_LOAD_HEAL_MULT_SLOW = 0.7

EQUIP_LOAD_DAMAGE_MULT = {
    "fast": NW_EQUIP_LOAD_DAMAGE_MULT_FAST,
    "normal": NW_EQUIP_LOAD_DAMAGE_MULT_NORMAL,
    "slow": NW_EQUIP_LOAD_DAMAGE_MULT_SLOW,
}
EQUIP_LOAD_HEAL_MULT = {
    "fast": NW_EQUIP_LOAD_HEAL_MULT_FAST,
    "normal": NW_EQUIP_LOAD_HEAL_MULT_NORMAL,
    "slow": NW_EQUIP_LOAD_HEAL_MULT_SLOW,
}

# weapon scaling columns on weapon rows
WEAPON_SCALING_KEYS = {
    "str": "ScalingStrength",
    "dex": "ScalingDexterity",
    "int": "ScalingIntelligence",
    "foc": "ScalingFocus",
}


def round_gear_score(gear_score: float) -> float:
    gs = max(float(gear_score or 0), NW_MIN_POSSIBLE_WEAPON_GEAR_SCORE)
    step = NW_GEAR_SCORE_ROUNDING_INTERVAL
    if NW_ROUND_GEARSCORE_UP:
        return math.ceil(gs / step) * step
    return math.floor(gs / step) * step


def damage_factor_for_gs(gear_score: float) -> float:
    """Compounding gear-score multiplier; the rate drops past the 500 threshold."""
    gs = round_gear_score(gear_score)
    interval = NW_BASE_DAMAGE_GEAR_SCORE_INTERVAL
    base_steps = math.floor((min(gs, NW_DIMINISHING_GEAR_SCORE_THRESHOLD) - NW_MIN_POSSIBLE_WEAPON_GEAR_SCORE) / interval)
    dim_steps = math.floor(max(gs - NW_DIMINISHING_GEAR_SCORE_THRESHOLD, 0) / interval)
    dim_rate = NW_BASE_DAMAGE_COMPOUND_INCREASE * NW_COMPOUND_INCREASE_DIMINISHING_MULTIPLIER
    return (1 + NW_BASE_DAMAGE_COMPOUND_INCREASE) ** base_steps * (1 + dim_rate) ** dim_steps


def damage_factor_for_level(level: int) -> float:
    return NW_LEVEL_DAMAGE_MULTIPLIER * max(0, int(level or 1) - 1)


def damage_scale_attrs(weapon: Optional[Mapping]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for ref, key in WEAPON_SCALING_KEYS.items():
        try:
            out[ref] = float((weapon or {}).get(key) or 0)
        except (TypeError, ValueError):
            out[ref] = 0.0
    return out


def damage_factor_for_attrs(weapon_scale: Mapping[str, float], attr_scale: Mapping[str, Optional[float]]) -> float:
    """Sum of weapon scaling * attribute ModifierValueSum."""
    total = 0.0
    for ref, scale in weapon_scale.items():
        total += float(scale or 0) * float(attr_scale.get(ref) or 0)
    return total


def damage_for_weapon(
    *,
    weapon_gear_score: float,
    base_damage: float,
    damage_coef: float = 1,
    level: int = 60,
    weapon_scale: Optional[Mapping[str, float]] = None,
    attr_scale: Optional[Mapping[str, Optional[float]]] = None,
    ammo_mod: float = 0,
    base_mod: float = 0,
    crit_mod: float = 0,
    empower_mod: float = 0,
) -> float:
    """Outgoing damage of one hit before mitigation."""
    gs = damage_factor_for_gs(weapon_gear_score)
    lvl = damage_factor_for_level(level)
    attrs = damage_factor_for_attrs(weapon_scale or {}, attr_scale or {})
    return (
        float(base_damage or 0)
        * float(damage_coef or 0)
        * gs
        * (1 + lvl + attrs)
        * (1 + ammo_mod)
        * (1 + base_mod + crit_mod)
        * (1 + empower_mod)
    )


def damage_mitigation_percent(*, armor_rating: float, armor_penetration: float = 0, gear_score: float = 100) -> float:
    """Fraction of damage that still lands (1.0 = nothing mitigated)."""
    pen = min(1.0, max(0.0, float(armor_penetration or 0)))
    effective = float(armor_rating or 0) * (1 - pen)
    scale = NW_PHYSICAL_ARMOR_SCALE_FACTOR * damage_factor_for_gs(gear_score)
    if not scale:
        return 1.0
    ratio = min(NW_MAX_ARMOR_MITIGATION, max(NW_MIN_ARMOR_MITIGATION, effective / scale))
    return 1 - ratio / (1 + ratio)


def armor_rating_for_gs(base_rating: float, gear_score: float) -> float:
    return round(float(base_rating or 0) * damage_factor_for_gs(gear_score), NW_ARMOR_RATING_DECIMAL_ACCURACY)
