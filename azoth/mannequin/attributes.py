# -*- coding: utf-8 -*-
"""Attribute pipeline: base + bonus + assigned, then placement (magnify) mods."""

from __future__ import annotations

import math
from typing import Dict, List, Sequence

from azoth.items import get_item_gs_bonus
from azoth.mannequin.types import ATTRIBUTE_MOD_KEYS, ATTRIBUTE_REFS, ActiveAttribute, ActiveEffect, ActivePerk, MannequinState
from azoth.perks import get_perk_multiplier
from azoth.tables import DbSlice, as_list, as_number

__all__ = [
    "select_attributes",
    "select_bonus_attributes",
    "select_equipped_attributes",
    "select_placing_mods",
    "solve_attribute_placing_mods",
]


def _affix_scale(active: ActivePerk) -> float:
    if not active.perk.get("ScalingPerGearScore"):
        return 1.0
    return get_perk_multiplier(active.perk, active.gear_score + get_item_gs_bonus(active.perk, active.item))


def _min_level(rows: List[Dict]) -> int:
    levels = [int(as_number(r.get("Level"))) for r in rows if r.get("Level") is not None]
    return min(levels) if levels else 0


def select_equipped_attributes(db: DbSlice, perks: Sequence[ActivePerk]) -> Dict[str, int]:
    """Starting level of every attribute plus the floored affix MODs of active perks."""
    result = {ref: _min_level(db.level_table(ref)) for ref in ATTRIBUTE_REFS}
    for active in perks:
        if not active.affix:
            continue
        scale = _affix_scale(active)
        for ref, key in ATTRIBUTE_MOD_KEYS.items():
            result[ref] += math.floor(as_number(active.affix.get(key)) * scale)
    return result


def select_bonus_attributes(effects: Sequence[ActiveEffect]) -> Dict[str, int]:
    """Attribute MODs from consumed food and potions."""
    result = {ref: 0 for ref in ATTRIBUTE_REFS}
    for active in effects:
        if not active.effect or not active.consumable:
            continue
        for ref, key in ATTRIBUTE_MOD_KEYS.items():
            result[ref] += int(as_number(active.effect.get(key)))
    return result


def select_placing_mods(perks: Sequence[ActivePerk]) -> List[int]:
    """``AttributePlacingMods`` lists, floored per index and summed positionally."""
    result: List[int] = []
    for active in perks:
        raw = (active.affix or {}).get("AttributePlacingMods")
        if not raw:
            continue
        scale = _affix_scale(active)
        parts = raw.split(",") if isinstance(raw, str) else as_list(raw)
        for i, part in enumerate(parts):
            value = math.floor(as_number(part) * scale)
            while len(result) <= i:
                result.append(0)
            result[i] += value
    return result


def solve_attribute_placing_mods(totals: Dict[str, int], placing_mods: Sequence[int]) -> Dict[str, int]:
    """Distribute placement mods over the attributes.

    Attributes are ranked by total (highest first); ``placing_mods[i]`` goes
    to rank ``i``. Attributes sharing a total pool the mods of their ranks and
    split them evenly, the floor remainder going to the first one in
    str/dex/int/foc/con order.
    """
    out = {ref: 0 for ref in ATTRIBUTE_REFS}
    if not placing_mods:
        return out

    order = list(ATTRIBUTE_REFS)
    ranked = sorted(order, key=lambda ref: (-totals.get(ref, 0), order.index(ref)))

    i = 0
    while i < len(ranked):
        j = i
        while j + 1 < len(ranked) and totals.get(ranked[j + 1], 0) == totals.get(ranked[i], 0):
            j += 1
        group = ranked[i : j + 1]
        pool = sum(int(placing_mods[k]) for k in range(i, j + 1) if k < len(placing_mods))
        size = len(group)
        if size and pool:
            share = pool // size
            for ref in group:
                out[ref] += share
            out[group[0]] += pool - share * size
        i = j + 1
    return out


def select_attributes(
    db: DbSlice,
    perks: Sequence[ActivePerk],
    effects: Sequence[ActiveEffect],
    state: MannequinState,
) -> Dict[str, ActiveAttribute]:
    base = select_equipped_attributes(db, perks)
    bonus = select_bonus_attributes(effects)
    assigned = state.assigned_attributes or {}
    magnify = select_placing_mods(perks)

    result: Dict[str, ActiveAttribute] = {}
    for ref in ATTRIBUTE_REFS:
        b = base.get(ref, 0)
        x = bonus.get(ref, 0)
        a = int(assigned.get(ref, 0) or 0)
        result[ref] = ActiveAttribute(base=b, bonus=x, assigned=a, total=b + x + a)

    solved = solve_attribute_placing_mods({ref: attr.total for ref, attr in result.items()}, magnify)
    for ref, value in solved.items():
        result[ref].magnify = value
        result[ref].total += value

    for ref, attr in result.items():
        rows = db.level_table(ref)
        hit = next((r for r in rows if as_number(r.get("Level"), -1) == attr.total), None)
        if hit:
            attr.health = hit.get("Health")
            attr.scale = hit.get("ModifierValueSum")
        abilities: List[str] = []
        for r in rows:
            if as_number(r.get("Level")) <= attr.total:
                abilities.extend(str(a) for a in as_list(r.get("EquipAbilities")))
        attr.abilities = abilities
    return result
