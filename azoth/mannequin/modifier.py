# -*- coding: utf-8 -*-
"""Modifier aggregation over the active build objects.

``each_modifier`` is a lazy generator that walks every contributing source in
a fixed category order:

    bonuses -> effects -> perk affixes -> abilities -> ability self-effects
    (-> consumables, only for DMGVitalsCategory)

Within a category the input order is kept, so a source breakdown is
reproducible. Sums go through ``modifier_sum``; products are only ever built
with an explicit ``modifier_mult``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional

from azoth.items import get_item_gs_bonus
from azoth.mannequin.keys import read_modifier
from azoth.mannequin.types import (
    ActiveAbility,
    ActiveBonus,
    ActiveEffect,
    ActiveMods,
    ActivePerk,
    ModifierResult,
    ModifierSource,
    ModifierValue,
)
from azoth.perks import get_perk_multiplier
from azoth.tables import as_number, eq_case_insensitive

__all__ = [
    "each_ability",
    "each_bonus",
    "each_effect",
    "each_modifier",
    "each_perk",
    "modifier_add",
    "modifier_groups",
    "modifier_mult",
    "modifier_result",
    "modifier_sum",
    "modifier_vitals_category",
]

Predicate = Callable[[ModifierValue], bool]


def each_effect(mods: ActiveMods) -> Iterator[ActiveEffect]:
    """Active effects, dropping occurrences beyond a status effect's StackMax."""
    stack: Dict[str, int] = {}
    for it in mods.effects:
        stack_max = as_number(it.effect.get("StackMax"))
        if stack_max:
            sid = str(it.effect.get("StatusID") or "").lower()
            count = stack.get(sid, 0)
            stack[sid] = count + 1
            if count >= stack_max:
                continue
        yield it


def each_ability(mods: ActiveMods) -> Iterator[ActiveAbility]:
    """Active abilities, dropping stackable ones beyond IsStackableMax."""
    stack: Dict[str, int] = {}
    for it in mods.abilities:
        aid = str(it.ability.get("AbilityID") or "").lower()
        stack[aid] = stack.get(aid, 0) + 1
        stack_max = as_number(it.ability.get("IsStackableMax"))
        if not it.ability.get("IsStackableAbility") or not stack_max or stack[aid] <= stack_max:
            yield it


def each_perk(mods: ActiveMods) -> Iterator[ActivePerk]:
    yield from mods.perks


def each_bonus(mods: ActiveMods) -> Iterator[ActiveBonus]:
    yield from mods.bonuses


def _ability_scale(ability: ActiveAbility) -> float:
    scale = 1.0
    if ability.perk:
        scale *= get_perk_multiplier(ability.perk.perk, ability.perk.gear_score)
    if ability.scale:
        scale *= ability.scale
    return scale


def each_modifier(key: str, mods: ActiveMods) -> Iterator[ModifierValue]:
    read_modifier(None, key)

    for bonus in each_bonus(mods):
        if bonus.key == key:
            yield ModifierValue(value=bonus.value, scale=1, source=ModifierSource(label=bonus.name or None))

    for it in each_effect(mods):
        value = read_modifier(it.effect, key)
        if not value:
            continue
        scale = 1.0
        if it.perk:
            scale = get_perk_multiplier(it.perk.perk, it.perk.gear_score)
        source = ModifierSource(
            ability=it.ability,
            perk=it.perk.perk if it.perk else None,
            item=it.item,
            slot=it.perk.slot if it.perk else None,
            effect=it.effect,
        )
        yield ModifierValue(value=value, scale=scale, source=source)

    for it in each_perk(mods):
        if not it.affix:
            continue
        value = read_modifier(it.affix, key)
        if not value:
            continue
        scale = get_perk_multiplier(it.perk, it.gear_score + get_item_gs_bonus(it.perk, it.item))
        yield ModifierValue(value=value, scale=scale, source=ModifierSource(perk=it.perk, item=it.item, slot=it.slot))

    for it in each_ability(mods):
        value = read_modifier(it.ability, key)
        if not value:
            continue
        source = ModifierSource(ability=it.ability, perk=it.perk.perk if it.perk else None)
        yield ModifierValue(value=value, scale=_ability_scale(it), source=source)

    for it in each_ability(mods):
        for effect in it.self_effects:
            value = read_modifier(effect, key)
            if not value:
                continue
            source = ModifierSource(ability=it.ability, perk=it.perk.perk if it.perk else None, effect=effect)
            yield ModifierValue(value=value, scale=_ability_scale(it), source=source)

    if key == "DMGVitalsCategory":
        for it in mods.consumables:
            value = read_modifier(it.consumable, key)
            if not value:
                continue
            yield ModifierValue(value=value, scale=1, source=ModifierSource(item=it.item))


def modifier_result(base: Optional[ModifierValue] = None) -> ModifierResult:
    if base is None:
        return ModifierResult(value=0, source=[])
    return ModifierResult(value=as_number(base.value), source=[base])


def modifier_add(result: ModifierResult, mod: ModifierValue) -> ModifierResult:
    value = as_number(mod.value)
    if value:
        result.value += value * mod.scale
        result.source.append(mod)
    return result


def modifier_mult(result: ModifierResult, mod: ModifierValue) -> ModifierResult:
    value = as_number(mod.value)
    if value:
        result.value *= value * mod.scale
        result.source.append(mod)
    return result


def modifier_sum(key: str, mods: ActiveMods, predicate: Optional[Predicate] = None) -> ModifierResult:
    result = modifier_result()
    for mod in each_modifier(key, mods):
        if predicate is None or predicate(mod):
            modifier_add(result, mod)
    return result


def modifier_groups(key: str, mods: ActiveMods) -> List[Dict[str, Any]]:
    """String-valued modifiers (e.g. DMGVitalsCategory) with their sources."""
    out: List[Dict[str, Any]] = []
    for mod in each_modifier(key, mods):
        if isinstance(mod.value, str):
            out.append({"value": mod.value, "scale": mod.scale, "source": mod.source})
    return out


def _parse_category_list(value: str) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for part in value.split(","):
        if "=" not in part:
            continue
        name, raw = part.split("=", 1)
        out[name.strip()] = as_number(raw)
    return out


def modifier_vitals_category(key: str, mods: ActiveMods, category: str) -> ModifierResult:
    """Sum the ``category`` entry of ``"Beast=0.05,Lost=0.1"`` style modifiers."""
    result = modifier_result()
    for group in modifier_groups(key, mods):
        for name, value in _parse_category_list(group["value"]).items():
            if eq_case_insensitive(name, category):
                modifier_add(result, ModifierValue(value=value, scale=group["scale"], source=group["source"]))
    return result
