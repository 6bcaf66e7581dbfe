# -*- coding: utf-8 -*-
"""Build selectors.

Every selector is a pure function of ``(db, state)`` and whatever an earlier
selector produced; none of them keeps state between calls.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence

from azoth.damage import (
    NW_EQUIP_LOAD_MAX,
    NW_EQUIP_LOAD_RATIO_NORMAL,
    NW_EQUIP_LOAD_RATIO_SLOW,
)
from azoth.items import (
    GEAR_SCORE_SLOTS,
    get_ammo_type_from_weapon_tag,
    get_item_perk_ids_with_override,
    get_weapon_tag_from_weapon,
    get_weapon_type,
    is_item_armor,
    is_item_consumable,
    is_item_jewelery,
    is_item_shield,
    is_item_tool,
    is_item_weapon,
)
from azoth.mannequin.conditions import ConditionCheck, check_all_conditions, is_active_ability
from azoth.mannequin.types import (
    ActiveAbility,
    ActiveAttribute,
    ActiveConsumable,
    ActiveEffect,
    ActivePerk,
    ActiveWeapon,
    EquippedItem,
    MannequinState,
)
from azoth.tables import DbSlice, TableIndex, as_list, as_number, eq_case_insensitive

logger = logging.getLogger(__name__)

UNARMED_WEAPON_ID = "Unarmed"
UNARMED_TABLE_PREFIX = "Unarmed_"

# TODO: read the hit counter scale from the ultimate's status effect instead of the id
ULTIMATE_HIT_SCALED_ABILITY = "Ultimate_Greataxe_Mauler"
ULTIMATE_HIT_SCALE_MAX = 10


def _is_weapon_active(weapon_active: str, slot: str) -> bool:
    if weapon_active == "primary" and slot == "weapon1":
        return True
    if weapon_active == "secondary" and slot == "weapon2":
        return True
    return False


def _find_slot(state: MannequinState, slot: str) -> Optional[EquippedItem]:
    return next((it for it in state.equipped_items if it.slot == slot), None)


# ------------------------------------------------------------
# Weapon
# ------------------------------------------------------------


def select_active_weapon(db: DbSlice, state: MannequinState) -> ActiveWeapon:
    equipped = next((it for it in state.equipped_items if _is_weapon_active(state.weapon_active, it.slot)), None)
    item = db.items.get(equipped.item_id) if equipped else None
    weapon = db.weapons.get((item or {}).get("ItemStatsRef")) or db.weapons.get(UNARMED_WEAPON_ID)
    weapon_tag = get_weapon_tag_from_weapon(weapon)
    ammo_type = get_ammo_type_from_weapon_tag(weapon_tag)

    ammo = None
    ammo_slot = {"Arrow": "arrow", "Shot": "cartridge"}.get(str((weapon or {}).get("AmmoType") or ""))
    if ammo_slot:
        ammo_item = _find_slot(state, ammo_slot)
        ammo = db.ammos.get(ammo_item.item_id) if ammo_item else None

    return ActiveWeapon(
        item=item,
        weapon=weapon,
        weapon_tag=weapon_tag,
        gear_score=equipped.gear_score if equipped else None,
        slot=equipped.slot if equipped else None,
        unsheathed=state.weapon_unsheathed,
        ammo=ammo if ammo and eq_case_insensitive(ammo.get("AmmoType"), ammo_type) else None,
    )


def select_weapon_attacks(db: DbSlice, weapon: ActiveWeapon) -> List[Dict[str, Any]]:
    """Light and heavy damage rows of the weapon's damage table."""
    wtype = get_weapon_type(weapon.weapon_tag)
    if weapon.weapon_tag and not wtype:
        return []
    prefix = wtype["DamageTablePrefix"] if wtype else UNARMED_TABLE_PREFIX
    out: List[Dict[str, Any]] = []
    for row in db.damage_table:
        if not as_number(row.get("DmgCoef")):
            continue
        if not str(row.get("DamageID") or "").startswith(prefix):
            continue
        if row.get("AttackType") in ("Light", "Heavy"):
            out.append(row)
    return out


def select_damage_table_row(rows: Sequence[Dict[str, Any]], state: MannequinState) -> Optional[Dict[str, Any]]:
    for row in rows or []:
        if row.get("DamageID") == state.selected_attack:
            return row
    return rows[0] if rows else None


# ------------------------------------------------------------
# Equipment
# ------------------------------------------------------------


def select_level(state: MannequinState) -> int:
    return state.level


def select_gear_score(state: MannequinState) -> int:
    """Average gear score over armor, jewelry and the two weapon slots.

    An empty slot counts as 0; the first item equipped in a slot wins.
    """
    by_slot: Dict[str, float] = {}
    for equipped in state.equipped_items:
        if equipped.slot in GEAR_SCORE_SLOTS and equipped.item_id:
            by_slot.setdefault(equipped.slot, max(0.0, as_number(equipped.gear_score)))
    return math.floor(sum(by_slot.values()) / len(GEAR_SCORE_SLOTS))


def select_equip_load(db: DbSlice, state: MannequinState, perks: Sequence[ActivePerk]) -> float:
    total = 0.0
    for equipped in state.equipped_items:
        item = db.items.get(equipped.item_id)
        if not item or not (is_item_armor(item) or is_item_shield(item)):
            continue
        ref = item.get("ItemStatsRef")
        weapon = db.weapons.get(ref) or {}
        armor = db.armors.get(ref) or {}
        raw = weapon.get("WeightOverride") or armor.get("WeightOverride") or item.get("Weight")
        weight = math.floor(as_number(raw)) / 10
        carrier = next((p for p in perks if p.item is item), None)
        scale = 1 + as_number(((carrier.affix if carrier else None) or {}).get("WeightMultiplier"))
        total += weight * scale
    return total


def equip_load_category(load: float) -> str:
    """fast / normal / slow by percentage of the maximum equip load."""
    ratio = load / NW_EQUIP_LOAD_MAX * 100
    if ratio < NW_EQUIP_LOAD_RATIO_NORMAL:
        return "fast"
    if ratio < NW_EQUIP_LOAD_RATIO_SLOW:
        return "normal"
    return "slow"


def _equipped_where(db: DbSlice, state: MannequinState, pred) -> List[EquippedItem]:
    return [it for it in state.equipped_items if pred(db.items.get(it.item_id))]


def select_equipped_armor(db: DbSlice, state: MannequinState) -> List[EquippedItem]:
    return _equipped_where(db, state, lambda item: is_item_armor(item) or is_item_jewelery(item))


def select_equipped_weapons(db: DbSlice, state: MannequinState) -> List[EquippedItem]:
    return _equipped_where(db, state, lambda item: is_item_weapon(item) or is_item_shield(item))


def select_equipped_tools(db: DbSlice, state: MannequinState) -> List[EquippedItem]:
    return _equipped_where(db, state, is_item_tool)


def select_equipped_consumables(db: DbSlice, state: MannequinState) -> List[EquippedItem]:
    return _equipped_where(db, state, is_item_consumable)


def select_placed_housings(db: DbSlice, state: MannequinState) -> List[EquippedItem]:
    return [it for it in state.equipped_items if (db.housings.get(it.item_id) or {}).get("HousingStatusEffect")]


# ------------------------------------------------------------
# Perks
# ------------------------------------------------------------


def select_equipped_perks(db: DbSlice, state: MannequinState) -> List[ActivePerk]:
    out: List[ActivePerk] = []
    for equipped in state.equipped_items:
        item = db.items.get(equipped.item_id)
        if not item:
            continue
        ref = item.get("ItemStatsRef")
        for perk_id in get_item_perk_ids_with_override(item, equipped.perks):
            perk = db.perks.get(perk_id)
            if not perk:
                continue
            out.append(
                ActivePerk(
                    slot=equipped.slot,
                    item=item,
                    gear_score=equipped.gear_score,
                    perk=perk,
                    affix=db.affixes.get(perk.get("Affix")),
                    weapon=db.weapons.get(ref),
                    armor=db.armors.get(ref),
                    rune=db.runes.get(ref),
                )
            )
    return out


def is_perk_active(active: ActivePerk, weapon: ActiveWeapon) -> bool:
    condition = active.perk.get("ConditionEvent")
    if condition == "OnEquip":
        return True
    if not (is_item_weapon(active.item) or is_item_shield(active.item)):
        return True
    is_active_slot = weapon.slot == active.slot or (
        active.slot == "weapon3" and weapon.weapon_tag in ("Sword", "Flail")
    )
    if not is_active_slot:
        return False
    if condition == "OnActive":
        return True
    if condition == "OnUnsheathed":
        return bool(weapon.unsheathed)
    return False


def select_active_perks(db: DbSlice, state: MannequinState, weapon: Optional[ActiveWeapon] = None) -> List[ActivePerk]:
    weapon = weapon or select_active_weapon(db, state)
    return [p for p in select_equipped_perks(db, state) if is_perk_active(p, weapon)]


# ------------------------------------------------------------
# Effects
# ------------------------------------------------------------


def select_consumable_effects(db: DbSlice, state: MannequinState) -> List[ActiveEffect]:
    # consumables in the build count as consumed
    out: List[ActiveEffect] = []
    for equipped in state.equipped_items:
        consumable = db.consumables.get(equipped.item_id)
        if not consumable:
            continue
        for sid in as_list(consumable.get("AddStatusEffects")):
            effect = db.effects.get(sid)
            if effect:
                out.append(ActiveEffect(effect=effect, item=db.items.get(equipped.item_id), consumable=consumable))
    return out


def select_housing_effects(db: DbSlice, state: MannequinState) -> List[ActiveEffect]:
    out: List[ActiveEffect] = []
    for equipped in state.equipped_items:
        housing = db.housings.get(equipped.item_id)
        effect = db.effects.get((housing or {}).get("HousingStatusEffect"))
        if effect:
            out.append(ActiveEffect(effect=effect, item=housing))
    return out


def select_perk_effects(db: DbSlice, perks: Sequence[ActivePerk]) -> List[ActiveEffect]:
    out: List[ActiveEffect] = []
    for active in perks:
        affix = db.affixes.get(active.perk.get("Affix"))
        effect = db.effects.get((affix or {}).get("StatusEffect"))
        if effect:
            out.append(ActiveEffect(effect=effect, perk=active))
    return out


def select_enforced_effects(db: DbSlice, state: MannequinState) -> List[ActiveEffect]:
    # town buffs and the like, repeated per stack
    out: List[ActiveEffect] = []
    for enforced in state.enforced_effects or []:
        effect = db.effects.get(enforced.id)
        if not effect:
            continue
        out.extend(ActiveEffect(effect=effect) for _ in range(max(0, int(enforced.stack))))
    return out


def select_active_effects(db: DbSlice, perks: Sequence[ActivePerk], state: MannequinState) -> List[ActiveEffect]:
    return (
        select_consumable_effects(db, state)
        + select_housing_effects(db, state)
        + select_perk_effects(db, perks)
        + select_enforced_effects(db, state)
    )


def select_active_consumables(db: DbSlice, state: MannequinState) -> List[ActiveConsumable]:
    out: List[ActiveConsumable] = []
    for equipped in state.equipped_items:
        consumable = db.consumables.get(equipped.item_id)
        if consumable:
            out.append(ActiveConsumable(item=db.items.get(equipped.item_id), consumable=consumable))
    return out


# ------------------------------------------------------------
# Abilities
# ------------------------------------------------------------


def get_ability_scale(ability: Optional[Dict[str, Any]], state: MannequinState) -> float:
    if not ability:
        return 1
    max_around = as_number(ability.get("MaxNumAroundMe"))
    if ability.get("NumAroundMe") and max_around:
        return max(1, min(state.num_around_me, max_around))
    if ability.get("AbilityID") == ULTIMATE_HIT_SCALED_ABILITY:
        return max(1, min(state.num_hits, ULTIMATE_HIT_SCALE_MAX))
    return 1


def get_status_effect_list(ids: Any, effects: TableIndex) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for sid in as_list(ids):
        effect = effects.get(sid)
        if effect:
            out.append(effect)
        else:
            logger.warning("missing effect %s", sid)
    return out


def select_attribute_abilities(db: DbSlice, attributes: Dict[str, ActiveAttribute]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for attr in attributes.values():
        for aid in attr.abilities:
            ability = db.abilities.get(aid)
            if ability:
                out.append(ability)
    return out


def select_activated_abilities(db: DbSlice, state: MannequinState) -> List[Dict[str, Any]]:
    return [a for a in (db.abilities.get(aid) for aid in state.activated_abilities) if a]


def select_weapon_abilities(db: DbSlice, weapon: ActiveWeapon, state: MannequinState) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for skills in (state.equipped_skills1, state.equipped_skills2):
        if not skills or not eq_case_insensitive(skills.weapon, weapon.weapon_tag):
            continue
        for aid in list(skills.tree1) + list(skills.tree2):
            ability = db.abilities.get(aid)
            if ability:
                out.append(ability)
    return out


def select_perk_abilities(db: DbSlice, perks: Sequence[ActivePerk], state: MannequinState) -> List[ActiveAbility]:
    out: List[ActiveAbility] = []
    for active in perks:
        for aid in as_list(active.perk.get("EquipAbility")):
            ability = db.abilities.get(aid)
            if not ability:
                continue
            out.append(
                ActiveAbility(
                    ability=ability,
                    self_effects=get_status_effect_list(ability.get("SelfApplyStatusEffect"), db.effects),
                    perk=active,
                    scale=get_ability_scale(ability, state),
                )
            )
    return out


def select_all_abilities(
    db: DbSlice,
    attributes: Dict[str, ActiveAttribute],
    weapon: ActiveWeapon,
    perks: Sequence[ActivePerk],
    state: MannequinState,
) -> List[ActiveAbility]:
    out: List[ActiveAbility] = []
    for ability in select_attribute_abilities(db, attributes):
        out.append(
            ActiveAbility(
                ability=ability,
                self_effects=get_status_effect_list(ability.get("SelfApplyStatusEffect"), db.effects),
                attribute=True,
                scale=get_ability_scale(ability, state),
            )
        )
    for ability in select_weapon_abilities(db, weapon, state):
        out.append(
            ActiveAbility(
                ability=ability,
                self_effects=get_status_effect_list(ability.get("SelfApplyStatusEffect"), db.effects),
                weapon=weapon,
                scale=get_ability_scale(ability, state),
                cooldown=db.cooldowns.get(ability.get("AbilityID")),
            )
        )
    out.extend(select_perk_abilities(db, perks, state))
    return out


def select_active_abilities(
    db: DbSlice,
    attributes: Dict[str, ActiveAttribute],
    weapon: ActiveWeapon,
    attack: Optional[Dict[str, Any]],
    perks: Sequence[ActivePerk],
    state: MannequinState,
    conditions: ConditionCheck = check_all_conditions,
) -> List[ActiveAbility]:
    return [
        a
        for a in select_all_abilities(db, attributes, weapon, perks, state)
        if is_active_ability(a.ability, attack, state, conditions)
    ]
