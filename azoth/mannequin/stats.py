# -*- coding: utf-8 -*-
"""Full build resolution: state in, derived stat blocks out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from azoth.damage import (
    EQUIP_LOAD_DAMAGE_MULT,
    EQUIP_LOAD_HEAL_MULT,
    damage_factor_for_gs,
    damage_for_weapon,
    damage_scale_attrs,
)
from azoth.mannequin.attributes import select_attributes
from azoth.mannequin.conditions import ConditionCheck, check_all_conditions
from azoth.mannequin.keys import ATTRIBUTE_KEYS, DAMAGE_TYPES
from azoth.mannequin.modifier import modifier_sum
from azoth.mannequin.selectors import (
    equip_load_category,
    select_active_abilities,
    select_active_consumables,
    select_active_effects,
    select_active_perks,
    select_active_weapon,
    select_damage_table_row,
    select_equip_load,
    select_gear_score,
    select_level,
    select_weapon_attacks,
)
from azoth.mannequin.types import (
    ActiveAbility,
    ActiveAttribute,
    ActiveBonus,
    ActiveConsumable,
    ActiveEffect,
    ActiveMods,
    ActivePerk,
    ActiveWeapon,
    MannequinState,
    ModifierResult,
)
from azoth.tables import DbSlice, as_number

__all__ = ["MannequinResult", "STAT_KEYS", "resolve_mannequin", "weapon_damage_summary"]

STAT_KEYS = (
    ATTRIBUTE_KEYS
    + (
        "BaseDamage",
        "CritChance",
        "CritDamage",
        "ArmorPenetration",
        "PhysicalArmor",
        "ElementalArmor",
        "MaxHealthMod",
        "MaxManaMod",
        "HealScalingValueMultiplier",
        "EncumbranceMod",
    )
    + tuple(f"DMG{t}" for t in DAMAGE_TYPES)
    + tuple(f"ABS{t}" for t in DAMAGE_TYPES)
)


@dataclass
class MannequinResult:
    weapon: ActiveWeapon
    attack: Optional[Dict[str, Any]]
    attacks: List[Dict[str, Any]]
    perks: List[ActivePerk]
    effects: List[ActiveEffect]
    abilities: List[ActiveAbility]
    consumables: List[ActiveConsumable]
    attributes: Dict[str, ActiveAttribute]
    equip_load: float
    equip_load_category: str
    stats: Dict[str, ModifierResult] = field(default_factory=dict)
    damage: Dict[str, Any] = field(default_factory=dict)
    level: int = 0
    gear_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "gear_score": self.gear_score,
            "weapon": self.weapon.to_dict(),
            "attack": (self.attack or {}).get("DamageID"),
            "attacks": [a.get("DamageID") for a in self.attacks],
            "perks": [p.to_dict() for p in self.perks],
            "effects": [e.to_dict() for e in self.effects],
            "abilities": [a.to_dict() for a in self.abilities],
            "consumables": [c.to_dict() for c in self.consumables],
            "attributes": {k: v.to_dict() for k, v in self.attributes.items()},
            "equip_load": self.equip_load,
            "equip_load_category": self.equip_load_category,
            "stats": {k: v.to_dict() for k, v in self.stats.items()},
            "damage": dict(self.damage),
        }


def weapon_damage_summary(
    weapon: ActiveWeapon,
    attack: Optional[Dict[str, Any]],
    attributes: Dict[str, ActiveAttribute],
    mods: ActiveMods,
    *,
    level: int,
    load_category: str,
) -> Dict[str, Any]:
    if not weapon.weapon or not attack:
        return {}
    damage_type = str(attack.get("DamageType") or weapon.weapon.get("DamageType") or "Standard")
    attr_scale = {ref: attr.scale for ref, attr in attributes.items()}
    base_mod = modifier_sum("BaseDamage", mods).value + EQUIP_LOAD_DAMAGE_MULT.get(load_category, 0)
    empower = modifier_sum(f"DMG{damage_type}", mods).value if damage_type in DAMAGE_TYPES else 0
    ammo_mod = as_number((weapon.ammo or {}).get("DamageModifier"))
    crit_mod = modifier_sum("CritDamage", mods).value
    crit_mult = as_number(weapon.weapon.get("CritDamageMultiplier"), 1) or 1

    kwargs = dict(
        weapon_gear_score=weapon.gear_score or 0,
        base_damage=as_number(weapon.weapon.get("BaseDamage")),
        damage_coef=as_number(attack.get("DmgCoef")),
        level=level,
        weapon_scale=damage_scale_attrs(weapon.weapon),
        attr_scale=attr_scale,
        ammo_mod=ammo_mod,
        base_mod=base_mod,
        empower_mod=empower,
    )
    standard = damage_for_weapon(**kwargs)
    crit = damage_for_weapon(crit_mod=crit_mult - 1 + crit_mod, **kwargs)
    return {
        "damage_type": damage_type,
        "gear_score_factor": damage_factor_for_gs(weapon.gear_score or 0),
        "standard": standard,
        "crit": crit,
        "heal_multiplier": EQUIP_LOAD_HEAL_MULT.get(load_category, 1),
    }


def resolve_mannequin(
    db: DbSlice,
    state: MannequinState,
    *,
    bonuses: Optional[Sequence[ActiveBonus]] = None,
    conditions: ConditionCheck = check_all_conditions,
) -> MannequinResult:
    weapon = select_active_weapon(db, state)
    attacks = select_weapon_attacks(db, weapon)
    attack = select_damage_table_row(attacks, state)
    perks = select_active_perks(db, state, weapon)
    effects = select_active_effects(db, perks, state)
    consumables = select_active_consumables(db, state)
    attributes = select_attributes(db, perks, effects, state)
    abilities = select_active_abilities(db, attributes, weapon, attack, perks, state, conditions)

    load = select_equip_load(db, state, perks)
    category = equip_load_category(load)

    mods = ActiveMods(
        perks=perks,
        effects=effects,
        abilities=abilities,
        consumables=consumables,
        bonuses=list(bonuses or []),
    )
    stats = {key: modifier_sum(key, mods) for key in STAT_KEYS}
    damage = weapon_damage_summary(weapon, attack, attributes, mods, level=state.level, load_category=category)

    return MannequinResult(
        weapon=weapon,
        attack=attack,
        attacks=attacks,
        perks=perks,
        effects=effects,
        abilities=abilities,
        consumables=consumables,
        attributes=attributes,
        equip_load=load,
        equip_load_category=category,
        stats=stats,
        damage=damage,
        level=select_level(state),
        gear_score=select_gear_score(state),
    )
