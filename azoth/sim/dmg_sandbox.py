# -*- coding: utf-8 -*-
"""Damage sandbox: one weapon attack against one defender."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from azoth.damage import (
    damage_factor_for_attrs,
    damage_factor_for_gs,
    damage_factor_for_level,
    damage_for_weapon,
    damage_mitigation_percent,
    damage_scale_attrs,
)
from azoth.items import get_weapon_tag_from_weapon, get_weapon_type
from azoth.tables import as_number


def _round(value: float) -> float:
    return round(float(value), 6)


def list_attacks(damage_rows: Sequence[Dict[str, Any]], weapon_tag: Optional[str]) -> List[Dict[str, Any]]:
    wtype = get_weapon_type(weapon_tag)
    if not wtype:
        return []
    prefix = wtype["DamageTablePrefix"]
    out = []
    for row in damage_rows or []:
        did = str(row.get("DamageID") or "")
        if did.startswith(prefix):
            out.append(
                {
                    "id": did,
                    "label": did[len(prefix) :],
                    "attack_type": row.get("AttackType"),
                    "dmg_coef": as_number(row.get("DmgCoef"), 1),
                }
            )
    return out


def simulate_damage(
    *,
    weapon: Optional[Mapping[str, Any]] = None,
    damage_rows: Optional[Sequence[Dict[str, Any]]] = None,
    attack_id: Optional[str] = None,
    weapon_gear_score: float = 600,
    player_level: int = 60,
    attr_sums: Optional[Mapping[str, float]] = None,
    base_damage: Optional[float] = None,
    crit_damage: Optional[float] = None,
    damage_coef: Optional[float] = None,
    ammo_mod: float = 0,
    base_mod: float = 0,
    crit_mod: float = 0,
    empower_mod: float = 0,
    armor_penetration: float = 0,
    defender_armor_rating: float = 0,
    defender_gear_score: Optional[float] = None,
) -> Dict[str, Any]:
    """Standard, crit and mitigated damage for one attack.

    Values taken from ``weapon`` / ``damage_rows`` can be overridden by the
    explicit ``base_damage``, ``crit_damage`` and ``damage_coef`` arguments.
    """
    weapon = weapon or {}
    weapon_tag = get_weapon_tag_from_weapon(dict(weapon)) if weapon else None
    attacks = list_attacks(damage_rows or [], weapon_tag)
    attack = next((a for a in attacks if a["id"] == attack_id), attacks[0] if attacks else None)

    base = base_damage if base_damage is not None else as_number(weapon.get("BaseDamage"))
    crit = crit_damage if crit_damage is not None else as_number(weapon.get("CritDamageMultiplier"), 1)
    coef = damage_coef if damage_coef is not None else (attack["dmg_coef"] if attack else 1)
    weapon_scale = damage_scale_attrs(weapon)
    attrs = dict(attr_sums or {})
    crit_sum = max(0.0, crit - 1 + crit_mod)

    common = dict(
        weapon_gear_score=weapon_gear_score,
        base_damage=base,
        damage_coef=coef,
        level=player_level,
        weapon_scale=weapon_scale,
        attr_scale=attrs,
        ammo_mod=ammo_mod,
        base_mod=base_mod,
        empower_mod=empower_mod,
    )
    tooltip = damage_for_weapon(
        weapon_gear_score=weapon_gear_score,
        base_damage=base,
        damage_coef=coef,
        level=player_level,
        weapon_scale=weapon_scale,
        attr_scale=attrs,
    )
    standard = damage_for_weapon(crit_mod=0, **common)
    critical = damage_for_weapon(crit_mod=crit_sum, **common)
    mitigation = damage_mitigation_percent(
        armor_rating=defender_armor_rating,
        armor_penetration=armor_penetration,
        gear_score=defender_gear_score if defender_gear_score is not None else weapon_gear_score,
    )

    return {
        "weapon": {
            "id": weapon.get("WeaponID"),
            "tag": weapon_tag,
            "base_damage": base,
            "crit_damage": crit,
            "scale": weapon_scale,
        },
        "attack": attack,
        "attacks": attacks,
        "factors": {
            "gear_score": _round(damage_factor_for_gs(weapon_gear_score)),
            "level": _round(damage_factor_for_level(player_level)),
            "attributes": _round(damage_factor_for_attrs(weapon_scale, attrs)),
            "crit": _round(crit_sum),
            "mitigation": _round(mitigation),
        },
        "damage": {
            "tooltip": _round(tooltip),
            "standard": _round(standard),
            "standard_mitigated": _round(standard * mitigation),
            "crit": _round(critical),
            "crit_mitigated": _round(critical * mitigation),
        },
    }
