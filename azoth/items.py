# -*- coding: utf-8 -*-
"""Item classification, equip slots and weapon-type lookups."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from azoth.perks import is_perk_inherent
from azoth.tables import as_list, eq_case_insensitive

__all__ = [
    "EQUIP_SLOTS",
    "GEAR_SCORE_SLOTS",
    "WEAPON_TYPES",
    "get_ammo_type_from_weapon_tag",
    "get_item_gs_bonus",
    "get_item_perk_ids",
    "get_item_perk_ids_with_override",
    "get_weapon_tag_from_weapon",
    "get_weapon_type",
    "is_item_armor",
    "is_item_consumable",
    "is_item_jewelery",
    "is_item_shield",
    "is_item_tool",
    "is_item_weapon",
]

EQUIP_SLOTS = (
    "head",
    "chest",
    "hands",
    "legs",
    "feet",
    "amulet",
    "ring",
    "earring",
    "weapon1",
    "weapon2",
    "weapon3",
    "arrow",
    "cartridge",
    "heartgem",
    "quickslot1",
    "quickslot2",
    "quickslot3",
    "quickslot4",
    "tool1",
    "tool2",
    "tool3",
    "tool4",
    "tool5",
)

# slots counted by the build's average gear score
GEAR_SCORE_SLOTS = EQUIP_SLOTS[:EQUIP_SLOTS.index("weapon3")]

# WeaponTag, ItemClass used to detect it, damage table prefix, ammo
WEAPON_TYPES: List[Dict[str, Any]] = [
    {"WeaponTag": "Sword", "ItemClass": "Sword", "DamageTablePrefix": "1hSword_", "UIName": "Sword", "AmmoType": None},
    {"WeaponTag": "Rapier", "ItemClass": "Rapier", "DamageTablePrefix": "Rapier_", "UIName": "Rapier", "AmmoType": None},
    {"WeaponTag": "Hatchet", "ItemClass": "Hatchet", "DamageTablePrefix": "1hThrowingAxe_", "UIName": "Hatchet", "AmmoType": None},
    {"WeaponTag": "Flail", "ItemClass": "Flail", "DamageTablePrefix": "Flail_", "UIName": "Flail", "AmmoType": None},
    {"WeaponTag": "Spear", "ItemClass": "Spear", "DamageTablePrefix": "2hSpear_", "UIName": "Spear", "AmmoType": None},
    {"WeaponTag": "GreatAxe", "ItemClass": "GreatAxe", "DamageTablePrefix": "2hGreatAxe_", "UIName": "Great Axe", "AmmoType": None},
    {"WeaponTag": "WarHammer", "ItemClass": "WarHammer", "DamageTablePrefix": "2hDemoHammer_", "UIName": "War Hammer", "AmmoType": None},
    {"WeaponTag": "GreatSword", "ItemClass": "GreatSword", "DamageTablePrefix": "2hGreatSword_", "UIName": "Greatsword", "AmmoType": None},
    {"WeaponTag": "Bow", "ItemClass": "Bow", "DamageTablePrefix": "Bow_", "UIName": "Bow", "AmmoType": "Arrow"},
    {"WeaponTag": "Rifle", "ItemClass": "Musket", "DamageTablePrefix": "Rifle_", "UIName": "Musket", "AmmoType": "Shot"},
    {"WeaponTag": "Blunderbuss", "ItemClass": "Blunderbuss", "DamageTablePrefix": "Blunderbuss_", "UIName": "Blunderbuss", "AmmoType": "Shot"},
    {"WeaponTag": "Fire", "ItemClass": "FireStaff", "DamageTablePrefix": "FireStaff_", "UIName": "Fire Staff", "AmmoType": None},
    {"WeaponTag": "Life", "ItemClass": "LifeStaff", "DamageTablePrefix": "LifeStaff_", "UIName": "Life Staff", "AmmoType": None},
    {"WeaponTag": "Ice", "ItemClass": "IceMagic", "DamageTablePrefix": "IceGauntlet_", "UIName": "Ice Gauntlet", "AmmoType": None},
    {"WeaponTag": "VoidGauntlet", "ItemClass": "VoidGauntlet", "DamageTablePrefix": "VoidGauntlet_", "UIName": "Void Gauntlet", "AmmoType": None},
]

_PERK_COL_RE = re.compile(r"^(Perk|PerkBucket)(\d+)$")


def _classes(item: Optional[Dict[str, Any]]) -> List[str]:
    return [str(c).lower() for c in as_list((item or {}).get("ItemClass"))]


def is_item_weapon(item: Optional[Dict[str, Any]]) -> bool:
    return eq_case_insensitive((item or {}).get("ItemType"), "Weapon")


def is_item_armor(item: Optional[Dict[str, Any]]) -> bool:
    return eq_case_insensitive((item or {}).get("ItemType"), "Armor")


def is_item_shield(item: Optional[Dict[str, Any]]) -> bool:
    return any("shield" in c for c in _classes(item))


def is_item_jewelery(item: Optional[Dict[str, Any]]) -> bool:
    classes = _classes(item)
    return any(c in classes for c in ("equippableamulet", "equippablering", "equippabletoken"))


def is_item_tool(item: Optional[Dict[str, Any]]) -> bool:
    return "equippabletool" in _classes(item)


def is_item_consumable(item: Optional[Dict[str, Any]]) -> bool:
    return "consumable" in _classes(item) or eq_case_insensitive((item or {}).get("ItemType"), "Consumable")


def get_weapon_type(weapon_tag: Optional[str]) -> Optional[Dict[str, Any]]:
    if not weapon_tag:
        return None
    for wtype in WEAPON_TYPES:
        if eq_case_insensitive(wtype["WeaponTag"], weapon_tag):
            return wtype
    return None


def get_weapon_tag_from_weapon(weapon: Optional[Dict[str, Any]]) -> Optional[str]:
    """Resolve a weapon stat row to its canonical weapon tag (or None)."""
    if not weapon:
        return None
    for tag in as_list(weapon.get("WeaponTag")):
        wtype = get_weapon_type(tag)
        if wtype:
            return wtype["WeaponTag"]
    classes = _classes(weapon)
    for wtype in WEAPON_TYPES:
        if wtype["ItemClass"].lower() in classes:
            return wtype["WeaponTag"]
    return None


def get_ammo_type_from_weapon_tag(weapon_tag: Optional[str]) -> Optional[str]:
    wtype = get_weapon_type(weapon_tag)
    return wtype["AmmoType"] if wtype else None


def get_item_perk_ids(item: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Perk columns of an item, ordered by slot number (``Perk1`` .. ``PerkBucketN``)."""
    cols = []
    for key, value in (item or {}).items():
        m = _PERK_COL_RE.match(str(key))
        if m and value:
            cols.append((m.group(1) != "Perk", int(m.group(2)), key, str(value)))
    cols.sort()
    return {key: value for _, _, key, value in cols}


def get_item_perk_ids_with_override(
    item: Optional[Dict[str, Any]],
    overrides: Optional[Dict[str, str]] = None,
) -> List[str]:
    """Perk ids of an item; a per-slot override (keyed by column name) wins.

    Bucket columns hold bucket ids, not perk ids; they only contribute when
    the caller supplies a concrete perk for that column.
    """
    overrides = overrides or {}
    out: List[str] = []
    for key, value in get_item_perk_ids(item).items():
        chosen = overrides.get(key)
        if chosen:
            out.append(str(chosen))
        elif key.startswith("Perk") and not key.startswith("PerkBucket"):
            out.append(value)
    for key, value in overrides.items():
        if value and key not in get_item_perk_ids(item):
            out.append(str(value))
    return out


def get_item_gs_bonus(perk: Optional[Dict[str, Any]], item: Optional[Dict[str, Any]]) -> float:
    """Inherent (attribute) perks scale with the item's GearScoreBonus as well."""
    if not is_perk_inherent(perk):
        return 0
    try:
        return float((item or {}).get("GearScoreBonus") or 0)
    except (TypeError, ValueError):
        return 0
