# -*- coding: utf-8 -*-
"""Closed set of modifier property names.

Effects, affixes, abilities and consumables are plain table rows. Modifier
code reads them only through ``read_modifier`` so a typo in a key fails
immediately instead of silently summing to zero.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Optional

__all__ = [
    "ALL_KEYS",
    "ATTRIBUTE_KEYS",
    "DAMAGE_TYPES",
    "NUMERIC_KEYS",
    "STRING_KEYS",
    "is_modifier_key",
    "read_modifier",
]

DAMAGE_TYPES = (
    "Slash",
    "Strike",
    "Thrust",
    "Arcane",
    "Fire",
    "Ice",
    "Nature",
    "Corruption",
    "Lightning",
    "Siege",
    "Standard",
)

ATTRIBUTE_KEYS = (
    "MODConstitution",
    "MODDexterity",
    "MODFocus",
    "MODIntelligence",
    "MODStrength",
)

_SCALAR_KEYS = (
    "BaseDamage",
    "CritChance",
    "CritDamage",
    "CritDamageMultiplier",
    "CritDamageReduction",
    "ArmorPenetration",
    "PhysicalArmor",
    "ElementalArmor",
    "BlockDamage",
    "BlockStaminaDamage",
    "BlockDamageReduction",
    "MaxHealthMod",
    "MaxManaMod",
    "MaxStaminaMod",
    "HealScalingValueMultiplier",
    "HealthRate",
    "ManaRate",
    "StaminaRate",
    "EncumbranceMod",
    "WeightMultiplier",
    "DamageMultiplier",
    "DamageReduction",
    "HitDamageMultiplier",
    "CooldownDurationMod",
    "StaggerDamage",
    "RangedAccuracy",
    "ProjectileSpeed",
)

NUMERIC_KEYS: FrozenSet[str] = frozenset(
    ATTRIBUTE_KEYS
    + _SCALAR_KEYS
    + tuple(f"DMG{t}" for t in DAMAGE_TYPES)
    + tuple(f"ABS{t}" for t in DAMAGE_TYPES)
    + tuple(f"Empower{t}" for t in DAMAGE_TYPES)
)

# comma separated "Category=value" lists
STRING_KEYS: FrozenSet[str] = frozenset(
    (
        "DMGVitalsCategory",
        "ABSVitalsCategory",
        "DamageCategory",
    )
)

ALL_KEYS: FrozenSet[str] = NUMERIC_KEYS | STRING_KEYS


def is_modifier_key(key: str) -> bool:
    return key in ALL_KEYS


def read_modifier(record: Optional[Dict[str, Any]], key: str) -> Any:
    """Value of ``key`` on a table row, or None when the row lacks it."""
    if key not in ALL_KEYS:
        raise KeyError(f"unknown modifier key: {key}")
    if not isinstance(record, dict):
        return None
    return record.get(key)
