# -*- coding: utf-8 -*-
"""Shared fixtures: a small in-memory game database."""

from __future__ import annotations

import copy
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from azoth.mannequin import MannequinState  # noqa: E402
from azoth.tables import DbSlice  # noqa: E402


def _attr_rows(with_ability: str = "") -> List[Dict[str, Any]]:
    return [
        {"Level": 5, "Health": 100, "ModifierValueSum": 0.05},
        {"Level": 20, "Health": 120, "ModifierValueSum": 0.2, "EquipAbilities": with_ability},
        {"Level": 50, "Health": 150, "ModifierValueSum": 0.5},
    ]


RAW_TABLES: Dict[str, Any] = {
    "items": [
        {
            "ItemID": "Sword_T5",
            "ItemType": "Weapon",
            "ItemClass": ["EquippableMainHand", "Sword"],
            "ItemStatsRef": "1hSword_T5",
            "Perk1": "PerkID_Stat_Str",
            "Perk2": "PerkID_Weapon_Dmg",
            "Perk3": "PerkID_Unsheathed_Crit",
            "PerkBucket4": "PerkBucket_Sword",
        },
        {
            "ItemID": "Chest_T5",
            "ItemType": "Armor",
            "ItemClass": ["EquippableChest", "Armor"],
            "ItemStatsRef": "Chest_Heavy_T5",
            "Perk1": "PerkID_Armor_Refresh",
        },
        {"ItemID": "FoodStr", "ItemType": "Consumable", "ItemClass": ["Consumable"]},
        {"ItemID": "Gem", "ItemType": "Resource"},
        {"ItemID": "Ring", "ItemType": "Armor", "ItemClass": ["EquippableRing"]},
    ],
    "weapons": [
        {
            "WeaponID": "1hSword_T5",
            "WeaponTag": "Sword",
            "BaseDamage": 100,
            "CritDamageMultiplier": 1.25,
            "ScalingStrength": 0.9,
            "ScalingDexterity": 0.65,
            "DamageType": "Slash",
        },
        {"WeaponID": "Unarmed", "BaseDamage": 20},
    ],
    "armors": [{"WeaponID": "Chest_Heavy_T5", "WeightOverride": 120, "PhysicalArmor": 300}],
    "consumables": [{"ConsumableID": "FoodStr", "AddStatusEffects": "Food_Str"}],
    "perks": [
        {
            "PerkID": "PerkID_Stat_Str",
            "PerkType": "Inherent",
            "ScalingPerGearScore": 0.001,
            "Affix": "Stat_Str",
            "ConditionEvent": "OnEquip",
            "ItemClass": ["EquippableMainHand"],
        },
        {"PerkID": "PerkID_Weapon_Dmg", "PerkType": "Generated", "Affix": "Weapon_Dmg", "ConditionEvent": "OnActive"},
        {
            "PerkID": "PerkID_Unsheathed_Crit",
            "PerkType": "Generated",
            "Affix": "Unsheathed_Crit",
            "ConditionEvent": "OnUnsheathed",
        },
        {
            "PerkID": "PerkID_Armor_Refresh",
            "PerkType": "Generated",
            "EquipAbility": "Ability_Refresh",
            "ConditionEvent": "OnEquip",
        },
        {"PerkID": "PerkID_Gem_Fire", "PerkType": "Gem", "Affix": "Gem_Fire", "ScalingPerGearScore": 0.0002},
    ],
    "affixes": [
        {"StatusID": "Stat_Str", "MODStrength": 10},
        {"StatusID": "Weapon_Dmg", "DMGSlash": 0.1},
        {"StatusID": "Unsheathed_Crit", "CritChance": 0.05},
        {"StatusID": "Gem_Fire", "ABSFire": 0.1, "DMGVitalsCategory": "Beast=0.05"},
    ],
    "effects": [
        {"StatusID": "Food_Str", "MODStrength": 20},
        {"StatusID": "TownBuff_Dmg", "DMGSlash": 0.05, "StackMax": 2},
        {"StatusID": "Refresh_Buff", "CritChance": 0.02},
        {"StatusID": "Potion_Heal", "PotencyPerLevel": 2},
    ],
    "abilities": [
        {"AbilityID": "Ability_Refresh", "CritDamage": 0.1, "SelfApplyStatusEffect": "Refresh_Buff"},
        {"AbilityID": "Ability_Str20", "ABSFire": 0.05},
    ],
    "damage_table": [
        {"DamageID": "1hSword_Light1", "AttackType": "Light", "DmgCoef": 1.0, "DamageType": "Slash"},
        {"DamageID": "1hSword_Heavy1", "AttackType": "Heavy", "DmgCoef": 1.5, "DamageType": "Slash"},
        {"DamageID": "Unarmed_Light1", "AttackType": "Light", "DmgCoef": 1.0},
    ],
    "attr_con": _attr_rows(),
    "attr_dex": _attr_rows(),
    "attr_foc": _attr_rows(),
    "attr_int": _attr_rows(),
    "attr_str": _attr_rows("Ability_Str20"),
    "loot_tables": [
        {"LootTableID": "Root", "AND/OR": "OR", "MaxRoll": 100, "Conditions": "", "Item1": "[LTID]Sub", "Item2": "Gem", "Item3": "[LBID]BucketA"},
        {"LootTableID": "Root_Probs", "Item1": "0", "Item2": "50", "Item3": "80"},
        {"LootTableID": "Root_Qty", "Item1": "1", "Item2": "1-3", "Item3": "1"},
        {"LootTableID": "Sub", "AND/OR": "AND", "MaxRoll": 100, "Conditions": "Level", "Item1": "Sword_T5", "Item2": "[LTID]Root", "Item3": "Ring"},
        {"LootTableID": "Sub_Probs", "Item1": "10", "Item2": "0", "Item3": "60"},
        {"LootTableID": "Sub_Qty", "Item1": "1", "Item2": "1", "Item3": "1"},
        {"LootTableID": "Loop", "AND/OR": "OR", "MaxRoll": 0, "Item1": "[LTID]Loop", "Item2": "Gem"},
        {"LootTableID": "Loop_Probs", "Item1": "0", "Item2": "0"},
        {"LootTableID": "Loop_Qty", "Item1": "1", "Item2": "1"},
    ],
    "loot_buckets": [
        {"RowPlaceholders": "FIRSTROW", "LootBucket1": "BucketA"},
        {"Item1": "Pearl", "Quantity1": "1-2", "MatchOne1": "TRUE", "Tags1": "Level:10-20,Named"},
        {"Item1": "Amber", "Quantity1": "1", "MatchOne1": "FALSE", "Tags1": "Level:30"},
    ],
}


@pytest.fixture
def raw_tables() -> Dict[str, Any]:
    return copy.deepcopy(RAW_TABLES)


@pytest.fixture
def db(raw_tables) -> DbSlice:
    return DbSlice.from_tables(raw_tables)


@pytest.fixture
def sword_state() -> MannequinState:
    """Level 60 character with the sword in the primary slot and a heavy chest."""
    return MannequinState.from_dict(
        {
            "level": 60,
            "equipped_items": [
                {"slot": "weapon1", "item_id": "Sword_T5", "gear_score": 600},
                {"slot": "chest", "item_id": "Chest_T5", "gear_score": 500},
            ],
            "enforced_effects": [{"id": "TownBuff_Dmg", "stack": 3}],
        }
    )


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path, raw_tables) -> Path:
    """The raw tables written out as a datatables folder."""
    root = tmp_path / "datatables"
    _write_json(root / "javelindata_itemdefinitions_master_common.json", raw_tables["items"][:3])
    _write_json(root / "javelindata_itemdefinitions_master_named.json", raw_tables["items"][3:])
    _write_json(root / "javelindata_itemdefinitions_weapons.json", raw_tables["weapons"])
    _write_json(root / "javelindata_itemdefinitions_armor.json", raw_tables["armors"])
    _write_json(root / "javelindata_perks.json", {"rows": raw_tables["perks"]})
    _write_json(root / "javelindata_affixstats.json", raw_tables["affixes"])
    _write_json(root / "javelindata_statuseffects.json", raw_tables["effects"])
    _write_json(root / "weaponabilities" / "javelindata_ability_sword.json", raw_tables["abilities"])
    _write_json(root / "javelindata_damagetable.json", raw_tables["damage_table"])
    _write_json(root / "javelindata_loottables.json", raw_tables["loot_tables"])
    _write_json(root / "javelindata_lootbuckets.json", raw_tables["loot_buckets"])
    (root / "readme.txt").write_text("not a table", encoding="utf-8")
    return root
