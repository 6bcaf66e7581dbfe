# -*- coding: utf-8 -*-
"""Ability activation checks against the build state."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Optional

from azoth.mannequin.types import MannequinState
from azoth.tables import as_list, as_number

logger = logging.getLogger(__name__)

__all__ = [
    "ConditionCheck",
    "check_all_conditions",
    "compare",
    "is_active_ability",
    "reject_ability_props",
]

REJECT_PROPS_PATH = Path(__file__).with_name("ability_reject_props.json")

ConditionCheck = Callable[[Dict[str, Any], MannequinState], bool]

_COMPARATORS: Dict[str, Callable[[float, float], bool]] = {
    "greaterthan": lambda a, b: a > b,
    "lessthan": lambda a, b: a < b,
    "greaterthanorequal": lambda a, b: a >= b,
    "lessthanorequal": lambda a, b: a <= b,
    "equal": lambda a, b: a == b,
    "notequal": lambda a, b: a != b,
}


@lru_cache(maxsize=1)
def reject_ability_props() -> FrozenSet[str]:
    data = json.loads(REJECT_PROPS_PATH.read_text(encoding="utf-8"))
    names = list(data.get("unsupported_triggers") or []) + list(data.get("unsupported_conditions") or [])
    return frozenset(str(n) for n in names)


def compare(comparison: Optional[str], actual: float, expected: float) -> bool:
    """Unknown comparison types pass (the condition is not modeled)."""
    fn = _COMPARATORS.get(str(comparison or "").lower())
    if fn is None:
        return True
    return fn(actual, expected)


def check_all_conditions(ability: Dict[str, Any], state: MannequinState) -> bool:
    """Vitals percentage conditions of an ability against the build state."""
    mine = (
        ("MyHealthPercent", state.my_health_percent),
        ("MyManaPercent", state.my_mana_percent),
        ("MyStaminaPercent", state.my_stamina_percent),
    )
    for key, actual in mine:
        if ability.get(key) in (None, ""):
            continue
        if not compare(ability.get("MyComparisonType"), actual, as_number(ability.get(key))):
            return False

    if ability.get("TargetHealthPercent") not in (None, ""):
        expected = as_number(ability.get("TargetHealthPercent"))
        if not compare(ability.get("TargetComparisonType"), state.target_health_percent, expected):
            return False
    return True


def is_active_ability(
    ability: Optional[Dict[str, Any]],
    attack: Optional[Dict[str, Any]],
    state: MannequinState,
    conditions: ConditionCheck = check_all_conditions,
) -> bool:
    if not ability or not attack:
        return False
    if not conditions(ability, state):
        return False

    # Light, Heavy, Ability, Magic
    attack_types = as_list(ability.get("AttackType"))
    if attack_types and attack.get("AttackType") not in attack_types:
        return False

    if ability.get("DamageIsMelee"):
        if not ability.get("OnHit") or attack.get("IsRanged"):
            return False
    if ability.get("DamageIsRanged"):
        if not ability.get("OnHit") or not attack.get("IsRanged"):
            return False

    rows = as_list(ability.get("DamageTableRow"))
    if rows:
        if attack.get("DamageID") not in rows:
            return False
        if not ability.get("OnHit"):
            return False

    if ability.get("CDRImmediatelyOptions") == "ActiveWeapon":
        if ability.get("OnHitTaken") or ability.get("OnHit"):
            return True

    for key in reject_ability_props():
        if ability.get(key):
            logger.debug("ability %s rejected by %s", ability.get("AbilityID"), key)
            return False
    return True
