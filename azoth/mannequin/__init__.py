# -*- coding: utf-8 -*-
"""Build (mannequin) resolution."""

from azoth.mannequin.stats import MannequinResult, resolve_mannequin
from azoth.mannequin.types import ActiveBonus, EquippedItem, EquippedSkills, EnforcedEffect, MannequinState

__all__ = [
    "ActiveBonus",
    "EnforcedEffect",
    "EquippedItem",
    "EquippedSkills",
    "MannequinResult",
    "MannequinState",
    "resolve_mannequin",
]
