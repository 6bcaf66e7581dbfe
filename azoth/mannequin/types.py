# -*- coding: utf-8 -*-
"""Build (mannequin) input state and the active-object records derived from it.

Every record here is rebuilt per resolution call; nothing is mutated after
the selectors hand it out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

ATTRIBUTE_REFS = ("str", "dex", "int", "foc", "con")

ATTRIBUTE_MOD_KEYS = {
    "con": "MODConstitution",
    "dex": "MODDexterity",
    "foc": "MODFocus",
    "int": "MODIntelligence",
    "str": "MODStrength",
}


def _num(value: Any, default: float = 0) -> float:
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class EquippedItem:
    slot: str
    item_id: str
    gear_score: float = 0
    # perk column -> perk id, e.g. {"Perk1": "PerkID_Stat_Str"}
    perks: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EquippedItem":
        return cls(
            slot=str(data.get("slot") or ""),
            item_id=str(data.get("item_id") or data.get("itemId") or ""),
            gear_score=_num(data.get("gear_score", data.get("gearScore"))),
            perks={str(k): str(v) for k, v in (data.get("perks") or {}).items() if v},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"slot": self.slot, "item_id": self.item_id, "gear_score": self.gear_score, "perks": dict(self.perks)}


@dataclass(frozen=True)
class EquippedSkills:
    weapon: str
    tree1: List[str] = field(default_factory=list)
    tree2: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["EquippedSkills"]:
        if not isinstance(data, dict) or not data.get("weapon"):
            return None
        return cls(
            weapon=str(data["weapon"]),
            tree1=[str(x) for x in data.get("tree1") or [] if x],
            tree2=[str(x) for x in data.get("tree2") or [] if x],
        )


@dataclass(frozen=True)
class EnforcedEffect:
    id: str
    stack: int = 1


@dataclass
class MannequinState:
    """Character build input."""

    level: int = 60
    equipped_items: List[EquippedItem] = field(default_factory=list)
    assigned_attributes: Dict[str, int] = field(default_factory=dict)
    weapon_active: str = "primary"
    weapon_unsheathed: bool = False
    selected_attack: Optional[str] = None
    enforced_effects: List[EnforcedEffect] = field(default_factory=list)
    activated_abilities: List[str] = field(default_factory=list)
    equipped_skills1: Optional[EquippedSkills] = None
    equipped_skills2: Optional[EquippedSkills] = None
    num_around_me: int = 0
    num_hits: int = 0
    # vitals in percent, read by ability conditions
    my_health_percent: float = 100
    my_mana_percent: float = 100
    my_stamina_percent: float = 100
    target_health_percent: float = 100

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MannequinState":
        data = data or {}
        enforced = []
        for it in data.get("enforced_effects") or []:
            if isinstance(it, dict) and it.get("id"):
                enforced.append(EnforcedEffect(id=str(it["id"]), stack=int(_num(it.get("stack"), 1))))
            elif isinstance(it, str) and it:
                enforced.append(EnforcedEffect(id=it))
        return cls(
            level=int(_num(data.get("level"), 60)),
            equipped_items=[EquippedItem.from_dict(it) for it in data.get("equipped_items") or [] if isinstance(it, dict)],
            assigned_attributes={k: int(_num(v)) for k, v in (data.get("assigned_attributes") or {}).items()},
            weapon_active=str(data.get("weapon_active") or "primary"),
            weapon_unsheathed=bool(data.get("weapon_unsheathed")),
            selected_attack=data.get("selected_attack") or None,
            enforced_effects=enforced,
            activated_abilities=[str(x) for x in data.get("activated_abilities") or [] if x],
            equipped_skills1=EquippedSkills.from_dict(data.get("equipped_skills1")),
            equipped_skills2=EquippedSkills.from_dict(data.get("equipped_skills2")),
            num_around_me=int(_num(data.get("num_around_me"))),
            num_hits=int(_num(data.get("num_hits"))),
            my_health_percent=_num(data.get("my_health_percent"), 100),
            my_mana_percent=_num(data.get("my_mana_percent"), 100),
            my_stamina_percent=_num(data.get("my_stamina_percent"), 100),
            target_health_percent=_num(data.get("target_health_percent"), 100),
        )


@dataclass
class ActiveWeapon:
    item: Optional[Dict[str, Any]] = None
    weapon: Optional[Dict[str, Any]] = None
    weapon_tag: Optional[str] = None
    gear_score: Optional[float] = None
    slot: Optional[str] = None
    unsheathed: bool = False
    ammo: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": (self.item or {}).get("ItemID"),
            "weapon_id": (self.weapon or {}).get("WeaponID"),
            "weapon_tag": self.weapon_tag,
            "gear_score": self.gear_score,
            "slot": self.slot,
            "unsheathed": self.unsheathed,
            "ammo_id": (self.ammo or {}).get("AmmoID"),
        }


@dataclass
class ActivePerk:
    slot: str
    item: Optional[Dict[str, Any]]
    gear_score: float
    perk: Dict[str, Any]
    affix: Optional[Dict[str, Any]] = None
    weapon: Optional[Dict[str, Any]] = None
    armor: Optional[Dict[str, Any]] = None
    rune: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot": self.slot,
            "item_id": (self.item or {}).get("ItemID"),
            "gear_score": self.gear_score,
            "perk_id": self.perk.get("PerkID"),
            "affix_id": (self.affix or {}).get("StatusID"),
        }


@dataclass
class ActiveEffect:
    effect: Dict[str, Any]
    item: Optional[Dict[str, Any]] = None
    consumable: Optional[Dict[str, Any]] = None
    perk: Optional[ActivePerk] = None
    ability: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status_id": self.effect.get("StatusID"),
            "item_id": (self.item or {}).get("ItemID") or (self.item or {}).get("HouseItemID"),
            "consumable_id": (self.consumable or {}).get("ConsumableID"),
            "perk_id": self.perk.perk.get("PerkID") if self.perk else None,
        }


@dataclass
class ActiveAbility:
    ability: Dict[str, Any]
    self_effects: List[Dict[str, Any]] = field(default_factory=list)
    perk: Optional[ActivePerk] = None
    weapon: Optional[ActiveWeapon] = None
    attribute: bool = False
    scale: float = 1
    cooldown: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ability_id": self.ability.get("AbilityID"),
            "self_effects": [e.get("StatusID") for e in self.self_effects],
            "perk_id": self.perk.perk.get("PerkID") if self.perk else None,
            "weapon_tag": self.weapon.weapon_tag if self.weapon else None,
            "attribute": self.attribute,
            "scale": self.scale,
            "cooldown": (self.cooldown or {}).get("CooldownTime"),
        }


@dataclass
class ActiveConsumable:
    item: Optional[Dict[str, Any]]
    consumable: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"item_id": (self.item or {}).get("ItemID"), "consumable_id": self.consumable.get("ConsumableID")}


@dataclass(frozen=True)
class ActiveBonus:
    """A flat named value, e.g. a fort buff typed in by the user."""

    key: str
    value: Union[int, float, str]
    name: str = ""


@dataclass
class ActiveMods:
    """Everything that can contribute to a modifier sum."""

    perks: List[ActivePerk] = field(default_factory=list)
    effects: List[ActiveEffect] = field(default_factory=list)
    abilities: List[ActiveAbility] = field(default_factory=list)
    consumables: List[ActiveConsumable] = field(default_factory=list)
    bonuses: List[ActiveBonus] = field(default_factory=list)


@dataclass
class ActiveAttribute:
    base: int = 0
    bonus: int = 0
    assigned: int = 0
    magnify: int = 0
    total: int = 0
    health: Optional[float] = None
    scale: Optional[float] = None
    abilities: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": self.base,
            "bonus": self.bonus,
            "assigned": self.assigned,
            "magnify": self.magnify,
            "total": self.total,
            "health": self.health,
            "scale": self.scale,
            "abilities": list(self.abilities),
        }


@dataclass
class ModifierSource:
    label: Optional[str] = None
    icon: Optional[str] = None
    perk: Optional[Dict[str, Any]] = None
    ability: Optional[Dict[str, Any]] = None
    item: Optional[Dict[str, Any]] = None
    slot: Optional[str] = None
    effect: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.label:
            out["label"] = self.label
        if self.icon:
            out["icon"] = self.icon
        if self.perk:
            out["perk_id"] = self.perk.get("PerkID")
        if self.ability:
            out["ability_id"] = self.ability.get("AbilityID")
        if self.item:
            out["item_id"] = self.item.get("ItemID") or self.item.get("HouseItemID")
        if self.slot:
            out["slot"] = self.slot
        if self.effect:
            out["status_id"] = self.effect.get("StatusID")
        return out


@dataclass
class ModifierValue:
    value: Union[int, float, str]
    scale: float
    source: ModifierSource

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "scale": self.scale, "source": self.source.to_dict()}


@dataclass
class ModifierResult:
    value: float = 0
    source: List[ModifierValue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "source": [s.to_dict() for s in self.source]}
