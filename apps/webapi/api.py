# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from azoth.expression import ExpressionContext, ExpressionError, ExpressionSolver
from azoth.loot import build_loot_graph
from azoth.loot.context import LootContext
from azoth.mannequin import ActiveBonus, MannequinState, resolve_mannequin
from azoth.sim import simulate_damage
from azoth.version import versions

from .table_store import TableStore


def get_store(request: Request) -> TableStore:
    return request.app.state.store  # type: ignore[attr-defined]


def _parse_values(pairs: List[str]) -> Dict[str, Any]:
    """NAME=V query pairs; numbers where they parse, strings otherwise."""
    out: Dict[str, Any] = {}
    for pair in pairs or []:
        name, sep, raw = str(pair).partition("=")
        if not sep or not name.strip():
            raise HTTPException(status_code=422, detail=f"Bad value pair (want NAME=V): {pair}")
        try:
            out[name.strip()] = float(raw)
        except ValueError:
            out[name.strip()] = raw.strip()
    return out


router = APIRouter(prefix="/api/v1")


class EquippedItemModel(BaseModel):
    slot: str
    item_id: str
    gear_score: float = 0
    perks: Dict[str, str] = Field(default_factory=dict)


class EnforcedEffectModel(BaseModel):
    id: str
    stack: int = 1


class EquippedSkillsModel(BaseModel):
    weapon: str
    tree1: List[str] = Field(default_factory=list)
    tree2: List[str] = Field(default_factory=list)


class BonusModel(BaseModel):
    key: str
    value: Union[float, str]
    name: str = ""


class MannequinRequest(BaseModel):
    level: int = Field(60, ge=1, le=65)
    equipped_items: List[EquippedItemModel] = Field(default_factory=list)
    assigned_attributes: Dict[str, int] = Field(default_factory=dict)
    weapon_active: str = "primary"
    weapon_unsheathed: bool = False
    selected_attack: Optional[str] = None
    enforced_effects: List[EnforcedEffectModel] = Field(default_factory=list)
    activated_abilities: List[str] = Field(default_factory=list)
    equipped_skills1: Optional[EquippedSkillsModel] = None
    equipped_skills2: Optional[EquippedSkillsModel] = None
    num_around_me: int = 0
    num_hits: int = 0
    my_health_percent: float = 100
    my_mana_percent: float = 100
    my_stamina_percent: float = 100
    target_health_percent: float = 100
    bonuses: List[BonusModel] = Field(default_factory=list)


class DmgRequest(BaseModel):
    weapon_id: str
    attack_id: Optional[str] = None
    weapon_gear_score: float = 600
    player_level: int = 60
    attr_sums: Dict[str, float] = Field(default_factory=dict)
    ammo_mod: float = 0
    base_mod: float = 0
    crit_mod: float = 0
    empower_mod: float = 0
    armor_penetration: float = Field(0, ge=0, le=1)
    defender_armor_rating: float = 0
    defender_gear_score: Optional[float] = None


class ExpressionRequest(BaseModel):
    text: str
    item_id: Optional[str] = None
    gear_score: float = 0
    char_level: int = 60
    values: Dict[str, float] = Field(default_factory=dict)
    strict: bool = False


@router.get("/meta")
def meta(store: TableStore = Depends(get_store)):
    m: Dict[str, Any] = dict(versions())
    m["source"] = store.source()
    m["tables"] = store.db().stats()
    return m


@router.get("/tables")
def tables(store: TableStore = Depends(get_store)):
    stats = store.db().stats()
    return {"tables": [{"name": n, "rows": stats.get(n, 0)} for n in store.table_names()]}


@router.get("/tables/{name}/{rid}")
def table_record(name: str, rid: str, store: TableStore = Depends(get_store)):
    try:
        rec = store.get(name, rid)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Table not found: {name}")
    if rec is None:
        raise HTTPException(status_code=404, detail=f"Record not found: {name}/{rid}")
    return {"table": name, "id": rid, "record": rec}


@router.get("/loot/tables/{table_id}")
def loot_table(
    table_id: str,
    tag: List[str] = Query(default=[]),
    value: List[str] = Query(default=[]),
    ignore: List[str] = Query(default=[]),
    bucket_tag: List[str] = Query(default=[]),
    highlight: List[str] = Query(default=[]),
    store: TableStore = Depends(get_store),
):
    values = _parse_values(value)
    node = build_loot_graph(
        store.db(),
        table_id,
        tags=tag,
        values=values,
        ignore_ids=ignore,
        bucket_tags=bucket_tag,
        highlight=highlight,
    )
    if node is None:
        raise HTTPException(status_code=404, detail=f"Loot table not found: {table_id}")
    ctx = LootContext.create(tags=tag, values=values, ignore_ids=ignore, bucket_tags=bucket_tag)
    return {"context": ctx.to_dict(), "root": node.to_dict()}


@router.post("/mannequin")
def mannequin(req: MannequinRequest, store: TableStore = Depends(get_store)):
    doc = req.model_dump(exclude={"bonuses"})
    state = MannequinState.from_dict(doc)
    bonuses = [ActiveBonus(key=b.key, value=b.value, name=b.name) for b in req.bonuses]
    return resolve_mannequin(store.db(), state, bonuses=bonuses).to_dict()


@router.post("/dmg")
def dmg(req: DmgRequest, store: TableStore = Depends(get_store)):
    db = store.db()
    weapon = db.weapons.get(req.weapon_id)
    if weapon is None:
        raise HTTPException(status_code=404, detail=f"Weapon not found: {req.weapon_id}")
    return simulate_damage(
        weapon=weapon,
        damage_rows=db.damage_table,
        attack_id=req.attack_id,
        weapon_gear_score=req.weapon_gear_score,
        player_level=req.player_level,
        attr_sums=req.attr_sums,
        ammo_mod=req.ammo_mod,
        base_mod=req.base_mod,
        crit_mod=req.crit_mod,
        empower_mod=req.empower_mod,
        armor_penetration=req.armor_penetration,
        defender_armor_rating=req.defender_armor_rating,
        defender_gear_score=req.defender_gear_score,
    )


@router.post("/expression")
def expression(req: ExpressionRequest, store: TableStore = Depends(get_store)):
    ctx = ExpressionContext(
        text=req.text,
        item_id=req.item_id,
        gear_score=req.gear_score,
        char_level=req.char_level,
        values=dict(req.values),
    )
    try:
        return {"text": ExpressionSolver(store.db()).solve(ctx), "error": None}
    except ExpressionError as e:
        if req.strict:
            raise HTTPException(status_code=422, detail={"message": str(e), "token": e.token})
        return {"text": req.text, "error": {"message": str(e), "token": e.token}}
