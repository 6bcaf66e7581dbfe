#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Build resolver front-end.

Input is a JSON file holding a mannequin state, optionally wrapped as
``{"state": {...}, "bonuses": [{"key": "...", "value": 0.1, "name": "..."}]}``.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.table import Table

from apps.cli.cli_common import console, dump_json, fail, load_db, read_json, setup_logging
from azoth.mannequin import ActiveBonus, MannequinState, resolve_mannequin
from azoth.mannequin.keys import is_modifier_key
from azoth.mannequin.modifier import modifier_sum
from azoth.mannequin.types import ActiveMods


def _fmt(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.4g}"
    return "-" if value is None else str(value)


def parse_build(doc: Dict[str, Any]):
    state_doc = doc.get("state") if isinstance(doc.get("state"), dict) else doc
    bonuses = []
    for b in doc.get("bonuses") or []:
        if isinstance(b, dict) and b.get("key"):
            bonuses.append(ActiveBonus(key=str(b["key"]), value=b.get("value") or 0, name=str(b.get("name") or "")))
    return MannequinState.from_dict(state_doc), bonuses


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="azoth build", description="Resolve a character build")
    p.add_argument("path", help="build JSON file")
    p.add_argument("--stat", action="append", default=[], help="print the source breakdown of a modifier key")
    p.add_argument("--json", action="store_true", help="print the full result as JSON")
    p.add_argument("--data-root", default=None)
    p.add_argument("--log-level", default=None)
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    doc = read_json(Path(args.path))
    if not isinstance(doc, dict):
        fail(f"cannot read build file: {args.path}")
    for key in args.stat:
        if not is_modifier_key(key):
            fail(f"unknown modifier key: {key}")

    state, bonuses = parse_build(doc)
    db = load_db(args.data_root)
    result = resolve_mannequin(db, state, bonuses=bonuses)

    if args.json:
        dump_json(result.to_dict())
        return 0

    console.print(f"[bold cyan]Build[/bold cyan] level={result.level} gear score={result.gear_score}")
    w = result.weapon
    console.print(
        f"[bold cyan]Weapon[/bold cyan] {w.weapon_tag or '-'} ({(w.weapon or {}).get('WeaponID', '-')}) "
        f"gs={_fmt(w.gear_score)} attack={(result.attack or {}).get('DamageID', '-')} "
        f"load={result.equip_load:.1f} ({result.equip_load_category})"
    )

    attrs = Table(title="Attributes", box=None, header_style="bold cyan")
    for col in ("Attr", "Base", "Bonus", "Assigned", "Magnify", "Total", "Health", "Scale", "Abilities"):
        attrs.add_column(col, justify="right" if col not in ("Attr", "Abilities") else "left")
    for ref, a in result.attributes.items():
        attrs.add_row(ref, str(a.base), str(a.bonus), str(a.assigned), str(a.magnify), f"[bold]{a.total}[/bold]",
                      _fmt(a.health), _fmt(a.scale), ", ".join(a.abilities) or "-")
    console.print(attrs)

    perks = Table(title="Active perks", box=None, header_style="bold cyan")
    perks.add_column("Slot")
    perks.add_column("Perk")
    perks.add_column("GS", justify="right")
    for ap in result.perks:
        perks.add_row(ap.slot, str(ap.perk.get("PerkID")), _fmt(ap.gear_score))
    console.print(perks)

    console.print(f"[bold cyan]Effects[/bold cyan] {', '.join(str(e.effect.get('StatusID')) for e in result.effects) or '-'}")
    console.print(f"[bold cyan]Abilities[/bold cyan] {', '.join(str(a.ability.get('AbilityID')) for a in result.abilities) or '-'}")

    stats = Table(title="Stats (non-zero)", box=None, header_style="bold cyan")
    stats.add_column("Key")
    stats.add_column("Value", justify="right")
    stats.add_column("Sources", justify="right", style="dim")
    for key, res in result.stats.items():
        if res.value:
            stats.add_row(key, _fmt(res.value), str(len(res.source)))
    console.print(stats)

    if result.damage:
        d = result.damage
        console.print(
            f"[bold cyan]Damage[/bold cyan] {d['damage_type']}: standard={d['standard']:.1f} crit={d['crit']:.1f}"
        )

    for key in args.stat:
        res = result.stats.get(key)
        if res is None:
            res = modifier_sum(key, ActiveMods(result.perks, result.effects, result.abilities, result.consumables, bonuses))
        t = Table(title=f"{key} = {_fmt(res.value)}", box=None, header_style="bold cyan")
        t.add_column("Value", justify="right")
        t.add_column("Scale", justify="right")
        t.add_column("Source")
        for mod in res.source:
            src = mod.source.to_dict()
            t.add_row(_fmt(mod.value), _fmt(mod.scale), " ".join(f"{k}={v}" for k, v in src.items()))
        console.print(t)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
