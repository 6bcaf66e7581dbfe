#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Damage sandbox (CLI)."""

from __future__ import annotations

import argparse
from typing import List, Optional

from rich.table import Table

from apps.cli.cli_common import console, dump_json, fail, load_db, setup_logging
from azoth.sim import simulate_damage


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="azoth dmg", description="Damage sandbox")
    p.add_argument("--weapon", required=True, help="WeaponID of the weapon stat row")
    p.add_argument("--attack", default=None, help="DamageID (default: first row of the weapon)")
    p.add_argument("--gs", type=float, default=600, help="weapon gear score")
    p.add_argument("--level", type=int, default=60)
    for ref in ("str", "dex", "int", "foc"):
        p.add_argument(f"--{ref}", type=float, default=0, help=f"{ref} attribute scale (ModifierValueSum)")
    p.add_argument("--ammo", type=float, default=0, help="ammo modifier")
    p.add_argument("--base-mod", type=float, default=0)
    p.add_argument("--crit-mod", type=float, default=0)
    p.add_argument("--empower", type=float, default=0)
    p.add_argument("--armor", type=float, default=0, help="defender armor rating")
    p.add_argument("--pen", type=float, default=0, help="armor penetration (0..1)")
    p.add_argument("--defender-gs", type=float, default=None)
    p.add_argument("--json", action="store_true")
    p.add_argument("--data-root", default=None)
    p.add_argument("--log-level", default=None)
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    db = load_db(args.data_root)
    weapon = db.weapons.get(args.weapon)
    if weapon is None:
        fail(f"unknown weapon: {args.weapon}")

    report = simulate_damage(
        weapon=weapon,
        damage_rows=db.damage_table,
        attack_id=args.attack,
        weapon_gear_score=args.gs,
        player_level=args.level,
        attr_sums={"str": args.str, "dex": args.dex, "int": args.int, "foc": args.foc},
        ammo_mod=args.ammo,
        base_mod=args.base_mod,
        crit_mod=args.crit_mod,
        empower_mod=args.empower,
        armor_penetration=args.pen,
        defender_armor_rating=args.armor,
        defender_gear_score=args.defender_gs,
    )
    if args.json:
        dump_json(report)
        return 0

    attack = report.get("attack") or {}
    console.print(
        f"[bold cyan]{report['weapon']['id']}[/bold cyan] ({report['weapon']['tag'] or '-'}) "
        f"attack={attack.get('id', '-')} coef={attack.get('dmg_coef', '-')}"
    )
    factors = Table(title="Factors", box=None, header_style="bold cyan")
    factors.add_column("Factor")
    factors.add_column("Value", justify="right")
    for k, v in report["factors"].items():
        factors.add_row(k, f"{v:.4f}")
    console.print(factors)

    dmg = Table(title="Damage", box=None, header_style="bold cyan")
    dmg.add_column("Kind")
    dmg.add_column("Value", justify="right")
    for k, v in report["damage"].items():
        dmg.add_row(k, f"{v:.1f}")
    console.print(dmg)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
