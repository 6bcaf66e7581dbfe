#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Solve ${...} expressions in description text."""

from __future__ import annotations

import argparse
from typing import List, Optional

from apps.cli.cli_common import console, fail, load_db, parse_values, setup_logging
from azoth.expression import ExpressionContext, ExpressionError, ExpressionSolver


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="azoth expr", description="Solve description text expressions")
    p.add_argument("text")
    p.add_argument("--item", default=None, help="perk / status effect id for perkMultiplier and ConsumablePotency")
    p.add_argument("--gs", type=float, default=600, help="gear score")
    p.add_argument("--level", type=int, default=60, help="character level")
    p.add_argument("--value", action="append", default=[], help="context token NAME=V (repeatable)")
    p.add_argument("--strict", action="store_true", help="fail instead of echoing the text on unresolved tokens")
    p.add_argument("--data-root", default=None)
    p.add_argument("--log-level", default=None)
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    db = load_db(args.data_root)
    ctx = ExpressionContext(
        text=args.text,
        item_id=args.item,
        gear_score=args.gs,
        char_level=args.level,
        values=parse_values(args.value),
    )
    try:
        console.print(ExpressionSolver(db).solve(ctx), markup=False)
    except ExpressionError as e:
        if args.strict:
            fail(f"{e} (token: {e.token})")
        console.print(f"[yellow]{e}[/yellow]")
        console.print(args.text, markup=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
