#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Loot table explorer: render the gated chance tree of a table or bucket."""

from __future__ import annotations

import argparse
from typing import List, Optional

from rich.panel import Panel
from rich.tree import Tree

from apps.cli.cli_common import console, dump_json, fail, load_db, parse_values, setup_logging
from azoth.loot import LootNode, build_loot_graph
from azoth.loot.context import LootContext


def _pct(value: float) -> str:
    if value >= 0.01:
        return f"{value * 100:.2f}%"
    return f"{value * 100:.4f}%"


def _label(node: LootNode) -> str:
    style = "white" if node.unlocked else "dim strike"
    mark = "[bold yellow]*[/bold yellow] " if node.highlight else ""
    if node.type == "table":
        head = f"[bold cyan]{node.ref}[/bold cyan]"
        data = node.data or {}
        meta = f"{data.get('AndOr')} roll={data.get('MaxRoll')}"
        if data.get("Conditions"):
            meta += f" if {','.join(data['Conditions'])}"
        tail = f"[dim]{meta} | items {node.unlocked_item_count}/{node.total_item_count}[/dim]"
    elif node.type == "bucket":
        head = f"[bold magenta]{node.ref}[/bold magenta]"
        tail = f"[dim]bucket | items {node.unlocked_item_count}/{node.total_item_count}[/dim]"
    else:
        head = f"[{style}]{node.ref}[/{style}]"
        tail = ""
        if node.type == "table-item":
            tail = f"[dim]prob={(node.row or {}).get('Prob')} qty={(node.row or {}).get('Qty')}[/dim]"
        elif node.data:
            tags = ",".join(str(t.get("Name")) for t in (node.data.get("Tags") or {}).values())
            tail = f"[dim]{tags}[/dim]" if tags else ""
    chance = f"[green]{_pct(node.chance_absolute)}[/green]" if node.unlocked else "[red]locked[/red]"
    return f"{mark}{head} {chance} {tail}".rstrip()


def _render(node: LootNode, tree: Tree, depth: int, max_depth: int, only_unlocked: bool) -> None:
    for child in node.children:
        if only_unlocked and not child.unlocked:
            continue
        branch = tree.add(_label(child))
        if depth + 1 < max_depth:
            _render(child, branch, depth + 1, max_depth, only_unlocked)
        elif child.children:
            branch.add(f"[dim]... {len(child.children)} more[/dim]")


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="azoth loot", description="Resolve a loot table or bucket")
    p.add_argument("ref", help="LootTableID (or LootBucket id)")
    p.add_argument("--tag", action="append", default=[], help="condition tag that is true (repeatable)")
    p.add_argument("--value", action="append", default=[], help="condition value NAME=V (repeatable)")
    p.add_argument("--ignore", action="append", default=[], help="table/bucket id to skip (repeatable)")
    p.add_argument("--bucket-tag", action="append", default=[], help="only collect bucket rows with this tag")
    p.add_argument("--highlight", action="append", default=[], help="item id to highlight (repeatable)")
    p.add_argument("--depth", type=int, default=8, help="max tree depth to print")
    p.add_argument("--unlocked", action="store_true", help="hide locked branches")
    p.add_argument("--json", action="store_true", help="print JSON instead of a tree")
    p.add_argument("--data-root", default=None)
    p.add_argument("--log-level", default=None)
    args = p.parse_args(argv)
    setup_logging(args.log_level)

    db = load_db(args.data_root)
    values = parse_values(args.value)
    node = build_loot_graph(
        db,
        args.ref,
        tags=args.tag,
        values=values,
        ignore_ids=args.ignore,
        bucket_tags=args.bucket_tag,
        highlight=args.highlight,
    )
    if node is None:
        fail(f"unknown loot table or bucket: {args.ref}")

    if args.json:
        ctx = LootContext.create(tags=args.tag, values=values, ignore_ids=args.ignore, bucket_tags=args.bucket_tag)
        dump_json({"context": ctx.to_dict(), "root": node.to_dict()})
        return 0

    console.print(
        Panel(
            f"[bold]{node.ref}[/bold]  tags={args.tag or '-'}  values={values or '-'}",
            title="Loot",
            border_style="cyan",
        )
    )
    tree = Tree(_label(node))
    _render(node, tree, 0, max(1, args.depth), args.unlocked)
    console.print(tree)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
