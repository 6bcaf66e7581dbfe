#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Write the datatables manifest: per-table files, row counts and source signature."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rich.console import Console  # noqa: E402

from azoth.engine import AzothEngine, TableError  # noqa: E402
from azoth.version import build_meta  # noqa: E402
from devtools.build_cache import file_sig, is_up_to_date, load_cache, save_cache, source_sig  # noqa: E402

SCHEMA_VERSION = 1
CACHE_KEY = "table_index"

console = Console()


def build_table_index(engine: AzothEngine) -> Dict[str, Any]:
    tables: Dict[str, Any] = {}
    for name in engine.table_names():
        files = engine.table_files(name)
        tables[name] = {"files": files, "rows": len(engine.load_table(name)) if files else 0}
    db_stats = engine.db().stats()
    return {
        "meta": build_meta(
            schema=SCHEMA_VERSION,
            tool="devtools/build_table_index.py",
            sources={"mode": engine.mode, "path": engine.source_path, "files": len(engine.file_list)},
        ),
        "tables": tables,
        # indexed counts differ from raw rows where ids repeat or loot rows are folded
        "indexed": db_stats,
    }


def main() -> int:
    p = argparse.ArgumentParser(description="Build the Azoth datatables manifest.")
    p.add_argument("--out", default="data/index/azoth_table_index_v1.json", help="Output JSON path")
    p.add_argument("--data-root", default=None, help="Datatables folder or zip (default from config)")
    p.add_argument("--force", action="store_true", help="Force rebuild even if cache matches")
    p.add_argument("--silent", action="store_true", help="Suppress engine logs")
    args = p.parse_args()

    try:
        engine = AzothEngine(data_root=args.data_root, silent=bool(args.silent))
    except FileNotFoundError as e:
        console.print(f"[red]ERR: {e}[/red]")
        return 2

    with engine:
        out_path = (PROJECT_ROOT / args.out).resolve()
        inputs_sig = {"tables": source_sig(engine), "schema": SCHEMA_VERSION}
        outputs_sig = {"out": file_sig(out_path)}

        cache = load_cache()
        if not args.force and is_up_to_date(cache, CACHE_KEY, inputs_sig, outputs_sig):
            console.print("[green]Table index up-to-date; skip rebuild[/green]")
            return 0

        try:
            index = build_table_index(engine)
        except TableError as e:
            console.print(f"[red]ERR: {e}[/red]")
            return 2

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(index, ensure_ascii=False, indent=2), encoding="utf-8")

    cache[CACHE_KEY] = {"signature": inputs_sig, "outputs": {"out": file_sig(out_path)}}
    save_cache(cache)

    console.print(f"[green]Table index written: {out_path}[/green]")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
