#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import configparser
import os
from pathlib import Path
from typing import List, Optional

from rich.panel import Panel
from rich.table import Table

from apps.cli.cli_common import (
    CONF_DIR,
    INDEX_DIR,
    PROJECT_ROOT,
    console,
    env_hint,
    file_info,
    human_mtime,
    human_size,
    setup_logging,
)

CONFIG_PATH = CONF_DIR / "settings.ini"

# tables the resolvers cannot work without
REQUIRED_TABLES = ("items", "weapons", "perks", "affixes", "effects", "damage_table", "attr_str")


def _status(level: str) -> str:
    if level == "PASS":
        return "[green]PASS[/green]"
    if level == "WARN":
        return "[yellow]WARN[/yellow]"
    return "[red]FAIL[/red]"


def _cfg_get(cfg: configparser.ConfigParser, section: str, key: str) -> str:
    v = cfg.get(section, key, fallback="").strip()
    return os.path.expanduser(v) if v else ""


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="azoth doctor", description="Azoth Doctor (environment + datatables health check)")
    p.add_argument("--data-root", default=None, help="datatables folder or zip (overrides settings.ini)")
    p.add_argument("--enforce", action="store_true", help="exit non-zero on failures (CI)")
    p.add_argument("--strict", action="store_true", help="treat WARN as FAIL (only when --enforce)")
    p.add_argument("--log-level", default=None)
    args = p.parse_args(argv)
    setup_logging(args.log_level or "WARNING")

    env_name, env_kind = env_hint()
    console.print(Panel(f"[bold cyan]Azoth Doctor[/bold cyan]\nEnv: {env_name} ({env_kind})", border_style="cyan"))

    table = Table(title="Health Checks", box=None, show_header=True, header_style="bold cyan")
    table.add_column("Check", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Details", style="dim")
    table.add_column("Fix Hint", style="green")

    fail = 0
    warn = 0

    # 1) config file (optional)
    cfg = configparser.ConfigParser()
    if CONFIG_PATH.is_file():
        try:
            cfg.read(CONFIG_PATH, encoding="utf-8")
            table.add_row("conf/settings.ini", _status("PASS"), str(CONFIG_PATH), "")
        except configparser.Error as e:
            table.add_row("conf/settings.ini", _status("WARN"), str(e), "Check ini format")
            warn += 1
    else:
        table.add_row("conf/settings.ini", _status("WARN"), "missing", "Optional: set [PATHS] DATA_ROOT")
        warn += 1

    data_root = args.data_root or _cfg_get(cfg, "PATHS", "DATA_ROOT")
    if data_root:
        exists = Path(data_root).exists()
        table.add_row("DATA_ROOT", _status("PASS" if exists else "WARN"), data_root, "" if exists else "Point DATA_ROOT at the exported datatables")
        if not exists:
            warn += 1

    # 2) datatables mount + required tables
    from azoth.engine import AzothEngine, TableError

    try:
        with AzothEngine(data_root=args.data_root, silent=True) as engine:
            table.add_row("datatables source", _status("PASS"), f"{engine.mode}: {engine.source_path}", "")
            for name in engine.table_names():
                files = engine.table_files(name)
                required = name in REQUIRED_TABLES
                if files:
                    rows = len(engine.load_table(name))
                    table.add_row(f"table {name}", _status("PASS"), f"{len(files)} file(s), {rows} rows", "")
                    continue
                level = "FAIL" if required else "WARN"
                table.add_row(f"table {name}", _status(level), "no matching files", "Re-export datatables")
                if required:
                    fail += 1
                else:
                    warn += 1
    except FileNotFoundError as e:
        table.add_row("datatables source", _status("FAIL"), str(e), "Set DATA_ROOT or pass --data-root")
        fail += 1
    except TableError as e:
        table.add_row("datatables parse", _status("FAIL"), str(e), "Re-export the broken file")
        fail += 1

    # 3) artifacts
    manifest = INDEX_DIR / "azoth_table_index_v1.json"
    info = file_info(manifest)
    table.add_row(
        "data/table_index",
        _status("PASS" if info["exists"] else "WARN"),
        f"{human_mtime(info['mtime'])} | {human_size(info['size'])}" if info["exists"] else "missing",
        "" if info["exists"] else "Run: azoth index",
    )
    if not info["exists"]:
        warn += 1

    console.print(table)
    console.print(f"[dim]Root: {PROJECT_ROOT} | Summary: FAIL={fail}, WARN={warn}[/dim]")

    if not args.enforce:
        return 0
    if fail:
        return 2
    if args.strict and warn:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
