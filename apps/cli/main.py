#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Unified CLI dispatcher for Azoth-Lab."""

from __future__ import annotations

import runpy
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def _tool_path(tool: dict) -> Path:
    folder = tool.get("folder") or "apps/cli/commands"
    return PROJECT_ROOT / folder / str(tool.get("file"))


def _resolve_tool(alias: Optional[str]) -> Optional[Path]:
    from apps.cli.registry import get_tools

    key = str(alias or "").strip()
    if not key:
        return None
    for tool in get_tools():
        if tool.get("alias") == key or tool.get("file") == key:
            return _tool_path(tool)
    return None


def print_tools(unknown: Optional[str] = None) -> None:
    from rich.console import Console
    from rich.table import Table

    from apps.cli.registry import get_tools

    console = Console()
    if unknown:
        console.print(f"[yellow]Unknown tool: {unknown}[/yellow]")
    table = Table(title="Azoth-Lab tools", box=None, header_style="bold cyan")
    table.add_column("Alias", style="bold")
    table.add_column("Type", style="dim")
    table.add_column("Description")
    table.add_column("Usage", style="green")
    for tool in get_tools():
        table.add_row(tool.get("alias", ""), tool.get("type", ""), tool.get("desc", ""), tool.get("usage", ""))
    console.print(table)


def main(argv: Optional[List[str]] = None) -> None:
    argv = list(argv) if argv is not None else list(sys.argv[1:])
    alias = argv[0] if argv else None
    path = _resolve_tool(alias)
    if path is None:
        print_tools(alias if alias not in (None, "-h", "--help", "help") else None)
        return

    sys.argv = [str(path)] + argv[1:]
    runpy.run_path(str(path), run_name="__main__")


if __name__ == "__main__":
    main()
