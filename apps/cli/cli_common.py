#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Shared helpers for CLI tools."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
INDEX_DIR = DATA_DIR / "index"
CONF_DIR = PROJECT_ROOT / "conf"

console = Console()


def setup_logging(level: Optional[str] = None) -> None:
    """Route library logging through rich; level from --log-level or settings.ini."""
    if not level:
        from azoth.config import azoth_config

        level = azoth_config.get("LOGGING", "LEVEL", fallback="INFO") if azoth_config is not None else "INFO"
    logging.basicConfig(
        level=str(level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=False, show_path=False)],
        force=True,
    )


def fail(msg: str, code: int = 2) -> None:
    console.print(f"[red]ERR: {msg}[/red]")
    sys.exit(code)


def open_engine(data_root: Optional[str] = None, silent: bool = False):
    from azoth.engine import AzothEngine, TableError

    try:
        return AzothEngine(data_root=data_root, silent=silent)
    except (FileNotFoundError, TableError) as e:
        fail(str(e))


def load_db(data_root: Optional[str] = None):
    from azoth.engine import TableError

    engine = open_engine(data_root)
    try:
        return engine.db()
    except TableError as e:
        fail(str(e))
    finally:
        engine.close()


def parse_values(pairs: Optional[List[str]]) -> Dict[str, Any]:
    """["Level=60", "Named=yes"] -> {"Level": 60.0, "Named": "yes"}."""
    out: Dict[str, Any] = {}
    for raw in pairs or []:
        if "=" not in raw:
            fail(f"expected NAME=VALUE, got {raw!r}")
        key, val = raw.split("=", 1)
        key = key.strip()
        val = val.strip()
        try:
            out[key] = float(val)
        except ValueError:
            out[key] = val
    return out


def read_json(path: Path) -> Optional[Dict[str, Any]]:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None


def dump_json(data: Any) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False, default=str))


def file_info(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"exists": False, "size": 0, "mtime": None}
    st = path.stat()
    return {"exists": True, "size": int(st.st_size), "mtime": float(st.st_mtime)}


def human_size(num: int) -> str:
    if num <= 0:
        return "-"
    for unit in ("B", "KiB", "MiB", "GiB"):
        if num < 1024.0:
            return f"{num:.0f} {unit}" if unit == "B" else f"{num:.1f} {unit}"
        num /= 1024.0
    return f"{num:.1f} TiB"


def human_mtime(ts: Optional[float]) -> str:
    if not ts:
        return "-"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


def env_hint() -> Tuple[str, str]:
    env = os.environ.get("CONDA_DEFAULT_ENV", "").strip()
    if env:
        return env, "conda"
    venv = os.environ.get("VIRTUAL_ENV", "").strip()
    if venv:
        return venv, "venv"
    return "system", "system"
