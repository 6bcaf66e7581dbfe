#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Input/output signatures for skipping devtools rebuilds."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CACHE_PATH = PROJECT_ROOT / "data" / "index" / ".build_cache.json"


def load_cache(path: Optional[Path] = None) -> Dict[str, Any]:
    p = path or DEFAULT_CACHE_PATH
    if not p.exists():
        return {}
    try:
        doc = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        # a broken cache only costs a rebuild
        return {}
    return doc if isinstance(doc, dict) else {}


def save_cache(cache: Dict[str, Any], path: Optional[Path] = None) -> None:
    p = path or DEFAULT_CACHE_PATH
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(cache, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def file_sig(path: Path) -> Dict[str, Any]:
    p = Path(path)
    try:
        st = p.stat()
    except OSError:
        return {"path": str(p), "exists": False}
    return {"path": str(p), "exists": True, "mtime_ns": int(st.st_mtime_ns), "size": int(st.st_size)}


def files_sig(paths: Iterable[Path], *, label: str = "") -> Dict[str, Any]:
    """Aggregate signature of many files (count, newest mtime, total size)."""
    count = 0
    max_mtime = 0
    total_size = 0
    for p in paths:
        try:
            st = Path(p).stat()
        except OSError:
            continue
        count += 1
        total_size += int(st.st_size)
        max_mtime = max(max_mtime, int(st.st_mtime_ns))
    return {"label": label, "count": count, "max_mtime_ns": max_mtime, "total_size": total_size}


def source_sig(engine: Any) -> Dict[str, Any]:
    """Signature of the datatables an AzothEngine has mounted."""
    if engine.mode == "zip":
        return {"mode": "zip", "source": file_sig(Path(engine.source_path))}
    base = Path(str(engine.source_path))
    return {"mode": "folder", "source": files_sig((base / p for p in engine.file_list), label=str(base))}


def is_up_to_date(cache: Dict[str, Any], key: str, inputs: Dict[str, Any], outputs: Dict[str, Any]) -> bool:
    entry = cache.get(key) or {}
    return entry.get("signature") == inputs and entry.get("outputs") == outputs
