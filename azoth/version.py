# -*- coding: utf-8 -*-
"""Version stamps for manifests and API payloads.

`conf/version.json` holds three free-text fields:

- `project_version`: the Azoth-Lab release.
- `index_version`: layout of the generated table manifest. Defaults to the project version.
- `data_version`: the game build the datatables were exported from.
"""

from __future__ import annotations

import json
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

VERSION_FILE = Path(__file__).resolve().parents[1] / "conf" / "version.json"
VERSION_KEYS = ("project_version", "index_version", "data_version")


@lru_cache(maxsize=1)
def _read_version_file() -> Dict[str, str]:
    try:
        doc = json.loads(VERSION_FILE.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(doc, dict):
        return {}
    return {k: str(doc[k]).strip() for k in VERSION_KEYS if str(doc.get(k) or "").strip()}


def versions() -> Dict[str, str]:
    raw = _read_version_file()
    project = raw.get("project_version", "unknown")
    return {
        "project_version": project,
        "index_version": raw.get("index_version", project),
        "data_version": raw.get("data_version", "unknown"),
    }


def build_meta(
    *,
    schema: int,
    tool: str,
    sources: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Header block stamped on every generated artifact."""
    meta: Dict[str, Any] = {
        "schema": int(schema),
        "generated": datetime.now().astimezone().isoformat(timespec="seconds"),
        "tool": tool,
        **versions(),
    }
    if sources:
        meta["sources"] = sources
    return meta
