#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""AzothEngine (core)

This module is intentionally UI-agnostic.

Responsibilities
- Mount a datatables source (zip or folder) holding the imported JSON tables.
- Map logical table names to source files via glob patterns.
- Load and index tables into a DbSlice for loot and build resolution.

Design notes
- Engine must be usable by CLI, devtools and Web layers.
- The resolvers under azoth/ are pure; the DbSlice cache lives here, in the caller.
- Use `silent=True` to suppress logs.
"""

from __future__ import annotations

import json
import logging
import os
import zipfile
from fnmatch import fnmatch
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from azoth.config import azoth_config
from azoth.tables import DbSlice

logger = logging.getLogger(__name__)

__all__ = ["AzothEngine", "TABLE_SOURCES", "TableError"]


class TableError(RuntimeError):
    """A table source exists but cannot be read as JSON rows."""


# logical table -> glob patterns, matched against the lowercased relative path
TABLE_SOURCES: Dict[str, Tuple[str, ...]] = {
    "items": ("*_itemdefinitions_master_*.json",),
    "weapons": ("*_itemdefinitions_weapons.json",),
    "armors": ("*_itemdefinitions_armor.json",),
    "ammos": ("*_itemdefinitions_ammo.json",),
    "runes": ("*_itemdefinitions_runes.json",),
    "consumables": ("*_itemdefinitions_consumables.json",),
    "housings": ("*_housingitems.json",),
    "perks": ("*_perks.json",),
    "affixes": ("*_affixstats.json",),
    "effects": ("*_statuseffects.json", "*_statuseffects_*.json"),
    "abilities": ("weaponabilities/*.json",),
    "cooldowns": ("*_cooldowns_player.json",),
    "damage_table": ("*_damagetable.json",),
    "attr_con": ("*_attributeconstitution.json",),
    "attr_dex": ("*_attributedexterity.json",),
    "attr_foc": ("*_attributefocus.json",),
    "attr_int": ("*_attributeintelligence.json",),
    "attr_str": ("*_attributestrength.json",),
    "loot_buckets": ("*_lootbuckets.json",),
    "loot_tables": ("*_loottables*.json",),
}


def _expanduser(p: Optional[str]) -> Optional[str]:
    return os.path.expanduser(p) if p else None


def _match(rel: str, pattern: str) -> bool:
    rel = rel.lower()
    if "/" in pattern:
        return fnmatch(rel, pattern) or fnmatch(rel, "*/" + pattern)
    return fnmatch(os.path.basename(rel), pattern)


class AzothEngine:
    """Main entry used by CLI / devtools / Web.

    Parameters
    - data_root: optional datatables folder or zip (overrides config).
    - silent: suppress all logs.
    - prefer_local_bundles: search project-root data drops first.
    """

    def __init__(
        self,
        data_root: Optional[str] = None,
        silent: bool = False,
        *,
        prefer_local_bundles: bool = True,
        encoding: str = "utf-8",
    ):
        self.encoding = encoding
        self.silent = bool(silent)

        self.mode: str = ""  # 'zip' | 'folder'
        self.source: Any = None  # ZipFile or folder path (str)
        self.source_path: str = ""
        self.file_list: List[str] = []

        self._db: Optional[DbSlice] = None

        self._init_source(data_root=data_root, prefer_local_bundles=prefer_local_bundles)

    # --------------------------------------------------------
    # Context manager
    # --------------------------------------------------------

    def __enter__(self) -> "AzothEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --------------------------------------------------------
    # Source mounting
    # --------------------------------------------------------

    def _project_root(self) -> Path:
        if azoth_config is not None:
            return Path(str(azoth_config.project_root)).resolve()
        # engine.py is azoth/engine.py
        return Path(__file__).resolve().parent.parent

    def _detect_candidates(self, prefer_local_bundles: bool) -> Tuple[List[str], List[str]]:
        """Return (zip_candidates, dir_candidates)."""
        pr = self._project_root()

        zip_candidates: List[str] = []
        dir_candidates: List[str] = []

        if prefer_local_bundles:
            zip_candidates.append(str(pr / "datatables.zip"))
            dir_candidates.append(str(pr / "data" / "datatables"))

        configured = None
        if azoth_config is not None:
            configured = _expanduser(azoth_config.get("PATHS", "DATA_ROOT"))
        if configured:
            if configured.lower().endswith(".zip"):
                zip_candidates.append(configured)
            else:
                dir_candidates.append(configured)

        return zip_candidates, dir_candidates

    def _log(self, msg: str) -> None:
        if not self.silent:
            logger.info(msg)

    def _mount_zip(self, path: str) -> None:
        self.mode = "zip"
        self.source = zipfile.ZipFile(path, "r")
        self.source_path = path
        self.file_list = sorted(n for n in self.source.namelist() if n.lower().endswith(".json"))
        self._log(f"Mounted datatables zip: {path}")

    def _mount_folder(self, path: str) -> None:
        self.mode = "folder"
        self.source = path
        self.source_path = path
        self.file_list = self._walk_folder(path)
        self._log(f"Mounted datatables folder: {path}")

    def _init_source(self, *, data_root: Optional[str], prefer_local_bundles: bool) -> None:
        explicit = _expanduser(data_root)
        if explicit:
            if os.path.isfile(explicit) and explicit.lower().endswith(".zip"):
                self._mount_zip(explicit)
                return
            if os.path.isdir(explicit):
                self._mount_folder(explicit)
                return
            raise FileNotFoundError(f"Datatables source not found: {explicit}")

        zip_candidates, dir_candidates = self._detect_candidates(prefer_local_bundles)
        for zp in zip_candidates:
            if zp and os.path.isfile(zp):
                self._mount_zip(zp)
                return
        for dp in dir_candidates:
            if dp and os.path.isdir(dp):
                self._mount_folder(dp)
                return

        raise FileNotFoundError("Cannot find datatables source (zip or folder).")

    def _walk_folder(self, folder: str) -> List[str]:
        folder = os.path.abspath(folder)
        out: List[str] = []
        for root, _, files in os.walk(folder):
            for name in files:
                if not name.lower().endswith(".json"):
                    continue
                full = os.path.join(root, name)
                out.append(os.path.relpath(full, folder).replace("\\", "/"))
        return sorted(out)

    def close(self) -> None:
        if self.mode == "zip" and self.source is not None:
            self.source.close()

    # --------------------------------------------------------
    # IO
    # --------------------------------------------------------

    @lru_cache(maxsize=1024)
    def read_json(self, path: str) -> Any:
        """Parse one JSON file of the mounted source. Raises TableError."""
        try:
            if self.mode == "zip":
                raw = self.source.read(path).decode(self.encoding, errors="replace")
            else:
                with open(os.path.join(self.source, path), "r", encoding=self.encoding, errors="replace") as f:
                    raw = f.read()
            return json.loads(raw)
        except (OSError, KeyError, ValueError) as exc:
            raise TableError(f"Cannot read table file {path}: {exc}") from exc

    def table_names(self) -> List[str]:
        return list(TABLE_SOURCES.keys())

    def table_files(self, name: str) -> List[str]:
        patterns = TABLE_SOURCES.get(name)
        if patterns is None:
            raise KeyError(f"unknown table: {name}")
        return [p for p in self.file_list if any(_match(p, pat) for pat in patterns)]

    def load_table(self, name: str) -> List[Dict[str, Any]]:
        """Concatenated rows of every file matching the table's patterns."""
        rows: List[Dict[str, Any]] = []
        for path in self.table_files(name):
            data = self.read_json(path)
            if isinstance(data, dict) and isinstance(data.get("rows"), list):
                data = data["rows"]
            if not isinstance(data, list):
                raise TableError(f"Table file {path} does not hold a list of rows")
            rows.extend(r for r in data if isinstance(r, dict))
        return rows

    def db(self) -> DbSlice:
        if self._db is None:
            self._log("Indexing datatables...")
            self._db = DbSlice.from_tables({name: self.load_table(name) for name in TABLE_SOURCES})
            self._log(f"Indexed {sum(self._db.stats().values())} rows")
        return self._db
