# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from azoth.tables import LEVEL_TABLES, TABLE_KEYS, DbSlice, eq_case_insensitive

logger = logging.getLogger(__name__)

# row tables without a TableIndex: name -> id column
ROW_TABLE_KEYS: Dict[str, str] = {
    "damage_table": "DamageID",
    "loot_buckets": "LootBucket",
}
ROW_TABLE_KEYS.update({name: "Level" for name in LEVEL_TABLES})


class TableStore:
    """Lazily mount the datatables once and serve lookups (thread-safe).

    Either pass a ready DbSlice (tests, embedding) or a data_root for
    AzothEngine to mount on first access.
    """

    def __init__(self, db: Optional[DbSlice] = None, *, data_root: Optional[str] = None):
        self._lock = threading.RLock()
        self._db = db
        self._data_root = data_root
        self._source: Dict[str, Any] = {"mode": "memory"} if db is not None else {}

    def db(self) -> DbSlice:
        with self._lock:
            if self._db is None:
                from azoth.engine import AzothEngine

                with AzothEngine(data_root=self._data_root, silent=True) as engine:
                    self._db = engine.db()
                    self._source = {"mode": engine.mode, "path": engine.source_path}
                logger.info("datatables loaded from %s", self._source.get("path"))
            return self._db

    def source(self) -> Dict[str, Any]:
        self.db()
        return dict(self._source)

    def table_names(self) -> List[str]:
        return list(TABLE_KEYS) + list(ROW_TABLE_KEYS)

    def get(self, name: str, rid: str) -> Optional[Any]:
        """One record of a table; level tables and buckets return their matching rows."""
        db = self.db()
        if name in TABLE_KEYS:
            return getattr(db, name).get(rid)
        key = ROW_TABLE_KEYS.get(name)
        if key is None:
            raise KeyError(name)
        rows = [r for r in getattr(db, name) if eq_case_insensitive(str(r.get(key)), rid)]
        if not rows:
            return None
        return rows[0] if name == "damage_table" else rows
