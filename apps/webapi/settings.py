# -*- coding: utf-8 -*-
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class WebApiSettings:
    """Runtime settings for the web API.

    Notes
    - data_root points at the datatables folder or zip; None falls back to
      the engine lookup (project-local bundle, then settings.ini DATA_ROOT).
    - root_path is for reverse-proxy mount (e.g. '/azoth')
    """

    data_root: Optional[str] = None
    root_path: str = ""
    cors_allow_origins: Optional[List[str]] = None
    gzip_minimum_size: int = 800

    @classmethod
    def from_env(cls) -> "WebApiSettings":
        origins = [o.strip() for o in os.environ.get("AZOTH_CORS_ORIGINS", "").split(",") if o.strip()]
        return cls(
            data_root=os.environ.get("AZOTH_DATA_ROOT") or None,
            root_path=os.environ.get("AZOTH_ROOT_PATH", ""),
            cors_allow_origins=origins or None,
        )

    @staticmethod
    def normalize_root_path(root_path: str) -> str:
        rp = (root_path or "").strip()
        if not rp:
            return ""
        if not rp.startswith("/"):
            rp = "/" + rp
        return rp.rstrip("/")
