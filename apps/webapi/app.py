# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from azoth.tables import DbSlice

from .api import router as api_router
from .settings import WebApiSettings
from .table_store import TableStore


def create_app(
    data_root: Optional[str] = None,
    *,
    db: Optional[DbSlice] = None,
    root_path: str = "",
    cors_allow_origins: Optional[Sequence[str]] = None,
    gzip_minimum_size: int = 800,
) -> FastAPI:
    """FastAPI app factory.

    `db` short-circuits the datatables mount (tests, embedding); otherwise the
    tables are mounted from `data_root` on the first request.
    """

    rp = WebApiSettings.normalize_root_path(root_path)

    app = FastAPI(
        title="Azoth Lab API",
        version="1.0",
        root_path=rp,
        docs_url="/docs",
        redoc_url=None,
    )

    app.state.store = TableStore(db, data_root=data_root)

    if gzip_minimum_size and gzip_minimum_size > 0:
        app.add_middleware(GZipMiddleware, minimum_size=int(gzip_minimum_size))

    if cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cors_allow_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_router)

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


def create_app_from_env() -> FastAPI:
    """uvicorn --factory entry: settings from AZOTH_* environment variables."""
    s = WebApiSettings.from_env()
    return create_app(
        s.data_root,
        root_path=s.root_path,
        cors_allow_origins=s.cors_allow_origins,
        gzip_minimum_size=s.gzip_minimum_size,
    )
