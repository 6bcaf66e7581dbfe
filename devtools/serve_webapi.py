#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Run the Azoth web API (FastAPI + Uvicorn).

Usage:
  python3 devtools/serve_webapi.py --host 0.0.0.0 --port 20000
"""

from __future__ import annotations

import argparse
import os
import socket
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import uvicorn  # noqa: E402

from apps.webapi.app import create_app  # noqa: E402


def _detect_lan_ip() -> str:
    """LAN IP of the outbound interface; nothing is sent."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError:
        return "127.0.0.1"


def main() -> None:
    parser = argparse.ArgumentParser(description="Azoth web API (FastAPI) server.")
    parser.add_argument("--data-root", default=os.environ.get("AZOTH_DATA_ROOT", ""), help="Datatables folder or zip")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=20000)
    parser.add_argument("--root-path", default="", help="Reverse proxy mount path, e.g. /azoth")
    parser.add_argument("--reload", action="store_true", help="Auto-reload code (development)")
    parser.add_argument("--log-level", default="info", choices=["critical", "error", "warning", "info", "debug", "trace"])
    parser.add_argument("--cors-allow-origin", action="append", default=[], help="CORS allow origin (repeatable)")
    args = parser.parse_args()

    host = str(args.host)
    port = int(args.port)
    rp = (args.root_path or "").rstrip("/")
    shown = _detect_lan_ip() if host == "0.0.0.0" else host
    print(f"Azoth API: http://{shown}:{port}{rp}/docs")
    print(f"Datatables: {args.data_root or '(settings.ini / project default)'}")

    if args.reload:
        # reload needs an import string; settings travel through the environment
        if args.data_root:
            os.environ["AZOTH_DATA_ROOT"] = str(args.data_root)
        os.environ["AZOTH_ROOT_PATH"] = str(args.root_path or "")
        os.environ["AZOTH_CORS_ORIGINS"] = ",".join(args.cors_allow_origin)
        uvicorn.run(
            "apps.webapi.app:create_app_from_env",
            factory=True,
            host=host,
            port=port,
            log_level=args.log_level,
            reload=True,
            proxy_headers=True,
            forwarded_allow_ips="*",
        )
        return

    app = create_app(
        args.data_root or None,
        root_path=args.root_path,
        cors_allow_origins=(args.cors_allow_origin or None),
    )
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=args.log_level,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
