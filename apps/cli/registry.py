#!/usr/bin/env python3
"""Azoth-Lab tool registry."""

TOOLS = [
    # --- CLI tools (apps/cli/commands) ---
    {
        "file": "doctor.py",
        "alias": "doctor",
        "desc": "Environment and datatables health check",
        "usage": "azoth doctor [--data-root PATH] [--enforce] [--strict]",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },
    {
        "file": "loot.py",
        "alias": "loot",
        "desc": "Resolve a loot table / bucket into a gated chance tree",
        "usage": "azoth loot <table_id> [--tag T] [--value NAME=V] [--highlight ITEM] [--json]",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },
    {
        "file": "build.py",
        "alias": "build",
        "desc": "Resolve a character build (attributes, perks, stats, damage)",
        "usage": "azoth build <build.json> [--stat KEY] [--json]",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },
    {
        "file": "dmg.py",
        "alias": "dmg",
        "desc": "Damage sandbox: one attack against one defender",
        "usage": "azoth dmg --weapon ID [--attack ID] [--gs 600] [--armor 0] [--json]",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },
    {
        "file": "expr.py",
        "alias": "expr",
        "desc": "Solve ${...} expressions in description text",
        "usage": "azoth expr \"<text>\" [--item ID] [--gs 600] [--value NAME=V]",
        "type": "CLI",
        "folder": "apps/cli/commands"
    },

    # --- Dev tools (devtools/) ---
    {
        "file": "build_table_index.py",
        "alias": "index",
        "desc": "Write the datatables manifest (row counts + source signatures)",
        "usage": "azoth index [--data-root PATH] [--force]",
        "type": "Dev",
        "folder": "devtools"
    },
    {
        "file": "serve_webapi.py",
        "alias": "web",
        "desc": "Start the web API (uvicorn)",
        "usage": "azoth web [--host 0.0.0.0] [--port 20000] [--data-root PATH]",
        "type": "Dev",
        "folder": "devtools"
    },
]


def get_tools():
    return TOOLS
