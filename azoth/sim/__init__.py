# -*- coding: utf-8 -*-
"""Simulation helpers (lightweight, data-driven)."""

from azoth.sim.dmg_sandbox import simulate_damage  # noqa: F401
