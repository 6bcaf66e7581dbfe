# -*- coding: utf-8 -*-
"""Loot table gating and expansion."""

from azoth.loot.context import LootContext
from azoth.loot.graph import LootGraph, LootNode, build_loot_graph

__all__ = ["LootContext", "LootGraph", "LootNode", "build_loot_graph"]
