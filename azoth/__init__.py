# -*- coding: utf-8 -*-
"""Azoth-Lab rules-resolution core (loot gating, modifiers, build stats)."""
