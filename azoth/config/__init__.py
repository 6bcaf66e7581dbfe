# -*- coding: utf-8 -*-
"""Optional project config (conf/settings.ini).

`azoth_config` is None when the settings file does not exist; callers fall
back to their own defaults.
"""

from azoth.config.loader import ConfigLoader

try:
    azoth_config = ConfigLoader()
except FileNotFoundError:
    azoth_config = None

__all__ = ["ConfigLoader", "azoth_config"]
