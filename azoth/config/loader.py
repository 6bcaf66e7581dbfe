# -*- coding: utf-8 -*-
import configparser
import os
from pathlib import Path
from typing import Optional


class ConfigLoader:
    def __init__(self, config_path: Optional[Path] = None):
        # project root sits two levels above azoth/config/
        self.project_root = Path(__file__).resolve().parents[2]
        self.config_path = Path(config_path) if config_path else self.project_root / "conf" / "settings.ini"

        self.config = configparser.ConfigParser()
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file missing: {self.config_path}")

        self.config.read(self.config_path, encoding="utf-8")

    def get(self, section, key, fallback=None):
        """Read a value and expand user paths (~)."""
        val = self.config.get(section, key, fallback=fallback)
        if val and "~" in val:
            return os.path.expanduser(val)
        return val


if __name__ == "__main__":
    cfg = ConfigLoader()
    print(f"Project Root: {cfg.project_root}")
    print(f"Data Root: {cfg.get('PATHS', 'DATA_ROOT')}")
