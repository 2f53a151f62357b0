from __future__ import annotations

import importlib
import os
from types import ModuleType


def get_settings_module() -> str:
    # APP_ENV selects the settings module, default 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "timekeeper.config.production"

    if env in {"test", "testing"}:
        return "timekeeper.config.testing"

    return "timekeeper.config.development"


def load_settings() -> ModuleType:
    return importlib.import_module(get_settings_module())
