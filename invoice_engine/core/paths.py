from __future__ import annotations

import os
from pathlib import Path

HOME_ENV = "INVOICE_ENGINE_HOME"


def config_dir() -> Path:
    """Directory holding settings.json and relative font paths.

    INVOICE_ENGINE_HOME overrides the default ~/.invoice_engine.
    """
    env = os.environ.get(HOME_ENV, "").strip()
    return Path(env).expanduser() if env else Path.home() / ".invoice_engine"


def resource_path(rel: str | Path) -> Path:
    """Resolve a configured resource such as 'fonts/NotoSans-Regular.ttf'.

    Relative paths are taken from config_dir(); absolute paths are returned unchanged.
    """
    p = Path(rel).expanduser()
    if p.is_absolute():
        return p
    return config_dir() / p


def settings_path() -> Path:
    return config_dir() / "settings.json"


def default_output_dir() -> Path:
    return Path.home() / "Documents" / "Invoices"
