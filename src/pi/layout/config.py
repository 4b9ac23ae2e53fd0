"""Layout cache options. Read from ~/.pi/layout.json when present."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TAB_STOP = 8


@dataclass
class LayoutOptions:
    tab_stop: int = DEFAULT_TAB_STOP
    columns: int = 0


def _get_config_path() -> Path:
    config_dir = Path(os.environ.get("PI_CONFIG_DIR", Path.home() / ".pi"))
    return config_dir / "layout.json"


def layout_options_from_dict(data: dict[str, Any]) -> LayoutOptions:
    options = LayoutOptions()
    tab_stop = data.get("tabStop")
    if tab_stop is not None:
        if not isinstance(tab_stop, int) or isinstance(tab_stop, bool) or tab_stop < 1:
            raise ValueError(f"tabStop must be a positive integer, got {tab_stop!r}")
        options.tab_stop = tab_stop
    columns = data.get("columns")
    if columns is not None:
        if not isinstance(columns, int) or isinstance(columns, bool) or columns < 0:
            raise ValueError(f"columns must be a non-negative integer, got {columns!r}")
        options.columns = columns
    return options


def load_layout_options(path: str | Path | None = None) -> LayoutOptions:
    config_path = Path(path) if path is not None else _get_config_path()
    if not config_path.exists():
        return LayoutOptions()
    try:
        data = json.loads(config_path.read_text())
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return layout_options_from_dict(data)
    except (OSError, ValueError) as e:
        logger.warning("Error reading layout config %s: %s", config_path, e)
        return LayoutOptions()
