"""Settings for the command-line front end and its collaborators."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from stoichsim.constants import FRAME_INTERVAL_MS, PROGRESS_STEP

logger = logging.getLogger(__name__)

CONFIG_ENV = "STOICHSIM_CONFIG"
CATALOG_ENV = "STOICHSIM_CATALOG"
HISTORY_ENV = "STOICHSIM_HISTORY"

DEFAULT_HISTORY_FILE = Path.home() / ".stoichsim" / "history.sqlite"


@dataclass(frozen=True)
class Settings:
    catalog_path: Optional[Path] = None  # None -> bundled catalog
    history_file: Path = DEFAULT_HISTORY_FILE
    strict_units: bool = True
    progress_step: float = PROGRESS_STEP
    frame_interval_ms: float = FRAME_INTERVAL_MS
    log_level: str = "WARNING"


def _parse_settings(data: Mapping[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(Settings)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

    parsed: Dict[str, Any] = {}
    if data.get("catalog_path") is not None:
        parsed["catalog_path"] = Path(data["catalog_path"]).expanduser()
    if data.get("history_file") is not None:
        parsed["history_file"] = Path(data["history_file"]).expanduser()
    if "strict_units" in data:
        parsed["strict_units"] = bool(data["strict_units"])
    if "progress_step" in data:
        parsed["progress_step"] = float(data["progress_step"])
    if "frame_interval_ms" in data:
        parsed["frame_interval_ms"] = float(data["frame_interval_ms"])
    if "log_level" in data:
        parsed["log_level"] = str(data["log_level"]).upper()

    if parsed.get("progress_step", PROGRESS_STEP) <= 0:
        raise ValueError("progress_step must be positive")
    if parsed.get("frame_interval_ms", FRAME_INTERVAL_MS) <= 0:
        raise ValueError("frame_interval_ms must be positive")
    return parsed


def load_settings(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build settings from an optional JSON file, then environment overrides."""
    environ = os.environ if environ is None else environ
    settings = Settings()

    if config_file is None and environ.get(CONFIG_ENV):
        config_file = Path(environ[CONFIG_ENV])
    if config_file is not None:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        settings = replace(settings, **_parse_settings(data))
        logger.debug("Loaded settings from %s", config_file)

    if environ.get(CATALOG_ENV):
        settings = replace(settings, catalog_path=Path(environ[CATALOG_ENV]))
    if environ.get(HISTORY_ENV):
        settings = replace(settings, history_file=Path(environ[HISTORY_ENV]))
    return settings
