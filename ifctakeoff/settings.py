"""ConfigManager: environment profiles and runtime settings.

Layers, lowest precedence first: key defaults, the ``TAKEOFF_ENV`` profile,
``.takeoff/config.json``, ``.env``, process environment.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from ifctakeoff.config import DEFAULT_MODEL_PREFIX

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

DEFAULTS: dict[str, str] = {
    "TAKEOFF_ENV": "development",
    "TAKEOFF_DB": "takeoff.db",
    "TAKEOFF_LOG_LEVEL": "INFO",
    "TAKEOFF_MODEL_PREFIX": DEFAULT_MODEL_PREFIX,
}

PROFILES: dict[str, dict[str, str]] = {
    "development": {"TAKEOFF_LOG_LEVEL": "DEBUG"},
    "production": {"TAKEOFF_LOG_LEVEL": "WARNING"},
    "testing": {"TAKEOFF_LOG_LEVEL": "DEBUG", "TAKEOFF_DB": MEMORY_DB},
}

CONFIG_DIR = ".takeoff"


class ConfigManager:
    """Merge take-off settings for one project directory."""

    def _profile(self) -> dict[str, str]:
        name = os.environ.get("TAKEOFF_ENV", DEFAULTS["TAKEOFF_ENV"])
        profile = PROFILES.get(name)
        if profile is None:
            logger.warning("Unknown profile %r, using defaults", name)
            return {"TAKEOFF_ENV": name}
        return {"TAKEOFF_ENV": name, **profile}

    def _read_json(self, path: Path) -> dict[str, str]:
        if not path.is_file():
            return {}
        try:
            data: Any = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.debug("Could not read %s", path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.debug("Ignoring %s: not a JSON object", path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _read_dotenv(self, path: Path) -> dict[str, str]:
        if not path.is_file():
            return {}
        values: dict[str, str] = {}
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError:
            logger.debug("Could not read %s", path, exc_info=True)
            return {}
        for line in lines:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                values[key.strip()] = value.strip()
        return values

    def load_config(self, project_path: str | Path = ".") -> dict[str, str]:
        """Return the merged settings for *project_path* as a flat dict."""
        root = Path(project_path)
        config = dict(DEFAULTS)
        config.update(self._profile())
        config.update(self._read_json(root / CONFIG_DIR / "config.json"))
        config.update(self._read_dotenv(root / ".env"))
        config.update({k: os.environ[k] for k in DEFAULTS if k in os.environ})
        return config


def database_path(config: dict[str, str], project_root: str | Path) -> str | Path:
    """``TAKEOFF_DB`` resolved against *project_root*; ``:memory:`` is kept."""
    configured = config.get("TAKEOFF_DB", DEFAULTS["TAKEOFF_DB"])
    if configured == MEMORY_DB:
        return configured
    path = Path(configured)
    return path if path.is_absolute() else Path(project_root) / path


def configure_logging(config: dict[str, str]) -> None:
    """Apply ``TAKEOFF_LOG_LEVEL`` to the package logger.

    For applications only; the library itself never installs handlers.
    """
    level_name = config.get("TAKEOFF_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        logger.warning("Unknown log level %r, using INFO", level_name)
        level = logging.INFO
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("ifctakeoff").setLevel(level)
