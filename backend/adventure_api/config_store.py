"""Config store: config file (master over env) + pushable overrides.

The config file may group keys in sections; ``s3: {bucket: photos}`` is read as
``s3_bucket: photos``. Top-level keys are used as-is.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Generic, Optional, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

SettingsT = TypeVar("SettingsT", bound=BaseModel)


def flatten_sections(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Join nested section keys with ``_``. Lists and scalars are leaves."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{str(key).strip().lower()}"
        if isinstance(value, dict):
            flat.update(flatten_sections(value, prefix=f"{name}_"))
        else:
            flat[name] = value
    return flat


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON config file into flat settings keys. Returns {} on any problem."""
    if not path.exists():
        logger.debug("Config file not found: %s (optional; using env/defaults)", path)
        return {}
    try:
        raw = path.read_text()
    except OSError as e:
        logger.warning("Could not read config file %s: %s", path, e)
        return {}

    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(raw)
        elif suffix == ".json":
            data = json.loads(raw)
        else:
            logger.warning("Config file must be .yaml, .yml, or .json: %s", path)
            return {}
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        logger.warning("Could not parse config file %s: %s", path, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file must contain a mapping; got %s", type(data).__name__)
        return {}
    return flatten_sections(data)


class ConfigStore(Generic[SettingsT]):
    """
    Settings built from env, an optional config file, and pushed overrides.
    Precedence: overrides > config file > env > defaults.
    """

    def __init__(self, settings_cls: type[SettingsT], config_file_path: Optional[str] = None):
        self._settings_cls = settings_cls
        self._file_path: Optional[Path] = (
            Path(config_file_path).expanduser().resolve() if config_file_path else None
        )
        self._overrides: dict[str, Any] = {}
        self._current: Optional[SettingsT] = None
        self._lock = threading.RLock()

    @property
    def file_path(self) -> Optional[Path]:
        return self._file_path

    def _known(self, values: dict[str, Any], source: str) -> dict[str, Any]:
        fields = self._settings_cls.model_fields
        unknown = sorted(k for k in values if k not in fields)
        if unknown:
            logger.warning("Ignoring unknown settings from %s: %s", source, ", ".join(unknown))
        return {k: v for k, v in values.items() if k in fields}

    def _build(self) -> SettingsT:
        env_values = self._settings_cls().model_dump()
        file_values = read_config_file(self._file_path) if self._file_path else {}
        file_values = self._known(file_values, str(self._file_path))
        return self._settings_cls(**{**env_values, **file_values, **self._overrides})

    def load_initial(self) -> None:
        """Build settings once at startup."""
        with self._lock:
            self._current = self._build()
            if self._file_path and self._file_path.exists():
                logger.info("Loaded config file (master over env): %s", self._file_path)

    def get_settings(self) -> SettingsT:
        with self._lock:
            if self._current is None:
                self.load_initial()
            return self._current

    def update(self, overrides: dict[str, Any]) -> bool:
        """Merge overrides and rebuild. Returns False and keeps the previous settings when invalid."""
        overrides = self._known(overrides, "update")
        with self._lock:
            current = self.get_settings()
            try:
                self._current = self._settings_cls(**{**current.model_dump(), **overrides})
            except ValidationError as e:
                logger.warning("Config update rejected; keeping previous config: %s", e)
                return False
            self._overrides.update(overrides)
            return True

    def reload_from_file(self) -> bool:
        """Re-read the config file and re-apply overrides."""
        with self._lock:
            try:
                self._current = self._build()
            except ValidationError as e:
                logger.warning("Config reload rejected; keeping previous config: %s", e)
                return False
            return True

    def clear_overrides(self) -> None:
        """Drop pushed overrides; back to config file + env."""
        with self._lock:
            self._overrides.clear()
            self._current = self._build()
