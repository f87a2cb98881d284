"""Configuration service - JSON file merged over defaults, dotted-key access"""

import copy
import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional, TypeVar, Union

from ....utils import app_logger
from .config_defaults import get_default_config

T = TypeVar("T")


class ConfigService:
    """Read/write access to the merged configuration"""

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            config_path: optional JSON file merged over the defaults
            overrides: in-memory settings merged last (tests, embedding hosts)
        """
        self.config_path = Path(config_path) if config_path else None
        self._lock = threading.RLock()
        self._config: Dict[str, Any] = get_default_config()

        if self.config_path is not None:
            self.load_config()
        if overrides:
            self._merge_recursive(self._config, copy.deepcopy(overrides))

    def load_config(self) -> bool:
        """Load the JSON file on top of the defaults

        Returns:
            True if the file was read; False means defaults are in use
        """
        defaults = get_default_config()

        if self.config_path is None or not self.config_path.exists():
            with self._lock:
                self._config = defaults
            app_logger.log_lifecycle_event(
                "Using default configuration",
                {"config_path": str(self.config_path)},
            )
            return False

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                raise ValueError("top-level JSON value must be an object")
        except (OSError, ValueError) as e:
            app_logger.log_error(e, "config_load", {"config_path": str(self.config_path)})
            with self._lock:
                self._config = defaults
            return False

        self._merge_recursive(defaults, loaded)
        with self._lock:
            self._config = defaults

        app_logger.log_lifecycle_event(
            "Configuration loaded",
            {"config_path": str(self.config_path), "keys_loaded": len(loaded)},
        )
        return True

    def get_setting(self, key: str, default: Optional[T] = None) -> T:
        """Get a setting by dotted path (e.g. "recording.sample_rate")"""
        with self._lock:
            value: Any = self._config
            for part in key.split("."):
                if isinstance(value, dict) and part in value:
                    value = value[part]
                else:
                    return default
            return copy.deepcopy(value)

    def set_setting(self, key: str, value: Any) -> None:
        """Set a setting by dotted path, creating intermediate sections"""
        parts = key.split(".")
        with self._lock:
            node = self._config
            for part in parts[:-1]:
                child = node.get(part)
                if not isinstance(child, dict):
                    child = {}
                    node[part] = child
                node = child
            node[parts[-1]] = value

    def get_all_settings(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._config)

    def save_config(self) -> bool:
        """Write the current configuration back to ``config_path``"""
        if self.config_path is None:
            return False
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.config_path.with_suffix(".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self.get_all_settings(), f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.config_path)
            return True
        except OSError as e:
            app_logger.log_error(e, "config_save", {"config_path": str(self.config_path)})
            return False

    @staticmethod
    def _merge_recursive(base: Dict[str, Any], update: Dict[str, Any]) -> None:
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                ConfigService._merge_recursive(base[key], value)
            else:
                base[key] = value
