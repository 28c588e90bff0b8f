"""
Localizable Cleanup Configuration

Handles file selection rules, lookup patterns and write preferences for the
Localizable.strings cleanup run.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern

from localizable_types import ConfigError


DEFAULT_CONFIG_PATH = "localizable_config.json"

# printf-style conversions: position, flags, width, precision, length modifier
DEFAULT_PLACEHOLDER_PATTERN = (
    r"%(?:\d+\$)?[-+#0]*\d*(?:\.\d+)?(?:hh|h|ll|l|q|z|t|j|L)?[@dDiuUxXoOfeEgGcCsSp]|%%"
)

logger = logging.getLogger(__name__)


def default_config() -> Dict[str, Any]:
    """Default configuration"""
    return {
        "resource_suffix": "Localizable.strings",
        "excluded_segments": ["Pods"],
        "source_extensions": ["swift", "m"],
        "excluded_name_marker": "test",
        "lookup_functions": ["NSLocalizedString"],
        "placeholder_pattern": DEFAULT_PLACEHOLDER_PATTERN,
        "write_enabled": True,
        "encoding": "utf-8",
        "version": "1.0"
    }


class LocalizableConfig:
    """Manages cleanup configuration and preferences"""

    def __init__(self, config_path: Optional[str] = None, must_exist: bool = True):
        self.explicit = config_path is not None and must_exist
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file, layered over the defaults"""
        config = default_config()
        path = Path(self.config_path)

        if not path.exists():
            if self.explicit:
                raise ConfigError(f"Config file not found: {self.config_path}")
            logger.debug(f"No config file at {self.config_path}, using defaults")
            return config

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Could not load config {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Expected object at top level in {self.config_path}")

        for key, value in data.items():
            if key not in config:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            config[key] = value

        try:
            re.compile(config["placeholder_pattern"])
        except (re.error, TypeError) as e:
            raise ConfigError(f"Invalid placeholder_pattern: {e}") from e

        return config

    def save_config(self):
        """Save current configuration to file"""
        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2)
                f.write("\n")
        except OSError as e:
            raise ConfigError(f"Could not save config {self.config_path}: {e}") from e
        logger.info(f"Wrote configuration to {self.config_path}")

    def get_resource_suffix(self) -> str:
        return self.config["resource_suffix"]

    def get_excluded_segments(self) -> List[str]:
        return list(self.config["excluded_segments"])

    def get_source_extensions(self) -> List[str]:
        """Extensions without the leading dot"""
        return [ext.lstrip(".") for ext in self.config["source_extensions"]]

    def get_excluded_name_marker(self) -> str:
        return self.config["excluded_name_marker"]

    def get_lookup_functions(self) -> List[str]:
        return list(self.config["lookup_functions"])

    def get_placeholder_pattern(self) -> Pattern:
        return re.compile(self.config["placeholder_pattern"])

    def is_write_enabled(self) -> bool:
        return bool(self.config.get("write_enabled", True))

    def set_write_enabled(self, enabled: bool):
        self.config["write_enabled"] = enabled

    def get_encoding(self) -> str:
        return self.config.get("encoding", "utf-8")

    def export_settings(self) -> Dict[str, Any]:
        """Export effective settings"""
        return dict(self.config)
