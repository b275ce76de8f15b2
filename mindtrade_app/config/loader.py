"""Configuration loader with 4-tier parameter precedence."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .defaults import DefaultConfig, get_default_config

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "MINDTRADE_API_BASE_URL": ("api", "base_url"),
    "MINDTRADE_API_TIMEOUT": ("api", "timeout_seconds"),
    "MINDTRADE_DB_PATH": ("storage", "db_path"),
    "MINDTRADE_LOG_LEVEL": ("logging", "level"),
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 4-tier precedence."""

    config_file: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_file: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_file is None:
            config_file = Path.home() / ".mindtrade" / "mindtrade.yaml"

        return cls(
            config_file=Path(config_file),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from the YAML config file, if present."""
        if not self.config_file.exists():
            return {}

        with open(self.config_file) as f:
            file_config = yaml.safe_load(f)

        return file_config or {}

    def load_env_config(self, environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
        """Load overrides from MINDTRADE_* environment variables."""
        if environ is None:
            environ = os.environ

        config: dict[str, Any] = {}
        for var, (section, key) in ENV_OVERRIDES.items():
            value = environ.get(var)
            if value is None or value == "":
                continue
            if key == "timeout_seconds":
                try:
                    value = int(value)
                except ValueError:
                    pass
            config.setdefault(section, {})[key] = value

        return config

    def merge_config(
        self,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 4-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Environment variables
        3. YAML config file
        4. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())
        config = self._deep_merge(config, self.load_env_config(environ))

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
