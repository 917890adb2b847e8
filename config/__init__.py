"""
Configuration Module for the Vehicle Valuation Report Resolver.

Settings are layered, later layers winning key by key:
    1. config/settings.yaml shipped with the package (complete defaults)
    2. An optional user file given with --config (may be partial)
    3. VALUATION_* environment variables for the handful of values that
       operators change per run

Usage:
    from config import get_config

    threshold = get_config("resolution.review_threshold", 60)

Environment Variables:
    VALUATION_REVIEW_THRESHOLD=75
    VALUATION_DEFAULT_DIALECT=CCC_ONE
    VALUATION_REFERENCE_YEAR=2026
    VALUATION_BACKEND=tesseract
    VALUATION_LOG_LEVEL=DEBUG
    VALUATION_OUTPUT_DIR=/data/outputs
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULTS_PATH = Path(__file__).parent / "settings.yaml"

# Environment variable -> dotted configuration key
ENV_OVERRIDES = {
    'VALUATION_REVIEW_THRESHOLD': 'resolution.review_threshold',
    'VALUATION_DEFAULT_DIALECT': 'resolution.default_dialect',
    'VALUATION_REFERENCE_YEAR': 'resolution.reference_year',
    'VALUATION_BACKEND': 'ingestion.backend',
    'VALUATION_LOG_LEVEL': 'logging.level',
    'VALUATION_OUTPUT_DIR': 'paths.output_dir',
}

REQUIRED_SECTIONS = ('resolution', 'confidence', 'ingestion', 'output', 'logging')


class ConfigurationManager:
    """
    Centralized configuration for the resolver.

    A single instance is shared by every module. The resolution engine
    snapshots what it needs into ResolutionSettings when it is built, so
    reloading never changes an engine that is already running.

    Attributes:
        config_path (Optional[Path]): User configuration file, if any.
        env_applied (Dict[str, Any]): Dotted keys set from the environment.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("resolution.lookahead_lines")
        4
        >>> config.get("confidence.weights.identifier_code")
        25
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load configuration on first use.

        A later call with a different config_path reloads with the new
        user file layered over the defaults.

        Args:
            config_path: Optional user configuration file.
        """
        requested = Path(config_path) if config_path else None

        if self._initialized and (requested is None or requested == self.config_path):
            return

        self.config_path = requested
        self.env_applied: Dict[str, Any] = {}
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Build the layered configuration.

        Raises:
            FileNotFoundError: If a configuration file doesn't exist.
            yaml.YAMLError: If a configuration file is invalid.
            ValueError: If a required section is missing after layering.
        """
        config = self._read_yaml(DEFAULTS_PATH)

        if self.config_path is not None:
            config = merge_dicts(config, self._read_yaml(self.config_path))

        self._config = config
        self._apply_environment()

        missing = [name for name in REQUIRED_SECTIONS if not isinstance(self._config.get(name), dict)]
        if missing:
            raise ValueError(f"Configuration is missing sections: {', '.join(missing)}")

        self._resolve_paths()

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must hold a mapping: {path}")
        return data

    def _apply_environment(self) -> None:
        """Apply VALUATION_* variables; values are parsed as YAML scalars."""
        for env_name, key in ENV_OVERRIDES.items():
            raw = os.environ.get(env_name)
            if raw is None or raw == '':
                continue

            try:
                value = yaml.safe_load(raw)
            except yaml.YAMLError:
                value = raw

            self.set(key, value)
            self.env_applied[key] = value

    def _resolve_paths(self) -> None:
        """Make relative entries under ``paths`` absolute against the project root."""
        project_root = Path(__file__).parent.parent

        for key, value in (self._config.get('paths') or {}).items():
            if value and not Path(value).is_absolute():
                self._config['paths'][key] = str(project_root / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Dotted key (e.g., "resolution.lookahead_lines").
            default: Returned when the key doesn't exist.

        Example:
            >>> config.get("resolution.default_dialect")
            'MITCHELL'
            >>> config.get("nonexistent.key", "fallback")
            'fallback'
        """
        value = self._config

        try:
            for part in key.split('.'):
                value = value[part]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a value by dotted key, creating intermediate sections.

        Used for command-line overrides such as --review-threshold.
        """
        parts = key.split('.')
        section = self._config
        for part in parts[:-1]:
            if not isinstance(section.get(part), dict):
                section[part] = {}
            section = section[part]
        section[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Return a copy of the complete configuration."""
        return merge_dicts({}, self._config)

    def reload(self) -> None:
        """Reload all layers from disk and the environment."""
        self.env_applied = {}
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance; the next access reloads from scratch."""
        cls._instance = None


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with override taking precedence.

    Neither argument is modified.

    Example:
        >>> merge_dicts({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
        {'a': 1, 'b': {'c': 2, 'd': 3}}
    """
    result = dict(base)

    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        elif isinstance(value, dict):
            result[key] = merge_dicts({}, value)
        else:
            result[key] = value

    return result


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get configuration values.

    Args:
        key: Configuration key in dot notation.
        default: Default value if key doesn't exist.
    """
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'ENV_OVERRIDES', 'get_config', 'merge_dicts']
