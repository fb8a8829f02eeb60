"""
Configuration loader with environment variable support.

Loads configuration from YAML files with hierarchical overrides:
1. config/default.yaml (base configuration)
2. config/{CARVIEW_ENV}.yaml (environment-specific)
3. Environment variables (CARVIEW_*)
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml

ENV_PREFIX = "CARVIEW_"
ENV_NAME = "CARVIEW_ENV"
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into a copy of base, recursing into nested sections."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _parse_value(value: str) -> Any:
    """Environment strings become bool, int or float where they parse as one."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value


def _resolve_path(config: dict, parts: list[str]) -> list[str]:
    """Group underscore-separated parts into existing config keys where possible."""
    path: list[str] = []
    node: Any = config
    i = 0
    while i < len(parts):
        # Longest run of parts that names an existing key
        for j in range(len(parts), i, -1):
            candidate = "_".join(parts[i:j])
            if isinstance(node, dict) and candidate in node:
                break
        else:
            j = i + 1
            candidate = parts[i]
        path.append(candidate)
        node = node.get(candidate) if isinstance(node, dict) else None
        i = j
    return path


class Config:
    """
    Hierarchical configuration for the recognition pipeline.

    Load order (later overrides earlier):
    1. default.yaml
    2. {CARVIEW_ENV}.yaml (development, production, etc.)
    3. Environment variables (CARVIEW_*)

    Usage:
        config = Config()
        threshold = config.get('postprocessing.min_confidence', 0.4)
        pipeline = RecognitionPipeline.from_config(config, model)
    """

    def __init__(self, config_dir: Path | None = None):
        """
        Load configuration.

        Args:
            config_dir: Directory holding the YAML files. Defaults to the project config/
        """
        self.config_dir = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
        self.env = os.getenv(ENV_NAME, "development")

        config = _deep_merge(
            _read_yaml(self.config_dir / "default.yaml"),
            _read_yaml(self.config_dir / f"{self.env}.yaml"),
        )
        self._config = self._apply_env_overrides(config)

    @staticmethod
    def _apply_env_overrides(config: dict) -> dict:
        """
        Apply CARVIEW_* environment variables.

        Underscores separate nesting levels unless they belong to an
        existing key, so CARVIEW_POSTPROCESSING_MIN_CONFIDENCE=0.5 sets
        config['postprocessing']['min_confidence'].
        """
        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX) or key == ENV_NAME:
                continue
            path = _resolve_path(config, key[len(ENV_PREFIX) :].lower().split("_"))
            node = config
            for part in path[:-1]:
                node = node.setdefault(part, {})
            node[path[-1]] = _parse_value(value)
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Dot-separated path like 'model.labels' or 'overlay.width_compensation.scale'
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value: Any = self._config
        for k in key.split("."):
            if not isinstance(value, dict) or value.get(k) is None:
                return default
            value = value[k]
        return value

    def __getitem__(self, key: str) -> Any:
        """Get top-level configuration section."""
        return self._config.get(key, {})


def setup_logging(config: Config | dict[str, Any]) -> None:
    """Configure logging from the 'logging' config section."""
    log_config = config.get("logging", {})
    level = getattr(logging, str(log_config.get("level", "INFO")).upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    log_file = log_config.get("file")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=log_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        handlers=handlers,
        force=True,
    )
