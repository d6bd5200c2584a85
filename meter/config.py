"""
Configuration and logging setup for expense-meter.

Values come from built-in defaults, optionally overridden by a YAML file and
then by environment variables.
"""

import copy
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from meter.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "currency": "USD",
    "storage": {
        "state_path": "data/state.json",
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "file": None,
    },
}

# env var -> (section, key); section None means top level
ENV_OVERRIDES = {
    "EXPENSE_METER_STATE_PATH": ("storage", "state_path"),
    "EXPENSE_METER_CURRENCY": (None, "currency"),
    "EXPENSE_METER_LOG_LEVEL": ("logging", "level"),
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration, merging a YAML file over the defaults.

    Args:
        config_path: Path to the YAML file. Defaults to $EXPENSE_METER_CONFIG
            or ``config.yaml`` in the working directory. A missing file is
            not an error.

    Returns:
        Configuration dictionary with defaults for missing values

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping
    """
    if config_path is None:
        config_path = Path(os.getenv("EXPENSE_METER_CONFIG", CONFIG_FILE))

    loaded: Dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                "Invalid YAML in config file",
                details={"path": str(config_path)},
                original_error=e,
            ) from e
        if not isinstance(loaded, dict):
            raise ConfigError(
                "Config file must contain a mapping",
                details={"path": str(config_path), "type": type(loaded).__name__},
            )
    else:
        logger.debug("Config file %s not found, using defaults", config_path)

    config = _merge(DEFAULT_CONFIG, loaded)

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if not value:
            continue
        if section is None:
            config[key] = value
        else:
            config.setdefault(section, {})[key] = value

    return config


def setup_logging(config: dict) -> None:
    """
    Configure root logging from the ``logging`` section of the config.

    Args:
        config: Configuration dictionary with logging settings
    """
    log_config = config.get("logging", {})
    level_name = str(log_config.get("level", "INFO")).upper()
    log_level = getattr(logging, level_name, None)
    if not isinstance(log_level, int):
        raise ConfigError("Unknown log level", details={"level": level_name})
    log_format = log_config.get("format", DEFAULT_CONFIG["logging"]["format"])
    log_file = log_config.get("file")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers,
        force=True,
    )
