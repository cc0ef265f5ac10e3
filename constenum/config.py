"""Configuration for constenum"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Generated accessor
METHOD_NAME = "Enum"
METHOD_COMMENT = "Enum returns a list of values declared for a type."

# Output file: <dir of first input>/<lowercased type><suffix>
OUTPUT_SUFFIX = "_enum.go"

# Looked up in the current directory when --config is not given
CONFIG_FILE_NAME = ".constenum.yaml"

DEFAULT_CONFIG = {
    "output_suffix": OUTPUT_SUFFIX,
    "format": True,  # run gofmt over the output when available
    "gofmt_path": None,  # None: search PATH
    "log_level": "INFO",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_active_config: Dict[str, Any] = dict(DEFAULT_CONFIG)


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load YAML configuration merged over the defaults.

    Args:
        path: Config file; falls back to .constenum.yaml in the working
              directory, then to the defaults

    Returns:
        Effective configuration dictionary (also returned by get_config)
    """
    global _active_config

    config = dict(DEFAULT_CONFIG)
    if path is None and Path(CONFIG_FILE_NAME).is_file():
        path = CONFIG_FILE_NAME

    if path is not None:
        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: expected a mapping at top level")

        for key, value in loaded.items():
            if key not in DEFAULT_CONFIG:
                logger.warning(f"{path}: ignoring unknown config key '{key}'")
                continue
            config[key] = value
        logger.debug(f"Loaded config from {path}")

    level = str(config["log_level"]).upper()
    if level not in LOG_LEVELS:
        raise ValueError(
            f"unknown log_level '{config['log_level']}'; expected one of {', '.join(LOG_LEVELS)}"
        )
    config["log_level"] = level

    _active_config = config
    return config


def get_config() -> Dict[str, Any]:
    """Get full configuration dictionary"""
    return dict(_active_config)
