#!/usr/bin/env python3
"""
Validity Configuration Module

Loads the state space and environment description used to build space
information and geometric validity checkers from constraints.yaml.

Author: Robot Control Team
"""

import os
import copy
import logging
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ValidityConfigError(Exception):
    """Raised for malformed space or obstacle definitions."""
    pass


DEFAULT_CONFIG = {
    'space': {
        'lower_bounds': [-1.0, -1.0, -1.0],
        'upper_bounds': [1.0, 1.0, 1.0],
        'longest_valid_segment_fraction': 0.01
    },
    'obstacles': {'enabled': False, 'list': []}
}


def get_default_config_path() -> str:
    """Get default path to the constraints configuration."""
    possible_paths = [
        os.path.join(os.path.dirname(__file__), "..", "..", "config", "constraints.yaml"),
        os.path.join(os.path.dirname(__file__), "..", "config", "constraints.yaml"),
        os.path.join(os.path.dirname(__file__), "constraints.yaml")
    ]

    for path in possible_paths:
        abs_path = os.path.abspath(path)
        if os.path.exists(abs_path):
            return abs_path

    # Return first path as default even if it doesn't exist
    return os.path.abspath(possible_paths[0])


def get_default_config() -> Dict[str, Any]:
    """Provide default configuration if config file is not available."""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_validity_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load validity configuration from YAML.

    Sections missing from the file are filled in from the defaults.

    Args:
        config_path: Path to constraints YAML file (default location if None)

    Returns:
        Configuration dictionary
    """
    config_path = config_path or get_default_config_path()

    if not os.path.exists(config_path):
        logger.warning(f"Constraints file not found: {config_path}, using default validity config")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load validity config from {config_path}: {e}")
        return get_default_config()

    if loaded is not None and not isinstance(loaded, dict):
        logger.error(f"Validity config {config_path} is not a mapping, using defaults")
        return get_default_config()

    config = get_default_config()
    for section, values in (loaded or {}).items():
        if isinstance(values, dict) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values

    logger.info(f"Validity config loaded from: {config_path}")
    return config
