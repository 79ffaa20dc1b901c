"""
Configuration management for StudioTone

Settings live in a YAML file (``studiotone/config.yaml`` ships with the
package). A user file only needs the keys it changes; everything else is
filled in from DEFAULTS.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

# ${NAME} placeholders in string values
_ENV_PATTERN = re.compile(r'\$\{([^}]+)\}')

DEFAULTS: Dict[str, Any] = {
    'enhancement': {
        'debounce_ms': 100,          # Quiet period before a re-render
        'analysis_max_edge': 300,    # Histogram working copy size
    },
    'sharpening': {
        'strength': 0.3,
        'threshold': 12.0,
    },
    'lighting': {
        'inner_radius': 0.15,        # Fractions of the image width
        'outer_radius': 0.85,
    },
    'output': {
        'format': 'JPEG',
        'quality': 95,
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    },
}


def _substitute_env(value: Any) -> Any:
    """Replace ${NAME} in every string of a nested structure; unknown names stay literal."""
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    if isinstance(value, dict):
        return {key: _substitute_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute_env(item) for item in value]
    return value


def _overlay(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Return base with overrides applied section by section."""
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _overlay(current, value)
        else:
            result[key] = value
    return result


def get_default_config() -> Dict[str, Any]:
    """Fresh copy of the built-in settings."""
    return copy.deepcopy(DEFAULTS)


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load settings from a YAML file

    Args:
        config_path: File to read; the bundled config.yaml when None

    Returns:
        Complete configuration dictionary. An unreadable or malformed file
        is logged and the defaults are returned instead.
    """
    path = DEFAULT_CONFIG_PATH if config_path is None else Path(config_path)

    if not path.exists():
        logger.warning(f"Config file not found: {path}. Using defaults.")
        return get_default_config()

    try:
        with open(path, 'r') as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Could not read config {path}: {e}")
        return get_default_config()

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        logger.error(f"Config {path} must be a mapping of sections, got {type(loaded).__name__}")
        return get_default_config()

    logger.info(f"Loaded configuration from {path}")
    return _overlay(DEFAULTS, _substitute_env(loaded))


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> bool:
    """
    Write settings as YAML

    Returns:
        True on success; failures are logged and reported as False
    """
    try:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Could not write config {config_path}: {e}")
        return False

    logger.info(f"Saved configuration to {config_path}")
    return True


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Look up a setting by dotted path, e.g. ``'sharpening.threshold'``

    Returns default when any section along the path is missing.
    """
    node = config
    for key in key_path.split('.'):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node


def update_config_value(config: Dict[str, Any], key_path: str, value: Any) -> None:
    """Set a setting by dotted path, creating intermediate sections."""
    *sections, leaf = key_path.split('.')
    node = config
    for key in sections:
        node = node.setdefault(key, {})
    node[leaf] = value
