"""
Configuration for the Slopes pipeline.

The configuration is a plain nested dictionary. Every module reads only its
own section (e.g. ``config.get("occlusion", {})``) and falls back to the
defaults below for missing keys, so a user config file only needs to list
the values it overrides.
"""
import copy
import json
import logging
import os
from typing import Any, Dict, Optional

from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "canvas": {
        # Margins reserved around the drawable area, as fractions of the canvas.
        "vertical_margin_ratio": 1 / 11,
        "horizontal_margin_ratio": 1 / 8.5,
        # Preview density: one sample every two pixels.
        "samples_per_pixel": 0.5,
    },
    "noise": {
        "persistence": 0.5,
        "lacunarity": 2.0,
    },
    "occlusion": {
        # Hard cap on the lookback window, whatever the perspective.
        "max_lookback_rows": 40,
    },
    "post_processing": {
        "group_tolerance": 1e-6,
        "retrace_tolerance": 0.1,
        "retrace_min_points": 3,
    },
    "export": {
        "reference_height": 552,
        "dpi": 300,
        "stroke": "#000000",
        "stroke_width": 1.0,
        "precision": 2,
        "background": None,
        "output_dir": "output",
    },
    "logging": {
        "log_dir": "logs",
        "log_name": "slopes_run",
        "level": "INFO",
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Builds the effective configuration.

    Args:
        path: Optional JSON file whose sections override the defaults.
        overrides: Optional in-memory dict applied last (used by the CLI and tests).

    Returns:
        dict: A fresh nested dictionary; callers may mutate it freely.

    Raises:
        InvalidConfiguration: If the file is missing, unreadable or not a JSON object.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if path is not None:
        if not os.path.exists(path):
            raise InvalidConfiguration(f"Config file not found at: {path}")

        logger.info(f"Loading configuration from {path}...")
        try:
            with open(path, "r", encoding="utf-8") as handle:
                user_config = json.load(handle)
        except json.JSONDecodeError as exc:
            raise InvalidConfiguration(f"Config file {path} is not valid JSON: {exc}") from exc

        if not isinstance(user_config, dict):
            raise InvalidConfiguration(f"Config file {path} must contain a JSON object.")

        unknown = set(user_config) - set(DEFAULT_CONFIG)
        if unknown:
            logger.warning(f"Ignoring unknown config sections: {sorted(unknown)}")
            user_config = {k: v for k, v in user_config.items() if k in DEFAULT_CONFIG}

        config = _deep_merge(config, user_config)

    if overrides:
        config = _deep_merge(config, overrides)

    return config


def get_section(config: Optional[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Returns one section with defaults filled in for any missing keys."""
    section = dict(DEFAULT_CONFIG.get(name, {}))
    if config:
        section.update(config.get(name, {}))
    return section
