"""
Shared helper functions and utilities.

This module contains logging setup and configuration loading used across the
project.
"""

import copy
import json
import logging
import os


def setup_logging(level=logging.INFO):
    """Set up logging configuration.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)
    logger.info("Logging initialized")


DEFAULT_CONFIG = {
    # Calibration model
    'calibration': {
        'marker_size': 0.025,  # meters, printed marker side length
    },

    # Marker detection
    'marker_detection': {
        'dictionary': '6x6_250',
        'circle_radius': 8,
        'accepted_color': [0, 255, 0, 0],  # RGBA green
        'rejected_color': [255, 0, 0, 0],  # RGBA red
        'draw_rejected': True,
    },

    # Pose estimation
    'pose': {
        'method': 'ippe_square',  # 'ippe_square', 'ippe', 'iterative'
        'min_triangle_area': 1.0,  # px^2, smaller quads are degenerate
    },

    # Good-features-to-track probe
    'feature_probe': {
        'max_corners': 20,
        'quality_level': 0.01,
        'min_distance': 10.0,
        'block_size': 3,
        'use_harris': False,
        'harris_k': 0.04,
        'circle_radius': 8,
        'color': [0, 255, 0, 0],
    },

    # Overlay rendering
    'overlay': {
        'axis_length': 0.03,  # meters
        'axis_thickness': 3,
        'antialiasing': True,
    },
}


def _merge(base, override):
    """Recursively merge ``override`` into ``base`` in place."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def get_config(config_path=None):
    """Load configuration from file or return defaults.

    Args:
        config_path: Path to a JSON configuration file (optional)

    Returns:
        dict: Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                loaded_config = json.load(f)
            _merge(config, loaded_config)
            logging.info(f"Configuration loaded from {config_path}")
        except (OSError, ValueError) as e:
            logging.warning(f"Failed to load config from {config_path}: {e}")
    elif config_path:
        logging.warning(f"Config file {config_path} not found, using defaults")

    return config


def save_config(config, config_path):
    """Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration file

    Returns:
        bool: True if save successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=4)
        logging.info(f"Configuration saved to {config_path}")
        return True
    except OSError as e:
        logging.error(f"Failed to save config to {config_path}: {e}")
        return False


def validate_config(config):
    """Validate configuration parameters.

    Args:
        config: Configuration dictionary

    Returns:
        bool: True if valid, False otherwise
    """
    for key in DEFAULT_CONFIG:
        if key not in config:
            logging.error(f"Missing required config section: {key}")
            return False

    if config['calibration'].get('marker_size', 0) <= 0:
        logging.error("Marker size must be positive")
        return False

    if config['overlay'].get('axis_length', 0) <= 0:
        logging.error("Axis length must be positive")
        return False

    probe = config['feature_probe']
    if probe.get('max_corners', 0) <= 0 or not 0 < probe.get('quality_level', 0) <= 1:
        logging.error("Feature probe needs max_corners > 0 and 0 < quality_level <= 1")
        return False

    logging.info("Configuration validated successfully")
    return True
