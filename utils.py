# utils.py
"""
Utility functions shared across the generator.

This module provides helpers such as logging setup, configuration
loading and range mapping that are used by several modules but do not
belong to layout, animation or rendering specifically.
"""
import logging
import logging.handlers
import json
import os
import numpy as np
from typing import Dict, Any

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys. All are optional.
#   - Outputs: None
#   - Side Effects: Configures the root Python logger with a console
#     handler and a rotating file handler. Creates the log directory.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: the parsed JSON document.
#   - Side Effects: Logs and re-raises FileNotFoundError and
#     json.JSONDecodeError.
#
# map_unit(n, low, high):
#   - Inputs: n in [0, 1] (scalar or array).
#   - Outputs: low + (high - low) * n, clipped to [low, high].


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Sets up logging to both the console and a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    log_file_path = log_config.get('log_file', 'logs/wheels.log')

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Avoid duplicate output when called again after a config reload
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Rotates at 1MB, keeps 5 backups.
    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=1024*1024, backupCount=5
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logging.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise


def map_unit(n, low, high):
    """
    Maps a noise value in [0, 1] onto [low, high].

    The result is clipped so that rounding in the interpolation can never
    push it past either bound.
    """
    return np.clip(low + (high - low) * n, low, high)
