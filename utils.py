# utils.py
"""
Utility functions for the simulation framework.

This module provides the configuration loader and logging setup, which
are used across the application but do not belong to the physics or
rendering code.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary with an optional "logging" key holding
#       "level", "format" and "log_file" sub-keys. A null "log_file"
#       disables file logging.
#   - Side Effects: Configures the root Python logger with a console
#     handler and, unless disabled, a rotating file handler. Creates the
#     log directory if needed.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed configuration, with every top-level section
#     present (missing sections become empty dictionaries).
#   - Errors: FileNotFoundError, json.JSONDecodeError, or ValueError when
#     the document or one of its sections is not a JSON object.

CONFIG_SECTIONS = ('simulation_parameters', 'visualization', 'run_control', 'logging')

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/simulation.log'


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', DEFAULT_LOG_FORMAT)
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file_path:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        # Rotates when the log reaches 1MB, keeps 5 backup logs.
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=1024*1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path or 'disabled'}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads the JSON configuration file and fills in missing sections."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

    if not isinstance(config, dict):
        msg = f"Configuration in {path} must be a JSON object, got {type(config).__name__}."
        logging.error(msg)
        raise ValueError(msg)

    for section in CONFIG_SECTIONS:
        value = config.setdefault(section, {})
        if not isinstance(value, dict):
            msg = f"Configuration section '{section}' in {path} must be a JSON object."
            logging.error(msg)
            raise ValueError(msg)

    logging.info("Configuration loaded successfully.")
    return config
