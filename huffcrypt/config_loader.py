# config_loader.py
import os
import sys
from importlib import resources

import yaml
from dotenv import load_dotenv
from loguru import logger

CONFIG_ENV_VAR = "HUFFCRYPT_CONFIG"


def _merge(base, override):
    merged = dict(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path=None):
    """
    Loads the packaged defaults and merges a user config file over them.

    The user file is config_path, or the path in $HUFFCRYPT_CONFIG (which may
    come from a .env file) when config_path is not given.

    Parameters:
    config_path (str, optional): Path to a YAML config file.

    Returns:
    dict: The merged configuration.
    """
    load_dotenv()
    defaults = yaml.safe_load(
        resources.files("huffcrypt").joinpath("config.yaml").read_text(encoding="utf-8")
    )

    config_path = config_path or os.getenv(CONFIG_ENV_VAR)
    if not config_path:
        return defaults

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)
    if config is not None and not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping.")
    return _merge(defaults, config)


def configure_logging(level="INFO"):
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
