"""
Configuration Loader Module.

This module is responsible for locating, loading, and validating bin
definition YAML files. It bridges the gap between the static YAML file and
the strictly typed Pydantic schema defined in `config_definitions.py`.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ordered_binning.core.config_definitions import BinsConfigSchema
from ordered_binning.core.exceptions import ConfigurationError
from ordered_binning.core.ordered_bins import OrderedBins

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ORDERED_BINNING_CONFIG"


def find_config_file(config_filename: str = "bins.yaml") -> Path:
    """
    Search for a bins file in standard locations with precedence.

    Search Order:
    1. ORDERED_BINNING_CONFIG environment variable (Highest priority).
    2. The filename itself, as given (absolute or relative to cwd).
    3. `configs/` directory in current working directory.

    Args:
        config_filename (str): The name or path of the YAML file.

    Raises:
        FileNotFoundError: If the file cannot be found in any search path.

    Returns:
        Path: The path to the resolved configuration file.
    """
    env_config_path = os.getenv(CONFIG_ENV_VAR)
    if env_config_path:
        env_path = Path(env_config_path)
        if env_path.is_file():
            logger.info(f"Loading bins config from env var: {env_path}")
            return env_path
        else:
            logger.warning(
                f"{CONFIG_ENV_VAR} set to '{env_path}' but file does not exist."
            )

    search_paths = [
        Path(config_filename),
        Path.cwd() / "configs" / config_filename,
    ]

    for path in search_paths:
        if path.is_file():
            logger.debug(f"Found bins config at: {path}")
            return path
    raise FileNotFoundError(
        f"Config file '{config_filename}' not found. Checked: {[str(p) for p in search_paths]}"
    )


def load_bins_config(config_filename: str | Path = "bins.yaml") -> BinsConfigSchema:
    """
    Read a bins YAML file and validate it against the schema.

    Args:
        config_filename (str | Path): Name or path of the configuration file.

    Raises:
        ConfigurationError: If the file is missing, contains invalid YAML, or
            violates the schema.

    Returns:
        BinsConfigSchema: The validated configuration.
    """
    try:
        config_path = find_config_file(str(config_filename))
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
        validated_config = BinsConfigSchema.model_validate(config_dict)
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Config file '{config_filename}' not found. {e}"
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Config file '{config_filename}' contains invalid YAML. {e}"
        ) from e
    except ValidationError as e:
        raise ConfigurationError(
            f"Config schema validation failed for '{config_filename}'. {e}"
        ) from e

    logger.debug("Bins configuration successfully validated.")
    return validated_config


def load_ordered_bins(config_filename: str | Path = "bins.yaml") -> OrderedBins:
    """
    Load a bins YAML file straight into an `OrderedBins`.

    Raises:
        ConfigurationError: If loading, validation, or construction fails.
    """
    return load_bins_config(config_filename).to_ordered_bins()
