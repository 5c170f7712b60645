"""
Configuration loading for simulation runs.

Loads YAML files, validates them against the schema and applies environment
overrides for the knobs most often changed between runs.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError as SchemaValidationError

from .config_schema import SimulationConfig, validate_simulation_config
from .exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

ENV_SEED = "MEV_SIM_SEED"
ENV_TRANSACTIONS = "MEV_SIM_TRANSACTIONS"
ENV_ATTACK_PROBABILITY = "MEV_SIM_ATTACK_PROBABILITY"

_ENV_OVERRIDES = {
    ENV_SEED: ("seed", int),
    ENV_TRANSACTIONS: ("total_transactions", int),
    ENV_ATTACK_PROBABILITY: ("attack_probability", float),
}


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse YAML configuration file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to load config {config_path}: {e}")

    if config_dict is None:
        raise ConfigurationError(f"Empty configuration file: {config_path}")
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping in {config_path}"
        )

    return config_dict


def apply_env_overrides(
    config_dict: Dict[str, Any], environ: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Overlay environment variables onto a raw configuration dictionary.

    Raises:
        ConfigurationError: If an override cannot be parsed
    """
    environ = os.environ if environ is None else environ
    merged = dict(config_dict)

    for env_name, (field_name, cast) in _ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            merged[field_name] = cast(raw)
        except ValueError:
            raise ConfigurationError(
                f"Invalid value for {env_name}: {raw!r}",
                details={"variable": env_name, "field": field_name},
            )
        logger.info(f"Config override from {env_name}: {field_name}={merged[field_name]}")

    return merged


def build_simulation_config(
    config_dict: Dict[str, Any], environ: Optional[Dict[str, str]] = None
) -> SimulationConfig:
    """
    Validate a raw dictionary (after environment overrides) into a config.

    Raises:
        ConfigurationError: If an environment override cannot be parsed
        ValidationError: If the configuration fails schema validation
    """
    merged = apply_env_overrides(config_dict, environ)
    try:
        return validate_simulation_config(merged)
    except SchemaValidationError as e:
        raise ValidationError(f"Configuration validation failed: {e}")


def load_simulation_config(
    config_path: Union[str, Path], environ: Optional[Dict[str, str]] = None
) -> SimulationConfig:
    """
    Load and validate a simulation configuration file.

    Args:
        config_path: Path to the YAML configuration file
        environ: Environment to read overrides from (defaults to os.environ)

    Returns:
        Validated simulation configuration

    Raises:
        ConfigurationError: If the file cannot be loaded
        ValidationError: If the configuration fails schema validation
    """
    config_dict = load_yaml_config(config_path)
    return build_simulation_config(config_dict, environ)


def get_default_config() -> SimulationConfig:
    """Get the default configuration."""
    return SimulationConfig()


def quick_test_config() -> SimulationConfig:
    """Small run for smoke tests."""
    return SimulationConfig(total_transactions=100)
