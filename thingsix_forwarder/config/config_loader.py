"""
ConfigLoader for YAML-based configuration with environment variable interpolation.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

# Define logger
logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "THINGSIX_CONFIG"
USER_CONFIG_DIR = Path.home() / ".config" / "thingsix-forwarder"


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


class ConfigLoader:
    """
    Loads and manages YAML configuration with environment variable interpolation.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Optional explicit path to config.yaml
        """
        self.config_path = self._find_config_path(config_path)
        self.config = self._load_config()
        logger.debug(f"ConfigLoader: config={self.config_path}")

    def _find_config_path(self, config_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Find the configuration file path.

        Looks in the following locations (in order):
        1. Explicit path provided to constructor
        2. Path specified by the THINGSIX_CONFIG environment variable
        3. Current working directory
        4. User's config directory (~/.config/thingsix-forwarder/)

        Args:
            config_path: Optional explicit path to config.yaml

        Returns:
            Path to the configuration file. The path may not exist, in which
            case the defaults are used.
        """
        if config_path:
            path = Path(config_path)
            if path.exists():
                return path
            logger.warning(f"Specified config path does not exist: {path}")

        env_path = os.getenv(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)
            if path.exists():
                return path
            logger.warning(
                f"Config path from environment variable does not exist: {path}"
            )

        candidates: List[Path] = [
            Path.cwd() / "config.yaml",
            USER_CONFIG_DIR / "config.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                return candidate

        return Path.cwd() / "config.yaml"

    def _interpolate_env_vars(self, value: Any) -> Any:
        """
        Recursively interpolate environment variables in configuration values.

        Replaces "${ENV_VAR}" or "$ENV_VAR" with the value of the environment variable.
        Unknown variables are left as-is.
        """
        if isinstance(value, str):
            pattern = r"\${([^}]+)}|\$([a-zA-Z0-9_]+)"

            def replace_env_var(match):
                env_var = match.group(1) or match.group(2)
                return os.environ.get(env_var, f"${{{env_var}}}")

            return re.sub(pattern, replace_env_var, value)
        elif isinstance(value, list):
            return [self._interpolate_env_vars(item) for item in value]
        elif isinstance(value, dict):
            return {k: self._interpolate_env_vars(v) for k, v in value.items()}
        else:
            return value

    def _load_config(self) -> Dict[str, Any]:
        """
        Load the configuration file and merge it over the defaults.

        Raises:
            ConfigError: If the configuration file cannot be loaded or is invalid
        """
        defaults = self._get_default_config()
        if not self.config_path.exists():
            logger.info(
                f"Configuration file not found: {self.config_path}. Using default configuration."
            )
            return defaults

        try:
            with open(self.config_path, "r") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            error_msg = f"Error parsing {self.config_path}: {e}"
            logger.error(error_msg)
            raise ConfigError(error_msg) from e
        except OSError as e:
            error_msg = f"Error loading configuration: {e}"
            logger.error(error_msg)
            raise ConfigError(error_msg) from e

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration in {self.config_path} must be a mapping, "
                f"got {type(config).__name__}"
            )

        config = self._interpolate_env_vars(config)
        return self._deep_merge(defaults, config)

    def _get_default_config(self) -> Dict[str, Any]:
        """Baseline configuration used when no file overrides a value."""
        return {
            "gateway_store": {
                "path": "gateways.yaml",
            },
            "logging": {
                "level": "INFO",
            },
        }

    def _deep_merge(
        self, base: Dict[str, Any], overlay: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep-merge *overlay* into *base* (overlay wins on leaf conflicts)."""
        merged = dict(base)
        for key, value in overlay.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get_config(self) -> Dict[str, Any]:
        """
        Get the full configuration.

        Returns:
            Dictionary containing the full configuration
        """
        return self.config

    def get_gateway_store_config(self) -> Dict[str, Any]:
        """
        Get the gateway store configuration section.

        Returns:
            Dictionary containing the gateway store configuration
        """
        return self.config.get("gateway_store", {})

    def get_gateway_store_path(self) -> Path:
        """Return the configured gateway store file, with ``~`` expanded."""
        raw = self.get_gateway_store_config().get("path") or "gateways.yaml"
        return Path(str(raw)).expanduser()

    def get_logging_config(self) -> Dict[str, Any]:
        """
        Get the logging configuration.

        Returns:
            Dictionary containing the logging configuration
        """
        return self.config.get("logging", {})


# Create a singleton instance
config_loader = ConfigLoader()
