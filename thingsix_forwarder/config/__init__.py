"""
Configuration management for the ThingsIX forwarder.

The shared instance lives at ``thingsix_forwarder.config.config_loader.config_loader``.
"""

from thingsix_forwarder.config.config_loader import ConfigError, ConfigLoader

__all__ = ["ConfigError", "ConfigLoader"]
