"""Configuration loading and schema.

- YAML-first configuration under configs/*.yaml
- Strict ${ENV_VAR} expansion (missing/empty env vars are errors)
"""

from __future__ import annotations

from bundle_provision.config.loader import load_app_config, load_config, resolve_profile_configs
from bundle_provision.config.model import (
    AppConfig,
    AssetConfig,
    LoggingConfig,
    PathsConfig,
    build_app_config,
    detect_platform,
)
from bundle_provision.core.errors import ConfigError

__all__ = [
    "AppConfig",
    "AssetConfig",
    "ConfigError",
    "LoggingConfig",
    "PathsConfig",
    "build_app_config",
    "detect_platform",
    "load_app_config",
    "load_config",
    "resolve_profile_configs",
]
