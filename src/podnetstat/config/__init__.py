"""
Configuration management for the podnetstat package.

Configuration is loaded once at startup from an optional TOML file,
environment variables and command-line flags, validated, and passed
explicitly to the components that need it.
"""

from .loader import (
    ENV_VARIABLES,
    load_config,
    load_env_overrides,
    load_toml_file,
    merge_layers,
)
from .validators import (
    LOG_LEVELS,
    validate_exporter_config,
    validate_kubelet_config,
    validate_metrics_config,
)

__all__ = [
    "ENV_VARIABLES",
    "load_config",
    "load_env_overrides",
    "load_toml_file",
    "merge_layers",
    "LOG_LEVELS",
    "validate_exporter_config",
    "validate_kubelet_config",
    "validate_metrics_config",
]
