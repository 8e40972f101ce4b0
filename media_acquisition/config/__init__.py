"""Configuration loading for media acquisition."""

from .settings import (
    DEFAULT_CONFIG_PATH,
    AcquisitionSettings,
    build_arg_parser,
    load_settings,
    read_config_file,
)

__all__ = [
    "AcquisitionSettings",
    "DEFAULT_CONFIG_PATH",
    "build_arg_parser",
    "load_settings",
    "read_config_file",
]
