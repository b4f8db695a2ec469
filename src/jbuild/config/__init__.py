"""Configuration parsing modules for jbuild."""

from .ini_parser import CONFIG_FILE_NAME, JBuildConfig, JBuildConfigError

__all__ = [
    "CONFIG_FILE_NAME",
    "JBuildConfig",
    "JBuildConfigError",
]
