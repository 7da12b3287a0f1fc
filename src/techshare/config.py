"""
Base settings.

Only the paths needed to bootstrap a run live here. Everything a run can vary is passed through
SimulationConfig.
"""

import os
from pathlib import Path

LOGGING_CONFIG_FILENAME = "logging_config.yaml"


def get_techshare_home() -> Path:
    """Get the TECHSHARE_HOME directory, defaulting to ~/.techshare if not set."""
    if (techshare_home := os.getenv("TECHSHARE_HOME")) is not None:
        return Path(techshare_home)
    return Path.home() / ".techshare"


def get_project_root_dir() -> Path:
    """Get the project root directory (the one holding pyproject.toml in a source checkout)."""
    return Path(__file__).resolve().parent.parent.parent


def default_logging_config_path() -> Path | None:
    """
    Locate logging_config.yaml.

    TECHSHARE_HOME takes precedence over the project root, so an installed package can be
    configured without touching the checkout.
    """
    for directory in (get_techshare_home(), get_project_root_dir()):
        candidate = directory / LOGGING_CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None

