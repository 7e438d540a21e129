"""Configuration management for SCFV Plan.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - data_dir: custom data directory (projects, exports)
   - active_project: id of the project CLI commands operate on

2. rates.yaml - The payroll rate table
   - fgts_rate, employer_inss_rate, pis_rate, provision_inss_rate,
     one_third_vacation_provision_rate, thirteenth_salary_provision_rate,
     multa_fgts_rate
   - Absent file means the built-in default table is used

Config directory resolution:
1. SCFV_PLAN_CONFIG_PATH environment variable (if set)
2. ~/.config/scfv-plan/ (XDG_CONFIG_HOME fallback)

Data directory resolution:
1. settings.json "data_dir" key (if set via CLI)
2. XDG_DATA_HOME/scfv-plan/ or ~/.local/share/scfv-plan/
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml


APP_NAME = "scfv-plan"
SETTINGS_FILENAME = "settings.json"
RATES_FILENAME = "rates.yaml"


class ConfigError(Exception):
    """Raised when a configuration file exists but cannot be used."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. SCFV_PLAN_CONFIG_PATH environment variable
    2. ~/.config/scfv-plan/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("SCFV_PLAN_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)

    Raises:
        ConfigError: If the file exists but is not valid JSON
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    try:
        with open(settings_file, "r") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {settings_file}: {e}") from e


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Args:
        settings: Settings dictionary to save

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json.

    Args:
        key: Setting key (e.g., "data_dir", "active_project")
        default: Default value if key not found
    """
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Returns:
        Path to the saved settings file
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def clear_setting(key: str) -> bool:
    """Remove a setting. Returns True if the key was present."""
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


def get_rates_path() -> Path:
    """Get the path to rates.yaml (may not exist yet)."""
    return get_config_dir() / RATES_FILENAME


def load_rates_file() -> Optional[dict]:
    """Load the raw rate table mapping from rates.yaml.

    Returns:
        Mapping as written in the file, or None if no rates.yaml exists

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping
    """
    rates_path = get_rates_path()

    if not rates_path.exists():
        return None

    try:
        with open(rates_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {rates_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{rates_path} must contain a mapping of rate names to values")

    return data


def save_rates_file(rates: dict) -> Path:
    """Write a rate table mapping to rates.yaml.

    Returns:
        Path to the saved rates file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    rates_path = config_dir / RATES_FILENAME

    with open(rates_path, "w") as f:
        yaml.dump(rates, f, default_flow_style=False, sort_keys=False)

    return rates_path


def delete_rates_file() -> bool:
    """Remove rates.yaml so the default table applies again."""
    rates_path = get_rates_path()
    if rates_path.exists():
        rates_path.unlink()
        return True
    return False


# =============================================================================
# XDG path helpers
# =============================================================================

def get_data_path() -> Path:
    """Get the data directory path.

    Uses settings.json "data_dir" when set, otherwise XDG_DATA_HOME/scfv-plan/.

    Returns:
        Path to the data directory (created if doesn't exist)
    """
    custom = get_setting("data_dir")
    if custom:
        data_path = Path(custom).expanduser()
    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_path = Path(xdg_data_home) / APP_NAME
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def get_projects_path() -> Path:
    """Get the project store directory (created if doesn't exist)."""
    path = get_data_path() / "projects"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_exports_path() -> Path:
    """Get the default spreadsheet export directory (created if doesn't exist)."""
    path = get_data_path() / "exports"
    path.mkdir(parents=True, exist_ok=True)
    return path
