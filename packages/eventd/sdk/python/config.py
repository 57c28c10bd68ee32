"""
Configuration provider for the eventd SDK.
Loads environment variables and an optional JSON configuration file.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic_settings import BaseSettings

from eventd_debug_tools import err

from .errors import EventdOptionsError

CONFIGURATION_KEY = "eventd"


class Settings(BaseSettings):
    """Process settings loaded from environment variables."""

    # Service configuration
    SERVICE_NAME: str = "eventd-sdk"
    LOG_LEVEL: str = "INFO"
    APP_RUN_IN_CLI: bool = False

    # JSON file holding an "eventd" section
    EVENTD_CONFIG_FILE: Optional[str] = None

    # Overrides for single keys of the "eventd" section.
    # Kept as strings so that the options model reports bad values.
    EVENTD_HOST: Optional[str] = None
    EVENTD_PORT: Optional[str] = None
    EVENTD_DISABLED: Optional[str] = None
    EVENTD_NKEY_FILE: Optional[str] = None
    EVENTD_NKEY: Optional[str] = None
    EVENTD_CONNECT_TIMEOUT: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Environment variable -> key inside the "eventd" section
_OVERRIDES = {
    "EVENTD_HOST": "host",
    "EVENTD_PORT": "port",
    "EVENTD_DISABLED": "disabled",
    "EVENTD_NKEY_FILE": "nkeyFile",
    "EVENTD_NKEY": "nkey",
    "EVENTD_CONNECT_TIMEOUT": "connectTimeout",
}


def _read_config_file(path: str) -> Dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, ValueError) as e:
        error = EventdOptionsError(f"invalid configuration file {path}: {e}")
        err(str(error))
        raise error from e

    if not isinstance(data, dict):
        error = EventdOptionsError(f"invalid configuration file {path}: top level must be an object")
        err(str(error))
        raise error
    return data


def load_configuration(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Build the configuration mapping consumed by the options loader.

    The JSON file named by EVENTD_CONFIG_FILE is read first, then single
    EVENTD_* environment variables override keys of its "eventd" section.
    """
    settings = settings or Settings()

    configuration: Dict[str, Any] = {}
    if settings.EVENTD_CONFIG_FILE:
        configuration = _read_config_file(settings.EVENTD_CONFIG_FILE)

    section = configuration.get(CONFIGURATION_KEY) or {}
    if not isinstance(section, dict):
        error = EventdOptionsError(f"invalid configuration, '{CONFIGURATION_KEY}' must be an object")
        err(str(error))
        raise error

    section = dict(section)
    for env_name, key in _OVERRIDES.items():
        value = getattr(settings, env_name)
        if value is not None:
            section[key] = value

    configuration = dict(configuration)
    configuration[CONFIGURATION_KEY] = section
    return configuration
