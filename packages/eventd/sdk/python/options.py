"""
eventd connection options.

The options live under the "eventd" section of the host configuration:

    {
        "eventd": {
            "host": "127.0.0.1",
            "port": 4222,
            "disabled": false,
            "nkeyFile": "eventd.nk",
            "nkey": "SU..."
        }
    }
"""

from functools import lru_cache
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from eventd_debug_tools import err

from .config import CONFIGURATION_KEY, Settings, load_configuration
from .errors import EventdOptionsError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4222
DEFAULT_CONNECT_TIMEOUT = 2.0


class EventdOptions(BaseModel):
    """Normalized, immutable eventd options."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    disabled: bool = False
    nkey_file: Optional[str] = Field(default=None, alias="nkeyFile")
    nkey: Optional[SecretStr] = None
    connect_timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, alias="connectTimeout")

    @field_validator("host", mode="before")
    @classmethod
    def default_host(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_HOST
        return value

    @field_validator("port", mode="before")
    @classmethod
    def default_port(cls, value: Any) -> Any:
        if value is None or value == "":
            return DEFAULT_PORT
        return value

    @field_validator("port")
    @classmethod
    def positive_port(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_PORT

    @field_validator("connect_timeout")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_CONNECT_TIMEOUT

    @field_validator("nkey_file", "nkey", mode="before")
    @classmethod
    def empty_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def url(self) -> str:
        return f"nats://{self.host}:{self.port}"

    def nkey_value(self) -> Optional[str]:
        """Raw nkey seed, or None when not configured."""
        if self.nkey is None:
            return None
        return self.nkey.get_secret_value()

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def load_options(configuration: Optional[Mapping[str, Any]], key: str = CONFIGURATION_KEY) -> EventdOptions:
    """
    Parse the named configuration section into EventdOptions.

    A missing section yields the defaults. Anything that fails validation is
    treated as gross misconfiguration and raises EventdOptionsError.
    """
    section = (configuration or {}).get(key)
    if section is None:
        section = {}
    if not isinstance(section, Mapping):
        error = EventdOptionsError(f"invalid configuration, '{key}' must be an object")
        err(str(error))
        raise error

    try:
        return EventdOptions.model_validate(dict(section))
    except ValidationError as e:
        error = EventdOptionsError(f"invalid configuration, {e}")
        err(str(error))
        raise error from e


@lru_cache(maxsize=None)
def get_options() -> EventdOptions:
    """Options for this process, loaded from Settings on first use and cached."""
    return load_options(load_configuration(Settings()))


def eventd_disabled() -> bool:
    """Check whether eventd is disabled for this process."""
    return get_options().disabled
