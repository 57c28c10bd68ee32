"""Debug Tools - console logging for the eventd SDK"""

from .debug_tools import debug, log, info, info_str, warn, err, set_level, get_level

__all__ = ["debug", "log", "info", "info_str", "warn", "err", "set_level", "get_level"]
