"""
Debug tools for eventd - Colored console logging with a level threshold
"""

import json
import os
import sys
from typing import Any, TextIO
from colorama import Fore, Style, init

# Initialize colorama - force color output even in Docker
init(autoreset=True, strip=False)

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
}

_level = LEVELS.get(os.environ.get("LOG_LEVEL", "INFO").upper(), LEVELS["INFO"])


def set_level(level: str) -> None:
    """Set the minimum level that is printed (DEBUG, INFO, WARNING, ERROR)"""
    global _level
    name = level.upper()
    if name not in LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    _level = LEVELS[name]


def get_level() -> str:
    for name, value in LEVELS.items():
        if value == _level:
            return name
    return "INFO"


def _safe_inspect(val: Any) -> str:
    """Safely convert value to string representation"""
    if isinstance(val, str):
        return val
    try:
        return json.dumps(val, indent=2, default=str)
    except (TypeError, ValueError):
        return str(val)


def _format_args(args: tuple) -> list:
    """Format arguments for printing"""
    return [arg if isinstance(arg, str) else _safe_inspect(arg) for arg in args]


def _emit(level: str, color: str, args: tuple, stream: TextIO) -> None:
    if LEVELS[level] < _level:
        return
    if args and isinstance(args[0], str):
        formatted = _format_args(args[1:])
        print(f"{color}{args[0]}{Style.RESET_ALL}", *formatted, file=stream)
    else:
        print(*_format_args(args), file=stream)


def debug(*args: Any) -> None:
    """Print debug message in dim white, only when LOG_LEVEL is DEBUG"""
    _emit("DEBUG", Style.DIM + Fore.WHITE, args, sys.stdout)


def log(*args: Any) -> None:
    """Print log message in green"""
    _emit("INFO", Fore.GREEN, args, sys.stdout)


def info(*args: Any) -> None:
    """Print info message in blue"""
    _emit("INFO", Fore.BLUE, args, sys.stdout)


def info_str(args: list[str]) -> None:
    """Print concatenated string arguments"""
    if LEVELS["INFO"] >= _level:
        print(''.join(args))


def warn(*args: Any) -> None:
    """Print warning message in yellow"""
    _emit("WARNING", Fore.YELLOW, args, sys.stderr)


def err(*args: Any) -> None:
    """Print error message in red"""
    _emit("ERROR", Fore.RED, args, sys.stderr)
