"""Environment configuration and CLI argument parsing."""

import argparse
import os
from pathlib import Path

from safepaths.domain.errors import ConfigurationError


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


BASE_PATH_ENV = "SAFEPATHS_BASE_PATH"

DEFAULT_MAX_PATH_LENGTH = 4096
DEFAULT_MAX_FILENAME_LENGTH = 255

POLICY_CHOICES = [
    "default",
    "uploads",
    "templates",
    "content",
    "development",
    "production",
]


def env_policy_settings() -> dict:
    """Read sanitization settings from ``SAFEPATHS_*`` variables.

    Read at call time rather than import time so tests and long-lived
    processes see the current environment.
    """
    return {
        "max_path_length": _env_int("SAFEPATHS_MAX_PATH_LENGTH", DEFAULT_MAX_PATH_LENGTH),
        "max_filename_length": _env_int(
            "SAFEPATHS_MAX_FILENAME_LENGTH", DEFAULT_MAX_FILENAME_LENGTH
        ),
        "strict_mode": _env_bool("SAFEPATHS_STRICT_MODE", False),
        "hidden_file_protection": _env_bool("SAFEPATHS_HIDDEN_FILE_PROTECTION", True),
        "custom_dangerous_patterns": tuple(
            _env_list("SAFEPATHS_EXTRA_DANGEROUS_PATTERNS", [])
        ),
        "trusted_path_prefixes": tuple(_env_list("SAFEPATHS_TRUSTED_PREFIXES", [])),
    }


def base_path_from_env(var_name: str = BASE_PATH_ENV) -> str:
    """Resolve a base directory from an environment variable.

    The variable must be set and point at an existing directory.
    """
    value = os.getenv(var_name)
    if not value:
        raise ConfigurationError(f"Environment variable {var_name} is not set")

    resolved = Path(value).expanduser().resolve()
    if not resolved.exists():
        raise ConfigurationError(f"{var_name} points to a missing path: {resolved}")
    if not resolved.is_dir():
        raise ConfigurationError(f"{var_name} is not a directory: {resolved}")
    return str(resolved)


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="safepaths", description="Inspect named paths and check path fragments"
    )
    parser.add_argument("--base", default=os.getenv(BASE_PATH_ENV, "."))
    parser.add_argument("--preset", help="Apply a framework preset (e.g. laravel)")
    parser.add_argument("--policy", default="default", choices=POLICY_CHOICES)
    default_log_level = os.getenv("SAFEPATHS_LOG_LEVEL", "WARNING").upper()
    default_destination = os.getenv("SAFEPATHS_LOG_DESTINATION", "stderr")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout, stderr or a file path",
    )
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=_env_bool("SAFEPATHS_LOG_JSON", True),
        help="Emit structured JSON log lines",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="Print every registered name=path pair")
    get_parser = commands.add_parser("get", help="Print the path for one name")
    get_parser.add_argument("name")
    join_parser = commands.add_parser(
        "join", help="Securely join an untrusted fragment onto a named path"
    )
    join_parser.add_argument("name")
    join_parser.add_argument("fragment")
    commands.add_parser("presets", help="List available presets")
    return parser.parse_args(argv)
