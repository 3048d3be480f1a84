"""
Configuration management for generate-license-file.

Settings come from built-in defaults, then the first config file found
(JSON or TOML), then environment variables.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from rich.console import Console

from .error_handling import ErrorCategory, get_error_handler

console = Console(stderr=True)

SCANNER_NAMES = ("node_modules", "license-checker")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ScanConfig:
    """Dependency scanner configuration."""

    scanner: str = "node_modules"
    timeout_seconds: int = 120
    license_checker_command: List[str] = field(
        default_factory=lambda: ["npx", "--yes", "license-checker"]
    )


@dataclass
class OutputConfig:
    """Report output configuration."""

    output_file: Optional[str] = None
    output_json: bool = False
    overwrite: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "WARNING"
    enable_json: bool = True


@dataclass
class ComprehensiveConfig:
    """Main configuration containing all subsections."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Global configuration instance
_global_config: Optional[ComprehensiveConfig] = None


def validate_config_values(config: ComprehensiveConfig) -> List[str]:
    """
    Validate configuration values and return any errors.

    Args:
        config: Configuration to validate

    Returns:
        List[str]: List of validation errors (empty if valid)
    """
    errors = []
    defaults = ComprehensiveConfig()

    for section_name in ("scan", "output", "logging"):
        section = getattr(config, section_name)
        default_section = getattr(defaults, section_name)
        for key, default in asdict(default_section).items():
            value = getattr(section, key)
            if not _matches_default_type(default, value):
                errors.append(
                    f"{section_name}.{key} must be {_type_name(default)} "
                    f"(got: {type(value).__name__})"
                )

    if config.scan.scanner not in SCANNER_NAMES:
        errors.append(
            f"scan.scanner must be one of {', '.join(SCANNER_NAMES)} "
            f"(got: {config.scan.scanner})"
        )
    if _is_int(config.scan.timeout_seconds) and config.scan.timeout_seconds <= 0:
        errors.append("scan.timeout_seconds must be positive")
    if not config.scan.license_checker_command:
        errors.append("scan.license_checker_command must not be empty")

    log_level = config.logging.log_level
    if isinstance(log_level, str) and log_level.upper() not in LOG_LEVELS:
        errors.append(f"logging.log_level must be one of {', '.join(LOG_LEVELS)}")

    return errors


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _matches_default_type(default: Any, value: Any) -> bool:
    """Check a configured value against the type of the field's default."""
    if default is None:
        return value is None or isinstance(value, str)
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, int):
        return _is_int(value)
    if isinstance(default, list):
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    return isinstance(value, type(default))


def _type_name(default: Any) -> str:
    if default is None:
        return "a string or null"
    if isinstance(default, bool):
        return "a boolean"
    if isinstance(default, int):
        return "an integer"
    if isinstance(default, list):
        return "a list of strings"
    return "a string"


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from a JSON or TOML file."""
    if not config_path.exists():
        return None

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix.lower() == ".toml":
                return toml.load(f)
            elif config_path.suffix.lower() == ".json":
                return json.load(f)
    except (OSError, ValueError, toml.TomlDecodeError) as e:
        get_error_handler().warning(
            ErrorCategory.CONFIGURATION,
            f"Error loading config from {config_path}: {e}",
            "cli_config",
            "load_config_file",
            exception=e,
        )

    return None


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / ".generate-license-file.json",
        Path.cwd() / ".generate-license-file.toml",
        Path.home() / ".config" / "generate-license-file" / "config.json",
        Path.home() / ".config" / "generate-license-file" / "config.toml",
    ]

    for location in locations:
        if location.exists():
            return location

    return None


def load_environment_overrides(config: ComprehensiveConfig) -> None:
    """Load environment variable overrides."""

    def get_env_bool(key: str, default: bool = False) -> bool:
        value = os.environ.get(key, "").lower()
        return value in ["true", "1", "yes", "on"] if value else default

    def get_env_int(key: str, default: Optional[int] = None) -> Optional[int]:
        try:
            return int(os.environ[key]) if key in os.environ else default
        except ValueError:
            console.print(f"⚠️  Invalid integer value for {key}, using default", style="yellow")
            return default

    if scanner := os.environ.get("GENERATE_LICENSE_FILE_SCANNER"):
        config.scan.scanner = scanner
    if timeout := get_env_int("GENERATE_LICENSE_FILE_TIMEOUT"):
        config.scan.timeout_seconds = timeout

    if output_file := os.environ.get("GENERATE_LICENSE_FILE_OUTPUT"):
        config.output.output_file = output_file
    config.output.output_json = get_env_bool(
        "GENERATE_LICENSE_FILE_JSON", config.output.output_json
    )

    if log_level := os.environ.get("GENERATE_LICENSE_FILE_LOG_LEVEL"):
        config.logging.log_level = log_level.upper()


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> List[str]:
    """
    Apply configuration from dictionary to config section.

    Values whose type does not match the field's default are reported and
    skipped, leaving the default in place.

    Returns:
        List[str]: Type errors for the skipped values
    """
    errors = []

    if not isinstance(section_data, dict):
        errors.append(f"{section_name} must be a table of settings")
        console.print(f"⚠️  {errors[-1]}, using defaults", style="yellow")
        return errors

    for key, value in section_data.items():
        if not hasattr(config, key):
            console.print(
                f"⚠️  Unknown config key in {section_name}: {key}", style="yellow"
            )
            continue

        default = getattr(config, key)
        if not _matches_default_type(default, value):
            errors.append(
                f"{section_name}.{key} must be {_type_name(default)} "
                f"(got: {type(value).__name__})"
            )
            console.print(f"⚠️  {errors[-1]}, using default", style="yellow")
            continue

        setattr(config, key, list(value) if isinstance(value, list) else value)

    return errors


def apply_config_data(
    config: ComprehensiveConfig, file_config: Dict[str, Any]
) -> List[str]:
    """Apply every known section of a loaded config file; returns type errors."""
    errors = []
    if not isinstance(file_config, dict):
        return ["config file must contain a table of sections"]

    for section_name in ("scan", "output", "logging"):
        if section_name in file_config:
            errors.extend(
                apply_config_section(
                    getattr(config, section_name), file_config[section_name], section_name
                )
            )
    return errors


def load_config() -> ComprehensiveConfig:
    """Load configuration from file and environment."""
    global _global_config

    if _global_config is not None:
        return _global_config

    config = ComprehensiveConfig()

    config_file = find_config_file()
    if config_file:
        file_config = load_config_file(config_file)
        if file_config:
            apply_config_data(config, file_config)

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        console.print("⚠️  Configuration validation errors:", style="red")
        for error in validation_errors:
            console.print(f"  • {error}", style="red")
        console.print("Using default values for invalid settings.", style="yellow")
        config = _with_defaults_for_invalid(config)

    _global_config = config
    return config


def _with_defaults_for_invalid(config: ComprehensiveConfig) -> ComprehensiveConfig:
    defaults = ComprehensiveConfig()
    for section_name in ("scan", "output", "logging"):
        section = getattr(config, section_name)
        for key, default in asdict(getattr(defaults, section_name)).items():
            if not _matches_default_type(default, getattr(section, key)):
                setattr(section, key, default)

    if config.scan.scanner not in SCANNER_NAMES:
        config.scan.scanner = defaults.scan.scanner
    if config.scan.timeout_seconds <= 0:
        config.scan.timeout_seconds = defaults.scan.timeout_seconds
    if not config.scan.license_checker_command:
        config.scan.license_checker_command = defaults.scan.license_checker_command
    if config.logging.log_level.upper() not in LOG_LEVELS:
        config.logging.log_level = defaults.logging.log_level
    return config


def get_config() -> ComprehensiveConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _global_config
    _global_config = None


def create_sample_config() -> str:
    """Generate sample JSON configuration."""
    return json.dumps(ComprehensiveConfig().to_dict(), indent=2)
