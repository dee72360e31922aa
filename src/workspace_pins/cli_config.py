"""
Configuration management for workspace-pins.

Settings come from built-in defaults, then the first config file found in the
working directory (JSON, YAML or TOML), then environment variables. Command
line options are applied on top by the CLI. The dependency matrix itself is
not configurable.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
import yaml
from rich.console import Console

from .error_handling import ErrorCategory, get_error_handler

console = Console(stderr=True)

CONFIG_FILE_NAMES = [
    ".workspace-pins.json",
    ".workspace-pins.yaml",
    ".workspace-pins.yml",
    ".workspace-pins.toml",
]

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

TRUE_VALUES = ["true", "1", "yes", "on"]
FALSE_VALUES = ["false", "0", "no", "off"]

BOOL_FIELDS = [
    ("publish", "buffer_writes"),
    ("publish", "dry_run"),
    ("output", "quiet"),
    ("output", "verbose"),
    ("logging", "json_logs"),
]


@dataclass
class WorkspaceConfig:
    """Where package manifests live."""

    root: str = "."
    packages_dir: str = "packages"
    manifest_name: str = "package.json"

    @property
    def root_path(self) -> Path:
        return Path(self.root)


@dataclass
class PublishConfig:
    """How prepare and restore runs persist their changes."""

    buffer_writes: bool = True
    dry_run: bool = False


@dataclass
class OutputConfig:
    quiet: bool = False
    verbose: bool = False
    indent: int = 2


@dataclass
class LoggingConfig:
    """Logging and error handling configuration."""

    log_level: str = "WARNING"
    json_logs: bool = True


@dataclass
class ComprehensiveConfig:
    """Main configuration containing all subsections."""

    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
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

    for section_name, key in BOOL_FIELDS:
        if not isinstance(getattr(getattr(config, section_name), key), bool):
            errors.append(f"{section_name}.{key} must be a boolean")

    if not config.workspace.packages_dir:
        errors.append("workspace.packages_dir must not be empty")
    if not config.workspace.manifest_name:
        errors.append("workspace.manifest_name must not be empty")
    elif not config.workspace.manifest_name.endswith(".json"):
        errors.append("workspace.manifest_name must be a .json file")

    if not isinstance(config.output.indent, int) or config.output.indent <= 0:
        errors.append("output.indent must be a positive integer")
    if config.output.quiet is True and config.output.verbose is True:
        errors.append("output.quiet and output.verbose are mutually exclusive")

    if str(config.logging.log_level).upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"logging.log_level must be one of {', '.join(VALID_LOG_LEVELS)}"
        )

    return errors


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from a JSON, YAML or TOML file."""
    if not config_path.exists():
        return None

    suffix = config_path.suffix.lower()
    try:
        with open(config_path, encoding="utf-8") as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".toml":
                data = toml.load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                return None
    except (OSError, ValueError, yaml.YAMLError) as e:
        get_error_handler().warning(
            ErrorCategory.CONFIGURATION,
            f"Error loading config from {config_path}: {e}",
            "cli_config",
            "load_config_file",
            exception=e,
            details={"path": str(config_path)},
        )
        console.print(
            f"⚠️  Error loading config from {config_path}: {e}",
            style="yellow",
            markup=False,
        )
        return None

    return data if isinstance(data, dict) else None


def find_config_file(search_dir: Optional[Path] = None) -> Optional[Path]:
    """Find config file in the given directory (default: cwd)."""
    base = search_dir or Path.cwd()
    for name in CONFIG_FILE_NAMES:
        location = base / name
        if location.exists():
            return location

    return None


def load_environment_overrides(config: ComprehensiveConfig) -> None:
    """Load environment variable overrides."""

    def get_env_bool(key: str, default: bool = False) -> bool:
        value = os.environ.get(key, "").lower()
        return value in TRUE_VALUES if value else default

    if root := os.environ.get("WORKSPACE_PINS_ROOT"):
        config.workspace.root = root

    config.publish.dry_run = get_env_bool(
        "WORKSPACE_PINS_DRY_RUN", config.publish.dry_run
    )
    config.publish.buffer_writes = get_env_bool(
        "WORKSPACE_PINS_BUFFER_WRITES", config.publish.buffer_writes
    )

    if log_level := os.environ.get("WORKSPACE_PINS_LOG_LEVEL"):
        config.logging.log_level = log_level.upper()


def parse_bool(value: Any) -> Any:
    """Coerce "true"/"false"-style strings to bool; other values pass through."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    return value


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> None:
    """Apply configuration from dictionary to config section."""
    for key, value in section_data.items():
        if hasattr(config, key):
            if isinstance(getattr(config, key), bool):
                value = parse_bool(value)
            setattr(config, key, value)
        else:
            console.print(
                f"⚠️  Unknown config key in {section_name}: {key}",
                style="yellow",
                markup=False,
            )


def apply_config_data(config: ComprehensiveConfig, file_config: Dict[str, Any]) -> None:
    for section_name in ["workspace", "publish", "output", "logging"]:
        section_data = file_config.get(section_name)
        if isinstance(section_data, dict):
            apply_config_section(
                getattr(config, section_name), section_data, section_name
            )


def load_config(search_dir: Optional[Path] = None) -> ComprehensiveConfig:
    """Load configuration from file and environment."""
    global _global_config

    if _global_config is not None:
        return _global_config

    config = ComprehensiveConfig()

    config_file = find_config_file(search_dir)
    if config_file:
        file_config = load_config_file(config_file)
        if file_config:
            apply_config_data(config, file_config)

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        console.print("⚠️  Configuration validation errors:", style="red")
        for error in validation_errors:
            console.print(f"  • {error}", style="red", markup=False)
            get_error_handler().warning(
                ErrorCategory.CONFIGURATION, error, "cli_config", "load_config"
            )
        console.print("Using default values for invalid settings.", style="yellow")
        _reset_invalid_values(config)

    _global_config = config
    return config


def _reset_invalid_values(config: ComprehensiveConfig) -> None:
    defaults = ComprehensiveConfig()
    for section_name, key in BOOL_FIELDS:
        section = getattr(config, section_name)
        if not isinstance(getattr(section, key), bool):
            setattr(section, key, getattr(getattr(defaults, section_name), key))
    if not config.workspace.packages_dir:
        config.workspace.packages_dir = defaults.workspace.packages_dir
    if not config.workspace.manifest_name or not config.workspace.manifest_name.endswith(
        ".json"
    ):
        config.workspace.manifest_name = defaults.workspace.manifest_name
    if not isinstance(config.output.indent, int) or config.output.indent <= 0:
        config.output.indent = defaults.output.indent
    if config.output.quiet and config.output.verbose:
        config.output.quiet = False
    if str(config.logging.log_level).upper() not in VALID_LOG_LEVELS:
        config.logging.log_level = defaults.logging.log_level


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


def effective_log_level(config: ComprehensiveConfig) -> str:
    """Log level name after applying --verbose to the configured level."""
    level = str(config.logging.log_level).upper()
    if config.output.verbose and level == "WARNING":
        return "INFO"
    return level
