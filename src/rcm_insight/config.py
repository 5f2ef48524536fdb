"""Configuration loading and management for RCM Insight.

Configuration sources are merged in priority order:
    1. Defaults (defined in MatrixConfig)
    2. Global config (~/.rcm-insight.toml)
    3. Project config (./rcm-insight.toml)
    4. Explicit config file
    5. Environment variables (RCM_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(default_view="process")
    >>> config.default_view
    'process'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
ViewName = Literal["process", "subprocess", "full"]

_VIEW_NAMES = ("process", "subprocess", "full")
_VERBOSITIES = ("quiet", "normal", "verbose")


@dataclass(frozen=True)
class MatrixConfig:
    """Settings for loading, viewing and exporting a risk-control matrix.

    Effectiveness base scores and health adjustments are fixed constants
    in ``rcm_insight.matrix.scoring``.

    Attributes:
        default_view: View depth used when no ``--view`` is given
        export_dir: Directory the CSV export is written to
        strict_integrity: Raise instead of warn on malformed node/edge sets
        high_impact_levels: Risk impacts reported as high-risk alerts
        alert_limit: Number of uncovered high-impact risks listed by summaries
        verbosity: Logging verbosity level
    """

    default_view: ViewName = "full"
    export_dir: str = "."
    strict_integrity: bool = False
    high_impact_levels: list[str] = field(default_factory=lambda: ["High", "Critical"])
    alert_limit: int = 5
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        if self.default_view not in _VIEW_NAMES:
            raise InvalidConfigError(
                "default_view", self.default_view, f"must be one of {', '.join(_VIEW_NAMES)}"
            )
        if self.verbosity not in _VERBOSITIES:
            raise InvalidConfigError(
                "verbosity", self.verbosity, f"must be one of {', '.join(_VERBOSITIES)}"
            )
        if self.alert_limit < 0:
            raise InvalidConfigError("alert_limit", self.alert_limit, "must be non-negative")
        if not self.high_impact_levels:
            raise InvalidConfigError(
                "high_impact_levels", self.high_impact_levels, "must name at least one level"
            )

    @property
    def export_path(self) -> Path:
        return Path(self.export_dir)


DEFAULT_CONFIG = MatrixConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> MatrixConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated MatrixConfig instance

    Raises:
        ConfigurationError: If a config file is missing or unparsable
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".rcm-insight.toml"
    if global_config.exists():
        merged.update(_read_config_file(global_config, "global config"))

    project_config = Path.cwd() / "rcm-insight.toml"
    if project_config.exists():
        merged.update(_read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_read_config_file(config_file, "config file"))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return MatrixConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _read_config_file(path: Path, label: str) -> dict:
    try:
        data = _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")
    # Settings may live at the top level or under an [rcm] table
    section = data.get("rcm", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid {label} '{path}': [rcm] must be a table")
    return dict(section)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from RCM_* environment variables.

    Supported environment variables:
        RCM_DEFAULT_VIEW: process/subprocess/full
        RCM_EXPORT_DIR: str
        RCM_STRICT_INTEGRITY: bool (true/false/1/0)
        RCM_ALERT_LIMIT: int
        RCM_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any RCM_* vars found.
    """
    type_hints = get_type_hints(MatrixConfig)

    result: dict[str, Any] = {}

    for field_name in MatrixConfig.__dataclass_fields__:
        env_key = f"RCM_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(field_name, env_value, f"{env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be expressed as a single string
    (lists), so the field keeps its file or default value.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
