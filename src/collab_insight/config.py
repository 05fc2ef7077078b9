"""Configuration loading and management for Collab Insight.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in ScoringConfig and its sections)
    2. Global config (~/.collab-insight.toml)
    3. Project config (./collab-insight.toml)
    4. Explicit config file
    5. Environment variables (COLLAB_* prefix, run settings only)
    6. Overrides (passed as kwargs)

A TOML file mirrors the dataclass layout::

    significant_file_commits = 3

    [weights]
    effort = 0.40
    loc = 0.25

    [penalties]
    solo_threshold = 0.85

    [run]
    workers = 4

Example:
    >>> config = load_config(workers=2)
    >>> config.run.workers
    2
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError


def _check_fraction(owner: str, name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{owner}.{name} must be between 0.0 and 1.0")


@dataclass(frozen=True)
class WeightConfig:
    """Component weights for the base score.

    The four core weights must sum to 1.0. ``pair_programming`` is only used
    when the pairing component applies; the active set is renormalized to 1.0
    at scoring time.
    """

    effort: float = 0.40
    loc: float = 0.25
    temporal: float = 0.20
    ownership: float = 0.15
    pair_programming: float = 0.10

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"weights.{f.name} must be non-negative")

        core_sum = self.effort + self.loc + self.temporal + self.ownership
        if not 0.99 <= core_sum <= 1.01:
            raise ValueError(f"Core weights must sum to 1.0, got {core_sum:.3f}")

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class PenaltyConfig:
    """Thresholds and multipliers of the multiplicative penalties.

    Attributes:
        solo_threshold: Top effort share above which the solo tier fires
        solo_multiplier: Multiplier of the solo tier
        imbalance_threshold: Top effort share above which the severe-imbalance tier fires
        imbalance_multiplier: Multiplier of the severe-imbalance tier
        trivial_ratio_threshold: Share of raw commits excluded by the pre-filter
        trivial_multiplier: Multiplier of the high-trivial-ratio penalty
        confidence_threshold: Ratings below this confidence count as low
        low_confidence_ratio: Share of low-confidence ratings that triggers the penalty
        low_confidence_multiplier: Multiplier of the low-confidence penalty
        late_window_fraction: Final fraction of the project window checked for late work
        late_work_ratio: Share of weighted effort inside that window that triggers the penalty
        late_work_multiplier: Multiplier of the late-work penalty
    """

    solo_threshold: float = 0.85
    solo_multiplier: float = 0.25
    imbalance_threshold: float = 0.70
    imbalance_multiplier: float = 0.70
    trivial_ratio_threshold: float = 0.50
    trivial_multiplier: float = 0.85
    confidence_threshold: float = 0.60
    low_confidence_ratio: float = 0.40
    low_confidence_multiplier: float = 0.90
    late_window_fraction: float = 0.20
    late_work_ratio: float = 0.50
    late_work_multiplier: float = 0.85

    def __post_init__(self) -> None:
        for f in fields(self):
            _check_fraction("penalties", f.name, getattr(self, f.name))
        if self.imbalance_threshold > self.solo_threshold:
            raise ValueError("penalties.imbalance_threshold must not exceed solo_threshold")


@dataclass(frozen=True)
class FilterConfig:
    """Pre-filter thresholds."""

    mass_reformat_min_files: int = 10
    mass_reformat_max_avg_lines: float = 5.0
    rename_max_lines: int = 2

    def __post_init__(self) -> None:
        if self.mass_reformat_min_files < 1:
            raise ValueError("filters.mass_reformat_min_files must be at least 1")
        if self.mass_reformat_max_avg_lines <= 0:
            raise ValueError("filters.mass_reformat_max_avg_lines must be positive")
        if self.rename_max_lines < 0:
            raise ValueError("filters.rename_max_lines must be non-negative")


@dataclass(frozen=True)
class ChunkConfig:
    """Bundling and splitting limits applied before rating."""

    bundle_max_lines: int = 30
    bundle_window_minutes: int = 60
    split_max_lines: int = 500

    def __post_init__(self) -> None:
        if self.bundle_max_lines < 0:
            raise ValueError("chunking.bundle_max_lines must be non-negative")
        if self.bundle_window_minutes < 0:
            raise ValueError("chunking.bundle_window_minutes must be non-negative")
        if self.split_max_lines < 1:
            raise ValueError("chunking.split_max_lines must be at least 1")


@dataclass(frozen=True)
class PairingConfig:
    """Pair-programming verification settings."""

    mandatory_sessions: int = 5

    def __post_init__(self) -> None:
        if self.mandatory_sessions < 1:
            raise ValueError("pairing.mandatory_sessions must be at least 1")


@dataclass(frozen=True)
class AnomalyConfig:
    """Thresholds of the display-only anomaly flags.

    ``suspicion_margin`` scales every threshold for the heuristic proposer:
    a candidate is proposed once its estimate reaches
    ``threshold * suspicion_margin`` and is then verified exactly.
    """

    late_dump_ratio: float = 0.50
    late_window_fraction: float = 0.20
    solo_ratio: float = 0.70
    inactive_gap_ratio: float = 0.50
    burst_day_fraction: float = 0.10
    burst_ratio: float = 0.50
    burst_min_days: int = 7
    suspicion_margin: float = 0.80

    def __post_init__(self) -> None:
        for name in (
            "late_dump_ratio",
            "late_window_fraction",
            "solo_ratio",
            "inactive_gap_ratio",
            "burst_day_fraction",
            "burst_ratio",
            "suspicion_margin",
        ):
            _check_fraction("anomaly", name, getattr(self, name))
        if self.burst_min_days < 1:
            raise ValueError("anomaly.burst_min_days must be at least 1")


@dataclass(frozen=True)
class RunConfig:
    """Execution settings for a course-wide run.

    Attributes:
        workers: Teams analyzed concurrently
        rating_concurrency: Concurrent rating calls per team
        run_rating_limit: Concurrent rating calls across the whole run (None = unbounded)
        rating_timeout_seconds: Timeout of a single rating call
        git_max_commits: Maximum commits read per repository (0 = unlimited)
        template_author_email: Known template/scaffold author, if any
    """

    workers: int = 4
    rating_concurrency: int = 4
    run_rating_limit: Optional[int] = None
    rating_timeout_seconds: float = 60.0
    git_max_commits: int = 0
    template_author_email: Optional[str] = None

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError("run.workers must be at least 1")
        if self.rating_concurrency < 1:
            raise ValueError("run.rating_concurrency must be at least 1")
        if self.run_rating_limit is not None and self.run_rating_limit < 1:
            raise ValueError("run.run_rating_limit must be at least 1")
        if self.rating_timeout_seconds <= 0:
            raise ValueError("run.rating_timeout_seconds must be positive")
        if self.git_max_commits < 0:
            raise ValueError("run.git_max_commits must be non-negative")


@dataclass(frozen=True)
class ScoringConfig:
    """Complete configuration for one analysis run.

    Attributes:
        significant_file_commits: Touches needed for a file to count in ownership spread
        ownership_author_cap: Upper bound on counted authors per file
    """

    weights: WeightConfig = field(default_factory=WeightConfig)
    penalties: PenaltyConfig = field(default_factory=PenaltyConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    chunking: ChunkConfig = field(default_factory=ChunkConfig)
    pairing: PairingConfig = field(default_factory=PairingConfig)
    anomaly: AnomalyConfig = field(default_factory=AnomalyConfig)
    run: RunConfig = field(default_factory=RunConfig)

    significant_file_commits: int = 3
    ownership_author_cap: int = 4

    def __post_init__(self) -> None:
        if self.significant_file_commits < 1:
            raise ValueError("significant_file_commits must be at least 1")
        if self.ownership_author_cap < 1:
            raise ValueError("ownership_author_cap must be at least 1")


_SECTIONS = {
    "weights": WeightConfig,
    "penalties": PenaltyConfig,
    "filters": FilterConfig,
    "chunking": ChunkConfig,
    "pairing": PairingConfig,
    "anomaly": AnomalyConfig,
    "run": RunConfig,
}


def load_config(config_file: Optional[Path] = None, **overrides) -> ScoringConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides. Keys naming a ``RunConfig`` field
            (``workers=8``) go to the ``run`` section, section names accept a
            dict or a section instance, anything else is a top-level field.

    Returns:
        Validated ScoringConfig instance

    Raises:
        ConfigurationError: If a config file is missing or invalid
        InvalidConfigError: If a value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".collab-insight.toml"
    if global_config.exists():
        _merge(merged, _read_config_file(global_config, "global config"))

    project_config = Path.cwd() / "collab-insight.toml"
    if project_config.exists():
        _merge(merged, _read_config_file(project_config, "project config"))

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _read_config_file(config_file, "config file"))

    env_overrides = _load_env_vars()
    if env_overrides:
        _merge(merged, {"run": env_overrides})

    run_fields = RunConfig.__dataclass_fields__
    for key, value in overrides.items():
        if key in run_fields:
            _merge(merged, {"run": {key: value}})
        elif key in _SECTIONS and isinstance(value, _SECTIONS[key]):
            merged[key] = value
        else:
            _merge(merged, {key: value})

    return _build(merged)


def _build(merged: dict[str, Any]) -> ScoringConfig:
    kwargs: dict[str, Any] = {}
    for key, value in merged.items():
        section_cls = _SECTIONS.get(key)
        if section_cls is None:
            kwargs[key] = value
            continue
        if isinstance(value, section_cls):
            kwargs[key] = value
            continue
        if not isinstance(value, dict):
            raise InvalidConfigError(key, value, "expected a table")
        try:
            kwargs[key] = section_cls(**value)
        except TypeError as e:
            raise ConfigurationError(f"Invalid [{key}] config: {e}")
        except ValueError as e:
            raise InvalidConfigError(key, value, str(e))

    try:
        return ScoringConfig(**kwargs)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Merge ``source`` into ``target``, one level deep for section tables."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = {**target[key], **value}
        else:
            target[key] = value


def _read_config_file(path: Path, label: str) -> dict:
    try:
        return _load_toml_file(path)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load run settings from COLLAB_* environment variables.

    Supported environment variables:
        COLLAB_WORKERS: int
        COLLAB_RATING_CONCURRENCY: int
        COLLAB_RUN_RATING_LIMIT: int
        COLLAB_RATING_TIMEOUT_SECONDS: float
        COLLAB_GIT_MAX_COMMITS: int
        COLLAB_TEMPLATE_AUTHOR_EMAIL: str

    Returns:
        Dict of field_name -> parsed_value for any COLLAB_* vars found.
    """
    type_hints = get_type_hints(RunConfig)

    result: dict[str, Any] = {}

    for field_name in RunConfig.__dataclass_fields__:
        env_key = f"COLLAB_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the annotated type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

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

    if type_hint is float:
        return float(value)

    if type_hint is str:
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
