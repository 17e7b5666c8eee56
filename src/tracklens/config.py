"""
tracklens configuration loader

This module centralizes *all* configuration handling for tracklens.

Design goals:
- CLI flags override everything (handled by the CLI itself).
- Sensible defaults if no config exists; the engines are fully usable
  without ever calling load_config().
- Per-machine config without committing personal paths:
    ~/.config/tracklens/config.toml
- Repo-local config:
    <repo_root>/config/config.toml
- Environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument
2) Environment variables (TRACKLENS_*)
3) User config: ~/.config/tracklens/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

Example config.toml:

    [paths]
    work_root = "~/GPS/_work"

    [metrics]
    sort_points = true
    duration_start = "first_point"   # or "session_start"

    [viewport]
    padding_fraction = 0.2
    min_span_degrees = 0.001

    [recording]
    min_displacement_m = 5.0

Historical builds disagreed on the recording threshold (2 m vs 5 m) and on
whether duration starts at the first fix or at the explicit session start.
Both are plain settings here; neither is hard-coded in the engines.
"""

from __future__ import annotations

import enum
import math
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from tracklens.errors import ConfigError


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise ConfigError
      with the file path in the message.
    """
    if not path.is_file():
        return {}

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "viewport.padding_fraction")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str):
        return Path(v).expanduser()
    return None


def _as_bool(v: Any, key: str) -> bool:
    """
    Coerce loosely-typed config values into booleans.

    TOML booleans and the usual env-var spellings ("yes", "off", "1"...)
    are accepted; anything else is a ConfigError.
    """
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on"):
            return True
        if s in ("false", "no", "n", "0", "off"):
            return False
    raise ConfigError(f"{key}: expected a boolean, got {v!r}")


def _as_float(v: Any, key: str, *, minimum: float = 0.0) -> float:
    """Coerce to a finite float >= minimum."""
    if isinstance(v, bool):
        raise ConfigError(f"{key}: expected a number, got {v!r}")
    try:
        f = float(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key}: expected a number, got {v!r}") from e
    if not math.isfinite(f) or f < minimum:
        raise ConfigError(f"{key}: must be a finite number >= {minimum}, got {v!r}")
    return f


# ---------------------------------------------------------------------------
# Repo discovery
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the repo root.

    Heuristic: the presence of a `config/` directory marks the repo root.
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_work_root() -> Path:
    return Path.home() / "GPS" / "_work"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
class DurationStart(str, enum.Enum):
    """Where a track's duration starts counting."""

    FIRST_POINT = "first_point"
    SESSION_START = "session_start"


def _as_duration_start(v: Any, key: str) -> DurationStart:
    try:
        return DurationStart(str(v).strip().lower())
    except ValueError as e:
        allowed = ", ".join(m.value for m in DurationStart)
        raise ConfigError(f"{key}: expected one of {allowed}, got {v!r}") from e


@dataclass(frozen=True)
class MetricsConfig:
    sort_points: bool = True
    duration_start: DurationStart = DurationStart.FIRST_POINT


@dataclass(frozen=True)
class ViewportConfig:
    """
    Viewport fitting parameters.

    min_span_degrees defaults to roughly house-level zoom; padding_fraction
    widens the bounding box by 20% on each axis.
    """

    padding_fraction: float = 0.2
    min_span_degrees: float = 0.001


@dataclass(frozen=True)
class RecordingConfig:
    min_displacement_meters: float = 5.0


@dataclass(frozen=True)
class TrackLensPaths:
    work_root: Path


@dataclass(frozen=True)
class TrackLensConfig:
    """
    Fully merged tracklens configuration.

    Attributes:
    - paths: resolved filesystem layout
    - metrics / viewport / recording: engine settings
    - source: provenance map showing where each value came from
    """

    paths: TrackLensPaths
    metrics: MetricsConfig
    viewport: ViewportConfig
    recording: RecordingConfig
    source: dict[str, str]


# dotted key -> (env var, coercion)
_KEYS = {
    "paths.work_root": ("TRACKLENS_WORK_ROOT", lambda v, k: _as_path(v)),
    "metrics.sort_points": ("TRACKLENS_SORT_POINTS", _as_bool),
    "metrics.duration_start": ("TRACKLENS_DURATION_START", _as_duration_start),
    "viewport.padding_fraction": ("TRACKLENS_PADDING_FRACTION", _as_float),
    "viewport.min_span_degrees": ("TRACKLENS_MIN_SPAN_DEGREES", _as_float),
    "recording.min_displacement_m": ("TRACKLENS_MIN_DISPLACEMENT_M", _as_float),
}


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
) -> TrackLensConfig:
    """
    Load, merge, and validate all tracklens configuration.

    This function is the single authoritative entry point for configuration
    access. `environ` defaults to os.environ and exists for tests.
    """
    if environ is None:
        environ = dict(os.environ)

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path.cwd())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "tracklens" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    # Hard defaults
    values: dict[str, Any] = {
        "paths.work_root": default_work_root(),
        "metrics.sort_points": MetricsConfig.sort_points,
        "metrics.duration_start": MetricsConfig.duration_start,
        "viewport.padding_fraction": ViewportConfig.padding_fraction,
        "viewport.min_span_degrees": ViewportConfig.min_span_degrees,
        "recording.min_displacement_m": RecordingConfig.min_displacement_meters,
    }
    src = {k: "default" for k in values}

    # Repo, then user config (user overrides repo)
    for cfg, label, path in (
        (repo_cfg, "repo", repo_config_path),
        (user_cfg, "user", user_config_path),
    ):
        for key, (_env, coerce) in _KEYS.items():
            raw = _deep_get(cfg, key)
            if raw is None:
                continue
            v = coerce(raw, key)
            if v is None:
                continue
            values[key] = v
            src[key] = f"{label}:{path}"

    # Environment variable overrides (highest non-CLI precedence)
    for key, (env, coerce) in _KEYS.items():
        raw = environ.get(env)
        if not raw:
            continue
        values[key] = coerce(raw, env)
        src[key] = f"env:{env}"

    return TrackLensConfig(
        paths=TrackLensPaths(work_root=values["paths.work_root"].expanduser()),
        metrics=MetricsConfig(
            sort_points=values["metrics.sort_points"],
            duration_start=values["metrics.duration_start"],
        ),
        viewport=ViewportConfig(
            padding_fraction=values["viewport.padding_fraction"],
            min_span_degrees=values["viewport.min_span_degrees"],
        ),
        recording=RecordingConfig(
            min_displacement_meters=values["recording.min_displacement_m"],
        ),
        source=src,
    )
