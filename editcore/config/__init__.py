"""Configuration helpers for the editcore matcher."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

# Acceptance bar for the similarity stage: best window must score above the
# threshold and beat the runner-up by at least the margin.
DEFAULT_SIMILARITY_THRESHOLD = 0.80
DEFAULT_MIN_MARGIN = 0.05

DEFAULT_CONFIG_PATH = Path(__file__).with_name("matcher.yaml")


class MatcherConfig(BaseModel):
    """Tunables for the fuzzy matcher, sourced from YAML."""

    similarity_threshold: float = Field(DEFAULT_SIMILARITY_THRESHOLD, ge=0.0, le=1.0)
    min_margin: float = Field(DEFAULT_MIN_MARGIN, ge=0.0, le=1.0)
    max_candidates: int = Field(3, gt=0)  # candidates listed in failure feedback
    max_search_chars: int = Field(500, gt=0)  # search text echoed back on failure
    excerpt_lines: int = Field(6, gt=0)
    candidate_floor: float = Field(0.5, ge=0.0, le=1.0)  # weakest region worth listing


_ENV_OVERRIDES = {
    "EDITCORE_SIMILARITY_THRESHOLD": ("similarity_threshold", float),
    "EDITCORE_MIN_MARGIN": ("min_margin", float),
    "EDITCORE_MAX_CANDIDATES": ("max_candidates", int),
}


def get_env_overrides() -> dict[str, float | int]:
    """Collect matcher overrides from the environment, skipping bad values."""
    overrides: dict[str, float | int] = {}
    for env_name, (field_name, cast) in _ENV_OVERRIDES.items():
        env_val = os.environ.get(env_name)
        if not env_val:
            continue
        try:
            overrides[field_name] = cast(env_val)
        except ValueError:
            continue
    return overrides


def load_matcher_config(path: str | Path | None = None) -> MatcherConfig:
    """Load matcher config from YAML file.

    Priority:
        1. EDITCORE_* environment variables
        2. ``matcher:`` section of the YAML file
        3. Field defaults

    Args:
        path: Optional override path. Defaults to `editcore/config/matcher.yaml`.

    Returns:
        Validated MatcherConfig.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Matcher config not found: {config_path}")

    data = yaml.safe_load(config_path.read_text()) or {}
    values = dict(data.get("matcher") or {})
    values.update(get_env_overrides())
    return MatcherConfig(**values)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_MIN_MARGIN",
    "DEFAULT_SIMILARITY_THRESHOLD",
    "MatcherConfig",
    "get_env_overrides",
    "load_matcher_config",
]
