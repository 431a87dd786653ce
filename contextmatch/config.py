"""Configuration management for contextmatch."""

import logging
import math
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

from contextmatch.matching.scorer import MATCH_THRESHOLD, SIGNAL_WEIGHTS
from contextmatch.profile.models import ContextWindow

logger = logging.getLogger(__name__)

# Default paths
DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_SETTINGS_PATH = DATA_DIR / "settings.yaml"
DEFAULT_POOL_PATH = DATA_DIR / "pool.yaml"

# Environment overrides
SETTINGS_ENV_VAR = "CONTEXTMATCH_SETTINGS"
LOG_LEVEL_ENV_VAR = "CONTEXTMATCH_LOG_LEVEL"

# Candidates below this completeness are not considered for matching
DEFAULT_MIN_COMPLETENESS = 0.4

# Most matches a single generate request may ask for
MAX_MATCH_LIMIT = 20


class ScoringSettings(BaseModel):
    """Tunable scoring parameters."""

    weights: Dict[str, float] = Field(
        default_factory=lambda: dict(SIGNAL_WEIGHTS),
        description="Signal name -> weight, must sum to 1.0",
    )
    match_threshold: float = Field(MATCH_THRESHOLD, ge=0.0, le=1.0)
    default_limit: int = Field(10, ge=1, le=MAX_MATCH_LIMIT)
    min_completeness: float = Field(DEFAULT_MIN_COMPLETENESS, ge=0.0, le=1.0)

    @field_validator("weights")
    @classmethod
    def _check_weights(cls, value: Dict[str, float]) -> Dict[str, float]:
        if set(value) != set(SIGNAL_WEIGHTS):
            missing = sorted(set(SIGNAL_WEIGHTS) - set(value))
            unknown = sorted(set(value) - set(SIGNAL_WEIGHTS))
            raise ValueError(f"Weights must name every signal (missing={missing}, unknown={unknown})")
        if any(w < 0 for w in value.values()):
            raise ValueError("Weights must be non-negative")
        total = math.fsum(value.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Weights must sum to 1.0, got {total}")
        # Keep the weight-table order so tie-breaks stay stable
        return {name: value[name] for name in SIGNAL_WEIGHTS}


def ensure_data_dir() -> None:
    """Ensure the data directory exists."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def resolve_settings_path(path: Optional[Path] = None) -> Path:
    """Pick the settings file: explicit path, then env var, then default."""
    if path is not None:
        return path
    env_path = os.environ.get(SETTINGS_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_SETTINGS_PATH


def load_settings(path: Optional[Path] = None) -> ScoringSettings:
    """Load scoring settings from YAML file.

    Args:
        path: Optional path to settings file. Defaults to $CONTEXTMATCH_SETTINGS
            or data/settings.yaml.

    Returns:
        ScoringSettings instance. Returns defaults if file doesn't exist.
    """
    path = resolve_settings_path(path)

    if not path.exists():
        logger.debug(f"No settings at {path}, using defaults")
        return ScoringSettings()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return ScoringSettings()

    return ScoringSettings.model_validate(data)


def load_pool(path: Optional[Path] = None) -> Tuple[List[ContextWindow], Dict[str, List[str]]]:
    """Load a candidate pool from YAML file.

    The document holds a ``contexts`` list of context windows and an
    optional ``communities`` mapping of user id -> community ids.

    Args:
        path: Optional path to pool file. Defaults to data/pool.yaml.

    Returns:
        (contexts, communities). Both empty if file doesn't exist.
    """
    if path is None:
        path = DEFAULT_POOL_PATH

    if not path.exists():
        return [], {}

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return [], {}

    contexts = [ContextWindow.model_validate(item) for item in data.get("contexts") or []]
    communities = {
        str(user_id): [str(c) for c in (ids or [])]
        for user_id, ids in (data.get("communities") or {}).items()
    }

    logger.info(f"Loaded {len(contexts)} contexts from {path}")
    return contexts, communities


def save_pool(
    contexts: Iterable[ContextWindow],
    path: Optional[Path] = None,
    communities: Optional[Dict[str, List[str]]] = None,
) -> Path:
    """Save a candidate pool to YAML file.

    Args:
        contexts: Context windows to save.
        path: Optional path to save to. Defaults to data/pool.yaml.
        communities: Optional user id -> community ids mapping.

    Returns:
        Path where the pool was saved.
    """
    if path is None:
        path = DEFAULT_POOL_PATH
        ensure_data_dir()

    # Convert to dicts, excluding None values for cleaner YAML
    data = {
        "contexts": [c.model_dump(mode="json", exclude_none=True) for c in contexts],
    }
    if communities:
        data["communities"] = communities

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    return path
