"""
Tests for settings and pool loading.
"""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from contextmatch.config import (
    MAX_MATCH_LIMIT,
    SETTINGS_ENV_VAR,
    ScoringSettings,
    load_pool,
    load_settings,
    save_pool,
)
from contextmatch.matching.scorer import SIGNAL_WEIGHTS
from contextmatch.profile.models import ContextWindow, OpenTo


def write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestScoringSettings:
    """Test settings validation."""

    def test_defaults(self):
        """Defaults match the built-in weight table and thresholds."""
        settings = ScoringSettings()
        assert settings.weights == SIGNAL_WEIGHTS
        assert settings.match_threshold == 0.5
        assert settings.default_limit == 10
        assert settings.min_completeness == 0.4

    def test_weights_must_sum_to_one(self):
        """Weights that do not sum to 1.0 are rejected."""
        weights = dict(SIGNAL_WEIGHTS, graph_signals=0.5)
        with pytest.raises(ValidationError):
            ScoringSettings(weights=weights)

    def test_weights_must_name_every_signal(self):
        """A weight table missing a signal is rejected."""
        weights = dict(SIGNAL_WEIGHTS)
        del weights["graph_signals"]
        weights["semantic_similarity"] = 0.5
        with pytest.raises(ValidationError):
            ScoringSettings(weights=weights)

    def test_negative_weight_rejected(self):
        """Negative weights are rejected even when the sum is 1.0."""
        weights = dict(SIGNAL_WEIGHTS, semantic_similarity=0.6, graph_signals=-0.1)
        with pytest.raises(ValidationError):
            ScoringSettings(weights=weights)

    def test_weights_reordered_to_signal_order(self):
        """Weights are stored in signal declaration order."""
        weights = dict(reversed(list(SIGNAL_WEIGHTS.items())))
        assert list(ScoringSettings(weights=weights).weights) == list(SIGNAL_WEIGHTS)

    def test_threshold_range(self):
        """Thresholds above 1.0 are rejected."""
        with pytest.raises(ValidationError):
            ScoringSettings(match_threshold=1.5)

    def test_default_limit_range(self):
        """default_limit must stay within 1..MAX_MATCH_LIMIT."""
        with pytest.raises(ValidationError):
            ScoringSettings(default_limit=0)
        with pytest.raises(ValidationError):
            ScoringSettings(default_limit=MAX_MATCH_LIMIT + 1)
        assert ScoringSettings(default_limit=MAX_MATCH_LIMIT).default_limit == MAX_MATCH_LIMIT


class TestLoadSettings:
    """Test settings file loading."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """A missing settings file falls back to defaults."""
        assert load_settings(tmp_path / "nope.yaml") == ScoringSettings()

    def test_empty_file_gives_defaults(self, tmp_path):
        """An empty settings file falls back to defaults."""
        path = tmp_path / "settings.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == ScoringSettings()

    def test_loads_values(self, tmp_path):
        """Values in the file override defaults, the rest stay default."""
        path = write_yaml(tmp_path / "settings.yaml", {"match_threshold": 0.6, "default_limit": 20})
        settings = load_settings(path)
        assert settings.match_threshold == 0.6
        assert settings.default_limit == 20
        assert settings.weights == SIGNAL_WEIGHTS

    def test_env_var_path(self, tmp_path, monkeypatch):
        """The settings path can come from the environment."""
        path = write_yaml(tmp_path / "env.yaml", {"default_limit": 3})
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))
        assert load_settings().default_limit == 3

    def test_invalid_weights_in_file(self, tmp_path):
        """Invalid weights in the file raise a validation error."""
        path = write_yaml(tmp_path / "settings.yaml", {"weights": {"semantic_similarity": 1.0}})
        with pytest.raises(ValidationError):
            load_settings(path)


class TestPool:
    """Test pool loading and saving."""

    def test_missing_pool(self, tmp_path):
        """A missing pool file gives an empty pool."""
        assert load_pool(tmp_path / "pool.yaml") == ([], {})

    def test_load_contexts_and_communities(self, tmp_path):
        """Contexts are validated and community ids coerced to strings."""
        path = write_yaml(tmp_path / "pool.yaml", {
            "contexts": [
                {"user_id": "u1", "skills": ["Go"], "open_to": ["advice"], "embedding": [0.1, 0.2]},
                {"user_id": "u2", "upcoming_travel": None},
            ],
            "communities": {"u1": ["ns", 7], "u2": None},
        })
        contexts, communities = load_pool(path)

        assert [c.user_id for c in contexts] == ["u1", "u2"]
        assert contexts[0].open_to == {OpenTo.ADVICE}
        assert contexts[1].upcoming_travel == []
        assert communities == {"u1": ["ns", "7"], "u2": []}

    def test_save_then_load(self, tmp_path):
        """A saved pool loads back unchanged."""
        contexts = [
            ContextWindow(user_id="u1", seeking="A designer", open_to=["hiring"], embedding=[1.0, 0.0]),
            ContextWindow(user_id="u2", current_location="Lisbon"),
        ]
        path = save_pool(contexts, tmp_path / "pool.yaml", communities={"u1": ["ns"]})

        loaded, communities = load_pool(path)
        assert loaded == contexts
        assert communities == {"u1": ["ns"]}
