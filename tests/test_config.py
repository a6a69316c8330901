"""Tests for matcher configuration loading."""

import pytest
from pydantic import ValidationError

from editcore.config import (
    DEFAULT_MIN_MARGIN,
    DEFAULT_SIMILARITY_THRESHOLD,
    MatcherConfig,
    get_env_overrides,
    load_matcher_config,
)


class TestLoadMatcherConfig:
    """Tests for load_matcher_config()."""

    def test_default_file(self):
        config = load_matcher_config()

        assert isinstance(config, MatcherConfig)
        assert config.similarity_threshold == DEFAULT_SIMILARITY_THRESHOLD
        assert config.min_margin == DEFAULT_MIN_MARGIN
        assert config.max_candidates == 3

    def test_custom_file(self, tmp_path):
        path = tmp_path / "matcher.yaml"
        path.write_text("matcher:\n  similarity_threshold: 0.9\n  excerpt_lines: 2\n")

        config = load_matcher_config(path)

        assert config.similarity_threshold == 0.9
        assert config.excerpt_lines == 2
        assert config.min_margin == DEFAULT_MIN_MARGIN

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "matcher.yaml"
        path.write_text("")

        assert load_matcher_config(path) == MatcherConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_matcher_config(tmp_path / "nope.yaml")

    def test_out_of_range_rejected(self, tmp_path):
        path = tmp_path / "matcher.yaml"
        path.write_text("matcher:\n  similarity_threshold: 1.5\n")

        with pytest.raises(ValidationError):
            load_matcher_config(path)


class TestEnvOverrides:
    """Environment variables override the YAML values."""

    def test_threshold_override(self, monkeypatch):
        monkeypatch.setenv("EDITCORE_SIMILARITY_THRESHOLD", "0.95")
        assert load_matcher_config().similarity_threshold == 0.95

    def test_candidates_override(self, monkeypatch):
        monkeypatch.setenv("EDITCORE_MAX_CANDIDATES", "5")
        assert load_matcher_config().max_candidates == 5

    def test_bad_value_ignored(self, monkeypatch):
        monkeypatch.setenv("EDITCORE_MIN_MARGIN", "lots")
        assert get_env_overrides() == {}
        assert load_matcher_config().min_margin == DEFAULT_MIN_MARGIN
