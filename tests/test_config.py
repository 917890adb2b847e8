"""
Tests for layered configuration.

Run with: pytest tests/test_config.py -v
"""

import pytest

from config import ENV_OVERRIDES, ConfigurationManager, get_config, merge_dicts
from src.dialect import Dialect
from src.resolver import ResolutionSettings


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def fresh_config(monkeypatch):
    """Reset the shared configuration before and after a test."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def user_file(tmp_path):
    """A partial user configuration file."""
    path = tmp_path / "override.yaml"
    path.write_text(
        "resolution:\n"
        "  review_threshold: 75\n"
        "  default_dialect: CCC_ONE\n",
        encoding='utf-8'
    )
    return path


# =============================================================================
# TESTS
# =============================================================================

class TestConfigurationManager:
    """Tests for ConfigurationManager."""

    def test_packaged_defaults(self, fresh_config):
        """settings.yaml supplies the defaults."""
        assert get_config("resolution.lookahead_lines") == 4
        assert get_config("confidence.weights.identifier_code") == 25
        assert get_config("missing.key", "fallback") == "fallback"

    def test_user_file_is_layered(self, fresh_config, user_file):
        """A partial user file overrides only the keys it names."""
        ConfigurationManager(str(user_file))

        assert get_config("resolution.review_threshold") == 75
        assert get_config("resolution.lookahead_lines") == 4

        settings = ResolutionSettings.from_config()
        assert settings.default_dialect is Dialect.CCC_ONE
        assert settings.review_threshold == 75

    def test_environment_wins(self, fresh_config, user_file, monkeypatch):
        """Environment variables override both files and are parsed as scalars."""
        monkeypatch.setenv("VALUATION_REVIEW_THRESHOLD", "82.5")
        monkeypatch.setenv("VALUATION_REFERENCE_YEAR", "2026")

        config = ConfigurationManager(str(user_file))

        assert get_config("resolution.review_threshold") == 82.5
        assert get_config("resolution.reference_year") == 2026
        assert config.env_applied == {
            'resolution.review_threshold': 82.5,
            'resolution.reference_year': 2026,
        }

    def test_missing_user_file(self, fresh_config, tmp_path):
        """A missing user file is an error."""
        with pytest.raises(FileNotFoundError):
            ConfigurationManager(str(tmp_path / "absent.yaml"))

    def test_non_mapping_file(self, fresh_config, tmp_path):
        """A file holding a list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding='utf-8')
        with pytest.raises(ValueError):
            ConfigurationManager(str(path))

    def test_set_and_copy(self, fresh_config):
        """set() creates sections; get_all() returns an independent copy."""
        config = ConfigurationManager()
        config.set("output.json.indent", 4)

        snapshot = config.get_all()
        snapshot['output']['json']['indent'] = 8

        assert get_config("output.json.indent") == 4

    def test_paths_absolute(self, fresh_config):
        """Relative paths are resolved against the project root."""
        assert get_config("paths.output_dir").endswith("outputs")
        assert not get_config("paths.output_dir") == "outputs"


class TestMergeDicts:
    """Tests for merge_dicts."""

    def test_deep_merge(self):
        """Nested sections merge key by key."""
        base = {'a': 1, 'b': {'c': 2, 'd': 3}}
        merged = merge_dicts(base, {'b': {'d': 4}, 'e': 5})

        assert merged == {'a': 1, 'b': {'c': 2, 'd': 4}, 'e': 5}
        assert base['b']['d'] == 3

    def test_scalar_replaces_section(self):
        """A scalar override replaces a whole section."""
        assert merge_dicts({'a': {'b': 1}}, {'a': None}) == {'a': None}
