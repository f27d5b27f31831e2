"""
Configuration Tests

Run with: pytest tests/test_config.py -v
"""

import json
import logging

import pytest
import yaml

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dvbi_core.config import settings as cfg
from dvbi_core.config.settings import (
    ValidatorConfig,
    VocabularySource,
    configure_logging,
    get_default_config,
    load_config,
    save_config,
)


@pytest.fixture
def config():
    """Create a non-default configuration."""
    config = get_default_config()
    config.reference.use_urls = True
    config.reference.timeout = 5
    config.reference.vocabularies[cfg.GENRES] = VocabularySource(files=["genres.xml"], urls=[])
    config.schemas.directory = "schemas"
    config.log_level = "DEBUG"
    config.custom = {"deployment": "test"}
    return config


class TestDefaults:
    """Tests for the default configuration."""

    def test_every_vocabulary_has_a_source(self):
        """All vocabularies have a default location."""
        config = ValidatorConfig()
        for name in (cfg.LANGUAGES, cfg.COUNTRIES, cfg.GENRES, cfg.CREDITS_ROLES, cfg.RATINGS):
            assert config.reference.source(name).files

    def test_unknown_vocabulary_is_empty(self):
        """An unknown vocabulary has no source."""
        source = ValidatorConfig().reference.source("nothing")
        assert source.files == [] and source.urls == []

    def test_schema_validation_off_by_default(self):
        """No schema directory is configured by default."""
        assert ValidatorConfig().schemas.directory == ""


class TestSaveAndLoad:
    """Tests for JSON and YAML configuration files."""

    @pytest.mark.parametrize("name", ["config.json", "config.yaml", "nested/config.yml"])
    def test_round_trip(self, config, tmp_path, name):
        """A saved configuration loads back unchanged."""
        path = tmp_path / name
        save_config(config, path)
        loaded = load_config(path)
        assert loaded.to_dict() == config.to_dict()

    def test_partial_file_keeps_defaults(self, tmp_path):
        """Missing keys take their default values."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"log_level": "WARNING", "reference": {"data_dir": "data"}}))
        loaded = load_config(path)
        assert loaded.log_level == "WARNING"
        assert loaded.report_schema_version is True
        assert loaded.reference.source(cfg.GENRES).files[0].startswith("data/")

    def test_empty_yaml(self, tmp_path):
        """An empty file gives the defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path).to_dict() == ValidatorConfig().to_dict()

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.json")

    def test_unsupported_format(self, config, tmp_path):
        """Only JSON and YAML are supported."""
        path = tmp_path / "config.toml"
        path.write_text("x = 1")
        with pytest.raises(ValueError):
            load_config(path)
        with pytest.raises(ValueError):
            save_config(config, path)

    def test_json_is_readable(self, config, tmp_path):
        """The JSON file is plain JSON."""
        path = tmp_path / "config.json"
        save_config(config, path)
        data = json.loads(path.read_text())
        assert data["schemas"]["directory"] == "schemas"
        assert data["reference"]["vocabularies"][cfg.GENRES]["files"] == ["genres.xml"]


class TestLogging:
    """Tests for logging setup."""

    def test_configure_logging_accepts_config(self, config):
        """configure_logging runs with and without a configuration."""
        configure_logging(config)
        configure_logging()
        assert logging.getLogger("dvbi_core").getEffectiveLevel() <= logging.CRITICAL
