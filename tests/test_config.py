"""
Tests for configuration loading.
"""

import logging

import yaml

from studiotone.config import (
    load_config, get_default_config, save_config, get_config_value, update_config_value
)


class TestLoadConfig:
    """Reading YAML configuration."""

    def test_bundled_config(self):
        config = load_config()
        assert get_config_value(config, 'enhancement.debounce_ms') == 100
        assert get_config_value(config, 'sharpening.threshold') == 12.0
        assert get_config_value(config, 'output.quality') == 95

    def test_missing_file_uses_defaults(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="studiotone.config"):
            config = load_config(tmp_path / "missing.yaml")
        assert config == get_default_config()
        assert "not found" in caplog.text

    def test_partial_file_is_merged(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({'sharpening': {'strength': 0.5}}))

        config = load_config(path)
        assert config['sharpening']['strength'] == 0.5
        assert config['sharpening']['threshold'] == 12.0
        assert config['lighting']['outer_radius'] == 0.85

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("sharpening: [unclosed")
        assert load_config(path) == get_default_config()

    def test_non_mapping_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        assert load_config(path) == get_default_config()

    def test_environment_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STUDIOTONE_TEST_FORMAT", "PNG")
        path = tmp_path / "config.yaml"
        path.write_text("output:\n  format: ${STUDIOTONE_TEST_FORMAT}\n")
        assert load_config(path)['output']['format'] == "PNG"


class TestConfigValues:
    """Dot-path access helpers."""

    def test_get_missing_value(self):
        config = get_default_config()
        assert get_config_value(config, 'lighting.missing', 7) == 7
        assert get_config_value(config, 'output.quality.deeper', 'x') == 'x'

    def test_update_creates_sections(self):
        config = {}
        update_config_value(config, 'output.quality', 80)
        assert config == {'output': {'quality': 80}}

    def test_save_and_reload(self, tmp_path):
        config = get_default_config()
        update_config_value(config, 'enhancement.debounce_ms', 250)
        path = tmp_path / "saved.yaml"

        assert save_config(config, path)
        assert load_config(path) == config
