"""
Unit tests for configuration loading.
"""

import pytest

import admin_console.config_loader as config_loader
from admin_console.config_loader import (
    deep_merge,
    get_config_summary,
    get_default_config,
    load_config,
    validate_config,
)


@pytest.fixture(autouse=True)
def _clear_cache(monkeypatch):
    monkeypatch.delenv(config_loader.BASE_URL_ENV, raising=False)
    config_loader.clear_config_cache()
    yield
    config_loader.clear_config_cache()


class TestDeepMerge:
    """Test cases for deep_merge()."""

    def test_nested_values_are_merged(self):
        base = {'api': {'base_url': 'http://a', 'timeout': 15}, 'app': {'debug': False}}
        update = {'api': {'timeout': 30}}

        result = deep_merge(base, update)

        assert result == {'api': {'base_url': 'http://a', 'timeout': 30}, 'app': {'debug': False}}
        assert base['api']['timeout'] == 15

    def test_non_dict_replaces(self):
        assert deep_merge({'a': {'b': 1}}, {'a': 2}) == {'a': 2}


class TestLoadConfig:
    """Test cases for load_config()."""

    def test_file_overrides_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("api:\n  base_url: 'https://admin.example.com'\nui:\n  page_size: 10\n")

        config = load_config(path)

        assert config['api']['base_url'] == 'https://admin.example.com'
        assert config['api']['timeout'] == 15
        assert config['ui']['page_size'] == 10

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == get_default_config()

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("api: [unclosed\n")
        assert load_config(path) == get_default_config()

    def test_non_mapping_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        assert load_config(path) == get_default_config()

    def test_env_overrides_base_url(self, tmp_path, monkeypatch):
        monkeypatch.setenv(config_loader.BASE_URL_ENV, "https://staging.example.com")
        config = load_config(tmp_path / "missing.yaml")
        assert config['api']['base_url'] == "https://staging.example.com"

    def test_default_path_is_cached(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("app:\n  name: 'First'\n")
        monkeypatch.setattr(config_loader, "CONFIG_FILE", path)

        assert load_config()['app']['name'] == 'First'
        path.write_text("app:\n  name: 'Second'\n")
        assert load_config()['app']['name'] == 'First'

        config_loader.clear_config_cache()
        assert load_config()['app']['name'] == 'Second'

    def test_get_config_value(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_loader, "CONFIG_FILE", tmp_path / "missing.yaml")
        assert config_loader.get_config_value('ui', 'page_size') == 5
        assert config_loader.get_config_value('ui', 'nope', 'fallback') == 'fallback'
        assert config_loader.get_config_value('nope', 'x') is None


class TestValidateConfig:
    """Test cases for validate_config()."""

    def test_defaults_are_valid(self):
        assert validate_config(get_default_config())

    def test_missing_section(self):
        config = get_default_config()
        del config['schema']
        assert not validate_config(config)

    @pytest.mark.parametrize("section,key,value", [
        ('api', 'base_url', 'localhost:8000'),
        ('api', 'timeout', 0),
        ('api', 'timeout', 'soon'),
        ('ui', 'page_size', -1),
        ('schema', 'user_edit', None),
    ])
    def test_invalid_values(self, section, key, value):
        config = get_default_config()
        config[section][key] = value
        assert not validate_config(config)

    def test_summary(self):
        summary = get_config_summary(get_default_config())
        assert summary['api_base_url'] == 'http://localhost:8000'
        assert summary['page_size'] == 5
        assert summary['debug_mode'] is False
