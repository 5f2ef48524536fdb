"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from rcm_insight.config import DEFAULT_CONFIG, MatrixConfig, load_config
from rcm_insight.exceptions import ConfigurationError, InvalidConfigError


class TestMatrixConfig:
    def test_defaults(self):
        config = MatrixConfig()
        assert config.default_view == "full"
        assert config.export_dir == "."
        assert config.strict_integrity is False
        assert config.high_impact_levels == ["High", "Critical"]
        assert config.alert_limit == 5
        assert config.verbosity == "normal"
        assert config == DEFAULT_CONFIG

    def test_export_path(self):
        assert MatrixConfig(export_dir="out/csv").export_path == Path("out/csv")

    @pytest.mark.parametrize(
        "kwargs,key",
        [
            ({"default_view": "risk"}, "default_view"),
            ({"verbosity": "loud"}, "verbosity"),
            ({"alert_limit": -1}, "alert_limit"),
            ({"high_impact_levels": []}, "high_impact_levels"),
        ],
    )
    def test_invalid_values(self, kwargs, key):
        with pytest.raises(InvalidConfigError) as exc_info:
            MatrixConfig(**kwargs)
        assert exc_info.value.key == key

    def test_frozen(self):
        with pytest.raises(AttributeError):
            MatrixConfig().alert_limit = 3


class TestLoadConfig:
    def test_no_sources_gives_defaults(self):
        assert load_config() == DEFAULT_CONFIG

    def test_overrides(self):
        config = load_config(default_view="process", alert_limit=2)
        assert config.default_view == "process"
        assert config.alert_limit == 2

    def test_none_overrides_ignored(self):
        assert load_config(default_view=None).default_view == "full"

    def test_verbose_and_quiet_flags(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False, quiet=False).verbosity == "normal"

    def test_unknown_override(self):
        with pytest.raises(ConfigurationError):
            load_config(colour="blue")

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('default_view = "subprocess"\nalert_limit = 3\n', encoding="utf-8")
        config = load_config(config_file=path)
        assert config.default_view == "subprocess"
        assert config.alert_limit == 3

    def test_rcm_table(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text(
            '[rcm]\nhigh_impact_levels = ["Critical"]\nstrict_integrity = true\n',
            encoding="utf-8",
        )
        config = load_config(config_file=path)
        assert config.high_impact_levels == ["Critical"]
        assert config.strict_integrity is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(config_file=tmp_path / "nope.toml")

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("default_view = [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(config_file=path)

    def test_project_file_discovered(self, tmp_path, monkeypatch):
        (tmp_path / "rcm-insight.toml").write_text('export_dir = "exports"\n', encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert load_config().export_dir == "exports"

    def test_global_file_discovered(self, tmp_path, monkeypatch):
        (tmp_path / ".rcm-insight.toml").write_text("alert_limit = 9\n", encoding="utf-8")
        monkeypatch.setenv("HOME", str(tmp_path))
        assert load_config().alert_limit == 9

    def test_project_beats_global(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        project = tmp_path / "project"
        home.mkdir()
        project.mkdir()
        (home / ".rcm-insight.toml").write_text("alert_limit = 9\n", encoding="utf-8")
        (project / "rcm-insight.toml").write_text("alert_limit = 1\n", encoding="utf-8")
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.chdir(project)
        assert load_config().alert_limit == 1


class TestEnvironment:
    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("RCM_DEFAULT_VIEW", "process")
        monkeypatch.setenv("RCM_STRICT_INTEGRITY", "yes")
        monkeypatch.setenv("RCM_ALERT_LIMIT", "10")
        config = load_config()
        assert config.default_view == "process"
        assert config.strict_integrity is True
        assert config.alert_limit == 10

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.toml"
        path.write_text('default_view = "subprocess"\n', encoding="utf-8")
        monkeypatch.setenv("RCM_DEFAULT_VIEW", "process")
        assert load_config(config_file=path).default_view == "process"

    def test_override_beats_env(self, monkeypatch):
        monkeypatch.setenv("RCM_ALERT_LIMIT", "10")
        assert load_config(alert_limit=2).alert_limit == 2

    def test_bad_bool(self, monkeypatch):
        monkeypatch.setenv("RCM_STRICT_INTEGRITY", "maybe")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_bad_int(self, monkeypatch):
        monkeypatch.setenv("RCM_ALERT_LIMIT", "many")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_list_fields_not_read_from_env(self, monkeypatch):
        monkeypatch.setenv("RCM_HIGH_IMPACT_LEVELS", "Low")
        assert load_config().high_impact_levels == ["High", "Critical"]
