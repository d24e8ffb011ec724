"""Tests for session_journal.services.config_manager."""

from pathlib import Path

import pytest

from session_journal.errors import ConfigError
from session_journal.services.config_manager import (
    DEFAULTS,
    ConfigManager,
    default_config_path,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "vault:\n"
        "  path: /data/vault\n"
        "domains:\n"
        "  work: /srv/work\n"
        "related:\n"
        "  minScore: 8\n"
        "  maxResults: not-a-number\n"
    )
    return path


# ---------------------------------------------------------------------------
# 1. Defaults
# ---------------------------------------------------------------------------

def test_default_values():
    """Unset keys fall back to DEFAULTS."""
    config = ConfigManager()
    assert config.get_int("related/minScore") == 5
    assert config.get_int("trends/displayWeeks") == 12
    assert config.get_string("unknown/key") == ""


def test_missing_file_uses_defaults(tmp_path):
    config = ConfigManager.from_file(tmp_path / "absent.yaml")
    assert config.get_string("vault/path") == DEFAULTS["vault/path"]


# ---------------------------------------------------------------------------
# 2. YAML loading
# ---------------------------------------------------------------------------

def test_nested_yaml_is_flattened(config_file):
    config = ConfigManager.from_file(config_file)
    assert config.get_string("vault/path") == "/data/vault"
    assert config.get_string("domains/work") == "/srv/work"
    assert config.get_int("related/minScore") == 8


def test_malformed_int_falls_back(config_file):
    config = ConfigManager.from_file(config_file)
    assert config.get_int("related/maxResults") == 3


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("vault: [unclosed\n")
    with pytest.raises(ConfigError):
        ConfigManager.from_file(path)


def test_non_mapping_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError):
        ConfigManager.from_file(path)


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert ConfigManager.from_file(path).get_int("related/maxResults") == 3


# ---------------------------------------------------------------------------
# 3. Setters and typed getters
# ---------------------------------------------------------------------------

def test_set_get_string():
    config = ConfigManager()
    config.set_string("vault/path", "/custom/path")
    assert config.get_string("vault/path") == "/custom/path"


def test_set_get_int():
    config = ConfigManager()
    config.set_int("related/maxResults", 10)
    assert config.get_int("related/maxResults") == 10


def test_bool_is_not_an_int():
    config = ConfigManager({"related/minScore": True})
    assert config.get_int("related/minScore") == 5


def test_set_get_bool():
    config = ConfigManager()
    config.set_bool("x/enabled", False)
    assert config.get_bool("x/enabled") is False
    config.set_string("x/enabled", "yes")
    assert config.get_bool("x/enabled") is True


# ---------------------------------------------------------------------------
# 4. Save
# ---------------------------------------------------------------------------

def test_save_roundtrip(tmp_path):
    target = tmp_path / "nested" / "config.yaml"
    config = ConfigManager({"vault/path": "/v", "related/minScore": 7})
    assert config.save(target) == target

    reloaded = ConfigManager.from_file(target)
    assert reloaded.get_string("vault/path") == "/v"
    assert reloaded.get_int("related/minScore") == 7
    assert "vault:" in target.read_text()


# ---------------------------------------------------------------------------
# 5. Derived paths
# ---------------------------------------------------------------------------

def test_derived_paths():
    config = ConfigManager({"vault/path": "/data/vault"})
    assert config.vault_path == Path("/data/vault")
    assert config.sessions_dir == Path("/data/vault/Sessions")
    assert config.state_dir == Path("/data/vault/.session-journal")


def test_home_expansion(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    config = ConfigManager({"vault/path": "~/notes"})
    assert config.vault_path == tmp_path / "notes"


def test_domain_paths_skip_empty():
    config = ConfigManager({"domains/work": "/w", "domains/personal": ""})
    paths = config.domain_paths()
    assert paths["work"] == "/w"
    assert "personal" not in paths
    assert "opensource" in paths


def test_default_config_path_honours_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_config_path() == tmp_path / "session-journal" / "config.yaml"
