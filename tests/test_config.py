"""Tests for configuration loading."""

import os
import tempfile
import yaml
import pytest
from avgcalc.config import Config


def write_config(data):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.dump(data, f)
        return f.name


def test_config_defaults():
    """Test that config loads with defaults when file is minimal."""
    temp_path = write_config({"window": {"size": 5}})
    try:
        config = Config(temp_path)
        assert config.window_size == 5
        assert config.port == 9876  # default
        assert config.fetch_timeout_ms == 500  # default
        assert config.processing_warn_ms == 450  # default
        assert config.endpoints["p"] == "http://20.244.56.144/evaluation-service/primes"
        assert config.is_production is False
    finally:
        os.unlink(temp_path)


def test_config_env_overrides(monkeypatch):
    """Test that environment variables override config values."""
    temp_path = write_config({"server": {"port": 8000, "host": "127.0.0.1"}, "window": {"size": 10}})
    try:
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("AC_WINDOW_SIZE", "20")
        monkeypatch.setenv("AC_URL_R", "http://override/rand")
        monkeypatch.setenv("AC_ENV", "Production")

        config = Config(temp_path)
        assert config.port == 9000
        assert config.window_size == 20
        assert config.endpoints["r"] == "http://override/rand"
        assert config.endpoints["e"].endswith("/even")  # not overridden
        assert config.host == "127.0.0.1"  # not overridden
        assert config.is_production is True
    finally:
        os.unlink(temp_path)


def test_config_ac_port_beats_port(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("AC_PORT", "9100")
    assert Config.from_dict({}).port == 9100


def test_config_local_overrides():
    """Test that config.local.yaml beside the main file is merged over it."""
    with tempfile.TemporaryDirectory() as tmp:
        main_path = os.path.join(tmp, "config.yaml")
        with open(main_path, 'w') as f:
            yaml.dump({"upstream": {"timeout_ms": 500, "endpoints": {"p": "http://main/primes"}}}, f)
        with open(os.path.join(tmp, "config.local.yaml"), 'w') as f:
            yaml.dump({"upstream": {"timeout_ms": 800}}, f)

        config = Config(main_path)
        assert config.fetch_timeout_ms == 800
        assert config.endpoints["p"] == "http://main/primes"


def test_config_explicit_missing_file():
    with pytest.raises(FileNotFoundError):
        Config("/nonexistent/avgcalc/config.yaml")


def test_config_creates_default_when_discovered(monkeypatch):
    """Test that an auto-discovered missing config.yaml is created with defaults."""
    with tempfile.TemporaryDirectory() as tmp:
        monkeypatch.chdir(tmp)
        monkeypatch.setattr(Config, "_find_config_file", lambda self: os.path.join(tmp, "config.yaml"))
        config = Config()
        assert os.path.exists(os.path.join(tmp, "config.yaml"))
        assert config.window_size == 10
        assert config.log_rotation["when"] == "midnight"


def test_config_rejects_bad_values():
    with pytest.raises(ValueError):
        Config.from_dict({"window": {"size": 0}})
    with pytest.raises(ValueError):
        Config.from_dict({"upstream": {"timeout_ms": -1}})
    with pytest.raises(ValueError):
        Config.from_dict({"upstream": {"endpoints": {"f": ""}}})


def test_config_access_log_toggle(monkeypatch):
    assert Config.from_dict({}).access_log is True
    monkeypatch.setenv("AC_ACCESS_LOG", "false")
    assert Config.from_dict({}).access_log is False
