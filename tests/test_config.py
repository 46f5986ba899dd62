"""
Unit tests for config.py module.
"""

import json

import pytest

from src.frameworks_drivers.config import Config, JupyterConfig


class TestJupyterConfig:
    """Test JupyterConfig model."""

    def test_valid_config(self):
        config = JupyterConfig(port=9999, token="abc", home_dir="/home/user", config_dir="/tmp/cfg", start_timeout=30)
        assert config.port == 9999
        assert config.token == "abc"
        assert config.start_timeout == 30

    def test_default_values(self):
        config = JupyterConfig()
        assert config.port == 8888
        assert len(config.token) == 48
        assert config.start_timeout is None

    def test_generated_tokens_differ(self):
        assert JupyterConfig().token != JupyterConfig().token

    @pytest.mark.parametrize("port", [0, 70000])
    def test_invalid_port(self, port):
        with pytest.raises(ValueError):
            JupyterConfig(port=port)

    def test_invalid_start_timeout(self):
        with pytest.raises(ValueError):
            JupyterConfig(start_timeout=0)

    def test_effective_dirs_prefer_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("JLAB_DESKTOP_HOME", "/override/home")
        monkeypatch.setenv("JLAB_DESKTOP_CONFIG_DIR", "/override/config")
        config = JupyterConfig(home_dir="/home/user", config_dir="/cfg")

        assert config.effective_home_dir == "/override/home"
        assert config.effective_config_dir == "/override/config"

    def test_effective_dirs_fall_back_to_configured_values(self, monkeypatch):
        monkeypatch.delenv("JLAB_DESKTOP_HOME", raising=False)
        monkeypatch.delenv("JLAB_DESKTOP_CONFIG_DIR", raising=False)
        config = JupyterConfig(home_dir="/home/user", config_dir="/cfg")

        assert config.effective_home_dir == "/home/user"
        assert config.effective_config_dir == "/cfg"

    def test_effective_home_defaults_to_user_home(self, monkeypatch, tmp_path):
        monkeypatch.delenv("JLAB_DESKTOP_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert JupyterConfig().effective_home_dir == str(tmp_path)


class TestConfig:
    """Test Config model."""

    def test_valid_config(self, sample_config_data):
        config = Config(**sample_config_data)
        assert config.jupyter.port == 9999
        assert config.environments.default_python_path == "/opt/conda/bin/python"
        assert config.server.port == 8100
        assert config.factory.prewarm_on_startup is True

    def test_minimal_config(self):
        config = Config()
        assert config.jupyter.port == 8888
        assert config.environments.default_python_path is None
        assert config.server.host == "127.0.0.1"
        assert config.factory.prewarm_on_startup is False


class TestLoadConfig:
    """Test Config.load."""

    def test_load_valid_config(self, config_file, sample_config_data):
        config = Config.load(config_file)
        assert isinstance(config, Config)
        assert config.jupyter.token == sample_config_data["jupyter"]["token"]
        assert config.jupyter.start_timeout == 60

    def test_load_nonexistent_file(self):
        with pytest.raises(FileNotFoundError):
            Config.load("nonexistent_config.json")

    def test_load_invalid_json(self, tmp_path):
        config_path = tmp_path / "invalid.json"
        config_path.write_text("invalid json content {")

        with pytest.raises(json.JSONDecodeError):
            Config.load(str(config_path))

    def test_load_invalid_config_structure(self, tmp_path):
        config_path = tmp_path / "invalid_structure.json"
        config_path.write_text(json.dumps({"jupyter": {"port": "not-a-port"}}))

        with pytest.raises(ValueError):
            Config.load(str(config_path))
